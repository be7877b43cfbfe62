"""Unit tests for the discount engine."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from shuttlesync.models.order import CatalogService, OrderContext, ServiceLine
from shuttlesync.models.voucher import DiscountType, Voucher, VoucherStatus
from shuttlesync.services.discount_engine import (
    DiscountEngine,
    RejectionReason,
    compute_discount,
    compute_final_amount,
    compute_subtotal,
    update_service_quantity,
)


def make_voucher(**overrides) -> Voucher:
    """Active voucher valid all of 2025 unless overridden."""
    data = {
        "code": "TEST",
        "type": DiscountType.PERCENTAGE,
        "value": Decimal("10"),
        "valid_from": date(2025, 1, 1),
        "valid_to": date(2025, 12, 31),
    }
    data.update(overrides)
    return Voucher(**data)


def test_percentage_discount_capped(today):
    """Test 10% of 1,000,000 is capped at 50,000."""
    voucher = make_voucher(max_discount_amount=Decimal("50000"))

    result = compute_discount(Decimal("1000000"), voucher, today)

    assert result.rejection is None
    assert result.discount_amount == Decimal("50000")
    assert result.is_applied


def test_percentage_discount_below_cap(today, welcome_voucher):
    """Test percentage discount under the cap is not clamped."""
    result = compute_discount(Decimal("300000"), welcome_voucher, today)

    assert result.discount_amount == Decimal("30000")


def test_percentage_discount_without_cap(today):
    """Test a percentage voucher with no cap."""
    voucher = make_voucher(value=Decimal("20"))

    result = compute_discount(Decimal("500000"), voucher, today)

    assert result.discount_amount == Decimal("100000")


def test_fixed_discount_clamped_to_subtotal(today):
    """Test fixed 50,000 on a 30,000 order gives 30,000."""
    voucher = make_voucher(type=DiscountType.FIXED, value=Decimal("50000"))

    result = compute_discount(Decimal("30000"), voucher, today)

    assert result.discount_amount == Decimal("30000")
    assert compute_final_amount(Decimal("30000"), result.discount_amount) == Decimal("0")


def test_fixed_discount_ignores_max_cap(today):
    """Test the max cap only applies to percentage vouchers."""
    voucher = make_voucher(
        type=DiscountType.FIXED,
        value=Decimal("80000"),
        max_discount_amount=Decimal("10000"),
    )

    result = compute_discount(Decimal("500000"), voucher, today)

    assert result.discount_amount == Decimal("80000")


def test_min_order_not_reached(today):
    """Test voucher below minimum order is rejected with the shortfall."""
    voucher = make_voucher(min_order_amount=Decimal("300000"))

    result = compute_discount(Decimal("200000"), voucher, today)

    assert result.discount_amount == Decimal("0")
    assert not result.is_applied
    assert result.rejection.reason == RejectionReason.VOUCHER_INELIGIBLE
    assert result.rejection.shortfall == Decimal("100000")
    assert result.rejection.voucher_code == "TEST"
    assert compute_final_amount(Decimal("200000"), result.discount_amount) == Decimal("200000")


def test_min_order_exactly_reached(today):
    """Test subtotal equal to the minimum is eligible."""
    voucher = make_voucher(min_order_amount=Decimal("200000"))

    result = compute_discount(Decimal("200000"), voucher, today)

    assert result.rejection is None
    assert result.discount_amount == Decimal("20000")


@pytest.mark.parametrize("status", [VoucherStatus.INACTIVE, VoucherStatus.EXPIRED])
def test_non_active_voucher_rejected(today, status):
    """Test inactive and expired vouchers are rejected, not zeroed silently."""
    voucher = make_voucher(status=status)

    result = compute_discount(Decimal("500000"), voucher, today)

    assert result.discount_amount == Decimal("0")
    assert result.rejection.reason == RejectionReason.VOUCHER_EXPIRED


def test_voucher_past_valid_to_rejected(today):
    """Test a voucher whose window ended yesterday."""
    voucher = make_voucher(valid_to=today - timedelta(days=1))

    result = compute_discount(Decimal("500000"), voucher, today)

    assert result.rejection.reason == RejectionReason.VOUCHER_EXPIRED
    assert "expired" in result.rejection.message


def test_voucher_not_yet_valid_rejected(today):
    """Test a voucher whose window starts tomorrow."""
    voucher = make_voucher(valid_from=today + timedelta(days=1))

    result = compute_discount(Decimal("500000"), voucher, today)

    assert result.rejection.reason == RejectionReason.VOUCHER_EXPIRED


def test_validity_window_is_inclusive(today):
    """Test vouchers are usable on their first and last day."""
    first_day = make_voucher(valid_from=today)
    last_day = make_voucher(valid_to=today)

    assert compute_discount(Decimal("100000"), first_day, today).rejection is None
    assert compute_discount(Decimal("100000"), last_day, today).rejection is None


def test_open_ended_voucher(today):
    """Test a voucher without valid_to never expires by date."""
    voucher = make_voucher(valid_to=None)

    result = compute_discount(Decimal("100000"), voucher, date(2099, 1, 1))

    assert result.discount_amount == Decimal("10000")


def test_no_voucher_gives_zero_discount():
    """Test absent voucher yields zero and no rejection."""
    result = compute_discount(Decimal("260000"), None)

    assert result.discount_amount == Decimal("0")
    assert result.rejection is None
    assert not result.is_applied


def test_negative_subtotal_raises(today):
    """Test negative subtotal is a caller error."""
    with pytest.raises(ValueError):
        compute_discount(Decimal("-1"), make_voucher(), today)


def test_malformed_negative_value_clamped_to_zero(today):
    """Test a negative voucher value can never increase the amount."""
    voucher = make_voucher(type=DiscountType.FIXED, value=Decimal("-20000"))

    result = compute_discount(Decimal("100000"), voucher, today)

    assert result.discount_amount == Decimal("0")


def test_malformed_percentage_over_100_clamped(today):
    """Test a percentage above 100 cannot exceed the subtotal."""
    voucher = make_voucher(value=Decimal("150"))

    result = compute_discount(Decimal("100000"), voucher, today)

    assert result.discount_amount == Decimal("100000")


def test_percentage_rounding_half_up(today):
    """Test percentage discounts are rounded half-up to 2 places."""
    voucher = make_voucher(value=Decimal("10"))

    result = compute_discount(Decimal("12345.55"), voucher, today)

    assert result.discount_amount == Decimal("1234.56")


def test_engine_decimal_places(today):
    """Test configurable precision."""
    engine = DiscountEngine(decimal_places=0)
    voucher = make_voucher(value=Decimal("10"))

    result = engine.compute_discount(Decimal("12345"), voucher, today)

    assert result.discount_amount == Decimal("1235")


def test_percentage_of_huge_subtotal_does_not_raise(today):
    """Test rounding keeps working past the default decimal precision."""
    voucher = make_voucher(value=Decimal("10"))
    subtotal = Decimal("1e27")

    result = compute_discount(subtotal, voucher, today)

    assert result.rejection is None
    assert result.discount_amount == Decimal("1e26")
    assert Decimal("0") <= result.discount_amount <= subtotal


def test_discount_bounds_hold_for_all_vouchers(
    today, welcome_voucher, weekend_voucher, holiday_voucher, inactive_voucher
):
    """Test 0 <= discount <= subtotal and final >= 0 across inputs."""
    vouchers = [
        None,
        welcome_voucher,
        weekend_voucher,
        holiday_voucher,
        inactive_voucher,
        make_voucher(type=DiscountType.FIXED, value=Decimal("999999999")),
        make_voucher(value=Decimal("100")),
    ]
    subtotals = [Decimal("0"), Decimal("1"), Decimal("30000"), Decimal("200000"), Decimal("1000000")]

    for voucher in vouchers:
        for subtotal in subtotals:
            result = compute_discount(subtotal, voucher, today)
            assert Decimal("0") <= result.discount_amount <= subtotal
            assert compute_final_amount(subtotal, result.discount_amount) >= Decimal("0")


def test_compute_discount_is_idempotent(today, weekend_voucher):
    """Test identical inputs give identical results."""
    first = compute_discount(Decimal("450000"), weekend_voucher, today)
    second = compute_discount(Decimal("450000"), weekend_voucher, today)

    assert first == second
    assert weekend_voucher.used_count == 0


def test_compute_subtotal():
    """Test court price plus service lines."""
    lines = [
        ServiceLine(service_id=1, quantity=2, unit_price=Decimal("15000")),
        ServiceLine(service_id=2, quantity=1, unit_price=Decimal("30000")),
    ]

    assert compute_subtotal(Decimal("200000"), lines) == Decimal("260000")


def test_compute_subtotal_without_services():
    """Test subtotal is the court price alone when nothing is ordered."""
    assert compute_subtotal(200000, []) == Decimal("200000")


def test_service_line_rejects_zero_quantity():
    """Test a zero-quantity line cannot be built."""
    with pytest.raises(ValueError):
        ServiceLine(service_id=1, quantity=0, unit_price=Decimal("15000"))


def test_update_quantity_to_zero_removes_line(catalog_services):
    """Test decreasing a line to zero drops it and its contribution."""
    shuttles, rackets = catalog_services[0], catalog_services[1]
    lines = update_service_quantity([], shuttles, 2)
    lines = update_service_quantity(lines, rackets, 1)
    assert compute_subtotal(Decimal("200000"), lines) == Decimal("260000")

    lines = update_service_quantity(lines, rackets, -1)

    assert [line.service_id for line in lines] == [1]
    assert compute_subtotal(Decimal("200000"), lines) == Decimal("230000")


def test_update_quantity_below_zero_removes_line(catalog_services):
    """Test overshooting the decrement also removes the line."""
    lines = update_service_quantity([], catalog_services[0], 1)

    assert update_service_quantity(lines, catalog_services[0], -5) == []


def test_update_quantity_keeps_order_and_increments(catalog_services):
    """Test adjusting an existing line keeps its position."""
    shuttles, rackets = catalog_services[0], catalog_services[1]
    lines = update_service_quantity([], shuttles, 1)
    lines = update_service_quantity(lines, rackets, 1)

    lines = update_service_quantity(lines, shuttles, 2)

    assert [(line.service_id, line.quantity) for line in lines] == [(1, 3), (2, 1)]


def test_update_quantity_decrement_unknown_service_is_noop():
    """Test decrementing a service not in the order adds nothing."""
    service = CatalogService(service_id=9, name="Water", unit_price=Decimal("10000"))

    assert update_service_quantity([], service, -1) == []


def test_update_quantity_does_not_mutate_input(catalog_services):
    """Test the original list is left untouched."""
    lines = update_service_quantity([], catalog_services[0], 1)

    update_service_quantity(lines, catalog_services[0], -1)

    assert len(lines) == 1


def test_price_order(today, welcome_voucher):
    """Test subtotal, discount and final amount of an order context."""
    order = OrderContext(
        court_price=Decimal("200000"),
        service_lines=[
            ServiceLine(service_id=1, quantity=2, unit_price=Decimal("15000")),
            ServiceLine(service_id=2, quantity=1, unit_price=Decimal("30000")),
        ],
        applied_voucher=welcome_voucher,
    )

    priced = DiscountEngine().price_order(order, today)

    assert priced.subtotal == order.subtotal == Decimal("260000")
    assert priced.discount.discount_amount == Decimal("26000")
    assert priced.final_amount == Decimal("234000")
    assert priced.totals.final_amount == Decimal("234000")
