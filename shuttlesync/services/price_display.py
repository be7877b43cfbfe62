"""Price display helpers.

Vietnamese currency formatting and receipt rows. Presentation only;
no pricing rule lives here.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from shuttlesync.config.settings import Settings
from shuttlesync.models.order import OrderContext
from shuttlesync.models.voucher import DiscountType, Voucher
from shuttlesync.services.discount_engine import PricedOrder

VND_SYMBOL = "₫"


def format_vnd(amount, currency_symbol: str = VND_SYMBOL) -> str:
    """
    Format an amount the way vi-VN renders VND.

    Args:
        amount: Decimal, int or numeric string
        currency_symbol: Symbol appended after the amount

    Returns:
        str: e.g. "1.234.567 ₫"; unparseable input renders as zero
    """
    try:
        value = Decimal(str(amount))
        if not value.is_finite():
            value = Decimal("0")
        value = value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except (ValueError, TypeError, InvalidOperation):
        value = Decimal("0")

    sign = "-" if value < 0 else ""
    digits = f"{abs(value):,}".replace(",", ".")
    return f"{sign}{digits} {currency_symbol}"


def format_voucher_value(voucher: Voucher, currency_symbol: str = VND_SYMBOL) -> str:
    """'10%' for percentage vouchers, a VND amount for fixed ones."""
    if voucher.type == DiscountType.PERCENTAGE:
        return f"{voucher.value.normalize():f}%"
    return format_vnd(voucher.value, currency_symbol)


def invoice_summary_lines(
    order: OrderContext,
    priced: PricedOrder,
    currency_symbol: str = VND_SYMBOL,
) -> list[tuple[str, str]]:
    """Label/amount rows for the booking summary and receipt."""
    rows = [("Court", format_vnd(order.court_price, currency_symbol))]

    for line in order.service_lines:
        rows.append(
            (f"{line.name or line.service_id} x{line.quantity}",
             format_vnd(line.line_total, currency_symbol))
        )

    rows.append(("Subtotal", format_vnd(priced.subtotal, currency_symbol)))

    if priced.discount.is_applied and order.applied_voucher is not None:
        rows.append(
            (f"Discount ({order.applied_voucher.code})",
             f"-{format_vnd(priced.discount.discount_amount, currency_symbol)}")
        )

    rows.append(("Total", format_vnd(priced.final_amount, currency_symbol)))
    return rows


class PriceDisplayService:
    """Formatting bound to the configured currency symbol."""

    def __init__(self, currency_symbol: str = VND_SYMBOL):
        self.currency_symbol = currency_symbol

    @classmethod
    def from_settings(cls, settings: Settings) -> "PriceDisplayService":
        """Display service using ``Settings.currency_symbol``."""
        return cls(currency_symbol=settings.currency_symbol)

    def format_price(self, amount) -> str:
        return format_vnd(amount, self.currency_symbol)

    def format_voucher_value(self, voucher: Voucher) -> str:
        return format_voucher_value(voucher, self.currency_symbol)

    def summary_lines(
        self, order: OrderContext, priced: PricedOrder
    ) -> list[tuple[str, str]]:
        return invoice_summary_lines(order, priced, self.currency_symbol)
