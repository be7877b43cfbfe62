"""Discount engine.

Single source of the voucher pricing rules used by every booking,
invoice and payment screen:
- Subtotal from court price and service lines
- Voucher eligibility (status, validity window, minimum order)
- Percentage vs fixed discount with max-discount cap
- Clamping so 0 <= discount <= subtotal and final >= 0

Everything here is pure and synchronous. Rule violations come back as
a ``VoucherRejection`` value, never as an exception.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal, localcontext
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

from shuttlesync.config.settings import Settings
from shuttlesync.logging import get_logger
from shuttlesync.models.invoice import InvoiceTotals
from shuttlesync.models.order import CatalogService, OrderContext, ServiceLine
from shuttlesync.models.voucher import DiscountType, Voucher, VoucherStatus, today_utc

logger = get_logger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
DEFAULT_DECIMAL_PLACES = 2


class RejectionReason(str, Enum):
    """Why a voucher was not applied."""

    VOUCHER_INELIGIBLE = "VOUCHER_INELIGIBLE"
    VOUCHER_EXPIRED = "VOUCHER_EXPIRED"
    VOUCHER_NOT_FOUND = "VOUCHER_NOT_FOUND"
    INVOICE_ALREADY_PAID = "INVOICE_ALREADY_PAID"
    PERMISSION_DENIED = "PERMISSION_DENIED"


class VoucherRejection(BaseModel):
    """Recoverable voucher failure, shown to the user."""

    model_config = ConfigDict(frozen=True)

    reason: RejectionReason
    message: str
    voucher_code: Optional[str] = None
    shortfall: Optional[Decimal] = Field(
        default=None, description="Amount missing to reach the minimum order"
    )


class DiscountResult(BaseModel):
    """Discount for an order, or the reason none was applied."""

    model_config = ConfigDict(frozen=True)

    discount_amount: Decimal = ZERO
    rejection: Optional[VoucherRejection] = None

    @property
    def is_applied(self) -> bool:
        """Check if a non-rejected voucher produced a discount."""
        return self.rejection is None and self.discount_amount > ZERO


class PricedOrder(BaseModel):
    """Totals of an order context as displayed on the booking screens."""

    model_config = ConfigDict(frozen=True)

    subtotal: Decimal
    discount: DiscountResult
    final_amount: Decimal

    @property
    def totals(self) -> InvoiceTotals:
        """Totals in invoice form."""
        return InvoiceTotals(
            original_amount=self.subtotal,
            discount_amount=self.discount.discount_amount,
            final_amount=self.final_amount,
        )


def to_decimal(value) -> Decimal:
    """Convert int, str or Decimal amounts without float artefacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def not_found(code: str) -> VoucherRejection:
    """Rejection for a code the lookup did not match."""
    return VoucherRejection(
        reason=RejectionReason.VOUCHER_NOT_FOUND,
        message=f"Voucher {code.strip().upper()} not found",
        voucher_code=code.strip().upper(),
    )


class DiscountEngine:
    """Stateless voucher pricing rules."""

    def __init__(self, decimal_places: int = DEFAULT_DECIMAL_PLACES):
        """
        Initialize discount engine.

        Args:
            decimal_places: Precision percentage discounts are rounded to
        """
        self.decimal_places = decimal_places
        self._quantum = Decimal(1).scaleb(-decimal_places)

    @classmethod
    def from_settings(cls, settings: Settings) -> "DiscountEngine":
        """Engine using the configured amount precision."""
        return cls(decimal_places=settings.amount_decimal_places)

    def compute_subtotal(
        self, court_price, service_lines: Iterable[ServiceLine]
    ) -> Decimal:
        """
        Court price plus quantity x unit price of every service line.

        Raises:
            ValueError: If the court price is negative
        """
        price = to_decimal(court_price)
        if price < ZERO:
            raise ValueError("court_price must be non-negative")
        return price + sum((line.line_total for line in service_lines), ZERO)

    def update_service_quantity(
        self,
        service_lines: list[ServiceLine],
        service: CatalogService,
        delta: int,
    ) -> list[ServiceLine]:
        """
        Change the quantity of a service, returning a new list of lines.

        A new service is appended. A line whose quantity would drop to
        zero or below is removed entirely; zero-quantity lines are never
        kept.
        """
        updated: list[ServiceLine] = []
        found = False
        for line in service_lines:
            if line.service_id != service.service_id:
                updated.append(line)
                continue
            found = True
            quantity = line.quantity + delta
            if quantity > 0:
                updated.append(line.model_copy(update={"quantity": quantity}))

        if not found and delta > 0:
            updated.append(ServiceLine.from_catalog(service, delta))

        return updated

    def check_eligibility(
        self, subtotal, voucher: Voucher, today: Optional[date] = None
    ) -> Optional[VoucherRejection]:
        """
        Check status, validity window and minimum order.

        Returns:
            None when the voucher may be applied, else the rejection
        """
        today = today or today_utc()
        amount = to_decimal(subtotal)

        if voucher.status != VoucherStatus.ACTIVE:
            return VoucherRejection(
                reason=RejectionReason.VOUCHER_EXPIRED,
                message=f"Voucher {voucher.code} is {voucher.status.value}",
                voucher_code=voucher.code,
            )

        if today < voucher.valid_from:
            return VoucherRejection(
                reason=RejectionReason.VOUCHER_EXPIRED,
                message=f"Voucher {voucher.code} is not valid until {voucher.valid_from.isoformat()}",
                voucher_code=voucher.code,
            )

        if voucher.valid_to is not None and today > voucher.valid_to:
            return VoucherRejection(
                reason=RejectionReason.VOUCHER_EXPIRED,
                message=f"Voucher {voucher.code} expired on {voucher.valid_to.isoformat()}",
                voucher_code=voucher.code,
            )

        if amount < voucher.min_order_amount:
            shortfall = voucher.min_order_amount - amount
            return VoucherRejection(
                reason=RejectionReason.VOUCHER_INELIGIBLE,
                message=(
                    f"Order total {amount} is below the minimum "
                    f"{voucher.min_order_amount} for voucher {voucher.code}"
                ),
                voucher_code=voucher.code,
                shortfall=shortfall,
            )

        return None

    def calculate_raw_discount(self, subtotal, voucher: Voucher) -> Decimal:
        """
        Discount for an eligible voucher, clamped into [0, subtotal].

        PERCENTAGE: subtotal * value / 100, rounded half-up, capped at
        max_discount_amount when set. FIXED: value, unscaled.
        """
        amount = to_decimal(subtotal)

        if voucher.type == DiscountType.PERCENTAGE:
            with localcontext() as ctx:
                raw = amount * voucher.value / HUNDRED
                # quantize needs room for every integer digit plus the scale
                ctx.prec = max(ctx.prec, raw.adjusted() + self.decimal_places + 2)
                raw = raw.quantize(self._quantum, rounding=ROUND_HALF_UP)
            if voucher.max_discount_amount is not None and raw > voucher.max_discount_amount:
                raw = voucher.max_discount_amount
        else:
            raw = voucher.value

        return min(max(raw, ZERO), max(amount, ZERO))

    def compute_discount(
        self, subtotal, voucher: Optional[Voucher], today: Optional[date] = None
    ) -> DiscountResult:
        """
        Compute the discount a voucher gives on a subtotal.

        Args:
            subtotal: Non-negative order amount before discount
            voucher: Selected voucher, or None
            today: Evaluation date (defaults to the current UTC date)

        Returns:
            DiscountResult with 0 <= discount_amount <= subtotal; a
            rejected voucher yields a zero discount plus the rejection

        Raises:
            ValueError: If subtotal is negative
        """
        amount = to_decimal(subtotal)
        if amount < ZERO:
            raise ValueError("subtotal must be non-negative")

        if voucher is None:
            return DiscountResult()

        rejection = self.check_eligibility(amount, voucher, today)
        if rejection is not None:
            logger.debug(
                "voucher_not_eligible",
                voucher_code=voucher.code,
                reason=rejection.reason.value,
                subtotal=str(amount),
            )
            return DiscountResult(rejection=rejection)

        return DiscountResult(discount_amount=self.calculate_raw_discount(amount, voucher))

    def compute_final_amount(self, subtotal, discount_amount) -> Decimal:
        """Subtotal minus discount, never below zero."""
        return max(ZERO, to_decimal(subtotal) - to_decimal(discount_amount))

    def price_order(
        self, order: OrderContext, today: Optional[date] = None
    ) -> PricedOrder:
        """Subtotal, discount and final amount for an order context."""
        subtotal = self.compute_subtotal(order.court_price, order.service_lines)
        discount = self.compute_discount(subtotal, order.applied_voucher, today)
        return PricedOrder(
            subtotal=subtotal,
            discount=discount,
            final_amount=self.compute_final_amount(subtotal, discount.discount_amount),
        )


_default_engine = DiscountEngine()


def compute_subtotal(court_price, service_lines: Iterable[ServiceLine]) -> Decimal:
    """Court price plus all service line totals."""
    return _default_engine.compute_subtotal(court_price, service_lines)


def compute_discount(
    subtotal, voucher: Optional[Voucher], today: Optional[date] = None
) -> DiscountResult:
    """Discount a voucher gives on a subtotal."""
    return _default_engine.compute_discount(subtotal, voucher, today)


def compute_final_amount(subtotal, discount_amount) -> Decimal:
    """Subtotal minus discount, never below zero."""
    return _default_engine.compute_final_amount(subtotal, discount_amount)


def update_service_quantity(
    service_lines: list[ServiceLine], service: CatalogService, delta: int
) -> list[ServiceLine]:
    """Adjust a service quantity; lines dropping to zero are removed."""
    return _default_engine.update_service_quantity(service_lines, service, delta)
