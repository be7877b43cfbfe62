"""Invoice domain models."""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .order import ServiceLine

ZERO = Decimal("0")


class InvoiceStatus(str, Enum):
    """Invoice payment status."""

    PENDING = "Pending"
    PAID = "Paid"
    CANCELLED = "Cancelled"


class InvoiceType(str, Enum):
    """Channel the booking behind the invoice came through."""

    STANDARD = "STANDARD"
    ONLINE = "ONLINE"
    COUNTER = "COUNTER"
    PHONE = "PHONE"
    MOBILE_APP = "MOBILE_APP"


class InvoiceTotals(BaseModel):
    """Original, discount and final amounts of an invoice."""

    model_config = ConfigDict(frozen=True)

    original_amount: Decimal = Field(ge=0)
    discount_amount: Decimal = Field(default=ZERO, ge=0)
    final_amount: Decimal = Field(ge=0)

    @model_validator(mode="after")
    def validate_amounts(self) -> "InvoiceTotals":
        """Ensure discount <= original and final = original - discount."""
        if self.discount_amount > self.original_amount:
            raise ValueError("discount_amount cannot exceed original_amount")
        expected = max(ZERO, self.original_amount - self.discount_amount)
        if self.final_amount != expected:
            raise ValueError(
                f"final_amount {self.final_amount} does not match calculated {expected}"
            )
        return self

    @classmethod
    def from_amounts(cls, original_amount: Decimal, discount_amount: Decimal) -> "InvoiceTotals":
        """Build totals, clamping the discount into [0, original_amount]."""
        discount = min(max(discount_amount, ZERO), original_amount)
        return cls(
            original_amount=original_amount,
            discount_amount=discount,
            final_amount=original_amount - discount,
        )


class InvoiceDetail(BaseModel):
    """Line item of a persisted invoice."""

    description: str
    amount: Decimal = Field(ge=0)


class Invoice(BaseModel):
    """Invoice as persisted by the backend."""

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    booking_id: int
    invoice_date: Optional[date] = None
    invoice_type: InvoiceType = InvoiceType.STANDARD
    status: InvoiceStatus = InvoiceStatus.PENDING
    details: list[InvoiceDetail] = Field(default_factory=list)
    totals: InvoiceTotals
    voucher_code: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        """Accept 'paid' / 'PAID' / 'Paid' alike."""
        if isinstance(v, str):
            return v.strip().capitalize()
        return v

    @property
    def is_paid(self) -> bool:
        """Check if the invoice has been paid."""
        return self.status == InvoiceStatus.PAID


class InvoiceDraft(BaseModel):
    """Finalized order submitted to the backend to create an invoice."""

    booking_id: int
    customer_id: int
    court_price: Decimal = Field(ge=0)
    service_lines: list[ServiceLine] = Field(default_factory=list)
    voucher_code: Optional[str] = None
    discount_amount: Decimal = Field(default=ZERO, ge=0)
    final_amount: Decimal = Field(ge=0)
    notes: Optional[str] = None
