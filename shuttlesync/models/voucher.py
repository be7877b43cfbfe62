"""Voucher domain models."""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

MAX_CODE_LENGTH = 20
MAX_PERCENTAGE = Decimal("100")


class DiscountType(str, Enum):
    """How a voucher's value is turned into a discount."""

    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


class VoucherStatus(str, Enum):
    """Voucher lifecycle status, set by the administration side."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"


def normalize_code(code: str) -> str:
    """Canonical form used for case-insensitive code matching."""
    return code.strip().upper()


def _parse_type(v):
    if isinstance(v, str):
        return v.strip().upper()
    return v


def _parse_status(v):
    if isinstance(v, str):
        return v.strip().lower()
    return v


class Voucher(BaseModel):
    """Voucher reference data as returned by the backend.

    Read-only here. Values are not re-validated against the admin
    definition rules, so a malformed record still prices safely.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    code: str = Field(min_length=1)
    name: str = ""
    description: str = ""
    type: DiscountType
    value: Decimal
    min_order_amount: Decimal = Decimal("0")
    max_discount_amount: Optional[Decimal] = None
    valid_from: date
    valid_to: Optional[date] = None
    status: VoucherStatus = VoucherStatus.ACTIVE
    usage_limit: Optional[int] = None
    used_count: int = 0

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        """Store codes upper-cased so lookups are case-insensitive."""
        code = normalize_code(v)
        if not code:
            raise ValueError("code must not be blank")
        return code

    @field_validator("type", mode="before")
    @classmethod
    def parse_type(cls, v):
        """Accept 'percentage' / 'fixed' in any case."""
        return _parse_type(v)

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        """Accept 'ACTIVE' / 'active' alike."""
        return _parse_status(v)

    @field_validator("min_order_amount", mode="before")
    @classmethod
    def default_min_order(cls, v):
        """Treat a missing minimum as no minimum."""
        return Decimal("0") if v is None else v

    @property
    def usage_percentage(self) -> float:
        """Share of the usage limit consumed, 0 when unlimited."""
        if not self.usage_limit:
            return 0.0
        return round(self.used_count * 100 / self.usage_limit, 2)

    @property
    def is_exhausted(self) -> bool:
        """Check if the usage limit has been reached."""
        return self.usage_limit is not None and self.used_count >= self.usage_limit

    def is_within_validity(self, on: date) -> bool:
        """Check if `on` falls inside [valid_from, valid_to]."""
        if on < self.valid_from:
            return False
        return self.valid_to is None or on <= self.valid_to

    def is_expired_on(self, on: date) -> bool:
        """Check if the voucher is expired by status or by date."""
        return self.status == VoucherStatus.EXPIRED or (
            self.valid_to is not None and on > self.valid_to
        )

    def is_available_on(self, on: date) -> bool:
        """Check if the voucher can be offered to a customer on `on`."""
        return (
            self.status == VoucherStatus.ACTIVE
            and self.is_within_validity(on)
            and not self.is_exhausted
        )


class VoucherInput(BaseModel):
    """Input model for voucher creation and edits (admin side)."""

    code: str = Field(min_length=1, max_length=MAX_CODE_LENGTH)
    name: str = Field(min_length=1, max_length=100)
    description: str = ""
    type: DiscountType
    value: Decimal = Field(gt=0)
    min_order_amount: Decimal = Field(default=Decimal("0"), ge=0)
    max_discount_amount: Optional[Decimal] = Field(default=None, ge=0)
    valid_from: date
    valid_to: Optional[date] = None
    status: VoucherStatus = VoucherStatus.ACTIVE
    usage_limit: Optional[int] = Field(default=None, ge=0)

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        """Ensure code is not blank and store it upper-cased."""
        code = normalize_code(v)
        if not code:
            raise ValueError("Voucher code is required")
        return code

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Ensure name is not blank."""
        if not v.strip():
            raise ValueError("Voucher name is required")
        return v.strip()

    @field_validator("type", mode="before")
    @classmethod
    def parse_type(cls, v):
        """Accept 'percentage' / 'fixed' in any case."""
        return _parse_type(v)

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        """Accept 'ACTIVE' / 'active' alike."""
        return _parse_status(v)

    @model_validator(mode="after")
    def validate_rules(self) -> "VoucherInput":
        """Cross-field definition rules."""
        if self.type == DiscountType.PERCENTAGE and self.value > MAX_PERCENTAGE:
            raise ValueError("Percentage discount cannot exceed 100%")
        if self.valid_to is not None and self.valid_to < self.valid_from:
            raise ValueError("valid_to must not be before valid_from")
        return self

    def to_voucher(self, id: Optional[int] = None, used_count: int = 0) -> Voucher:
        """Build the read-only voucher record for this definition."""
        return Voucher(id=id, used_count=used_count, **self.model_dump())


def today_utc() -> date:
    """Current date used for validity checks when none is given."""
    return datetime.now(timezone.utc).date()
