"""Order context models built per booking session."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .voucher import Voucher


class CatalogService(BaseModel):
    """Service catalog entry (racket rental, shuttlecocks, drinks...)."""

    model_config = ConfigDict(frozen=True)

    service_id: int
    name: str = Field(min_length=1)
    unit_price: Decimal = Field(ge=0, description="Authoritative at selection time")
    is_active: bool = True


class ServiceLine(BaseModel):
    """Ordered service within a booking (value object)."""

    model_config = ConfigDict(frozen=True)

    service_id: int
    name: str = ""
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(ge=0)

    @property
    def line_total(self) -> Decimal:
        """Quantity times unit price."""
        return self.quantity * self.unit_price

    @classmethod
    def from_catalog(cls, service: CatalogService, quantity: int) -> "ServiceLine":
        """Create a line priced from the catalog."""
        return cls(
            service_id=service.service_id,
            name=service.name,
            quantity=quantity,
            unit_price=service.unit_price,
        )


class OrderContext(BaseModel):
    """Court price, selected services and at most one voucher."""

    court_price: Decimal = Field(ge=0, description="Price of the reserved time slot")
    service_lines: list[ServiceLine] = Field(default_factory=list)
    applied_voucher: Optional[Voucher] = None

    @property
    def subtotal(self) -> Decimal:
        """Court price plus all service line totals."""
        return self.court_price + sum(
            (line.line_total for line in self.service_lines), Decimal("0")
        )
