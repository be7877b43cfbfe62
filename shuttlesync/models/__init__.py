"""Models package - Pydantic domain models."""

from .invoice import (
    Invoice,
    InvoiceDetail,
    InvoiceDraft,
    InvoiceStatus,
    InvoiceTotals,
    InvoiceType,
)
from .order import CatalogService, OrderContext, ServiceLine
from .session import UserRole, UserSession
from .voucher import DiscountType, Voucher, VoucherInput, VoucherStatus

__all__ = [
    "Invoice",
    "InvoiceDetail",
    "InvoiceDraft",
    "InvoiceStatus",
    "InvoiceTotals",
    "InvoiceType",
    "CatalogService",
    "OrderContext",
    "ServiceLine",
    "UserRole",
    "UserSession",
    "DiscountType",
    "Voucher",
    "VoucherInput",
    "VoucherStatus",
]
