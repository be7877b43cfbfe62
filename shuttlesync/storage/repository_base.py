"""Interfaces of the backend collaborators.

The backend REST API owns persistence; these are the seams the
services talk to.
"""

from abc import ABC, abstractmethod
from typing import Optional

from shuttlesync.models.invoice import Invoice, InvoiceDraft
from shuttlesync.models.order import CatalogService
from shuttlesync.models.voucher import Voucher, normalize_code


class VoucherRepository(ABC):
    """Voucher lookup/search collaborator."""

    @abstractmethod
    async def get_by_code(self, code: str) -> Optional[Voucher]:
        """Retrieve voucher by code (case-insensitive)."""
        pass

    @abstractmethod
    async def list_all(self) -> list[Voucher]:
        """Retrieve all vouchers."""
        pass


class InvoiceRepository(ABC):
    """Booking/invoice persistence collaborator."""

    @abstractmethod
    async def create(self, draft: InvoiceDraft) -> Invoice:
        """Create invoice from a finalized order; backend assigns the id."""
        pass


class ServiceCatalog(ABC):
    """Read-only service catalog collaborator."""

    @abstractmethod
    async def list_services(self) -> list[CatalogService]:
        """Retrieve all catalog services."""
        pass


class InMemoryVoucherRepository(VoucherRepository):
    """Voucher repository backed by a dict, keyed by normalized code."""

    def __init__(self, vouchers: Optional[list[Voucher]] = None):
        self._vouchers: dict[str, Voucher] = {}
        for voucher in vouchers or []:
            self.add(voucher)

    def add(self, voucher: Voucher) -> None:
        """Insert or replace a voucher."""
        self._vouchers[voucher.code] = voucher

    async def get_by_code(self, code: str) -> Optional[Voucher]:
        return self._vouchers.get(normalize_code(code))

    async def list_all(self) -> list[Voucher]:
        return list(self._vouchers.values())
