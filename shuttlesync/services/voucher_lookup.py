"""Voucher lookup service.

Resolves user-entered codes, powers the admin voucher search and counts,
and the customer "available vouchers" list.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from shuttlesync.logging import get_logger
from shuttlesync.logging.audit import AuditLogger
from shuttlesync.models.session import UserSession
from shuttlesync.models.voucher import DiscountType, Voucher, VoucherStatus, normalize_code, today_utc
from shuttlesync.security.permissions import PermissionChecker
from shuttlesync.services.discount_engine import (
    DiscountEngine,
    DiscountResult,
    VoucherRejection,
    not_found,
    to_decimal,
)
from shuttlesync.storage.repository_base import VoucherRepository

logger = get_logger(__name__)


class VoucherStats(BaseModel):
    """Counts shown on the admin voucher screen."""

    model_config = ConfigDict(frozen=True)

    total: int
    active: int
    inactive: int
    expired: int
    total_usage: int


class VoucherLookupService:
    """Finds vouchers and prices them against an order."""

    def __init__(
        self,
        voucher_repo: VoucherRepository,
        engine: Optional[DiscountEngine] = None,
        permissions: Optional[PermissionChecker] = None,
    ):
        """
        Initialize voucher lookup service.

        Args:
            voucher_repo: Voucher lookup collaborator
            engine: Discount engine (defaults to 2 decimal places)
            permissions: Permission checker
        """
        self.voucher_repo = voucher_repo
        self.engine = engine or DiscountEngine()
        self.permissions = permissions or PermissionChecker()

    async def find_by_code(
        self, code: str
    ) -> tuple[Optional[Voucher], Optional[VoucherRejection]]:
        """
        Find a voucher by user-entered code.

        Returns: (voucher, rejection_if_not_found)
        """
        normalized = normalize_code(code)
        if not normalized:
            return None, not_found(code)

        voucher = await self.voucher_repo.get_by_code(normalized)
        if voucher is None:
            logger.info("voucher_not_found", voucher_code=normalized)
            return None, not_found(normalized)

        return voucher, None

    async def search(
        self,
        term: str = "",
        status: Optional[VoucherStatus] = None,
        type: Optional[DiscountType] = None,
    ) -> list[Voucher]:
        """Case-insensitive match on code, name or description, with filters."""
        needle = term.strip().lower()
        results = []
        for voucher in await self.voucher_repo.list_all():
            if needle and not any(
                needle in field.lower()
                for field in (voucher.code, voucher.name, voucher.description)
            ):
                continue
            if status is not None and voucher.status != status:
                continue
            if type is not None and voucher.type != type:
                continue
            results.append(voucher)
        return results

    async def available_for_amount(
        self, amount, today: Optional[date] = None
    ) -> list[Voucher]:
        """
        Vouchers a customer could apply to an order of ``amount``.

        Sorted by the discount each yields for that amount, largest first.
        """
        today = today or today_utc()
        subtotal = to_decimal(amount)

        candidates: list[tuple[Decimal, Voucher]] = []
        for voucher in await self.voucher_repo.list_all():
            if not voucher.is_available_on(today):
                continue
            if voucher.min_order_amount > subtotal:
                continue
            candidates.append((self.engine.calculate_raw_discount(subtotal, voucher), voucher))

        candidates.sort(key=lambda c: c[0], reverse=True)
        return [voucher for _, voucher in candidates]

    async def apply_code(
        self, subtotal, code: str, today: Optional[date] = None
    ) -> DiscountResult:
        """Look up a code and compute its discount on the subtotal."""
        voucher, rejection = await self.find_by_code(code)
        if rejection is not None:
            return DiscountResult(rejection=rejection)
        return self.engine.compute_discount(subtotal, voucher, today)

    async def expired(self, today: Optional[date] = None) -> list[Voucher]:
        """Vouchers expired by status or past their end date."""
        today = today or today_utc()
        return [v for v in await self.voucher_repo.list_all() if v.is_expired_on(today)]

    async def stats(
        self, session: Optional[UserSession], today: Optional[date] = None
    ) -> Optional[VoucherStats]:
        """
        Voucher counts for the admin screen.

        A voucher past its end date counts as expired whatever its status.
        Returns None when the session may not manage vouchers.
        """
        if not self.permissions.can_manage_vouchers(session):
            actor_id = session.user_id if session else None
            logger.warning("voucher_stats_denied", user_id=actor_id)
            AuditLogger.log_permission_denied(
                actor_id=actor_id,
                resource_type="voucher",
                resource_id="stats",
                attempted_action="view_voucher_stats",
            )
            return None

        today = today or today_utc()
        vouchers = await self.voucher_repo.list_all()
        expired = sum(1 for v in vouchers if v.is_expired_on(today))
        active = sum(
            1
            for v in vouchers
            if v.status == VoucherStatus.ACTIVE and not v.is_expired_on(today)
        )
        return VoucherStats(
            total=len(vouchers),
            active=active,
            inactive=len(vouchers) - active - expired,
            expired=expired,
            total_usage=sum(v.used_count for v in vouchers),
        )
