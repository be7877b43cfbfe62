"""Invoice totals service.

Recomputes and displays invoice totals with the same rules the booking
screens use. Invoices are frozen models; every operation returns a new
invoice. Only staff and admins may change the discount on an invoice.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from shuttlesync.logging import get_logger
from shuttlesync.logging.audit import AuditLogger
from shuttlesync.models.invoice import Invoice, InvoiceTotals
from shuttlesync.models.session import UserSession
from shuttlesync.models.voucher import Voucher
from shuttlesync.security.permissions import PermissionChecker
from shuttlesync.services.discount_engine import (
    DiscountEngine,
    RejectionReason,
    VoucherRejection,
)

logger = get_logger(__name__)


class InvoiceTotalsService:
    """Applies vouchers to invoices and keeps their totals consistent."""

    def __init__(
        self,
        engine: Optional[DiscountEngine] = None,
        permissions: Optional[PermissionChecker] = None,
    ):
        """
        Initialize invoice totals service.

        Args:
            engine: Discount rules (default precision when omitted)
            permissions: Permission checker
        """
        self.engine = engine or DiscountEngine()
        self.permissions = permissions or PermissionChecker()

    def recalculate(self, invoice: Invoice) -> Invoice:
        """Original amount from the detail lines; discount re-clamped."""
        original = sum((detail.amount for detail in invoice.details), Decimal("0"))
        totals = InvoiceTotals.from_amounts(original, invoice.totals.discount_amount)
        return invoice.model_copy(update={"totals": totals})

    def _deny(
        self,
        session: Optional[UserSession],
        invoice: Invoice,
        action: str,
        voucher_code: Optional[str],
    ) -> Optional[VoucherRejection]:
        """Rejection plus audit entry when the session may not edit invoices."""
        if self.permissions.can_apply_voucher_to_invoice(session):
            return None

        actor_id = session.user_id if session else None
        logger.warning("invoice_permission_denied", user_id=actor_id, invoice_id=invoice.id)
        AuditLogger.log_permission_denied(
            actor_id=actor_id,
            resource_type="invoice",
            resource_id=invoice.id or invoice.booking_id,
            attempted_action=action,
        )
        return VoucherRejection(
            reason=RejectionReason.PERMISSION_DENIED,
            message="Only staff and admins can change invoice discounts",
            voucher_code=voucher_code,
        )

    def apply_voucher(
        self,
        invoice: Invoice,
        voucher: Voucher,
        session: Optional[UserSession],
        today: Optional[date] = None,
    ) -> tuple[Invoice, Optional[VoucherRejection]]:
        """
        Apply a voucher to an unpaid invoice.

        Returns: (invoice, rejection). On rejection the invoice is returned
        unchanged.
        """
        denied = self._deny(session, invoice, "apply_voucher_to_invoice", voucher.code)
        if denied is not None:
            return invoice, denied

        if invoice.is_paid:
            rejection = VoucherRejection(
                reason=RejectionReason.INVOICE_ALREADY_PAID,
                message="Cannot apply a voucher to a paid invoice",
                voucher_code=voucher.code,
            )
            logger.warning(
                "voucher_on_paid_invoice",
                invoice_id=invoice.id,
                voucher_code=voucher.code,
            )
            return invoice, rejection

        original = invoice.totals.original_amount
        result = self.engine.compute_discount(original, voucher, today)
        if result.rejection is not None:
            AuditLogger.log_voucher_rejected(
                actor_id=session.user_id,
                voucher_code=voucher.code,
                reason=result.rejection.reason.value,
                message=result.rejection.message,
            )
            return invoice, result.rejection

        totals = InvoiceTotals.from_amounts(original, result.discount_amount)
        logger.info(
            "invoice_voucher_applied",
            invoice_id=invoice.id,
            voucher_code=voucher.code,
            discount_amount=str(totals.discount_amount),
            final_amount=str(totals.final_amount),
        )
        AuditLogger.log_voucher_applied(
            actor_id=session.user_id,
            voucher_code=voucher.code,
            subtotal=original,
            discount_amount=totals.discount_amount,
        )
        return invoice.model_copy(update={"totals": totals, "voucher_code": voucher.code}), None

    def remove_voucher(
        self, invoice: Invoice, session: Optional[UserSession]
    ) -> tuple[Invoice, Optional[VoucherRejection]]:
        """
        Drop the discount; final amount goes back to the original.

        Returns: (invoice, rejection). On rejection the invoice is returned
        unchanged.
        """
        denied = self._deny(session, invoice, "remove_voucher_from_invoice", invoice.voucher_code)
        if denied is not None:
            return invoice, denied

        totals = InvoiceTotals.from_amounts(invoice.totals.original_amount, Decimal("0"))
        AuditLogger.log_voucher_removed(
            actor_id=session.user_id,
            invoice_id=invoice.id or invoice.booking_id,
            voucher_code=invoice.voucher_code,
        )
        return invoice.model_copy(update={"totals": totals, "voucher_code": None}), None
