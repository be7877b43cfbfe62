"""Checkout flow orchestration service.

Builds the order from the service catalog, resolves the voucher, prices
the order with the discount engine and submits the invoice draft to the
backend.
"""

from datetime import date
from typing import Optional

from shuttlesync.logging import get_logger
from shuttlesync.logging.audit import AuditLogger
from shuttlesync.models.invoice import Invoice, InvoiceDraft
from shuttlesync.models.order import OrderContext
from shuttlesync.models.session import UserSession
from shuttlesync.security.permissions import PermissionChecker
from shuttlesync.services.discount_engine import (
    DiscountEngine,
    PricedOrder,
    VoucherRejection,
)
from shuttlesync.services.voucher_lookup import VoucherLookupService
from shuttlesync.storage.repository_base import InvoiceRepository, ServiceCatalog

logger = get_logger(__name__)


class CheckoutResult:
    """Result of checkout flow."""

    def __init__(
        self,
        success: bool,
        invoice: Invoice | None = None,
        priced: PricedOrder | None = None,
        rejection: VoucherRejection | None = None,
        error: str | None = None,
    ):
        self.success = success
        self.invoice = invoice
        self.priced = priced
        self.rejection = rejection
        self.error = error


class CheckoutFlowService:
    """Orchestrates booking checkout with voucher pricing."""

    def __init__(
        self,
        voucher_lookup: VoucherLookupService,
        invoice_repo: InvoiceRepository,
        catalog: ServiceCatalog,
        engine: Optional[DiscountEngine] = None,
        permissions: Optional[PermissionChecker] = None,
    ):
        """
        Initialize checkout flow service.

        Args:
            voucher_lookup: Voucher lookup service
            invoice_repo: Booking/invoice persistence collaborator
            catalog: Service catalog collaborator
            engine: Discount engine (shared with voucher_lookup by default)
            permissions: Permission checker
        """
        self.voucher_lookup = voucher_lookup
        self.invoice_repo = invoice_repo
        self.catalog = catalog
        self.engine = engine or voucher_lookup.engine
        self.permissions = permissions or PermissionChecker()

    async def build_order(
        self,
        court_price,
        selections: dict[int, int],
    ) -> OrderContext:
        """
        Build an order context from {service_id: quantity} selections.

        Unknown or inactive services are skipped. Non-positive quantities
        add nothing.
        """
        services = {s.service_id: s for s in await self.catalog.list_services()}

        lines = []
        for service_id, quantity in selections.items():
            service = services.get(service_id)
            if service is None or not service.is_active:
                logger.warning(
                    "checkout_service_unavailable",
                    service_id=service_id,
                    reason="not in catalog" if service is None else "inactive",
                )
                continue
            lines = self.engine.update_service_quantity(lines, service, quantity)

        return OrderContext(court_price=court_price, service_lines=lines)

    async def apply_voucher_code(
        self,
        order: OrderContext,
        code: str,
        today: Optional[date] = None,
    ) -> tuple[OrderContext, Optional[VoucherRejection]]:
        """
        Attach a voucher to the order if it is eligible.

        Returns: (order, rejection). A rejected code leaves the order
        without a voucher so the original amount is shown unchanged.
        """
        voucher, rejection = await self.voucher_lookup.find_by_code(code)
        if rejection is None:
            subtotal = self.engine.compute_subtotal(order.court_price, order.service_lines)
            rejection = self.engine.check_eligibility(subtotal, voucher, today)

        if rejection is not None:
            return order.model_copy(update={"applied_voucher": None}), rejection

        return order.model_copy(update={"applied_voucher": voucher}), None

    async def submit(
        self,
        session: Optional[UserSession],
        order: OrderContext,
        booking_id: int,
        today: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> CheckoutResult:
        """
        Price the order and create its invoice on the backend.

        The backend's invoice totals are authoritative; a mismatch with the
        local computation is logged.
        """
        if not self.permissions.can_checkout(session):
            actor_id = session.user_id if session else None
            AuditLogger.log_permission_denied(
                actor_id=actor_id,
                resource_type="booking",
                resource_id=booking_id,
                attempted_action="checkout",
            )
            return CheckoutResult(False, error="Permission denied")

        priced = self.engine.price_order(order, today)
        voucher = order.applied_voucher

        if priced.discount.rejection is not None:
            rejection = priced.discount.rejection
            AuditLogger.log_voucher_rejected(
                actor_id=session.user_id,
                voucher_code=rejection.voucher_code or "",
                reason=rejection.reason.value,
                message=rejection.message,
            )
            return CheckoutResult(False, priced=priced, rejection=rejection)

        draft = InvoiceDraft(
            booking_id=booking_id,
            customer_id=session.user_id,
            court_price=order.court_price,
            service_lines=order.service_lines,
            voucher_code=voucher.code if voucher else None,
            discount_amount=priced.discount.discount_amount,
            final_amount=priced.final_amount,
            notes=notes,
        )

        try:
            invoice = await self.invoice_repo.create(draft)
        except Exception as e:
            logger.error(
                "invoice_creation_failed",
                booking_id=booking_id,
                error=str(e),
                exc_info=True,
            )
            AuditLogger.log_invoice_submit_failed(
                actor_id=session.user_id,
                booking_id=booking_id,
                error=str(e),
            )
            return CheckoutResult(False, priced=priced, error="Failed to create invoice")

        if invoice.totals.final_amount != priced.final_amount:
            logger.warning(
                "invoice_total_mismatch",
                invoice_id=invoice.id,
                local_final_amount=str(priced.final_amount),
                backend_final_amount=str(invoice.totals.final_amount),
            )

        if voucher is not None:
            AuditLogger.log_voucher_applied(
                actor_id=session.user_id,
                voucher_code=voucher.code,
                subtotal=priced.subtotal,
                discount_amount=priced.discount.discount_amount,
            )

        AuditLogger.log_invoice_submitted(
            actor_id=session.user_id,
            invoice_id=invoice.id if invoice.id is not None else "",
            booking_id=booking_id,
            final_amount=invoice.totals.final_amount,
            voucher_code=invoice.voucher_code,
        )

        logger.info(
            "checkout_completed",
            booking_id=booking_id,
            invoice_id=invoice.id,
            final_amount=str(invoice.totals.final_amount),
        )
        return CheckoutResult(True, invoice=invoice, priced=priced)
