"""Structured audit logging for voucher and invoice actions.

Provides an audit trail for discount decisions and invoice submissions.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from shuttlesync.logging import get_logger

logger = get_logger(__name__)


class AuditEventType(str, Enum):
    """Types of auditable events."""

    # Vouchers
    VOUCHER_APPLIED = "voucher_applied"
    VOUCHER_REJECTED = "voucher_rejected"
    VOUCHER_REMOVED = "voucher_removed"

    # Invoices
    INVOICE_SUBMITTED = "invoice_submitted"
    INVOICE_SUBMIT_FAILED = "invoice_submit_failed"

    # Security
    PERMISSION_DENIED = "permission_denied"


class AuditLogger:
    """Centralized audit logging service."""

    @staticmethod
    def log_event(
        event_type: AuditEventType,
        actor_id: Optional[int],
        resource_type: str,
        resource_id: int | str,
        action: str,
        success: bool = True,
        metadata: Optional[dict[str, Any]] = None,
        error: Optional[str] = None,
    ) -> None:
        """
        Log an auditable event with structured context.

        Args:
            event_type: Type of audit event
            actor_id: User ID performing the action (None for anonymous)
            resource_type: Type of resource (voucher, invoice, booking)
            resource_id: ID or code of the affected resource
            action: Human-readable action description
            success: Whether the action succeeded
            metadata: Additional context (amounts, reasons, etc.)
            error: Error message if action failed
        """
        audit_entry = {
            "event_type": event_type.value,
            "actor_id": actor_id,
            "resource_type": resource_type,
            "resource_id": str(resource_id),
            "action": action,
            "success": success,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "metadata": metadata or {},
        }

        if error:
            audit_entry["error"] = error

        logger.info("audit_event", **audit_entry)

    @staticmethod
    def log_voucher_applied(
        actor_id: Optional[int],
        voucher_code: str,
        subtotal: Decimal,
        discount_amount: Decimal,
    ) -> None:
        """Log a voucher accepted for an order."""
        AuditLogger.log_event(
            event_type=AuditEventType.VOUCHER_APPLIED,
            actor_id=actor_id,
            resource_type="voucher",
            resource_id=voucher_code,
            action=f"Applied voucher: {voucher_code}",
            metadata={
                "subtotal": str(subtotal),
                "discount_amount": str(discount_amount),
            },
        )

    @staticmethod
    def log_voucher_rejected(
        actor_id: Optional[int],
        voucher_code: str,
        reason: str,
        message: str,
    ) -> None:
        """Log a voucher rejection."""
        AuditLogger.log_event(
            event_type=AuditEventType.VOUCHER_REJECTED,
            actor_id=actor_id,
            resource_type="voucher",
            resource_id=voucher_code,
            action=f"Rejected voucher: {voucher_code}",
            success=False,
            metadata={"reason": reason},
            error=message,
        )

    @staticmethod
    def log_voucher_removed(
        actor_id: Optional[int],
        invoice_id: int | str,
        voucher_code: Optional[str],
    ) -> None:
        """Log a discount taken off an invoice."""
        AuditLogger.log_event(
            event_type=AuditEventType.VOUCHER_REMOVED,
            actor_id=actor_id,
            resource_type="invoice",
            resource_id=invoice_id,
            action=f"Removed voucher: {voucher_code}",
            metadata={"voucher_code": voucher_code},
        )

    @staticmethod
    def log_invoice_submitted(
        actor_id: int,
        invoice_id: int | str,
        booking_id: int,
        final_amount: Decimal,
        voucher_code: Optional[str] = None,
    ) -> None:
        """Log an invoice accepted by the backend."""
        AuditLogger.log_event(
            event_type=AuditEventType.INVOICE_SUBMITTED,
            actor_id=actor_id,
            resource_type="invoice",
            resource_id=invoice_id,
            action="Invoice submitted",
            metadata={
                "booking_id": booking_id,
                "final_amount": str(final_amount),
                "voucher_code": voucher_code,
            },
        )

    @staticmethod
    def log_invoice_submit_failed(
        actor_id: int,
        booking_id: int,
        error: str,
    ) -> None:
        """Log an invoice the backend did not accept."""
        AuditLogger.log_event(
            event_type=AuditEventType.INVOICE_SUBMIT_FAILED,
            actor_id=actor_id,
            resource_type="booking",
            resource_id=booking_id,
            action="Invoice submission failed",
            success=False,
            error=error,
        )

    @staticmethod
    def log_permission_denied(
        actor_id: Optional[int],
        resource_type: str,
        resource_id: int | str,
        attempted_action: str,
    ) -> None:
        """Log unauthorized access attempts."""
        AuditLogger.log_event(
            event_type=AuditEventType.PERMISSION_DENIED,
            actor_id=actor_id,
            resource_type=resource_type,
            resource_id=resource_id,
            action=f"Permission denied: {attempted_action}",
            success=False,
            metadata={"attempted_action": attempted_action},
        )
