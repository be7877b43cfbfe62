"""Permission checks for booking, invoice and voucher actions."""

from enum import Enum
from typing import Optional

from shuttlesync.models.session import UserRole, UserSession


class Permission(str, Enum):
    """Permission types."""

    MANAGE_VOUCHERS = "manage_vouchers"
    CHECKOUT = "checkout"
    APPLY_VOUCHER_TO_INVOICE = "apply_voucher_to_invoice"


_ROLE_PERMISSIONS: dict[UserRole, frozenset[Permission]] = {
    UserRole.ADMIN: frozenset(Permission),
    UserRole.STAFF: frozenset(
        {Permission.CHECKOUT, Permission.APPLY_VOUCHER_TO_INVOICE}
    ),
    UserRole.CUSTOMER: frozenset({Permission.CHECKOUT}),
}


class PermissionChecker:
    """Check session permissions for actions."""

    def has_permission(
        self, session: Optional[UserSession], permission: Permission
    ) -> bool:
        """Check if the session's role grants a permission."""
        if session is None:
            return False
        return permission in _ROLE_PERMISSIONS.get(session.role, frozenset())

    def can_manage_vouchers(self, session: Optional[UserSession]) -> bool:
        """Create, edit or retire vouchers (admin only)."""
        return self.has_permission(session, Permission.MANAGE_VOUCHERS)

    def can_checkout(self, session: Optional[UserSession]) -> bool:
        """Confirm a booking and submit its invoice."""
        return self.has_permission(session, Permission.CHECKOUT)

    def can_apply_voucher_to_invoice(self, session: Optional[UserSession]) -> bool:
        """Apply a voucher to an existing invoice (admin and staff)."""
        return self.has_permission(session, Permission.APPLY_VOUCHER_TO_INVOICE)
