"""Unit tests for permission checks."""

from shuttlesync.models.session import UserRole, UserSession
from shuttlesync.security.permissions import Permission, PermissionChecker


def test_admin_has_all_permissions(admin_session):
    """Test admins can do everything."""
    checker = PermissionChecker()

    for permission in Permission:
        assert checker.has_permission(admin_session, permission)


def test_customer_permissions(customer_session):
    """Test customers may only check out."""
    checker = PermissionChecker()

    assert checker.can_checkout(customer_session)
    assert not checker.can_manage_vouchers(customer_session)
    assert not checker.can_apply_voucher_to_invoice(customer_session)


def test_staff_permissions():
    """Test staff can check out and apply vouchers to invoices."""
    checker = PermissionChecker()
    staff = UserSession(user_id=7, role=UserRole.STAFF)

    assert checker.can_checkout(staff)
    assert checker.can_apply_voucher_to_invoice(staff)
    assert not checker.can_manage_vouchers(staff)


def test_missing_session_denied():
    """Test no session means no permissions."""
    checker = PermissionChecker()

    assert not checker.can_checkout(None)
    assert not checker.can_manage_vouchers(None)


def test_session_auth_headers(customer_session):
    """Test bearer header is built from the session token."""
    headers = customer_session.auth_headers()

    assert headers["Authorization"].startswith("Bearer ")
    assert UserSession(user_id=3, role=UserRole.CUSTOMER).auth_headers() == {}
