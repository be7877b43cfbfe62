"""Handlers package - user-facing messages for the booking screens."""

from shuttlesync.services.discount_engine import RejectionReason, VoucherRejection
from shuttlesync.services.price_display import format_vnd


def format_error_message(emoji: str, problem: str, action: str) -> str:
    """
    Format error messages following the pattern: [emoji] [problem] [action].

    Args:
        emoji: Visual indicator (e.g., "❌", "⚠️", "🔒")
        problem: Clear description of what went wrong
        action: Suggested next step for the user

    Returns:
        Formatted error message string

    Example:
        >>> format_error_message("❌", "Voucher not found.", "Check the code and try again.")
        '❌ Voucher not found.\\n\\nCheck the code and try again.'
    """
    return f"{emoji} {problem}\n\n{action}"


# Common error templates
ERROR_TEMPLATES = {
    "voucher_not_found": lambda code: format_error_message(
        "❌",
        f"Voucher {code} not found.",
        "Check the code and try again.",
    ),
    "voucher_expired": lambda code: format_error_message(
        "⏰",
        f"Voucher {code} is expired or no longer active.",
        "Remove it and choose another voucher.",
    ),
    "voucher_ineligible": lambda code, shortfall: format_error_message(
        "⚠️",
        f"Your order does not reach the minimum for voucher {code}.",
        f"Add {format_vnd(shortfall)} more or continue without a voucher.",
    ),
    "invoice_already_paid": lambda: format_error_message(
        "🔒",
        "This invoice has already been paid.",
        "Vouchers can only be applied to unpaid invoices.",
    ),
    "permission_denied": lambda: format_error_message(
        "🔒",
        "You don't have permission to perform this action.",
        "Sign in with an account that has access.",
    ),
    "checkout_failed": lambda: format_error_message(
        "❌",
        "We couldn't create your invoice.",
        "Please try again in a moment.",
    ),
}


def format_rejection(rejection: VoucherRejection) -> str:
    """Render a voucher rejection for the user."""
    code = rejection.voucher_code or ""
    if rejection.reason == RejectionReason.VOUCHER_NOT_FOUND:
        return ERROR_TEMPLATES["voucher_not_found"](code)
    if rejection.reason == RejectionReason.VOUCHER_EXPIRED:
        return ERROR_TEMPLATES["voucher_expired"](code)
    if rejection.reason == RejectionReason.VOUCHER_INELIGIBLE:
        return ERROR_TEMPLATES["voucher_ineligible"](code, rejection.shortfall or 0)
    if rejection.reason == RejectionReason.INVOICE_ALREADY_PAID:
        return ERROR_TEMPLATES["invoice_already_paid"]()
    if rejection.reason == RejectionReason.PERMISSION_DENIED:
        return ERROR_TEMPLATES["permission_denied"]()
    return format_error_message("❌", rejection.message, "Please try again.")
