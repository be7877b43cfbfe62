"""ShuttleSync court booking: voucher pricing and invoice totals."""

__version__ = "0.1.0"
