"""Data models for invoice payment processing."""

from .invoice import (
    Invoice,
    InvoiceType,
    Payment,
    PaymentOutcome
)
from .exceptions import (
    InvoiceException,
    InvoiceNotFoundError,
    InvalidInvoiceStateError,
    UnsupportedInvoiceTypeError
)

__all__ = [
    "Invoice",
    "InvoiceType",
    "Payment",
    "PaymentOutcome",
    "InvoiceException",
    "InvoiceNotFoundError",
    "InvalidInvoiceStateError",
    "UnsupportedInvoiceTypeError"
]
