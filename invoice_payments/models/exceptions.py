"""Exceptions raised while applying payments to invoices."""


class InvoiceException(Exception):
    """Base exception for invoice payment errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvoiceNotFoundError(InvoiceException):
    """Raised when no invoice matches the payment reference."""

    def __init__(self, reference: str):
        super().__init__("There is no invoice matching this payment")
        self.reference = reference


class InvalidInvoiceStateError(InvoiceException):
    """Raised when a zero-amount invoice already has payments recorded."""

    def __init__(self):
        super().__init__(
            "The invoice is in an invalid state, it has an amount of 0 but has payments"
        )


class UnsupportedInvoiceTypeError(InvoiceException):
    """Raised when the invoice type has no tax policy."""

    def __init__(self, invoice_type):
        type_name = getattr(invoice_type, "value", invoice_type)
        super().__init__(f"Unknown invoice type: {type_name}")
        self.invoice_type = invoice_type
