"""Payment processing modules."""

from .payment_processor import PaymentProcessor, create_payment_processor

__all__ = ["PaymentProcessor", "create_payment_processor"]
