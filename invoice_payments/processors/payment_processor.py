"""
Payment Processor for invoice payments.

Classifies an incoming payment against the invoice it references and applies it:
1. Zero-amount invoices need no payment
2. A first payment is checked against the invoice amount and always taxed
3. Later payments are checked against the remaining balance and taxed per invoice type

Accepted payments update the invoice and persist it; every other case only
returns an outcome.
"""
import logging
from decimal import Decimal
from typing import Iterable, List, Optional

from ..database import InvoiceRepository, create_repository
from ..models.invoice import Invoice, InvoiceType, Payment, PaymentOutcome
from ..models.exceptions import (
    InvoiceNotFoundError,
    InvalidInvoiceStateError,
    UnsupportedInvoiceTypeError
)
from ..utils.config import Settings, get_settings
from ..utils.logging_utils import setup_logging

logger = logging.getLogger(__name__)


class PaymentProcessor:
    """
    Applies payments to invoices held by a repository.

    Decision order (each step only reached if the previous did not match):
    - amount == 0: no payment needed, or invalid state if payments exist
    - no payments yet: compare the payment to the invoice amount
    - payments exist: already fully paid, else compare to amount - amount_paid
    """

    def __init__(self, repository: InvoiceRepository, tax_rate: Optional[Decimal] = None):
        self.repository = repository
        self.tax_rate = Decimal(str(tax_rate)) if tax_rate is not None else get_settings().TAX_RATE

    def process(self, payment: Payment) -> PaymentOutcome:
        """
        Apply a payment to the invoice matching its reference.

        Args:
            payment: Incoming payment

        Returns:
            PaymentOutcome describing what happened

        Raises:
            InvoiceNotFoundError: No invoice matches payment.reference
            InvalidInvoiceStateError: Zero-amount invoice with recorded payments
            UnsupportedInvoiceTypeError: Invoice type without a tax policy
        """
        invoice = self.repository.fetch(payment.reference)
        if invoice is None:
            logger.warning(f"No invoice found for payment reference {payment.reference}")
            raise InvoiceNotFoundError(payment.reference)

        if invoice.amount == 0:
            outcome = self._handle_zero_amount_invoice(invoice)
        elif invoice.payments:
            outcome = self._handle_invoice_with_existing_payments(invoice, payment)
        else:
            outcome = self._handle_invoice_with_no_existing_payments(invoice, payment)

        logger.info(f"Payment of {payment.amount} against {invoice.reference}: {outcome.value}")
        return outcome

    def process_payments(self, payments: Iterable[Payment]) -> List[PaymentOutcome]:
        """Process payments in order, each against the state left by the previous one."""
        return [self.process(payment) for payment in payments]

    def _handle_zero_amount_invoice(self, invoice: Invoice) -> PaymentOutcome:
        if not invoice.payments:
            return PaymentOutcome.NO_PAYMENT_NEEDED

        logger.error(
            f"Invoice {invoice.reference} has an amount of 0 "
            f"but {len(invoice.payments)} payments recorded"
        )
        raise InvalidInvoiceStateError()

    def _handle_invoice_with_no_existing_payments(self, invoice: Invoice,
                                                  payment: Payment) -> PaymentOutcome:
        remaining = invoice.amount

        if payment.amount > remaining:
            return PaymentOutcome.PAYMENT_EXCEEDS_INVOICE_AMOUNT
        if payment.amount == remaining:
            return self._apply_first_payment(invoice, payment, PaymentOutcome.FULLY_PAID)
        return self._apply_first_payment(invoice, payment, PaymentOutcome.PARTIALLY_PAID)

    def _handle_invoice_with_existing_payments(self, invoice: Invoice,
                                               payment: Payment) -> PaymentOutcome:
        # "Already paid" reads the payment history, "remaining" reads amount_paid
        sum_so_far = invoice.payments_total
        remaining = invoice.remaining_balance

        if sum_so_far == invoice.amount and sum_so_far != 0:
            return PaymentOutcome.ALREADY_FULLY_PAID
        if payment.amount > remaining:
            return PaymentOutcome.PAYMENT_EXCEEDS_REMAINING_BALANCE
        if payment.amount == remaining:
            return self._apply_subsequent_payment(invoice, payment, PaymentOutcome.FINALLY_PAID)
        return self._apply_subsequent_payment(invoice, payment, PaymentOutcome.STILL_PARTIALLY_PAID)

    def _apply_first_payment(self, invoice: Invoice, payment: Payment,
                             outcome: PaymentOutcome) -> PaymentOutcome:
        # First payment is taxed in full for every invoice type
        invoice.amount_paid = payment.amount
        invoice.tax_amount = payment.amount * self.tax_rate
        invoice.payments.append(payment)

        self.repository.save(invoice)
        return outcome

    def _apply_subsequent_payment(self, invoice: Invoice, payment: Payment,
                                  outcome: PaymentOutcome) -> PaymentOutcome:
        if invoice.type == InvoiceType.STANDARD:
            tax = Decimal("0")
        elif invoice.type == InvoiceType.COMMERCIAL:
            tax = payment.amount * self.tax_rate
        else:
            logger.error(f"Invoice {invoice.reference} has unsupported type {invoice.type!r}")
            raise UnsupportedInvoiceTypeError(invoice.type)

        invoice.amount_paid += payment.amount
        invoice.tax_amount += tax
        invoice.payments.append(payment)

        self.repository.save(invoice)
        return outcome


# Factory function
def create_payment_processor(repository: Optional[InvoiceRepository] = None,
                             settings: Optional[Settings] = None) -> PaymentProcessor:
    """Create a payment processor wired to the configured repository and logging."""
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)
    if repository is None:
        repository = create_repository(settings)
    return PaymentProcessor(repository=repository, tax_rate=settings.TAX_RATE)
