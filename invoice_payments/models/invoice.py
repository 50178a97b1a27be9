"""
Data models for invoice payment processing.
These models represent the core business entities a payment is applied to.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import List
from enum import Enum
from decimal import Decimal
import uuid


class InvoiceType(str, Enum):
    """Invoice types; the type decides whether later partial payments are taxed."""
    STANDARD = "Standard"
    COMMERCIAL = "Commercial"


class PaymentOutcome(str, Enum):
    """Outcome returned after evaluating a payment against an invoice."""
    NO_PAYMENT_NEEDED = "no payment needed"
    ALREADY_FULLY_PAID = "invoice was already fully paid"
    PAYMENT_EXCEEDS_REMAINING_BALANCE = "the payment is greater than the partial amount remaining"
    PAYMENT_EXCEEDS_INVOICE_AMOUNT = "the payment is greater than the invoice amount"
    FULLY_PAID = "invoice is now fully paid"
    PARTIALLY_PAID = "invoice is now partially paid"
    STILL_PARTIALLY_PAID = "another partial payment received, still not fully paid"
    FINALLY_PAID = "final partial payment received, invoice is now fully paid"

    def __str__(self) -> str:
        return self.value


# ============== Payment Models ==============

class Payment(BaseModel):
    """A single payment made against the invoice identified by its reference."""
    model_config = ConfigDict(frozen=True)

    reference: str = Field(..., description="Reference of the invoice being paid")
    amount: Decimal = Field(default=Decimal("0"), description="Payment amount")


# ============== Invoice Models ==============

class Invoice(BaseModel):
    """Invoice with its running paid/tax totals and payment history."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Unique invoice ID")
    reference: str = Field(..., min_length=1, description="Reference payments are matched on")
    amount: Decimal = Field(..., ge=0, description="Total invoice amount")
    amount_paid: Decimal = Field(default=Decimal("0"), description="Cumulative amount paid")
    tax_amount: Decimal = Field(default=Decimal("0"), description="Cumulative tax levied")
    type: InvoiceType = Field(default=InvoiceType.STANDARD, description="Invoice type")
    payments: List[Payment] = Field(default_factory=list, description="Payments in receipt order")

    @property
    def payments_total(self) -> Decimal:
        """Sum of the recorded payment amounts."""
        return sum((p.amount for p in self.payments), Decimal("0"))

    @property
    def remaining_balance(self) -> Decimal:
        return self.amount - self.amount_paid
