"""
Storage interface for invoices.

The payment processor only depends on InvoiceRepository; the in-memory
implementation below backs tests and the default configuration.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..models.invoice import Invoice

logger = logging.getLogger(__name__)


class InvoiceRepository(ABC):
    """Minimal storage capability consumed by the payment processor."""

    @abstractmethod
    def fetch(self, reference: str) -> Optional[Invoice]:
        """
        Retrieve the invoice matching a payment reference.

        Args:
            reference: Invoice reference

        Returns:
            Optional[Invoice]: Invoice if found, None otherwise
        """
        pass

    @abstractmethod
    def save(self, invoice: Invoice) -> None:
        """Persist the full current state of an invoice, keyed by its reference."""
        pass

    @abstractmethod
    def add(self, invoice: Invoice) -> None:
        """Register a new invoice."""
        pass


class InMemoryInvoiceRepository(InvoiceRepository):
    """
    Invoice repository kept in a dictionary.

    Invoices are copied on the way in and out, so a fetched invoice only
    changes the store once it is saved.
    """

    def __init__(self, invoices: Optional[List[Invoice]] = None):
        self._store: Dict[str, Invoice] = {}
        for invoice in invoices or []:
            self.add(invoice)

    def fetch(self, reference: str) -> Optional[Invoice]:
        invoice = self._store.get(reference)
        return invoice.model_copy(deep=True) if invoice else None

    def save(self, invoice: Invoice) -> None:
        self._store[invoice.reference] = invoice.model_copy(deep=True)
        logger.debug(f"Saved invoice {invoice.reference}")

    def add(self, invoice: Invoice) -> None:
        if invoice.reference in self._store:
            logger.warning(f"Invoice {invoice.reference} already exists, overwriting")
        self._store[invoice.reference] = invoice.model_copy(deep=True)
        logger.debug(f"Added invoice {invoice.reference}")

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, reference: str) -> bool:
        return reference in self._store
