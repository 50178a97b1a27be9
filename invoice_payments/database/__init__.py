"""Invoice storage backends."""

from typing import Optional

from .repository import InvoiceRepository, InMemoryInvoiceRepository
from .invoice_db import InvoiceDatabase, get_database
from ..utils.config import Settings, get_settings


def create_repository(settings: Optional[Settings] = None) -> InvoiceRepository:
    """Create the invoice repository selected by STORAGE_BACKEND."""
    settings = settings or get_settings()
    if settings.STORAGE_BACKEND == "sqlite":
        return InvoiceDatabase(settings.DATABASE_PATH)
    return InMemoryInvoiceRepository()


__all__ = [
    "InvoiceRepository",
    "InMemoryInvoiceRepository",
    "InvoiceDatabase",
    "get_database",
    "create_repository"
]
