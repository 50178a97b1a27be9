"""
Database module for persisting invoices and their payment history.

Provides SQLite-based storage for:
- Invoices with their paid and tax totals
- Payment history in receipt order
"""
import logging
import sqlite3
from pathlib import Path
from typing import List, Dict, Any, Optional
from datetime import datetime
from decimal import Decimal
from contextlib import contextmanager

from .repository import InvoiceRepository
from ..models.invoice import Invoice, InvoiceType
from ..utils.config import get_settings

logger = logging.getLogger(__name__)

SUPPORTED_TYPES = {invoice_type.value for invoice_type in InvoiceType}


class InvoiceDatabase(InvoiceRepository):
    """SQLite database for invoice persistence."""

    def __init__(self, db_path: str = "data/invoices.db"):
        """Initialize database connection."""
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._create_tables()

    @contextmanager
    def get_connection(self):
        """Get database connection with automatic commit/rollback."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _create_tables(self):
        """Create database tables if they don't exist."""
        with self.get_connection() as conn:
            cursor = conn.cursor()

            # Amounts are stored as TEXT so decimals round-trip exactly
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS invoices (
                    reference TEXT PRIMARY KEY,
                    invoice_id TEXT NOT NULL,
                    amount TEXT NOT NULL,
                    amount_paid TEXT NOT NULL,
                    tax_amount TEXT NOT NULL,
                    invoice_type TEXT NOT NULL,
                    created_at TEXT,
                    updated_at TEXT
                )
            """)

            # Payment history, ordered by sequence
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS payments (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    reference TEXT NOT NULL,
                    sequence INTEGER NOT NULL,
                    amount TEXT NOT NULL,
                    created_at TEXT,
                    FOREIGN KEY (reference) REFERENCES invoices(reference) ON DELETE CASCADE
                )
            """)

            cursor.execute("CREATE INDEX IF NOT EXISTS idx_invoice_type ON invoices(invoice_type)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_payment_reference ON payments(reference, sequence)")

    def fetch(self, reference: str) -> Optional[Invoice]:
        """Get invoice and its payments by reference."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM invoices WHERE reference = ?", (reference,))
            row = cursor.fetchone()
            if row is None:
                return None

            cursor.execute(
                "SELECT reference, amount FROM payments WHERE reference = ? ORDER BY sequence",
                (reference,)
            )
            payments = [dict(p) for p in cursor.fetchall()]

        return self._row_to_invoice(dict(row), payments)

    def save(self, invoice: Invoice) -> None:
        """
        Save the invoice and replace its payment history.

        Args:
            invoice: Invoice in its current state
        """
        with self.get_connection() as conn:
            self._write_invoice(conn.cursor(), invoice)
        logger.debug(f"Saved invoice {invoice.reference} with {len(invoice.payments)} payments")

    def add(self, invoice: Invoice) -> None:
        """Register a new invoice, overwriting any invoice with the same reference."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM invoices WHERE reference = ?", (invoice.reference,))
            if cursor.rowcount:
                logger.warning(f"Invoice {invoice.reference} already exists, overwriting")
            self._write_invoice(cursor, invoice)
        logger.debug(f"Added invoice {invoice.reference}")

    def _write_invoice(self, cursor: sqlite3.Cursor, invoice: Invoice) -> None:
        now = datetime.now().isoformat()
        invoice_type = getattr(invoice.type, "value", invoice.type)

        cursor.execute("""
            INSERT INTO invoices (
                reference, invoice_id, amount, amount_paid, tax_amount,
                invoice_type, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(reference) DO UPDATE SET
                invoice_id = excluded.invoice_id,
                amount = excluded.amount,
                amount_paid = excluded.amount_paid,
                tax_amount = excluded.tax_amount,
                invoice_type = excluded.invoice_type,
                updated_at = excluded.updated_at
        """, (
            invoice.reference,
            invoice.id,
            str(invoice.amount),
            str(invoice.amount_paid),
            str(invoice.tax_amount),
            invoice_type,
            now,
            now
        ))

        cursor.execute("DELETE FROM payments WHERE reference = ?", (invoice.reference,))
        cursor.executemany("""
            INSERT INTO payments (reference, sequence, amount, created_at)
            VALUES (?, ?, ?, ?)
        """, [
            (invoice.reference, sequence, str(payment.amount), now)
            for sequence, payment in enumerate(invoice.payments)
        ])

    @staticmethod
    def _row_to_invoice(row: Dict[str, Any], payments: List[Dict[str, Any]]) -> Invoice:
        data = {
            "id": row["invoice_id"],
            "reference": row["reference"],
            "amount": row["amount"],
            "amount_paid": row["amount_paid"],
            "tax_amount": row["tax_amount"],
            "type": row["invoice_type"],
            "payments": payments
        }
        if row["invoice_type"] in SUPPORTED_TYPES:
            return Invoice.model_validate(data)

        # Unsupported types load as stored; the processor rejects them when taxing
        data.pop("type")
        invoice = Invoice.model_validate(data)
        invoice.type = row["invoice_type"]
        return invoice

    def get_all_invoices(self, limit: int = 100, invoice_type: Optional[str] = None) -> List[Invoice]:
        """Get all invoices with optional type filter."""
        with self.get_connection() as conn:
            cursor = conn.cursor()

            if invoice_type:
                cursor.execute(
                    "SELECT reference FROM invoices WHERE invoice_type = ? ORDER BY created_at LIMIT ?",
                    (invoice_type, limit)
                )
            else:
                cursor.execute(
                    "SELECT reference FROM invoices ORDER BY created_at LIMIT ?",
                    (limit,)
                )

            references = [row["reference"] for row in cursor.fetchall()]

        return [self.fetch(reference) for reference in references]

    def get_statistics(self) -> Dict[str, Any]:
        """Get invoice and payment statistics."""
        with self.get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("SELECT amount, amount_paid, tax_amount, invoice_type FROM invoices")
            rows = cursor.fetchall()

            cursor.execute("SELECT COUNT(*) as total FROM payments")
            total_payments = cursor.fetchone()["total"]

        # Summed in Python to keep decimal precision
        by_type: Dict[str, int] = {}
        for row in rows:
            by_type[row["invoice_type"]] = by_type.get(row["invoice_type"], 0) + 1

        return {
            "total_invoices": len(rows),
            "total_payments": total_payments,
            "by_type": by_type,
            "total_amount": sum((Decimal(r["amount"]) for r in rows), Decimal("0")),
            "total_paid": sum((Decimal(r["amount_paid"]) for r in rows), Decimal("0")),
            "total_tax": sum((Decimal(r["tax_amount"]) for r in rows), Decimal("0"))
        }


# Singleton instance
_db_instance = None


def get_database() -> InvoiceDatabase:
    """Get singleton database instance."""
    global _db_instance
    if _db_instance is None:
        _db_instance = InvoiceDatabase(get_settings().DATABASE_PATH)
    return _db_instance
