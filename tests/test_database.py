"""
Tests for invoice storage backends.

Run with: pytest tests/ -v
"""
import sqlite3
import pytest
from decimal import Decimal

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from invoice_payments.database import InMemoryInvoiceRepository, InvoiceDatabase, create_repository
from invoice_payments.database import invoice_db
from invoice_payments.models import (
    Invoice,
    InvoiceType,
    Payment,
    PaymentOutcome,
    UnsupportedInvoiceTypeError
)
from invoice_payments.processors import PaymentProcessor
from invoice_payments.utils.config import Settings


@pytest.fixture
def sample_invoice():
    return Invoice(
        reference="INV-001",
        amount=Decimal("250.00"),
        amount_paid=Decimal("100.00"),
        tax_amount=Decimal("14.00"),
        type=InvoiceType.COMMERCIAL,
        payments=[
            Payment(reference="INV-001", amount=Decimal("60.00")),
            Payment(reference="INV-001", amount=Decimal("40.00"))
        ]
    )


class TestInMemoryInvoiceRepository:
    """Tests for the dictionary-backed repository."""

    @pytest.fixture
    def store(self):
        return InMemoryInvoiceRepository()

    def test_fetch_missing(self, store):
        assert store.fetch("nope") is None

    def test_add_and_fetch(self, store, sample_invoice):
        store.add(sample_invoice)

        fetched = store.fetch("INV-001")
        assert fetched == sample_invoice
        assert fetched is not sample_invoice
        assert "INV-001" in store
        assert len(store) == 1

    def test_fetched_copy_isolated_until_saved(self, store, sample_invoice):
        """Test that changes to a fetched invoice only persist through save."""
        store.add(sample_invoice)

        fetched = store.fetch("INV-001")
        fetched.amount_paid = Decimal("250.00")
        assert store.fetch("INV-001").amount_paid == Decimal("100.00")

        store.save(fetched)
        assert store.fetch("INV-001").amount_paid == Decimal("250.00")

    def test_add_overwrites_reference(self, store, sample_invoice):
        store.add(sample_invoice)
        store.add(Invoice(reference="INV-001", amount=5))

        assert store.fetch("INV-001").amount == 5
        assert len(store) == 1

    def test_initial_invoices(self, sample_invoice):
        store = InMemoryInvoiceRepository([sample_invoice, Invoice(reference="INV-002", amount=1)])
        assert len(store) == 2


class TestInvoiceDatabase:
    """Tests for the SQLite repository."""

    @pytest.fixture
    def db(self, tmp_path):
        return InvoiceDatabase(str(tmp_path / "nested" / "invoices.db"))

    def test_creates_database_file(self, db):
        assert db.db_path.exists()

    def test_fetch_missing(self, db):
        assert db.fetch("nope") is None

    def test_add_and_fetch(self, db, sample_invoice):
        db.add(sample_invoice)

        fetched = db.fetch("INV-001")
        assert fetched == sample_invoice
        assert fetched.type == InvoiceType.COMMERCIAL
        assert [p.amount for p in fetched.payments] == [Decimal("60.00"), Decimal("40.00")]

    def test_decimal_precision_preserved(self, db):
        db.add(Invoice(reference="INV-002", amount=Decimal("0.10"), tax_amount=Decimal("0.014")))

        fetched = db.fetch("INV-002")
        assert fetched.amount == Decimal("0.10")
        assert str(fetched.tax_amount) == "0.014"

    def test_save_replaces_payment_history(self, db, sample_invoice):
        db.add(sample_invoice)

        sample_invoice.payments.append(Payment(reference="INV-001", amount=Decimal("150.00")))
        sample_invoice.amount_paid = Decimal("250.00")
        db.save(sample_invoice)

        fetched = db.fetch("INV-001")
        assert fetched.amount_paid == Decimal("250.00")
        assert [p.amount for p in fetched.payments] == [
            Decimal("60.00"), Decimal("40.00"), Decimal("150.00")
        ]

    def test_save_new_invoice(self, db):
        db.save(Invoice(reference="INV-003", amount=10))
        assert db.fetch("INV-003").amount == 10

    def test_add_overwrites_reference(self, db, sample_invoice):
        db.add(sample_invoice)
        db.add(Invoice(reference="INV-001", amount=5))

        fetched = db.fetch("INV-001")
        assert fetched.amount == 5
        assert fetched.payments == []

    def test_persists_across_instances(self, tmp_path, sample_invoice):
        path = str(tmp_path / "invoices.db")
        InvoiceDatabase(path).add(sample_invoice)

        assert InvoiceDatabase(path).fetch("INV-001") == sample_invoice

    def test_get_all_invoices(self, db, sample_invoice):
        db.add(sample_invoice)
        db.add(Invoice(reference="INV-002", amount=10, type=InvoiceType.STANDARD))

        assert len(db.get_all_invoices()) == 2
        standard = db.get_all_invoices(invoice_type="Standard")
        assert [i.reference for i in standard] == ["INV-002"]

    def test_get_statistics(self, db, sample_invoice):
        db.add(sample_invoice)
        db.add(Invoice(reference="INV-002", amount=Decimal("10.50")))

        stats = db.get_statistics()
        assert stats["total_invoices"] == 2
        assert stats["total_payments"] == 2
        assert stats["by_type"] == {"Commercial": 1, "Standard": 1}
        assert stats["total_amount"] == Decimal("260.50")
        assert stats["total_paid"] == Decimal("100.00")
        assert stats["total_tax"] == Decimal("14.00")

    def test_failed_write_rolls_back(self, db, sample_invoice):
        db.add(sample_invoice)

        with pytest.raises(sqlite3.OperationalError):
            with db.get_connection() as conn:
                conn.execute("DELETE FROM payments")
                conn.execute("SELECT * FROM missing_table")

        assert len(db.fetch("INV-001").payments) == 2

    def test_unsupported_type_loads_as_stored(self, db):
        invoice = Invoice(reference="INV-005", amount=10)
        invoice.type = "Government"
        db.add(invoice)

        assert db.fetch("INV-005").type == "Government"

    def test_unsupported_type_rejected_by_processor(self, db):
        """Test that a stored unsupported type fails the same way as in memory."""
        invoice = Invoice(
            reference="INV-006",
            amount=10,
            amount_paid=5,
            payments=[Payment(reference="INV-006", amount=5)]
        )
        invoice.type = "Government"
        processor = PaymentProcessor(db, tax_rate=Decimal("0.14"))

        for store in (db, InMemoryInvoiceRepository()):
            store.add(invoice)
            processor.repository = store
            with pytest.raises(UnsupportedInvoiceTypeError) as exc_info:
                processor.process(Payment(reference="INV-006", amount=5))
            assert str(exc_info.value) == "Unknown invoice type: Government"

        fetched = db.fetch("INV-006")
        assert fetched.amount_paid == 5
        assert len(fetched.payments) == 1

    def test_unsupported_type_already_fully_paid(self, db):
        invoice = Invoice(
            reference="INV-007",
            amount=10,
            amount_paid=10,
            payments=[Payment(reference="INV-007", amount=10)]
        )
        invoice.type = "Government"
        db.add(invoice)
        processor = PaymentProcessor(db, tax_rate=Decimal("0.14"))

        result = processor.process(Payment(reference="INV-007", amount=1))

        assert result == PaymentOutcome.ALREADY_FULLY_PAID

    def test_processor_with_database(self, db):
        """Test the payment flow persisting through SQLite."""
        db.add(Invoice(reference="INV-004", amount=10, type=InvoiceType.COMMERCIAL))
        processor = PaymentProcessor(db, tax_rate=Decimal("0.14"))

        assert processor.process(Payment(reference="INV-004", amount=4)) == PaymentOutcome.PARTIALLY_PAID
        assert processor.process(Payment(reference="INV-004", amount=6)) == PaymentOutcome.FINALLY_PAID
        assert processor.process(Payment(reference="INV-004", amount=6)) == PaymentOutcome.ALREADY_FULLY_PAID

        fetched = db.fetch("INV-004")
        assert fetched.amount_paid == 10
        assert fetched.tax_amount == Decimal("1.40")
        assert len(fetched.payments) == 2


class TestGetDatabase:
    """Tests for the database singleton."""

    def test_singleton_uses_configured_path(self, tmp_path, monkeypatch):
        settings = Settings(DATABASE_PATH=str(tmp_path / "singleton.db"))
        monkeypatch.setattr(invoice_db, "_db_instance", None)
        monkeypatch.setattr(invoice_db, "get_settings", lambda: settings)

        db = invoice_db.get_database()

        assert db is invoice_db.get_database()
        assert db.db_path == tmp_path / "singleton.db"


class TestCreateRepository:
    """Tests for backend selection."""

    def test_memory_backend(self):
        assert isinstance(create_repository(Settings(STORAGE_BACKEND="memory")), InMemoryInvoiceRepository)

    def test_sqlite_backend(self, tmp_path):
        settings = Settings(STORAGE_BACKEND="sqlite", DATABASE_PATH=str(tmp_path / "db.sqlite"))
        repository = create_repository(settings)

        assert isinstance(repository, InvoiceDatabase)
        assert repository.db_path == tmp_path / "db.sqlite"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
