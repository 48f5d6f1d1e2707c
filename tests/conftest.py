"""Shared pytest fixtures for ledgerly tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal

import pytest

from ledgerly.database.factories import create_sqlite_database
from ledgerly.domain.contacts import CustomerService, VendorService
from ledgerly.domain.entities import (
    InvoiceDraft,
    InvoiceLineItemInput,
    PurchaseOrderDraft,
    PurchaseOrderLineItemInput,
)
from ledgerly.domain.invoice import InvoiceService
from ledgerly.domain.purchase_order import PurchaseOrderService
from ledgerly.domain.roles import RoleService

OWNER = "alice"
OTHER = "bob"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def owner():
    return OWNER


@pytest.fixture
def other_user():
    return OTHER


@pytest.fixture
def customer_service(temp_db):
    """Create a CustomerService with a temporary database."""
    return CustomerService(temp_db)


@pytest.fixture
def vendor_service(temp_db):
    """Create a VendorService with a temporary database."""
    return VendorService(temp_db)


@pytest.fixture
def invoice_service(temp_db):
    """Create an InvoiceService with a temporary database."""
    return InvoiceService(temp_db)


@pytest.fixture
def purchase_order_service(temp_db):
    """Create a PurchaseOrderService with a temporary database."""
    return PurchaseOrderService(temp_db)


@pytest.fixture
def role_service(temp_db):
    """Create a RoleService with a temporary database."""
    return RoleService(temp_db)


@pytest.fixture
def sample_customer(customer_service):
    """Create a customer owned by the default test user."""
    customer_id = customer_service.create_customer(OWNER, "Acme Corp", email="billing@acme.test")
    return customer_service.get_customer(OWNER, customer_id)


@pytest.fixture
def sample_vendor(vendor_service):
    """Create a vendor owned by the default test user."""
    vendor_id = vendor_service.create_vendor(OWNER, "Paper Supplies Ltd")
    return vendor_service.get_vendor(OWNER, vendor_id)


@pytest.fixture
def make_invoice_draft(sample_customer):
    """Factory for invoice drafts pointing at the sample customer."""

    def _make(**overrides):
        values = {
            "customer_id": sample_customer.id,
            "invoice_number": "INV-001",
            "invoice_date": date(2024, 1, 15),
            "due_date": date(2024, 2, 14),
        }
        values.update(overrides)
        return InvoiceDraft(**values)

    return _make


@pytest.fixture
def make_po_draft(sample_vendor):
    """Factory for purchase order drafts pointing at the sample vendor."""

    def _make(**overrides):
        values = {
            "po_number": "PO-001",
            "order_date": date(2024, 1, 10),
            "vendor_id": sample_vendor.id,
        }
        values.update(overrides)
        return PurchaseOrderDraft(**values)

    return _make


@pytest.fixture
def design_item():
    """The line item of the basic pricing example."""
    return InvoiceLineItemInput(
        description="Design work",
        quantity=Decimal("2"),
        unit_price=Decimal("50"),
        discount_percentage=Decimal("10"),
        tax_percentage=Decimal("5"),
    )


@pytest.fixture
def paper_item():
    return PurchaseOrderLineItemInput(
        description="Paper",
        quantity=Decimal("10"),
        unit_price=Decimal("4.50"),
        tax_percentage=Decimal("8"),
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
