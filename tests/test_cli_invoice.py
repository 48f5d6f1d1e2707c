"""Tests for the invoice and recurring CLI commands."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ledgerly.cli.main import cli
from ledgerly.domain.entities import InvoiceStatus


@pytest.fixture(autouse=True)
def _no_env_user(monkeypatch):
    monkeypatch.delenv("LEDGERLY_USER", raising=False)
    monkeypatch.delenv("LEDGERLY_DATABASE_URL", raising=False)


@pytest.fixture
def invoke(cli_runner, temp_db):
    """Run the CLI against the temporary database as a given user."""

    def _invoke(*args, user="alice", input=None):
        base = ["--db-path", temp_db.database_path]
        if user is not None:
            base += ["--user", user]
        return cli_runner.invoke(cli, base + list(args), input=input)

    return _invoke


@pytest.fixture
def created_invoice(invoke, sample_customer, temp_db):
    """Create INV-001 through the CLI and return its ID."""
    result = invoke(
        "invoice",
        "create",
        "--customer",
        str(sample_customer.id),
        "--number",
        "INV-001",
        "--date",
        "2024-01-15",
        "--due",
        "in 30 days",
        "--item",
        "Design work;2;50;10;5",
    )
    assert result.exit_code == 0, result.output
    temp_db.disconnect()
    (invoice,) = temp_db.list_invoices("alice")
    return invoice.id


def test_create_invoice(created_invoice, invoke, temp_db):
    invoice = temp_db.get_invoice(created_invoice)

    assert invoice.invoice_number == "INV-001"
    assert invoice.due_date == date(2024, 2, 14)
    assert invoice.total_amount == Decimal("94.50")
    assert invoice.status == InvoiceStatus.DRAFT


def test_create_prints_totals(invoke, sample_customer):
    result = invoke(
        "invoice",
        "create",
        "--customer",
        str(sample_customer.id),
        "--number",
        "INV-009",
        "--item",
        "Design work;2;50;10;5",
        "--item",
        "Hosting;1;20",
    )

    assert result.exit_code == 0
    assert "Created invoice" in result.output
    assert "Subtotal: $120.00" in result.output
    assert "Discount: $10.00" in result.output
    assert "Total: $114.50" in result.output


def test_create_requires_items(invoke, sample_customer):
    result = invoke("invoice", "create", "--customer", str(sample_customer.id), "--number", "X")
    assert result.exit_code != 0
    assert "--item" in result.output


def test_create_rejects_bad_item(invoke, sample_customer):
    result = invoke(
        "invoice",
        "create",
        "--customer",
        str(sample_customer.id),
        "--number",
        "X",
        "--item",
        "Design;two;50",
    )
    assert result.exit_code == 1
    assert "Invalid line item" in result.output


def test_create_requires_user(invoke, sample_customer):
    result = invoke(
        "invoice",
        "create",
        "--customer",
        str(sample_customer.id),
        "--number",
        "X",
        "--item",
        "Design;1;50",
        user=None,
    )
    assert result.exit_code == 1
    assert "No user given" in result.output


def test_user_from_environment(cli_runner, temp_db, sample_customer, monkeypatch):
    monkeypatch.setenv("LEDGERLY_USER", "alice")
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "customer", "list"])

    assert result.exit_code == 0
    assert "Acme Corp" in result.output


def test_duplicate_number_fails(created_invoice, invoke, sample_customer):
    result = invoke(
        "invoice",
        "create",
        "--customer",
        str(sample_customer.id),
        "--number",
        "INV-001",
        "--item",
        "Design;1;50",
    )
    assert result.exit_code == 1
    assert "already exists" in result.output


def test_show_and_list(created_invoice, invoke):
    result = invoke("invoice", "show", str(created_invoice))
    assert result.exit_code == 0
    assert "Design work" in result.output
    assert "Balance due: $94.50" in result.output

    result = invoke("invoice", "list")
    assert result.exit_code == 0
    assert "INV-001" in result.output

    result = invoke("invoice", "list", "--status", "paid")
    assert "No invoices found." in result.output


def test_other_user_cannot_see_or_change(created_invoice, invoke, temp_db):
    result = invoke("invoice", "show", str(created_invoice), user="bob")
    assert result.exit_code == 1
    assert "not found" in result.output

    result = invoke("invoice", "delete", str(created_invoice), "--yes", user="bob")
    assert result.exit_code == 1
    assert "permission" in result.output

    temp_db.disconnect()
    assert temp_db.get_invoice(created_invoice) is not None


def test_update_replaces_items(created_invoice, invoke, temp_db):
    result = invoke(
        "invoice",
        "update",
        str(created_invoice),
        "--notes",
        "Revised",
        "--item",
        "Hosting;3;20",
    )
    assert result.exit_code == 0, result.output

    temp_db.disconnect()
    invoice = temp_db.get_invoice(created_invoice)
    assert invoice.notes == "Revised"
    assert invoice.invoice_number == "INV-001"
    assert invoice.total_amount == Decimal("60.00")
    assert [i.description for i in temp_db.get_invoice_items(created_invoice)] == ["Hosting"]


def test_status_payment_and_summary(created_invoice, invoke, temp_db):
    result = invoke("invoice", "status", str(created_invoice), "paid")
    assert result.exit_code == 1
    assert "Cannot change invoice status" in result.output

    assert invoke("invoice", "status", str(created_invoice), "sent").exit_code == 0

    result = invoke("invoice", "pay", str(created_invoice), "$94.50")
    assert result.exit_code == 0, result.output
    assert "Status: paid" in result.output

    result = invoke("invoice", "summary")
    assert result.exit_code == 0
    assert "paid" in result.output
    assert "94.50" in result.output


def test_mark_overdue(created_invoice, invoke, temp_db):
    invoke("invoice", "status", str(created_invoice), "sent")

    result = invoke("invoice", "mark-overdue", "--as-of", "2024-03-01")

    assert result.exit_code == 0
    assert "Marked 1 invoice(s) overdue" in result.output
    temp_db.disconnect()
    assert temp_db.get_invoice(created_invoice).status == InvoiceStatus.OVERDUE


def test_delete_asks_for_confirmation(created_invoice, invoke, temp_db):
    result = invoke("invoice", "delete", str(created_invoice), input="n\n")
    assert "Deletion cancelled." in result.output

    result = invoke("invoice", "delete", str(created_invoice), input="y\n")
    assert result.exit_code == 0
    assert f"Deleted invoice {created_invoice}" in result.output

    temp_db.disconnect()
    assert temp_db.get_invoice(created_invoice) is None


def test_recurring_run(invoke, sample_customer, temp_db):
    result = invoke(
        "invoice",
        "create",
        "--customer",
        str(sample_customer.id),
        "--number",
        "RET-1",
        "--date",
        "2024-01-01",
        "--item",
        "Retainer;1;500",
        "--recurring",
        "monthly",
    )
    assert result.exit_code == 0, result.output
    assert "Recurs monthly, next on 2024-01-01" in result.output

    result = invoke("recurring", "list")
    assert "RET-1" in result.output

    result = invoke("recurring", "run", "--as-of", "2024-03-15")
    assert result.exit_code == 1
    assert "requires one of the roles: admin, accountant" in result.output

    invoke("role", "bootstrap-admin", user="root")
    result = invoke("recurring", "run", "--as-of", "2024-03-15", user="root")
    assert result.exit_code == 0, result.output
    assert "Generated 3 invoice(s)" in result.output

    result = invoke("recurring", "run", "--as-of", "2024-03-15", user="root")
    assert "No recurring invoices due" in result.output

    temp_db.disconnect()
    numbers = sorted(inv.invoice_number for inv in temp_db.list_invoices("alice"))
    assert numbers == ["RET-1", "RET-1-20240101", "RET-1-20240201", "RET-1-20240301"]


def test_stop_recurring(invoke, sample_customer, temp_db):
    invoke(
        "invoice",
        "create",
        "--customer",
        str(sample_customer.id),
        "--number",
        "RET-2",
        "--date",
        "2024-01-01",
        "--item",
        "Retainer;1;500",
        "--recurring",
        "weekly",
    )
    temp_db.disconnect()
    (invoice,) = temp_db.list_invoices("alice")

    result = invoke("invoice", "update", str(invoice.id), "--stop-recurring", "--item", "Retainer;1;500")

    assert result.exit_code == 0, result.output
    temp_db.disconnect()
    invoice = temp_db.get_invoice(invoice.id)
    assert not invoice.is_recurring
    assert invoice.next_recurrence_date is None


def test_update_clears_optional_dates(invoke, sample_customer, temp_db):
    invoke(
        "invoice",
        "create",
        "--customer",
        str(sample_customer.id),
        "--number",
        "RET-3",
        "--date",
        "2024-01-01",
        "--due",
        "2024-01-31",
        "--item",
        "Retainer;1;500",
        "--recurring",
        "monthly",
        "--recurrence-end",
        "2024-12-31",
    )
    temp_db.disconnect()
    (invoice,) = temp_db.list_invoices("alice")

    result = invoke(
        "invoice", "update", str(invoice.id), "--no-due", "--no-recurrence-end", "--item", "Retainer;1;500"
    )
    assert result.exit_code == 0, result.output

    temp_db.disconnect()
    invoice = temp_db.get_invoice(invoice.id)
    assert invoice.due_date is None
    assert invoice.recurrence_end_date is None
    assert invoice.is_recurring

    result = invoke("invoice", "update", str(invoice.id), "--due", "+30", "--no-due", "--item", "X;1;1")
    assert result.exit_code == 1
    assert "both given and cleared" in result.output


def test_partial_write_warns(created_invoice, invoke, monkeypatch):
    def fail(self):
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(Session, "commit", fail)
    monkeypatch.setattr(Session, "rollback", fail)

    result = invoke("invoice", "update", str(created_invoice), "--item", "Hosting;3;20")

    assert result.exit_code == 1
    assert "Warning: the record may be left in an inconsistent state." in result.output
    assert "line items could not be restored" in result.output
