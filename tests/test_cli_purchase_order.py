"""Tests for the purchase order, contact and role CLI commands."""

from decimal import Decimal

import pytest

from ledgerly.cli.main import cli
from ledgerly.domain.entities import PurchaseOrderStatus, Role


@pytest.fixture(autouse=True)
def _no_env_user(monkeypatch):
    monkeypatch.delenv("LEDGERLY_USER", raising=False)
    monkeypatch.delenv("LEDGERLY_DATABASE_URL", raising=False)


@pytest.fixture
def invoke(cli_runner, temp_db):
    def _invoke(*args, user="alice", input=None):
        return cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "--user", user, *args], input=input
        )

    return _invoke


@pytest.fixture
def created_po(invoke, sample_vendor, temp_db):
    result = invoke(
        "po",
        "create",
        "--number",
        "PO-001",
        "--vendor",
        str(sample_vendor.id),
        "--date",
        "2024-01-10",
        "--expected",
        "+2w",
        "--item",
        "Paper;10;4.50;8",
        "--item",
        "Toner;2;30",
    )
    assert result.exit_code == 0, result.output
    temp_db.disconnect()
    (order,) = temp_db.list_purchase_orders("alice")
    return order


def test_help_lists_command_groups(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    for name in ("customer", "vendor", "invoice", "po", "recurring", "role"):
        assert name in result.output


def test_customer_and_vendor_commands(invoke):
    result = invoke("customer", "create", "Acme Corp", "--email", "billing@acme.test")
    assert result.exit_code == 0
    assert "Created customer 'Acme Corp'" in result.output

    result = invoke("customer", "list")
    assert "billing@acme.test" in result.output
    assert "No customers found." in invoke("customer", "list", user="bob").output

    assert invoke("vendor", "create", "Paper Co").exit_code == 0
    assert "Paper Co" in invoke("vendor", "list").output

    result = invoke("vendor", "create", "  ")
    assert result.exit_code == 1
    assert "Company name is required" in result.output


def test_create_purchase_order(created_po):
    assert created_po.po_number == "PO-001"
    assert str(created_po.expected_delivery_date) == "2024-01-24"
    assert created_po.total_amount == Decimal("108.60")
    assert created_po.status == PurchaseOrderStatus.PENDING


def test_show_and_list(created_po, invoke):
    result = invoke("po", "show", str(created_po.id))
    assert result.exit_code == 0
    assert "Paper" in result.output
    assert "received 0" in result.output
    assert "Received in full" not in result.output

    assert "PO-001" in invoke("po", "list").output
    assert "No purchase orders found." in invoke("po", "list", user="bob").output


def test_receive_flow(created_po, invoke, temp_db):
    paper, toner = temp_db.get_purchase_order_items(created_po.id)

    result = invoke("po", "receive", str(created_po.id), "--line", f"{paper.id}=1")
    assert result.exit_code == 1
    assert "pending" in result.output

    assert invoke("po", "status", str(created_po.id), "approved").exit_code == 0
    assert invoke("po", "status", str(created_po.id), "ordered").exit_code == 0

    result = invoke("po", "receive", str(created_po.id), "--line", f"{paper.id}=4")
    assert result.exit_code == 0, result.output
    assert "received 4" in result.output
    assert "All line items received" not in result.output

    result = invoke(
        "po", "receive", str(created_po.id), "--line", f"{paper.id}=6", "--line", f"{toner.id}=2"
    )
    assert result.exit_code == 0, result.output
    assert "All line items received in full." in result.output
    assert "Received in full" in invoke("po", "show", str(created_po.id)).output

    result = invoke("po", "receive", str(created_po.id), "--line", f"{toner.id}=1")
    assert result.exit_code == 1
    assert "exceed the ordered quantity" in result.output


def test_invalid_transition(created_po, invoke):
    result = invoke("po", "status", str(created_po.id), "received")

    assert result.exit_code == 1
    assert "Cannot change purchase order status" in result.output


def test_update_and_delete(created_po, invoke, temp_db):
    result = invoke("po", "update", str(created_po.id), "--item", "Staples;5;1.20")
    assert result.exit_code == 0, result.output
    assert "Total: $6.00" in result.output

    result = invoke("po", "delete", str(created_po.id), "--yes", user="bob")
    assert result.exit_code == 1

    result = invoke("po", "delete", str(created_po.id), "--yes")
    assert result.exit_code == 0
    temp_db.disconnect()
    assert temp_db.get_purchase_order(created_po.id) is None


def test_summary(created_po, invoke):
    result = invoke("po", "summary")

    assert result.exit_code == 0
    assert "pending" in result.output
    assert "108.60" in result.output


class TestRoleCommands:
    def test_bootstrap_and_grant(self, invoke, temp_db):
        result = invoke("role", "bootstrap-admin", user="root")
        assert result.exit_code == 0
        assert "root is now an administrator" in result.output

        result = invoke("role", "bootstrap-admin", user="mallory")
        assert result.exit_code == 1
        assert "already exists" in result.output

        assert "Registered carol" in invoke("role", "register", user="carol").output
        assert "already has roles" in invoke("role", "register", user="carol").output

        result = invoke("role", "grant", "carol", "accountant", user="root")
        assert result.exit_code == 0
        assert "Granted accountant to carol" in result.output

        result = invoke("role", "show", "carol", user="root")
        assert "carol: accountant, user" in result.output

        temp_db.disconnect()
        assert set(r.role for r in temp_db.list_user_roles("carol")) == {Role.ACCOUNTANT, Role.USER}

    def test_set_role_replaces_roles(self, invoke, temp_db):
        invoke("role", "bootstrap-admin", user="root")
        invoke("role", "register", user="carol")

        result = invoke("role", "set", "carol", "accountant", user="root")
        assert result.exit_code == 0

        temp_db.disconnect()
        assert [r.role for r in temp_db.list_user_roles("carol")] == [Role.ACCOUNTANT]

    def test_non_admin_cannot_manage_roles(self, invoke):
        invoke("role", "register", user="carol")

        result = invoke("role", "set", "carol", "admin", user="carol")

        assert result.exit_code == 1
        assert "Only administrators" in result.output

    def test_revoke_and_list(self, invoke):
        invoke("role", "bootstrap-admin", user="root")
        invoke("role", "grant", "carol", "accountant", user="root")

        result = invoke("role", "list", user="root")
        assert "carol" in result.output
        assert "granted by root" in result.output

        result = invoke("role", "list", user="carol")
        lines = [line for line in result.output.splitlines() if line.strip()]
        assert lines and all(line.startswith("carol") for line in lines)

        assert "Revoked accountant" in invoke("role", "revoke", "carol", "accountant", user="root").output
        assert "does not have role" in invoke("role", "revoke", "carol", "accountant", user="root").output

        result = invoke("role", "revoke", "root", "admin", user="root")
        assert result.exit_code == 1
        assert "last administrator" in result.output


def test_db_url_option(cli_runner, tmp_path):
    url = f"sqlite:///{tmp_path / 'url.db'}"

    result = cli_runner.invoke(cli, ["--db-url", url, "--user", "alice", "vendor", "create", "Paper Co"])
    assert result.exit_code == 0, result.output

    result = cli_runner.invoke(cli, ["--db-url", url, "--user", "alice", "vendor", "list"])
    assert "Paper Co" in result.output
