"""Tests for the purchase order service."""

from datetime import date
from decimal import Decimal

import pytest

from ledgerly.domain.entities import PurchaseOrderLineItemInput, PurchaseOrderStatus
from ledgerly.domain.errors import (
    AuthorizationError,
    ConflictError,
    InvalidStateTransition,
    NotFoundError,
    ValidationError,
)


def _line(description="Toner", qty="2", price="30", tax="0"):
    return PurchaseOrderLineItemInput(
        description=description,
        quantity=Decimal(qty),
        unit_price=Decimal(price),
        tax_percentage=Decimal(tax),
    )


@pytest.fixture
def approved_order(purchase_order_service, make_po_draft, paper_item, owner):
    """An approved purchase order with two line items."""
    po_id = purchase_order_service.create_purchase_order(
        owner, make_po_draft(status=PurchaseOrderStatus.APPROVED), [paper_item, _line()]
    )
    return purchase_order_service.get_purchase_order(owner, po_id)


def test_build_has_no_discount(purchase_order_service, make_po_draft, paper_item, owner):
    write_set = purchase_order_service.build_purchase_order(owner, make_po_draft(), [paper_item])

    assert "discount_amount" not in write_set.header
    assert write_set.header["subtotal"] == Decimal("45.00")
    assert write_set.header["tax_amount"] == Decimal("3.60")
    assert write_set.header["total_amount"] == Decimal("48.60")
    assert write_set.items[0]["received_quantity"] == 0


def test_build_rejects_delivery_before_order(purchase_order_service, make_po_draft, paper_item, owner):
    draft = make_po_draft(expected_delivery_date=date(2024, 1, 1))
    with pytest.raises(ValidationError, match="Expected delivery date"):
        purchase_order_service.build_purchase_order(owner, draft, [paper_item])


def test_create_requires_items(purchase_order_service, make_po_draft, owner):
    with pytest.raises(ValidationError, match="At least one line item"):
        purchase_order_service.create_purchase_order(owner, make_po_draft(), [])
    assert purchase_order_service.list_purchase_orders(owner) == []


def test_create_and_read_back(purchase_order_service, make_po_draft, paper_item, owner):
    po_id = purchase_order_service.create_purchase_order(
        owner, make_po_draft(notes="Deliver to back door"), [paper_item, _line()]
    )

    order = purchase_order_service.get_purchase_order(owner, po_id)
    assert order.po_number == "PO-001"
    assert order.status == PurchaseOrderStatus.PENDING
    assert order.total_amount == Decimal("108.60")
    assert order.notes == "Deliver to back door"

    items = purchase_order_service.get_line_items(owner, po_id)
    assert [item.description for item in items] == ["Paper", "Toner"]
    assert all(item.received_quantity == 0 for item in items)


def test_create_without_vendor(purchase_order_service, make_po_draft, paper_item, owner):
    po_id = purchase_order_service.create_purchase_order(
        owner, make_po_draft(vendor_id=None), [paper_item]
    )
    assert purchase_order_service.get_purchase_order(owner, po_id).vendor_id is None


def test_unknown_vendor(purchase_order_service, make_po_draft, paper_item, owner):
    with pytest.raises(NotFoundError, match="Vendor 77"):
        purchase_order_service.create_purchase_order(owner, make_po_draft(vendor_id=77), [paper_item])


def test_duplicate_po_number(purchase_order_service, make_po_draft, paper_item, owner):
    purchase_order_service.create_purchase_order(owner, make_po_draft(), [paper_item])
    with pytest.raises(ConflictError):
        purchase_order_service.create_purchase_order(owner, make_po_draft(), [paper_item])


def test_update_replaces_items(purchase_order_service, make_po_draft, approved_order, owner):
    purchase_order_service.update_purchase_order(
        owner,
        approved_order.id,
        make_po_draft(status=PurchaseOrderStatus.ORDERED),
        [_line("Staples", qty="5", price="1.20")],
    )

    order = purchase_order_service.get_purchase_order(owner, approved_order.id)
    assert order.status == PurchaseOrderStatus.ORDERED
    assert order.total_amount == Decimal("6.00")
    items = purchase_order_service.get_line_items(owner, approved_order.id)
    assert [item.description for item in items] == ["Staples"]


def test_update_checks_transition(purchase_order_service, make_po_draft, paper_item, owner):
    po_id = purchase_order_service.create_purchase_order(owner, make_po_draft(), [paper_item])

    with pytest.raises(InvalidStateTransition):
        purchase_order_service.update_purchase_order(
            owner, po_id, make_po_draft(status=PurchaseOrderStatus.RECEIVED), [paper_item]
        )


def test_non_owner_cannot_modify(
    purchase_order_service, make_po_draft, approved_order, paper_item, owner, other_user
):
    with pytest.raises(AuthorizationError):
        purchase_order_service.update_purchase_order(
            other_user, approved_order.id, make_po_draft(), [paper_item]
        )
    with pytest.raises(AuthorizationError):
        purchase_order_service.delete_purchase_order(other_user, approved_order.id)
    with pytest.raises(AuthorizationError):
        purchase_order_service.change_status(other_user, approved_order.id, "ordered")

    assert purchase_order_service.get_purchase_order(other_user, approved_order.id) is None
    order = purchase_order_service.get_purchase_order(owner, approved_order.id)
    assert order.status == PurchaseOrderStatus.APPROVED


def test_delete(purchase_order_service, approved_order, owner):
    purchase_order_service.delete_purchase_order(owner, approved_order.id)
    assert purchase_order_service.get_purchase_order(owner, approved_order.id) is None


def test_change_status_walks_lifecycle(purchase_order_service, approved_order, owner):
    purchase_order_service.change_status(owner, approved_order.id, "ordered")
    purchase_order_service.change_status(owner, approved_order.id, PurchaseOrderStatus.RECEIVED)

    order = purchase_order_service.get_purchase_order(owner, approved_order.id)
    assert order.status == PurchaseOrderStatus.RECEIVED


class TestReceiveItems:
    def test_partial_then_full_receipt(self, purchase_order_service, approved_order, owner):
        paper, toner = purchase_order_service.get_line_items(owner, approved_order.id)

        items = purchase_order_service.receive_items(
            owner, approved_order.id, {paper.id: Decimal("4")}
        )
        assert items[0].received_quantity == Decimal("4")
        assert items[0].outstanding_quantity == Decimal("6")
        assert not purchase_order_service.is_fully_received(owner, approved_order.id)

        purchase_order_service.receive_items(
            owner, approved_order.id, {paper.id: Decimal("6"), toner.id: Decimal("2")}
        )
        assert purchase_order_service.is_fully_received(owner, approved_order.id)

    def test_over_receipt_rejected(self, purchase_order_service, approved_order, owner):
        paper, _ = purchase_order_service.get_line_items(owner, approved_order.id)

        with pytest.raises(ValidationError, match="exceed the ordered quantity"):
            purchase_order_service.receive_items(
                owner, approved_order.id, {paper.id: Decimal("11")}
            )

    def test_non_positive_quantity_rejected(self, purchase_order_service, approved_order, owner):
        paper, _ = purchase_order_service.get_line_items(owner, approved_order.id)

        with pytest.raises(ValidationError, match="must be positive"):
            purchase_order_service.receive_items(owner, approved_order.id, {paper.id: Decimal("0")})

    def test_unknown_line_item(self, purchase_order_service, approved_order, owner):
        with pytest.raises(NotFoundError, match="Line item 999"):
            purchase_order_service.receive_items(owner, approved_order.id, {999: Decimal("1")})

    def test_pending_order_cannot_receive(
        self, purchase_order_service, make_po_draft, paper_item, owner
    ):
        po_id = purchase_order_service.create_purchase_order(owner, make_po_draft(), [paper_item])
        (item,) = purchase_order_service.get_line_items(owner, po_id)

        with pytest.raises(ValidationError, match="pending"):
            purchase_order_service.receive_items(owner, po_id, {item.id: Decimal("1")})

    def test_nothing_to_receive(self, purchase_order_service, approved_order, owner):
        with pytest.raises(ValidationError, match="No received quantities"):
            purchase_order_service.receive_items(owner, approved_order.id, {})


def test_status_summary(purchase_order_service, make_po_draft, paper_item, approved_order, owner):
    purchase_order_service.create_purchase_order(
        owner, make_po_draft(po_number="PO-002"), [paper_item]
    )

    summary = {row.status: row for row in purchase_order_service.status_summary(owner)}

    assert summary["approved"].count == 1
    assert summary["approved"].total_amount == Decimal("108.60")
    assert summary["pending"].count == 1
    assert summary["pending"].total_amount == Decimal("48.60")
