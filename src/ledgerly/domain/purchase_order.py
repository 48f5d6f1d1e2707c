"""Purchase order domain service."""

import logging
from decimal import Decimal
from typing import Optional, Sequence

from ledgerly.database.base import Database
from ledgerly.domain.contacts import VendorService
from ledgerly.domain.entities import (
    PurchaseOrder as PurchaseOrderEntity,
    PurchaseOrderDraft,
    PurchaseOrderLineItem,
    PurchaseOrderLineItemInput,
    PurchaseOrderStatus,
    PurchaseOrderWriteSet,
    StatusSummary,
)
from ledgerly.domain.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    duplicate_po_number,
    not_owner,
    purchase_order_not_found,
)
from ledgerly.domain.permissions import require_user
from ledgerly.domain.pricing import calculate_totals
from ledgerly.domain.status import check_purchase_order_transition, parse_purchase_order_status

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
RECEIVABLE = (PurchaseOrderStatus.APPROVED, PurchaseOrderStatus.ORDERED)


class PurchaseOrderService:
    """Service for building, storing and receiving purchase orders."""

    def __init__(self, db: Database):
        """Initialize purchase order service.

        Args:
            db: Database instance
        """
        self.db = db
        self.vendors = VendorService(db)

    def build_purchase_order(
        self,
        user_id: str,
        draft: PurchaseOrderDraft,
        items: Sequence[PurchaseOrderLineItemInput],
    ) -> PurchaseOrderWriteSet:
        """Validate a purchase order and compute its stored values.

        Purchase orders carry no discount. Every line item starts with a
        ``received_quantity`` of 0.

        Raises:
            ValidationError: If a required field is missing, dates are out of
                order or a line item is invalid
        """
        user_id = require_user(user_id)
        if not draft.po_number or not draft.po_number.strip():
            raise ValidationError("Purchase order number is required")
        if draft.order_date is None:
            raise ValidationError("Order date is required")
        if (
            draft.expected_delivery_date is not None
            and draft.expected_delivery_date < draft.order_date
        ):
            raise ValidationError("Expected delivery date cannot be before the order date")

        status = parse_purchase_order_status(draft.status)
        totals = calculate_totals(items).rounded()

        header = {
            "user_id": user_id,
            "vendor_id": draft.vendor_id,
            "po_number": draft.po_number.strip(),
            "order_date": draft.order_date,
            "expected_delivery_date": draft.expected_delivery_date,
            "status": status.value,
            "subtotal": totals.subtotal,
            "tax_amount": totals.tax_amount,
            "total_amount": totals.total_amount,
            "notes": draft.notes,
        }
        rows = [
            {
                "description": item.description.strip(),
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "tax_percentage": item.tax_percentage,
                "product_id": item.product_id,
                "line_total": line.line_total,
                "received_quantity": ZERO,
            }
            for item, line in zip(items, totals.lines)
        ]
        return PurchaseOrderWriteSet(header=header, items=rows)

    def create_purchase_order(
        self,
        user_id: str,
        draft: PurchaseOrderDraft,
        items: Sequence[PurchaseOrderLineItemInput],
    ) -> int:
        """Create a purchase order with its line items.

        Returns:
            Purchase order ID
        """
        write_set = self.build_purchase_order(user_id, draft, items)
        owner = write_set.header["user_id"]
        if draft.vendor_id is not None:
            self.vendors.get_vendor(owner, draft.vendor_id)
        if self.db.po_number_exists(owner, write_set.header["po_number"]):
            raise ConflictError(duplicate_po_number(write_set.header["po_number"]))

        return self.db.insert_purchase_order(write_set.header, write_set.items)

    def update_purchase_order(
        self,
        user_id: str,
        purchase_order_id: int,
        draft: PurchaseOrderDraft,
        items: Sequence[PurchaseOrderLineItemInput],
    ) -> None:
        """Replace a purchase order's header and its entire line-item set.

        Line items are recreated, so previously received quantities are reset.

        Raises:
            InvalidStateTransition: If the status change is not allowed
            NotFoundError: If the purchase order or vendor does not exist
            AuthorizationError: If the caller does not own the purchase order
        """
        write_set = self.build_purchase_order(user_id, draft, items)
        header = write_set.header
        existing = self._owned_purchase_order(header["user_id"], purchase_order_id)

        check_purchase_order_transition(existing.status, PurchaseOrderStatus(header["status"]))
        if draft.vendor_id is not None:
            self.vendors.get_vendor(existing.user_id, draft.vendor_id)
        if self.db.po_number_exists(existing.user_id, header["po_number"], exclude_id=purchase_order_id):
            raise ConflictError(duplicate_po_number(header["po_number"]))

        del header["user_id"]
        self.db.replace_purchase_order(purchase_order_id, existing.user_id, header, write_set.items)

    def delete_purchase_order(self, user_id: str, purchase_order_id: int) -> None:
        """Delete a purchase order and its line items."""
        existing = self._owned_purchase_order(require_user(user_id), purchase_order_id)
        self.db.delete_purchase_order(purchase_order_id, existing.user_id)

    def get_purchase_order(self, user_id: str, purchase_order_id: int) -> Optional[PurchaseOrderEntity]:
        """Get a purchase order visible to ``user_id``, or None."""
        order = self.db.get_purchase_order(purchase_order_id)
        if order is None or order.user_id != user_id:
            return None
        return order

    def get_line_items(self, user_id: str, purchase_order_id: int) -> list[PurchaseOrderLineItem]:
        """Get the line items of a visible purchase order."""
        if self.get_purchase_order(user_id, purchase_order_id) is None:
            raise NotFoundError(purchase_order_not_found(purchase_order_id))
        return self.db.get_purchase_order_items(purchase_order_id)

    def list_purchase_orders(
        self,
        user_id: str,
        status: Optional[str] = None,
        vendor_id: Optional[int] = None,
    ) -> list[PurchaseOrderEntity]:
        """List the caller's purchase orders, newest first."""
        status_value = parse_purchase_order_status(status).value if status is not None else None
        return self.db.list_purchase_orders(
            require_user(user_id), status=status_value, vendor_id=vendor_id
        )

    def change_status(
        self, user_id: str, purchase_order_id: int, new_status: str | PurchaseOrderStatus
    ) -> None:
        """Move a purchase order to a new status."""
        target = parse_purchase_order_status(new_status)
        existing = self._owned_purchase_order(require_user(user_id), purchase_order_id)
        check_purchase_order_transition(existing.status, target)
        self.db.update_purchase_order_status(purchase_order_id, existing.user_id, target.value)
        logger.info(
            "Purchase order %s: %s -> %s", purchase_order_id, existing.status.value, target.value
        )

    def receive_items(
        self, user_id: str, purchase_order_id: int, receipts: dict[int, Decimal]
    ) -> list[PurchaseOrderLineItem]:
        """Record a (partial) delivery against a purchase order.

        Args:
            receipts: Quantity delivered now, keyed by line item ID. Each value
                is added to the item's ``received_quantity``.

        Returns:
            The purchase order's line items after the update

        Raises:
            ValidationError: If nothing is received, a quantity is not positive,
                the order is not approved/ordered, or an item would be received
                beyond its ordered quantity
            NotFoundError: If a line item does not belong to the order
        """
        existing = self._owned_purchase_order(require_user(user_id), purchase_order_id)
        if not receipts:
            raise ValidationError("No received quantities given")
        if existing.status not in RECEIVABLE:
            raise ValidationError(
                f"Cannot receive items on a {existing.status.value} purchase order"
            )

        items = {item.id: item for item in self.db.get_purchase_order_items(purchase_order_id)}
        updated: dict[int, Decimal] = {}
        for item_id, quantity in receipts.items():
            item = items.get(item_id)
            if item is None:
                raise NotFoundError(
                    f"Line item {item_id} not found on purchase order {purchase_order_id}"
                )
            if quantity <= ZERO:
                raise ValidationError(f"Line item {item_id}: received quantity must be positive")
            new_total = item.received_quantity + quantity
            if new_total > item.quantity:
                raise ValidationError(
                    f"Line item {item_id}: receiving {quantity} would exceed the ordered "
                    f"quantity ({item.received_quantity} of {item.quantity} already received)"
                )
            updated[item_id] = new_total

        self.db.update_received_quantities(purchase_order_id, existing.user_id, updated)
        logger.info("Received %d line item(s) on purchase order %s", len(updated), purchase_order_id)
        return self.db.get_purchase_order_items(purchase_order_id)

    def is_fully_received(self, user_id: str, purchase_order_id: int) -> bool:
        """True when every line item has been received in full."""
        return all(
            item.outstanding_quantity <= ZERO
            for item in self.get_line_items(user_id, purchase_order_id)
        )

    def status_summary(self, user_id: str) -> list[StatusSummary]:
        """Count and total of the caller's purchase orders per status."""
        return self.db.get_purchase_order_status_summary(require_user(user_id))

    def _owned_purchase_order(self, user_id: str, purchase_order_id: int) -> PurchaseOrderEntity:
        order = self.db.get_purchase_order(purchase_order_id)
        if order is None:
            raise NotFoundError(purchase_order_not_found(purchase_order_id))
        if order.user_id != user_id:
            raise AuthorizationError(not_owner("purchase order", purchase_order_id))
        return order
