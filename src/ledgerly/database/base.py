"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain services
from ledgerly.domain.entities import (
    Customer,
    Vendor,
    Invoice,
    InvoiceLineItem,
    PurchaseOrder,
    PurchaseOrderLineItem,
    UserRole,
    StatusSummary,
)


class Database(ABC):
    """Abstract database interface for ledgerly.

    Write operations on owned rows take the caller's ``user_id`` and refuse
    to touch rows owned by anyone else. This is the authoritative ownership
    check; services check again only to fail early.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Customer / vendor operations
    @abstractmethod
    def create_customer(self, user_id: str, company_name: str, email: Optional[str] = None) -> int:
        """Create a customer. Returns customer ID."""
        pass

    @abstractmethod
    def get_customer(self, customer_id: int) -> Optional[Customer]:
        """Get customer by ID."""
        pass

    @abstractmethod
    def list_customers(self, user_id: str) -> list[Customer]:
        """List customers owned by user."""
        pass

    @abstractmethod
    def create_vendor(self, user_id: str, company_name: str, email: Optional[str] = None) -> int:
        """Create a vendor. Returns vendor ID."""
        pass

    @abstractmethod
    def get_vendor(self, vendor_id: int) -> Optional[Vendor]:
        """Get vendor by ID."""
        pass

    @abstractmethod
    def list_vendors(self, user_id: str) -> list[Vendor]:
        """List vendors owned by user."""
        pass

    # Invoice operations
    @abstractmethod
    def insert_invoice(self, header: dict, items: list[dict]) -> int:
        """Insert an invoice header and its line items in one transaction.

        Returns invoice ID.
        """
        pass

    @abstractmethod
    def get_invoice(self, invoice_id: int) -> Optional[Invoice]:
        """Get invoice by ID."""
        pass

    @abstractmethod
    def get_invoice_items(self, invoice_id: int) -> list[InvoiceLineItem]:
        """Get line items of an invoice in insertion order."""
        pass

    @abstractmethod
    def list_invoices(
        self,
        user_id: str,
        status: Optional[str] = None,
        customer_id: Optional[int] = None,
    ) -> list[Invoice]:
        """List invoices owned by user, newest first."""
        pass

    @abstractmethod
    def invoice_number_exists(
        self, user_id: str, invoice_number: str, exclude_id: Optional[int] = None
    ) -> bool:
        """Check if the owner already uses an invoice number."""
        pass

    @abstractmethod
    def replace_invoice(self, invoice_id: int, user_id: str, header: dict, items: list[dict]) -> None:
        """Update header fields and replace every line item atomically.

        Raises:
            NotFoundError: If the invoice does not exist
            AuthorizationError: If ``user_id`` does not own the invoice
        """
        pass

    @abstractmethod
    def delete_invoice(self, invoice_id: int, user_id: str) -> None:
        """Delete an invoice and its line items."""
        pass

    @abstractmethod
    def update_invoice_status(self, invoice_id: int, user_id: str, status: str) -> None:
        """Set invoice status."""
        pass

    @abstractmethod
    def update_invoice_payment(
        self,
        invoice_id: int,
        user_id: str,
        paid_amount: Decimal,
        balance_due: Decimal,
        status: Optional[str] = None,
    ) -> None:
        """Set paid amount and balance due, and the status when given, in one write."""
        pass

    @abstractmethod
    def list_due_recurring_invoices(self, as_of: date) -> list[Invoice]:
        """List recurring invoices of every owner with an occurrence due by ``as_of``."""
        pass

    @abstractmethod
    def insert_recurring_child(
        self,
        parent_id: int,
        invoice_number: str,
        invoice_date: date,
        due_date: Optional[date],
        next_recurrence_date: Optional[date],
    ) -> int:
        """Copy a recurring invoice into a new child and advance the parent.

        The child copy and the parent's new ``next_recurrence_date`` are
        written in one transaction. A ``next_recurrence_date`` of None ends
        the recurrence. Returns the child invoice ID.
        """
        pass

    @abstractmethod
    def advance_recurrence(self, invoice_id: int, next_recurrence_date: Optional[date]) -> None:
        """Set the next occurrence date; None switches recurrence off."""
        pass

    @abstractmethod
    def get_invoice_status_summary(self, user_id: str) -> list[StatusSummary]:
        """Count and total invoices per status for an owner."""
        pass

    # Purchase order operations
    @abstractmethod
    def insert_purchase_order(self, header: dict, items: list[dict]) -> int:
        """Insert a purchase order header and its line items in one transaction.

        Returns purchase order ID.
        """
        pass

    @abstractmethod
    def get_purchase_order(self, purchase_order_id: int) -> Optional[PurchaseOrder]:
        """Get purchase order by ID."""
        pass

    @abstractmethod
    def get_purchase_order_items(self, purchase_order_id: int) -> list[PurchaseOrderLineItem]:
        """Get line items of a purchase order in insertion order."""
        pass

    @abstractmethod
    def list_purchase_orders(
        self,
        user_id: str,
        status: Optional[str] = None,
        vendor_id: Optional[int] = None,
    ) -> list[PurchaseOrder]:
        """List purchase orders owned by user, newest first."""
        pass

    @abstractmethod
    def po_number_exists(
        self, user_id: str, po_number: str, exclude_id: Optional[int] = None
    ) -> bool:
        """Check if the owner already uses a purchase order number."""
        pass

    @abstractmethod
    def replace_purchase_order(
        self, purchase_order_id: int, user_id: str, header: dict, items: list[dict]
    ) -> None:
        """Update header fields and replace every line item atomically."""
        pass

    @abstractmethod
    def delete_purchase_order(self, purchase_order_id: int, user_id: str) -> None:
        """Delete a purchase order and its line items."""
        pass

    @abstractmethod
    def update_purchase_order_status(self, purchase_order_id: int, user_id: str, status: str) -> None:
        """Set purchase order status."""
        pass

    @abstractmethod
    def update_received_quantities(
        self, purchase_order_id: int, user_id: str, quantities: dict[int, Decimal]
    ) -> None:
        """Set ``received_quantity`` for the given line item IDs in one transaction."""
        pass

    @abstractmethod
    def get_purchase_order_status_summary(self, user_id: str) -> list[StatusSummary]:
        """Count and total purchase orders per status for an owner."""
        pass

    # User role operations
    @abstractmethod
    def list_user_roles(self, user_id: Optional[str] = None) -> list[UserRole]:
        """List role assignments, optionally for a single user."""
        pass

    @abstractmethod
    def insert_user_role(self, user_id: str, role: str, created_by: Optional[str] = None) -> int:
        """Add a role to a user. Returns assignment ID."""
        pass

    @abstractmethod
    def delete_user_role(self, user_id: str, role: str) -> bool:
        """Remove a role from a user. Returns True if a row was deleted."""
        pass

    @abstractmethod
    def replace_user_roles(self, user_id: str, role: str, created_by: Optional[str] = None) -> None:
        """Delete every role of a user and insert ``role``, atomically."""
        pass

    @abstractmethod
    def count_role_holders(self, role: str) -> int:
        """Count users holding a role."""
        pass
