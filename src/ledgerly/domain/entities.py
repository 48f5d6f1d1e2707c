"""Domain model entities for ledgerly.

These are pure data classes representing business concepts, independent of
database schema. Services and the database layer exchange these instead of
ORM rows, so the persistence details can change without touching pricing or
lifecycle rules.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class PurchaseOrderStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    ORDERED = "ordered"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class RecurrenceFrequency(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class Role(str, Enum):
    ADMIN = "admin"
    ACCOUNTANT = "accountant"
    USER = "user"


@dataclass(frozen=True)
class Customer:
    """Customer domain entity."""

    id: int
    user_id: str
    company_name: str
    email: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Vendor:
    """Vendor domain entity."""

    id: int
    user_id: str
    company_name: str
    email: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class InvoiceLineItemInput:
    """Line item as entered on an invoice form, before pricing."""

    description: str
    unit_price: Decimal
    quantity: Decimal = Decimal("1")
    discount_percentage: Decimal = Decimal("0")
    tax_percentage: Decimal = Decimal("0")
    product_id: Optional[int] = None


@dataclass(frozen=True)
class PurchaseOrderLineItemInput:
    """Line item as entered on a purchase order form, before pricing."""

    description: str
    unit_price: Decimal
    quantity: Decimal = Decimal("1")
    tax_percentage: Decimal = Decimal("0")
    product_id: Optional[int] = None

    @property
    def discount_percentage(self) -> Decimal:
        return Decimal("0")


@dataclass(frozen=True)
class InvoiceLineItem:
    """Persisted invoice line item."""

    id: int
    invoice_id: int
    description: str
    quantity: Decimal
    unit_price: Decimal
    discount_percentage: Decimal
    tax_percentage: Decimal
    line_total: Decimal
    product_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class PurchaseOrderLineItem:
    """Persisted purchase order line item."""

    id: int
    purchase_order_id: int
    description: str
    quantity: Decimal
    unit_price: Decimal
    tax_percentage: Decimal
    line_total: Decimal
    received_quantity: Decimal
    product_id: Optional[int]
    created_at: datetime

    @property
    def outstanding_quantity(self) -> Decimal:
        return self.quantity - self.received_quantity


@dataclass(frozen=True)
class InvoiceDraft:
    """Header fields of an invoice as submitted by the caller."""

    customer_id: Optional[int]
    invoice_number: str
    invoice_date: date
    due_date: Optional[date] = None
    status: InvoiceStatus = InvoiceStatus.DRAFT
    notes: Optional[str] = None
    terms: Optional[str] = None
    is_recurring: bool = False
    recurrence_frequency: Optional[RecurrenceFrequency] = None
    recurrence_start_date: Optional[date] = None
    recurrence_end_date: Optional[date] = None
    next_recurrence_date: Optional[date] = None


@dataclass(frozen=True)
class PurchaseOrderDraft:
    """Header fields of a purchase order as submitted by the caller."""

    po_number: str
    order_date: date
    vendor_id: Optional[int] = None
    expected_delivery_date: Optional[date] = None
    status: PurchaseOrderStatus = PurchaseOrderStatus.PENDING
    notes: Optional[str] = None


@dataclass(frozen=True)
class Invoice:
    """Invoice domain entity."""

    id: int
    user_id: str
    customer_id: int
    invoice_number: str
    invoice_date: date
    due_date: Optional[date]
    status: InvoiceStatus
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    paid_amount: Decimal
    balance_due: Decimal
    notes: Optional[str]
    terms: Optional[str]
    is_recurring: bool
    recurrence_frequency: Optional[RecurrenceFrequency]
    recurrence_start_date: Optional[date]
    recurrence_end_date: Optional[date]
    next_recurrence_date: Optional[date]
    parent_invoice_id: Optional[int]
    created_at: datetime
    updated_at: datetime

    @property
    def is_balance_consistent(self) -> bool:
        """True when balance_due matches total minus paid and is not negative."""
        return (
            self.balance_due == self.total_amount - self.paid_amount
            and self.balance_due >= 0
        )


@dataclass(frozen=True)
class PurchaseOrder:
    """Purchase order domain entity."""

    id: int
    user_id: str
    vendor_id: Optional[int]
    po_number: str
    order_date: date
    expected_delivery_date: Optional[date]
    status: PurchaseOrderStatus
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class UserRole:
    """Role assignment domain entity."""

    id: int
    user_id: str
    role: Role
    created_by: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class StatusSummary:
    """Count and total amount of documents in one status."""

    status: str
    count: int
    total_amount: Decimal


@dataclass(frozen=True)
class InvoiceWriteSet:
    """Header values plus line-item rows ready to be persisted together."""

    header: dict
    items: list[dict] = field(default_factory=list)


@dataclass(frozen=True)
class PurchaseOrderWriteSet:
    """Header values plus line-item rows ready to be persisted together."""

    header: dict
    items: list[dict] = field(default_factory=list)
