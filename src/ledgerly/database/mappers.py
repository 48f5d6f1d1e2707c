"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the domain never sees ORM rows
and status/role columns come back as their enum types.
"""

from ledgerly.domain import entities as domain
from ledgerly.database.models import (
    Customer as ORMCustomer,
    Vendor as ORMVendor,
    Invoice as ORMInvoice,
    InvoiceItem as ORMInvoiceItem,
    PurchaseOrder as ORMPurchaseOrder,
    PurchaseOrderItem as ORMPurchaseOrderItem,
    UserRole as ORMUserRole,
)


def customer_to_domain(orm_customer: ORMCustomer) -> domain.Customer:
    """Convert SQLAlchemy Customer model to domain Customer entity."""
    return domain.Customer(
        id=orm_customer.id,
        user_id=orm_customer.user_id,
        company_name=orm_customer.company_name,
        email=orm_customer.email,
        created_at=orm_customer.created_at,
    )


def vendor_to_domain(orm_vendor: ORMVendor) -> domain.Vendor:
    """Convert SQLAlchemy Vendor model to domain Vendor entity."""
    return domain.Vendor(
        id=orm_vendor.id,
        user_id=orm_vendor.user_id,
        company_name=orm_vendor.company_name,
        email=orm_vendor.email,
        created_at=orm_vendor.created_at,
    )


def invoice_to_domain(orm_invoice: ORMInvoice) -> domain.Invoice:
    """Convert SQLAlchemy Invoice model to domain Invoice entity."""
    frequency = orm_invoice.recurrence_frequency
    return domain.Invoice(
        id=orm_invoice.id,
        user_id=orm_invoice.user_id,
        customer_id=orm_invoice.customer_id,
        invoice_number=orm_invoice.invoice_number,
        invoice_date=orm_invoice.invoice_date,
        due_date=orm_invoice.due_date,
        status=domain.InvoiceStatus(orm_invoice.status),
        subtotal=orm_invoice.subtotal,
        discount_amount=orm_invoice.discount_amount,
        tax_amount=orm_invoice.tax_amount,
        total_amount=orm_invoice.total_amount,
        paid_amount=orm_invoice.paid_amount,
        balance_due=orm_invoice.balance_due,
        notes=orm_invoice.notes,
        terms=orm_invoice.terms,
        is_recurring=bool(orm_invoice.is_recurring),
        recurrence_frequency=domain.RecurrenceFrequency(frequency) if frequency else None,
        recurrence_start_date=orm_invoice.recurrence_start_date,
        recurrence_end_date=orm_invoice.recurrence_end_date,
        next_recurrence_date=orm_invoice.next_recurrence_date,
        parent_invoice_id=orm_invoice.parent_invoice_id,
        created_at=orm_invoice.created_at,
        updated_at=orm_invoice.updated_at,
    )


def invoice_item_to_domain(orm_item: ORMInvoiceItem) -> domain.InvoiceLineItem:
    """Convert SQLAlchemy InvoiceItem model to domain InvoiceLineItem entity."""
    return domain.InvoiceLineItem(
        id=orm_item.id,
        invoice_id=orm_item.invoice_id,
        description=orm_item.description,
        quantity=orm_item.quantity,
        unit_price=orm_item.unit_price,
        discount_percentage=orm_item.discount_percentage,
        tax_percentage=orm_item.tax_percentage,
        line_total=orm_item.line_total,
        product_id=orm_item.product_id,
        created_at=orm_item.created_at,
    )


def purchase_order_to_domain(orm_po: ORMPurchaseOrder) -> domain.PurchaseOrder:
    """Convert SQLAlchemy PurchaseOrder model to domain PurchaseOrder entity."""
    return domain.PurchaseOrder(
        id=orm_po.id,
        user_id=orm_po.user_id,
        vendor_id=orm_po.vendor_id,
        po_number=orm_po.po_number,
        order_date=orm_po.order_date,
        expected_delivery_date=orm_po.expected_delivery_date,
        status=domain.PurchaseOrderStatus(orm_po.status),
        subtotal=orm_po.subtotal,
        tax_amount=orm_po.tax_amount,
        total_amount=orm_po.total_amount,
        notes=orm_po.notes,
        created_at=orm_po.created_at,
        updated_at=orm_po.updated_at,
    )


def purchase_order_item_to_domain(
    orm_item: ORMPurchaseOrderItem,
) -> domain.PurchaseOrderLineItem:
    """Convert SQLAlchemy PurchaseOrderItem model to domain PurchaseOrderLineItem entity."""
    return domain.PurchaseOrderLineItem(
        id=orm_item.id,
        purchase_order_id=orm_item.purchase_order_id,
        description=orm_item.description,
        quantity=orm_item.quantity,
        unit_price=orm_item.unit_price,
        tax_percentage=orm_item.tax_percentage,
        line_total=orm_item.line_total,
        received_quantity=orm_item.received_quantity,
        product_id=orm_item.product_id,
        created_at=orm_item.created_at,
    )


def user_role_to_domain(orm_role: ORMUserRole) -> domain.UserRole:
    """Convert SQLAlchemy UserRole model to domain UserRole entity."""
    return domain.UserRole(
        id=orm_role.id,
        user_id=orm_role.user_id,
        role=domain.Role(orm_role.role),
        created_by=orm_role.created_by,
        created_at=orm_role.created_at,
    )
