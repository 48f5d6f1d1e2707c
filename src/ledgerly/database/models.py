"""SQLAlchemy models for ledgerly database."""

import sqlite3
from datetime import datetime, date, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    CheckConstraint,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()

MONEY = Numeric(15, 2)
PERCENT = Numeric(5, 2)


def _now() -> datetime:
    return datetime.now(UTC)


class Customer(Base):
    """Customer model."""

    __tablename__ = "customers"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    company_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    invoices = relationship("Invoice", back_populates="customer")


class Vendor(Base):
    """Vendor model."""

    __tablename__ = "vendors"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    company_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    purchase_orders = relationship("PurchaseOrder", back_populates="vendor")


class Invoice(Base):
    """Invoice header model."""

    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    invoice_number = Column(String(50), nullable=False)
    invoice_date = Column(Date, default=date.today, nullable=False)
    due_date = Column(Date, nullable=True)
    status = Column(String(20), default="draft", nullable=False)
    subtotal = Column(MONEY, default=0, nullable=False)
    discount_amount = Column(MONEY, default=0, nullable=False)
    tax_amount = Column(MONEY, default=0, nullable=False)
    total_amount = Column(MONEY, default=0, nullable=False)
    paid_amount = Column(MONEY, default=0, nullable=False)
    balance_due = Column(MONEY, default=0, nullable=False)
    notes = Column(Text, nullable=True)
    terms = Column(Text, nullable=True)
    is_recurring = Column(Boolean, default=False, nullable=False)
    recurrence_frequency = Column(String(20), nullable=True)
    recurrence_start_date = Column(Date, nullable=True)
    recurrence_end_date = Column(Date, nullable=True)
    next_recurrence_date = Column(Date, nullable=True)
    parent_invoice_id = Column(
        Integer, ForeignKey("invoices.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "invoice_number", name="uq_invoice_owner_number"),
        CheckConstraint(
            "status IN ('draft', 'sent', 'paid', 'overdue', 'cancelled')",
            name="ck_invoice_status",
        ),
        CheckConstraint(
            "recurrence_frequency IS NULL OR "
            "recurrence_frequency IN ('weekly', 'monthly', 'quarterly', 'yearly')",
            name="ck_invoice_recurrence_frequency",
        ),
    )

    customer = relationship("Customer", back_populates="invoices")
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.id",
    )
    parent = relationship("Invoice", remote_side=[id], backref="children")


class InvoiceItem(Base):
    """Invoice line item model."""

    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True)
    invoice_id = Column(
        Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id = Column(Integer, nullable=True)
    description = Column(String(500), nullable=False)
    quantity = Column(MONEY, default=1, nullable=False)
    unit_price = Column(MONEY, default=0, nullable=False)
    discount_percentage = Column(PERCENT, default=0, nullable=False)
    tax_percentage = Column(PERCENT, default=0, nullable=False)
    line_total = Column(MONEY, default=0, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    invoice = relationship("Invoice", back_populates="items")


class PurchaseOrder(Base):
    """Purchase order header model."""

    __tablename__ = "purchase_orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id", ondelete="SET NULL"), nullable=True)
    po_number = Column(String(50), nullable=False)
    order_date = Column(Date, default=date.today, nullable=False)
    expected_delivery_date = Column(Date, nullable=True)
    status = Column(String(20), default="pending", nullable=False)
    subtotal = Column(MONEY, default=0, nullable=False)
    tax_amount = Column(MONEY, default=0, nullable=False)
    total_amount = Column(MONEY, default=0, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    updated_at = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "po_number", name="uq_purchase_order_owner_number"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'ordered', 'received', 'cancelled')",
            name="ck_purchase_order_status",
        ),
    )

    vendor = relationship("Vendor", back_populates="purchase_orders")
    items = relationship(
        "PurchaseOrderItem",
        back_populates="purchase_order",
        cascade="all, delete-orphan",
        order_by="PurchaseOrderItem.id",
    )


class PurchaseOrderItem(Base):
    """Purchase order line item model."""

    __tablename__ = "purchase_order_items"

    id = Column(Integer, primary_key=True)
    purchase_order_id = Column(
        Integer,
        ForeignKey("purchase_orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = Column(Integer, nullable=True)
    description = Column(String(500), nullable=False)
    quantity = Column(MONEY, default=1, nullable=False)
    unit_price = Column(MONEY, default=0, nullable=False)
    tax_percentage = Column(PERCENT, default=0, nullable=False)
    line_total = Column(MONEY, default=0, nullable=False)
    received_quantity = Column(MONEY, default=0, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    purchase_order = relationship("PurchaseOrder", back_populates="items")


class UserRole(Base):
    """Role assignment model."""

    __tablename__ = "user_roles"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    role = Column(String(20), nullable=False)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uq_user_role"),
        CheckConstraint("role IN ('admin', 'accountant', 'user')", name="ck_user_role"),
    )


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE clauses unless foreign keys are switched on
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
