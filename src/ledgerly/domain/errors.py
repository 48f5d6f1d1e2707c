"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class AuthorizationError(DomainError):
    """Ownership or role check failed."""


class InvalidStateTransition(ValidationError):
    """Status change not allowed by the entity's state machine."""


class PersistenceError(DomainError):
    """Underlying store call failed."""


class PartialWriteError(PersistenceError):
    """Header write succeeded but the line-item replace could not be undone."""


def invoice_not_found(invoice_id: int) -> str:
    """Return message for missing invoice."""
    return f"Invoice {invoice_id} not found"


def purchase_order_not_found(purchase_order_id: int) -> str:
    """Return message for missing purchase order."""
    return f"Purchase order {purchase_order_id} not found"


def customer_not_found(customer_id: int) -> str:
    """Return message for missing customer."""
    return f"Customer {customer_id} not found"


def vendor_not_found(vendor_id: int) -> str:
    """Return message for missing vendor."""
    return f"Vendor {vendor_id} not found"


def not_owner(kind: str, entity_id: int) -> str:
    """Return message when the caller does not own the entity."""
    return f"You do not have permission to modify {kind} {entity_id}"


def duplicate_invoice_number(invoice_number: str) -> str:
    """Return message for a reused invoice number."""
    return f"Invoice number '{invoice_number}' already exists"


def duplicate_po_number(po_number: str) -> str:
    """Return message for a reused purchase order number."""
    return f"Purchase order number '{po_number}' already exists"


def invalid_transition(kind: str, current: str, new: str) -> str:
    """Return message for a rejected status change."""
    return f"Cannot change {kind} status from '{current}' to '{new}'"


def admin_required() -> str:
    """Return message for admin-only operations."""
    return "Only administrators can manage user roles"
