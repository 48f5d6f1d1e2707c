"""Status state machines for invoices and purchase orders."""

from ledgerly.domain.entities import InvoiceStatus, PurchaseOrderStatus
from ledgerly.domain.errors import InvalidStateTransition, ValidationError, invalid_transition

INVOICE_TRANSITIONS: dict[InvoiceStatus, frozenset[InvoiceStatus]] = {
    InvoiceStatus.DRAFT: frozenset({InvoiceStatus.SENT, InvoiceStatus.CANCELLED}),
    InvoiceStatus.SENT: frozenset(
        {InvoiceStatus.PAID, InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED}
    ),
    InvoiceStatus.OVERDUE: frozenset({InvoiceStatus.PAID, InvoiceStatus.CANCELLED}),
    InvoiceStatus.PAID: frozenset(),
    InvoiceStatus.CANCELLED: frozenset(),
}

PURCHASE_ORDER_TRANSITIONS: dict[PurchaseOrderStatus, frozenset[PurchaseOrderStatus]] = {
    PurchaseOrderStatus.PENDING: frozenset(
        {PurchaseOrderStatus.APPROVED, PurchaseOrderStatus.CANCELLED}
    ),
    PurchaseOrderStatus.APPROVED: frozenset(
        {PurchaseOrderStatus.ORDERED, PurchaseOrderStatus.CANCELLED}
    ),
    PurchaseOrderStatus.ORDERED: frozenset(
        {PurchaseOrderStatus.RECEIVED, PurchaseOrderStatus.CANCELLED}
    ),
    PurchaseOrderStatus.RECEIVED: frozenset(),
    PurchaseOrderStatus.CANCELLED: frozenset(),
}


def parse_invoice_status(value: str | InvoiceStatus) -> InvoiceStatus:
    """Convert a status name to InvoiceStatus, raising ValidationError if unknown."""
    try:
        return InvoiceStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in InvoiceStatus)
        raise ValidationError(f"Unknown invoice status '{value}'. Expected one of: {allowed}")


def parse_purchase_order_status(value: str | PurchaseOrderStatus) -> PurchaseOrderStatus:
    """Convert a status name to PurchaseOrderStatus, raising ValidationError if unknown."""
    try:
        return PurchaseOrderStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in PurchaseOrderStatus)
        raise ValidationError(
            f"Unknown purchase order status '{value}'. Expected one of: {allowed}"
        )


def is_terminal(status: InvoiceStatus | PurchaseOrderStatus) -> bool:
    """True when no further status change is allowed from ``status``."""
    if isinstance(status, InvoiceStatus):
        return not INVOICE_TRANSITIONS[status]
    return not PURCHASE_ORDER_TRANSITIONS[status]


def check_invoice_transition(current: InvoiceStatus, new: InvoiceStatus) -> None:
    """Raise InvalidStateTransition unless ``current -> new`` is allowed.

    Keeping the same status is always allowed.
    """
    if current == new:
        return
    if new not in INVOICE_TRANSITIONS[current]:
        raise InvalidStateTransition(invalid_transition("invoice", current.value, new.value))


def check_purchase_order_transition(
    current: PurchaseOrderStatus, new: PurchaseOrderStatus
) -> None:
    """Raise InvalidStateTransition unless ``current -> new`` is allowed.

    Keeping the same status is always allowed.
    """
    if current == new:
        return
    if new not in PURCHASE_ORDER_TRANSITIONS[current]:
        raise InvalidStateTransition(
            invalid_transition("purchase order", current.value, new.value)
        )
