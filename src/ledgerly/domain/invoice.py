"""Invoice domain service."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ledgerly.database.base import Database
from ledgerly.domain.contacts import CustomerService
from ledgerly.domain.entities import (
    Invoice as InvoiceEntity,
    InvoiceDraft,
    InvoiceLineItem,
    InvoiceLineItemInput,
    InvoiceStatus,
    InvoiceWriteSet,
    StatusSummary,
)
from ledgerly.domain.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    duplicate_invoice_number,
    invoice_not_found,
    not_owner,
)
from ledgerly.domain.permissions import require_user
from ledgerly.domain.pricing import calculate_totals
from ledgerly.domain.recurrence import validate_recurrence
from ledgerly.domain.status import check_invoice_transition, parse_invoice_status
from ledgerly.utils.amount_parser import to_money

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class InvoiceService:
    """Service for building, storing and moving invoices through their lifecycle."""

    def __init__(self, db: Database):
        """Initialize invoice service.

        Args:
            db: Database instance
        """
        self.db = db
        self.customers = CustomerService(db)

    def build_invoice(
        self, user_id: str, draft: InvoiceDraft, items: Sequence[InvoiceLineItemInput]
    ) -> InvoiceWriteSet:
        """Validate an invoice and compute its stored values.

        This makes no database calls. ``paid_amount`` starts at 0, so
        ``balance_due`` equals ``total_amount``.

        Args:
            user_id: Owner of the invoice
            draft: Header fields
            items: Line items in display order

        Returns:
            Header values and one row per line item (without invoice_id)

        Raises:
            ValidationError: If a required field is missing, dates are out of
                order, the recurrence fields are inconsistent or a line item
                is invalid
        """
        user_id = require_user(user_id)
        if draft.customer_id is None:
            raise ValidationError("Customer is required")
        if not draft.invoice_number or not draft.invoice_number.strip():
            raise ValidationError("Invoice number is required")
        if draft.invoice_date is None:
            raise ValidationError("Invoice date is required")
        if draft.due_date is not None and draft.due_date < draft.invoice_date:
            raise ValidationError("Due date cannot be before the invoice date")

        status = parse_invoice_status(draft.status)
        recurrence = validate_recurrence(draft)
        totals = calculate_totals(items).rounded()

        frequency = recurrence.pop("recurrence_frequency")
        header = {
            "user_id": user_id,
            "customer_id": draft.customer_id,
            "invoice_number": draft.invoice_number.strip(),
            "invoice_date": draft.invoice_date,
            "due_date": draft.due_date,
            "status": status.value,
            "subtotal": totals.subtotal,
            "discount_amount": totals.discount_amount,
            "tax_amount": totals.tax_amount,
            "total_amount": totals.total_amount,
            "paid_amount": ZERO,
            "balance_due": totals.total_amount,
            "notes": draft.notes,
            "terms": draft.terms,
            "recurrence_frequency": frequency.value if frequency else None,
            **recurrence,
        }
        rows = [
            {
                "description": item.description.strip(),
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "discount_percentage": item.discount_percentage,
                "tax_percentage": item.tax_percentage,
                "product_id": item.product_id,
                "line_total": line.line_total,
            }
            for item, line in zip(items, totals.lines)
        ]
        return InvoiceWriteSet(header=header, items=rows)

    def create_invoice(
        self, user_id: str, draft: InvoiceDraft, items: Sequence[InvoiceLineItemInput]
    ) -> int:
        """Create an invoice with its line items.

        Returns:
            Invoice ID

        Raises:
            ValidationError: If the invoice is invalid (nothing is written)
            NotFoundError: If the customer does not exist for this user
            ConflictError: If the invoice number is already used by this user
        """
        write_set = self.build_invoice(user_id, draft, items)
        owner = write_set.header["user_id"]
        self.customers.get_customer(owner, draft.customer_id)

        if self.db.invoice_number_exists(owner, write_set.header["invoice_number"]):
            raise ConflictError(duplicate_invoice_number(write_set.header["invoice_number"]))

        return self.db.insert_invoice(write_set.header, write_set.items)

    def update_invoice(
        self,
        user_id: str,
        invoice_id: int,
        draft: InvoiceDraft,
        items: Sequence[InvoiceLineItemInput],
    ) -> None:
        """Replace an invoice's header and its entire line-item set.

        The previous line items are deleted and the new ones inserted in the
        same transaction as the header update. ``paid_amount`` is kept and
        ``balance_due`` recomputed.

        Raises:
            ValidationError: If the invoice is invalid or the new total is below
                the amount already paid
            InvalidStateTransition: If the status change is not allowed
            NotFoundError: If the invoice or customer does not exist
            AuthorizationError: If the caller does not own the invoice
            ConflictError: If the invoice number is used by another invoice
        """
        write_set = self.build_invoice(user_id, draft, items)
        header = write_set.header
        existing = self._owned_invoice(header["user_id"], invoice_id)

        check_invoice_transition(existing.status, InvoiceStatus(header["status"]))
        self.customers.get_customer(existing.user_id, draft.customer_id)
        if self.db.invoice_number_exists(
            existing.user_id, header["invoice_number"], exclude_id=invoice_id
        ):
            raise ConflictError(duplicate_invoice_number(header["invoice_number"]))

        if header["total_amount"] < existing.paid_amount:
            raise ValidationError(
                f"Invoice total {header['total_amount']} is below the amount already paid "
                f"({existing.paid_amount})"
            )
        header["paid_amount"] = existing.paid_amount
        header["balance_due"] = header["total_amount"] - existing.paid_amount

        # Editing a recurring invoice without a new next date keeps its schedule
        if (
            header["is_recurring"]
            and draft.next_recurrence_date is None
            and existing.next_recurrence_date is not None
            and existing.recurrence_start_date == header["recurrence_start_date"]
        ):
            header["next_recurrence_date"] = existing.next_recurrence_date

        del header["user_id"]
        self.db.replace_invoice(invoice_id, existing.user_id, header, write_set.items)

    def delete_invoice(self, user_id: str, invoice_id: int) -> None:
        """Delete an invoice and its line items.

        Raises:
            NotFoundError: If the invoice does not exist
            AuthorizationError: If the caller does not own the invoice
        """
        existing = self._owned_invoice(require_user(user_id), invoice_id)
        self.db.delete_invoice(invoice_id, existing.user_id)

    def get_invoice(self, user_id: str, invoice_id: int) -> Optional[InvoiceEntity]:
        """Get an invoice visible to ``user_id``.

        Returns:
            Invoice entity, or None if it does not exist or belongs to someone else
        """
        invoice = self.db.get_invoice(invoice_id)
        if invoice is None or invoice.user_id != user_id:
            return None
        return invoice

    def get_line_items(self, user_id: str, invoice_id: int) -> list[InvoiceLineItem]:
        """Get the line items of a visible invoice.

        Raises:
            NotFoundError: If the invoice is not visible to the caller
        """
        if self.get_invoice(user_id, invoice_id) is None:
            raise NotFoundError(invoice_not_found(invoice_id))
        return self.db.get_invoice_items(invoice_id)

    def list_invoices(
        self,
        user_id: str,
        status: Optional[str] = None,
        customer_id: Optional[int] = None,
    ) -> list[InvoiceEntity]:
        """List the caller's invoices, newest first."""
        status_value = parse_invoice_status(status).value if status is not None else None
        return self.db.list_invoices(
            require_user(user_id), status=status_value, customer_id=customer_id
        )

    def change_status(self, user_id: str, invoice_id: int, new_status: str | InvoiceStatus) -> None:
        """Move an invoice to a new status.

        Raises:
            InvalidStateTransition: If the state machine does not allow the move
        """
        target = parse_invoice_status(new_status)
        existing = self._owned_invoice(require_user(user_id), invoice_id)
        check_invoice_transition(existing.status, target)
        self.db.update_invoice_status(invoice_id, existing.user_id, target.value)
        logger.info("Invoice %s: %s -> %s", invoice_id, existing.status.value, target.value)

    def record_payment(self, user_id: str, invoice_id: int, amount: Decimal) -> InvoiceEntity:
        """Apply a payment to an invoice's balance.

        A payment that clears the balance of a sent or overdue invoice also
        marks it paid.

        Returns:
            The updated invoice

        Raises:
            ValidationError: If the amount is not positive, exceeds the balance,
                or the invoice is a draft or cancelled
        """
        existing = self._owned_invoice(require_user(user_id), invoice_id)
        amount = to_money(amount)
        if amount <= ZERO:
            raise ValidationError("Payment amount must be greater than zero")
        if existing.status in (InvoiceStatus.DRAFT, InvoiceStatus.CANCELLED):
            raise ValidationError(
                f"Cannot record a payment on a {existing.status.value} invoice"
            )
        if amount > existing.balance_due:
            raise ValidationError(
                f"Payment {amount} exceeds the balance due ({existing.balance_due})"
            )

        paid = existing.paid_amount + amount
        balance = existing.total_amount - paid
        status = None
        if balance == ZERO and existing.status in (InvoiceStatus.SENT, InvoiceStatus.OVERDUE):
            status = InvoiceStatus.PAID.value
        self.db.update_invoice_payment(invoice_id, existing.user_id, paid, balance, status)
        logger.info("Recorded payment of %s on invoice %s", amount, invoice_id)
        return self.db.get_invoice(invoice_id)

    def mark_overdue(self, user_id: str, as_of: date) -> list[int]:
        """Move sent invoices whose due date has passed to overdue.

        Returns:
            IDs of the invoices that changed
        """
        changed = []
        for invoice in self.list_invoices(user_id, status=InvoiceStatus.SENT.value):
            if invoice.due_date is not None and invoice.due_date < as_of:
                self.db.update_invoice_status(invoice.id, invoice.user_id, InvoiceStatus.OVERDUE.value)
                changed.append(invoice.id)
        if changed:
            logger.info("Marked %d invoice(s) overdue as of %s", len(changed), as_of)
        return changed

    def status_summary(self, user_id: str) -> list[StatusSummary]:
        """Count and total of the caller's invoices per status."""
        return self.db.get_invoice_status_summary(require_user(user_id))

    def _owned_invoice(self, user_id: str, invoice_id: int) -> InvoiceEntity:
        invoice = self.db.get_invoice(invoice_id)
        if invoice is None:
            raise NotFoundError(invoice_not_found(invoice_id))
        if invoice.user_id != user_id:
            raise AuthorizationError(not_owner("invoice", invoice_id))
        return invoice
