"""Recurring invoice contract and executor.

A recurring invoice is a template: on each ``next_recurrence_date`` a child
invoice is generated from it and the template's next date moves forward by
one period. The executor is run by an external scheduler (cron, a worker)
through ``RecurrenceExecutor.generate_due``.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from dateutil.relativedelta import relativedelta

from ledgerly.database.base import Database
from ledgerly.domain.entities import (
    Invoice,
    InvoiceDraft,
    InvoiceStatus,
    RecurrenceFrequency,
)
from ledgerly.domain.errors import DomainError, ValidationError

logger = logging.getLogger(__name__)

PERIODS = {
    RecurrenceFrequency.WEEKLY: relativedelta(weeks=1),
    RecurrenceFrequency.MONTHLY: relativedelta(months=1),
    RecurrenceFrequency.QUARTERLY: relativedelta(months=3),
    RecurrenceFrequency.YEARLY: relativedelta(years=1),
}


def parse_frequency(value: str | RecurrenceFrequency) -> RecurrenceFrequency:
    """Convert a frequency name to RecurrenceFrequency."""
    try:
        return RecurrenceFrequency(value)
    except ValueError:
        allowed = ", ".join(f.value for f in RecurrenceFrequency)
        raise ValidationError(
            f"Unknown recurrence frequency '{value}'. Expected one of: {allowed}"
        )


def advance_date(
    current: date, frequency: RecurrenceFrequency, anchor: Optional[date] = None
) -> date:
    """Return the first occurrence after ``current``.

    Occurrences are ``anchor + n * period``; ``anchor`` defaults to
    ``current``. Month-based periods clamp to the end of shorter months
    without losing the anchor day (Jan 31, Feb 29, Mar 31, Apr 30).
    """
    anchor = anchor or current
    period = PERIODS[frequency]
    n = 1
    while anchor + period * n <= current:
        n += 1
    return anchor + period * n


def validate_recurrence(draft: InvoiceDraft) -> dict:
    """Check the recurrence fields of an invoice draft.

    Returns:
        Dict of normalized recurrence column values. When the draft is not
        recurring every recurrence field is cleared.

    Raises:
        ValidationError: If a recurring draft is missing its frequency or
            start date, or its dates are out of order
    """
    if not draft.is_recurring:
        return {
            "is_recurring": False,
            "recurrence_frequency": None,
            "recurrence_start_date": None,
            "recurrence_end_date": None,
            "next_recurrence_date": None,
        }

    if draft.recurrence_frequency is None:
        raise ValidationError("Recurring invoices require a recurrence frequency")
    frequency = parse_frequency(draft.recurrence_frequency)
    start = draft.recurrence_start_date
    if start is None:
        raise ValidationError("Recurring invoices require a recurrence start date")

    end = draft.recurrence_end_date
    if end is not None and end < start:
        raise ValidationError("Recurrence end date cannot be before the start date")

    next_date = draft.next_recurrence_date or start
    if next_date < start:
        raise ValidationError("Next recurrence date cannot be before the start date")

    return {
        "is_recurring": True,
        "recurrence_frequency": frequency,
        "recurrence_start_date": start,
        "recurrence_end_date": end,
        "next_recurrence_date": next_date,
    }


def is_generation_candidate(invoice: Invoice, as_of: date) -> bool:
    """True when ``invoice`` has an occurrence due on or before ``as_of``."""
    return (
        invoice.is_recurring
        and invoice.status != InvoiceStatus.CANCELLED
        and invoice.recurrence_frequency is not None
        and invoice.next_recurrence_date is not None
        and invoice.next_recurrence_date <= as_of
    )


def child_invoice_number(parent_number: str, occurrence: date) -> str:
    """Invoice number for the child generated on ``occurrence``."""
    return f"{parent_number}-{occurrence:%Y%m%d}"


class RecurrenceExecutor(ABC):
    """Capability that spawns invoices from recurring templates."""

    @abstractmethod
    def generate_due(self, as_of: date) -> list[int]:
        """Generate every occurrence due on or before ``as_of``.

        Returns:
            IDs of the newly created invoices
        """
        pass


class InvoiceRecurrenceExecutor(RecurrenceExecutor):
    """Generates child invoices from recurring invoices stored in ``db``."""

    def __init__(self, db: Database):
        """Initialize the executor.

        Args:
            db: Database instance
        """
        self.db = db

    def generate_due(self, as_of: date) -> list[int]:
        created: list[int] = []
        for parent in self.db.list_due_recurring_invoices(as_of):
            if not is_generation_candidate(parent, as_of):
                continue
            try:
                self._catch_up(parent, as_of, created)
            except DomainError as e:
                # Failures stay scoped to one template
                logger.error("Could not generate from recurring invoice %s: %s", parent.id, e)
        return created

    def _catch_up(self, parent: Invoice, as_of: date, created: list[int]) -> None:
        occurrence = parent.next_recurrence_date
        frequency = parent.recurrence_frequency
        while occurrence is not None and occurrence <= as_of:
            if parent.recurrence_end_date is not None and occurrence > parent.recurrence_end_date:
                self.db.advance_recurrence(parent.id, None)
                logger.info("Recurring invoice %s reached its end date", parent.id)
                break

            following: Optional[date] = advance_date(
                occurrence, frequency, parent.recurrence_start_date
            )
            if parent.recurrence_end_date is not None and following > parent.recurrence_end_date:
                following = None

            child_id = self.db.insert_recurring_child(
                parent_id=parent.id,
                invoice_number=child_invoice_number(parent.invoice_number, occurrence),
                invoice_date=occurrence,
                due_date=self._child_due_date(parent, occurrence),
                next_recurrence_date=following,
            )
            logger.info(
                "Generated invoice %s from recurring invoice %s for %s",
                child_id,
                parent.id,
                occurrence,
            )
            created.append(child_id)
            occurrence = following

    @staticmethod
    def _child_due_date(parent: Invoice, occurrence: date) -> Optional[date]:
        if parent.due_date is None:
            return None
        return occurrence + (parent.due_date - parent.invoice_date)
