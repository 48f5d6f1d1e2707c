"""Line-item pricing.

Pure functions turning a list of line items into per-line amounts and
document totals. Percentages are whole-number percent (7.5 means 7.5%).
Amounts are kept at full Decimal precision; callers round with
``Totals.rounded()`` when storing.
"""

from dataclasses import dataclass, fields
from decimal import Decimal
from typing import Protocol, Sequence

from ledgerly.domain.errors import ValidationError
from ledgerly.utils.amount_parser import to_money

ZERO = Decimal("0")
HUNDRED = Decimal("100")


class PricedItem(Protocol):
    description: str
    quantity: Decimal
    unit_price: Decimal
    discount_percentage: Decimal
    tax_percentage: Decimal


@dataclass(frozen=True)
class LineAmounts:
    """Computed amounts for a single line item."""

    base: Decimal
    discount: Decimal
    after_discount: Decimal
    tax: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class Totals:
    """Aggregated amounts for a whole document."""

    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    lines: tuple[LineAmounts, ...] = ()

    def rounded(self) -> "Totals":
        """Return a copy with every figure rounded to cents.

        The total is derived from the rounded components so that
        ``total_amount == subtotal - discount_amount + tax_amount`` still holds.
        """
        subtotal = to_money(self.subtotal)
        discount = to_money(self.discount_amount)
        tax = to_money(self.tax_amount)
        return Totals(
            subtotal=subtotal,
            discount_amount=discount,
            tax_amount=tax,
            total_amount=subtotal - discount + tax,
            lines=tuple(
                LineAmounts(*(to_money(getattr(line, f.name)) for f in fields(LineAmounts)))
                for line in self.lines
            ),
        )


def _check_percentage(name: str, value: Decimal, position: int) -> None:
    if value < ZERO or value > HUNDRED:
        raise ValidationError(
            f"Line item {position}: {name} must be between 0 and 100, got {value}"
        )


def validate_line(item: PricedItem, position: int = 1) -> None:
    """Validate a single line item.

    Raises:
        ValidationError: If description is empty, quantity or price is
            negative, or a percentage is outside 0-100
    """
    if not item.description or not item.description.strip():
        raise ValidationError(f"Line item {position}: description is required")
    if item.quantity < ZERO:
        raise ValidationError(f"Line item {position}: quantity cannot be negative")
    if item.unit_price < ZERO:
        raise ValidationError(f"Line item {position}: unit price cannot be negative")
    _check_percentage("discount percentage", item.discount_percentage, position)
    _check_percentage("tax percentage", item.tax_percentage, position)


def calculate_line(item: PricedItem) -> LineAmounts:
    """Compute base, discount, tax and total for one line item."""
    base = Decimal(item.quantity) * Decimal(item.unit_price)
    discount = base * (Decimal(item.discount_percentage) / HUNDRED)
    after_discount = base - discount
    tax = after_discount * (Decimal(item.tax_percentage) / HUNDRED)
    return LineAmounts(
        base=base,
        discount=discount,
        after_discount=after_discount,
        tax=tax,
        line_total=after_discount + tax,
    )


def calculate_totals(items: Sequence[PricedItem]) -> Totals:
    """Validate line items and aggregate their amounts.

    Args:
        items: Ordered line items (invoice or purchase order variant)

    Returns:
        Totals with per-line amounts in the same order as ``items``

    Raises:
        ValidationError: If ``items`` is empty or any item is invalid
    """
    if not items:
        raise ValidationError("At least one line item is required")

    for position, item in enumerate(items, start=1):
        validate_line(item, position)

    lines = tuple(calculate_line(item) for item in items)
    return Totals(
        subtotal=sum((line.base for line in lines), ZERO),
        discount_amount=sum((line.discount for line in lines), ZERO),
        tax_amount=sum((line.tax for line in lines), ZERO),
        total_amount=sum((line.line_total for line in lines), ZERO),
        lines=lines,
    )
