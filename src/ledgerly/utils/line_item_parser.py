"""Parsing of line items given on the command line.

Invoice items:        "DESCRIPTION;QTY;PRICE[;DISCOUNT%[;TAX%[;PRODUCT_ID]]]"
Purchase order items: "DESCRIPTION;QTY;PRICE[;TAX%[;PRODUCT_ID]]"
Receipts:             "ITEM_ID=QTY"
"""

from decimal import Decimal
from typing import Optional

from ledgerly.domain.entities import InvoiceLineItemInput, PurchaseOrderLineItemInput
from ledgerly.utils.amount_parser import parse_amount

SEPARATOR = ";"


def _split(text: str, minimum: int, maximum: int, layout: str) -> list[str]:
    parts = [part.strip() for part in text.split(SEPARATOR)]
    if not minimum <= len(parts) <= maximum:
        raise ValueError(f"Invalid line item '{text}'. Expected {layout}")
    return parts


def _optional_amount(parts: list[str], index: int) -> Decimal:
    if index < len(parts) and parts[index]:
        return parse_amount(parts[index])
    return Decimal("0")


def _optional_id(parts: list[str], index: int) -> Optional[int]:
    if index < len(parts) and parts[index]:
        try:
            return int(parts[index])
        except ValueError:
            raise ValueError(f"Invalid product id '{parts[index]}'")
    return None


def parse_invoice_item(text: str) -> InvoiceLineItemInput:
    """Parse one invoice line item given on the command line."""
    parts = _split(text, 3, 6, "DESCRIPTION;QTY;PRICE[;DISCOUNT%[;TAX%[;PRODUCT_ID]]]")
    return InvoiceLineItemInput(
        description=parts[0],
        quantity=parse_amount(parts[1]),
        unit_price=parse_amount(parts[2]),
        discount_percentage=_optional_amount(parts, 3),
        tax_percentage=_optional_amount(parts, 4),
        product_id=_optional_id(parts, 5),
    )


def parse_purchase_order_item(text: str) -> PurchaseOrderLineItemInput:
    """Parse one purchase order line item given on the command line."""
    parts = _split(text, 3, 5, "DESCRIPTION;QTY;PRICE[;TAX%[;PRODUCT_ID]]")
    return PurchaseOrderLineItemInput(
        description=parts[0],
        quantity=parse_amount(parts[1]),
        unit_price=parse_amount(parts[2]),
        tax_percentage=_optional_amount(parts, 3),
        product_id=_optional_id(parts, 4),
    )


def parse_receipt(text: str) -> tuple[int, Decimal]:
    """Parse an "ITEM_ID=QTY" receipt."""
    item_id, sep, quantity = text.partition("=")
    if not sep:
        raise ValueError(f"Invalid receipt '{text}'. Expected ITEM_ID=QTY")
    try:
        return int(item_id.strip()), parse_amount(quantity)
    except ValueError as e:
        raise ValueError(f"Invalid receipt '{text}': {e}")
