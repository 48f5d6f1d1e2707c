"""Utility functions for ledgerly."""

from ledgerly.utils.date_parser import parse_date
from ledgerly.utils.amount_parser import parse_amount, to_money
from ledgerly.utils.line_item_parser import (
    parse_invoice_item,
    parse_purchase_order_item,
    parse_receipt,
)

__all__ = [
    "parse_date",
    "parse_amount",
    "to_money",
    "parse_invoice_item",
    "parse_purchase_order_item",
    "parse_receipt",
]
