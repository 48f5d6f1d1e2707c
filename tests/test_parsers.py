"""Tests for amount and line item parsing."""

from decimal import Decimal

import pytest

from ledgerly.utils.amount_parser import parse_amount, to_money
from ledgerly.utils.line_item_parser import (
    parse_invoice_item,
    parse_purchase_order_item,
    parse_receipt,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("123.45", Decimal("123.45")),
        ("$1,234.56", Decimal("1234.56")),
        ("€ 10", Decimal("10")),
        ("7.5%", Decimal("7.5")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "NaN"])
def test_parse_amount_rejects_garbage(text):
    with pytest.raises(ValueError):
        parse_amount(text)


def test_to_money_rounds_half_up():
    assert to_money(Decimal("2.345")) == Decimal("2.35")
    assert to_money(Decimal("-2.345")) == Decimal("-2.35")
    assert to_money(Decimal("4")) == Decimal("4.00")


def test_parse_invoice_item_full():
    item = parse_invoice_item("Design work; 2; $50; 10%; 5%; 42")

    assert item.description == "Design work"
    assert item.quantity == Decimal("2")
    assert item.unit_price == Decimal("50")
    assert item.discount_percentage == Decimal("10")
    assert item.tax_percentage == Decimal("5")
    assert item.product_id == 42


def test_parse_invoice_item_defaults():
    item = parse_invoice_item("Hosting;1;20")

    assert item.discount_percentage == 0
    assert item.tax_percentage == 0
    assert item.product_id is None


def test_parse_invoice_item_skipped_discount():
    item = parse_invoice_item("Hosting;1;20;;8")
    assert item.discount_percentage == 0
    assert item.tax_percentage == Decimal("8")


@pytest.mark.parametrize("spec", ["Hosting;1", "A;1;2;3;4;5;6", "Hosting;one;20", "A;1;2;0;0;x"])
def test_parse_invoice_item_invalid(spec):
    with pytest.raises(ValueError):
        parse_invoice_item(spec)


def test_parse_purchase_order_item():
    item = parse_purchase_order_item("Paper;10;4.50;8")

    assert item.quantity == Decimal("10")
    assert item.unit_price == Decimal("4.50")
    assert item.tax_percentage == Decimal("8")
    assert item.discount_percentage == 0


def test_parse_purchase_order_item_has_no_discount_column():
    with pytest.raises(ValueError):
        parse_purchase_order_item("Paper;10;4.50;5;8;1")


def test_parse_receipt():
    assert parse_receipt("12=3.5") == (12, Decimal("3.5"))

    with pytest.raises(ValueError, match="ITEM_ID=QTY"):
        parse_receipt("12:3")
    with pytest.raises(ValueError):
        parse_receipt("x=1")
