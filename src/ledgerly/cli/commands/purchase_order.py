"""Purchase order commands."""

import click
from ledgerly.cli.error_handling import current_user, handle_domain_error, parse_or_exit
from ledgerly.domain.entities import PurchaseOrderDraft, PurchaseOrderStatus
from ledgerly.domain.errors import DomainError
from ledgerly.domain.purchase_order import PurchaseOrderService
from ledgerly.utils.date_parser import parse_date
from ledgerly.utils.line_item_parser import parse_purchase_order_item, parse_receipt

STATUSES = [s.value for s in PurchaseOrderStatus]


@click.group()
def po_group():
    """Manage purchase orders."""
    pass


def _echo_totals(order) -> None:
    click.echo(f"  Number: {order.po_number}")
    click.echo(f"  Status: {order.status.value}")
    click.echo(f"  Subtotal: ${order.subtotal:,.2f}")
    click.echo(f"  Tax: ${order.tax_amount:,.2f}")
    click.echo(f"  Total: ${order.total_amount:,.2f}")


def _build_draft(ctx, po_number, order_date, vendor_id, expected, status, notes):
    # Dates arrive as raw option strings or as values kept from an existing order
    ordered = order_date
    if isinstance(order_date, str):
        ordered = parse_or_exit(ctx, parse_date, order_date, "order date")
    delivery = expected
    if isinstance(expected, str):
        delivery = parse_or_exit(ctx, lambda v: parse_date(v, base=ordered), expected, "delivery date")
    return PurchaseOrderDraft(
        po_number=po_number,
        order_date=ordered,
        vendor_id=vendor_id,
        expected_delivery_date=delivery,
        status=PurchaseOrderStatus(status),
        notes=notes,
    )


@po_group.command("create")
@click.option("--number", "po_number", required=True, help="Purchase order number (unique per user)")
@click.option("--date", "order_date", default="today", show_default=True, help="Order date")
@click.option("--vendor", "vendor_id", type=int, help="Vendor ID")
@click.option("--expected", help="Expected delivery date (e.g. 2024-03-01 or '+2w')")
@click.option("--status", type=click.Choice(STATUSES), default="pending", show_default=True)
@click.option("--notes", help="Notes")
@click.option(
    "--item",
    "items",
    multiple=True,
    required=True,
    help="Line item 'DESCRIPTION;QTY;PRICE[;TAX%[;PRODUCT_ID]]' (repeatable)",
)
@click.pass_context
def create_purchase_order(
    ctx,
    po_number: str,
    order_date: str,
    vendor_id: int | None,
    expected: str | None,
    status: str,
    notes: str | None,
    items: tuple[str, ...],
):
    """Create a purchase order.

    Examples:
        ledgerly po create --number PO-001 --vendor 2 --item "Paper;10;4.50;8"
    """
    service = PurchaseOrderService(ctx.obj["db"])
    user_id = current_user(ctx)

    draft = _build_draft(ctx, po_number, order_date, vendor_id, expected, status, notes)
    line_items = [parse_or_exit(ctx, parse_purchase_order_item, text, "line item") for text in items]

    try:
        po_id = service.create_purchase_order(user_id, draft, line_items)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created purchase order {po_id}")
    _echo_totals(service.get_purchase_order(user_id, po_id))


@po_group.command("update")
@click.argument("po_id", type=int)
@click.option("--number", "po_number", help="Purchase order number")
@click.option("--date", "order_date", help="Order date")
@click.option("--vendor", "vendor_id", type=int, help="Vendor ID")
@click.option("--expected", help="Expected delivery date")
@click.option("--status", type=click.Choice(STATUSES))
@click.option("--notes", help="Notes")
@click.option(
    "--item",
    "items",
    multiple=True,
    required=True,
    help="Line item 'DESCRIPTION;QTY;PRICE[;TAX%[;PRODUCT_ID]]' (repeatable)",
)
@click.pass_context
def update_purchase_order(
    ctx,
    po_id: int,
    po_number: str | None,
    order_date: str | None,
    vendor_id: int | None,
    expected: str | None,
    status: str | None,
    notes: str | None,
    items: tuple[str, ...],
):
    """Replace a purchase order and all of its line items.

    Received quantities start over at zero for the new line items.
    """
    service = PurchaseOrderService(ctx.obj["db"])
    user_id = current_user(ctx)

    existing = service.get_purchase_order(user_id, po_id)
    if existing is None:
        click.echo(f"Error: Purchase order {po_id} not found", err=True)
        ctx.exit(1)

    draft = _build_draft(
        ctx,
        po_number or existing.po_number,
        order_date or existing.order_date,
        vendor_id if vendor_id is not None else existing.vendor_id,
        expected or existing.expected_delivery_date,
        status or existing.status.value,
        notes if notes is not None else existing.notes,
    )
    line_items = [parse_or_exit(ctx, parse_purchase_order_item, text, "line item") for text in items]

    try:
        service.update_purchase_order(user_id, po_id, draft, line_items)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Updated purchase order {po_id}")
    _echo_totals(service.get_purchase_order(user_id, po_id))


@po_group.command("show")
@click.argument("po_id", type=int)
@click.pass_context
def show_purchase_order(ctx, po_id: int):
    """Show a purchase order with its line items and receipts."""
    service = PurchaseOrderService(ctx.obj["db"])
    user_id = current_user(ctx)

    order = service.get_purchase_order(user_id, po_id)
    if order is None:
        click.echo(f"Error: Purchase order {po_id} not found", err=True)
        ctx.exit(1)

    click.echo(f"\nPurchase order {order.id}")
    click.echo("=" * 80)
    if order.vendor_id is not None:
        click.echo(f"  Vendor ID: {order.vendor_id}")
    click.echo(f"  Ordered: {order.order_date}")
    if order.expected_delivery_date:
        click.echo(f"  Expected: {order.expected_delivery_date}")
    click.echo("\nLine items:")
    click.echo("-" * 80)
    for item in service.get_line_items(user_id, po_id):
        click.echo(
            f"ID: {item.id:4d} | {item.description[:30]:30s} | {item.quantity:>8} x "
            f"${item.unit_price:>10,.2f} | +{item.tax_percentage}% | "
            f"${item.line_total:>10,.2f} | received {item.received_quantity}"
        )
    click.echo("-" * 80)
    _echo_totals(order)
    if service.is_fully_received(user_id, po_id):
        click.echo("  Received in full")


@po_group.command("list")
@click.option("--status", type=click.Choice(STATUSES), help="Only orders in this status")
@click.option("--vendor", "vendor_id", type=int, help="Only orders for this vendor")
@click.pass_context
def list_purchase_orders(ctx, status: str | None, vendor_id: int | None):
    """List your purchase orders."""
    service = PurchaseOrderService(ctx.obj["db"])
    orders = service.list_purchase_orders(current_user(ctx), status=status, vendor_id=vendor_id)
    if not orders:
        click.echo("No purchase orders found.")
        return

    click.echo(f"\nFound {len(orders)} purchase order(s):")
    click.echo("-" * 80)
    for order in orders:
        click.echo(
            f"ID: {order.id:4d} | {order.po_number:20s} | {order.order_date} | "
            f"{order.status.value:9s} | Total: ${order.total_amount:>12,.2f}"
        )


@po_group.command("delete")
@click.argument("po_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_purchase_order(ctx, po_id: int, yes: bool):
    """Delete a purchase order and its line items."""
    service = PurchaseOrderService(ctx.obj["db"])
    user_id = current_user(ctx)

    if not yes and not click.confirm(f"Are you sure you want to delete purchase order {po_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_purchase_order(user_id, po_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted purchase order {po_id}")


@po_group.command("status")
@click.argument("po_id", type=int)
@click.argument("new_status", type=click.Choice(STATUSES))
@click.pass_context
def change_status(ctx, po_id: int, new_status: str):
    """Move a purchase order to a new status.

    Allowed moves: pending -> approved -> ordered -> received, and any open
    order -> cancelled.
    """
    service = PurchaseOrderService(ctx.obj["db"])
    try:
        service.change_status(current_user(ctx), po_id, new_status)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Purchase order {po_id} is now {new_status}")


@po_group.command("receive")
@click.argument("po_id", type=int)
@click.option("--line", "lines", multiple=True, required=True, help="Receipt 'ITEM_ID=QTY' (repeatable)")
@click.pass_context
def receive_items(ctx, po_id: int, lines: tuple[str, ...]):
    """Record delivered quantities against a purchase order.

    Examples:
        ledgerly po receive 4 --line 11=5 --line 12=2
    """
    service = PurchaseOrderService(ctx.obj["db"])
    user_id = current_user(ctx)

    receipts = {}
    for text in lines:
        item_id, quantity = parse_or_exit(ctx, parse_receipt, text, "receipt")
        receipts[item_id] = receipts.get(item_id, 0) + quantity

    try:
        items = service.receive_items(user_id, po_id, receipts)
    except DomainError as e:
        handle_domain_error(ctx, e)

    for item in items:
        click.echo(
            f"ID: {item.id:4d} | {item.description[:30]:30s} | "
            f"received {item.received_quantity} of {item.quantity}"
        )
    if service.is_fully_received(user_id, po_id):
        click.echo("All line items received in full.")


@po_group.command("summary")
@click.pass_context
def purchase_order_summary(ctx):
    """Show purchase order counts and totals per status."""
    service = PurchaseOrderService(ctx.obj["db"])
    rows = service.status_summary(current_user(ctx))
    if not rows:
        click.echo("No purchase orders found.")
        return

    click.echo(f"\n{'Status':12s} {'Count':>6s} {'Total':>16s}")
    click.echo("-" * 36)
    for row in rows:
        click.echo(f"{row.status:12s} {row.count:6d} ${row.total_amount:>15,.2f}")


def register_commands(cli):
    """Register purchase order commands with main CLI."""
    cli.add_command(po_group, name="po")
