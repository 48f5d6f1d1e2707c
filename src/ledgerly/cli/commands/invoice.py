"""Invoice commands."""

from datetime import date

import click
from ledgerly.cli.error_handling import current_user, handle_domain_error, parse_or_exit
from ledgerly.domain.entities import InvoiceDraft, InvoiceStatus, RecurrenceFrequency
from ledgerly.domain.errors import DomainError
from ledgerly.domain.invoice import InvoiceService
from ledgerly.utils.amount_parser import parse_amount
from ledgerly.utils.date_parser import parse_date
from ledgerly.utils.line_item_parser import parse_invoice_item

STATUSES = [s.value for s in InvoiceStatus]
FREQUENCIES = [f.value for f in RecurrenceFrequency]


@click.group()
def invoice_group():
    """Manage invoices."""
    pass


def _parse_items(ctx, item_texts: tuple[str, ...]):
    return [parse_or_exit(ctx, parse_invoice_item, text, "line item") for text in item_texts]


def _optional_date(ctx, value: str | None, label: str, base: date | None = None) -> date | None:
    if value is None:
        return None
    return parse_or_exit(ctx, lambda v: parse_date(v, base=base), value, label)


def _echo_invoice(invoice) -> None:
    click.echo(f"  Number: {invoice.invoice_number}")
    click.echo(f"  Status: {invoice.status.value}")
    click.echo(f"  Subtotal: ${invoice.subtotal:,.2f}")
    click.echo(f"  Discount: ${invoice.discount_amount:,.2f}")
    click.echo(f"  Tax: ${invoice.tax_amount:,.2f}")
    click.echo(f"  Total: ${invoice.total_amount:,.2f}")
    click.echo(f"  Balance due: ${invoice.balance_due:,.2f}")


@invoice_group.command("create")
@click.option("--customer", "customer_id", type=int, required=True, help="Customer ID")
@click.option("--number", "invoice_number", required=True, help="Invoice number (unique per user)")
@click.option("--date", "invoice_date", default="today", show_default=True, help="Invoice date")
@click.option("--due", "due_date", help="Due date (e.g. 2024-02-15 or 'in 30 days')")
@click.option("--status", type=click.Choice(STATUSES), default="draft", show_default=True)
@click.option("--notes", help="Notes printed on the invoice")
@click.option("--terms", help="Payment terms")
@click.option(
    "--item",
    "items",
    multiple=True,
    required=True,
    help="Line item 'DESCRIPTION;QTY;PRICE[;DISCOUNT%[;TAX%[;PRODUCT_ID]]]' (repeatable)",
)
@click.option("--recurring", type=click.Choice(FREQUENCIES), help="Make this a recurring invoice")
@click.option("--recurrence-start", help="First occurrence date (defaults to the invoice date)")
@click.option("--recurrence-end", help="Last date an occurrence may fall on")
@click.pass_context
def create_invoice(
    ctx,
    customer_id: int,
    invoice_number: str,
    invoice_date: str,
    due_date: str | None,
    status: str,
    notes: str | None,
    terms: str | None,
    items: tuple[str, ...],
    recurring: str | None,
    recurrence_start: str | None,
    recurrence_end: str | None,
):
    """Create an invoice.

    Examples:
        ledgerly invoice create --customer 1 --number INV-001 --item "Design;2;50;10;5"
        ledgerly invoice create --customer 1 --number INV-002 --due "in 30 days" \\
            --item "Hosting;1;20" --recurring monthly
    """
    service = InvoiceService(ctx.obj["db"])
    user_id = current_user(ctx)

    issued = parse_or_exit(ctx, parse_date, invoice_date, "invoice date")
    start = _optional_date(ctx, recurrence_start, "recurrence start date")
    if recurring and start is None:
        start = issued

    draft = InvoiceDraft(
        customer_id=customer_id,
        invoice_number=invoice_number,
        invoice_date=issued,
        due_date=_optional_date(ctx, due_date, "due date", base=issued),
        status=InvoiceStatus(status),
        notes=notes,
        terms=terms,
        is_recurring=recurring is not None,
        recurrence_frequency=RecurrenceFrequency(recurring) if recurring else None,
        recurrence_start_date=start,
        recurrence_end_date=_optional_date(ctx, recurrence_end, "recurrence end date"),
    )
    line_items = _parse_items(ctx, items)

    try:
        invoice_id = service.create_invoice(user_id, draft, line_items)
    except DomainError as e:
        handle_domain_error(ctx, e)

    invoice = service.get_invoice(user_id, invoice_id)
    click.echo(f"Created invoice {invoice_id}")
    _echo_invoice(invoice)
    if invoice.is_recurring:
        click.echo(
            f"  Recurs {invoice.recurrence_frequency.value}, next on {invoice.next_recurrence_date}"
        )


@invoice_group.command("update")
@click.argument("invoice_id", type=int)
@click.option("--customer", "customer_id", type=int, help="Customer ID")
@click.option("--number", "invoice_number", help="Invoice number")
@click.option("--date", "invoice_date", help="Invoice date")
@click.option("--due", "due_date", help="Due date")
@click.option("--no-due", is_flag=True, help="Clear the due date")
@click.option("--status", type=click.Choice(STATUSES))
@click.option("--notes", help="Notes printed on the invoice")
@click.option("--terms", help="Payment terms")
@click.option(
    "--item",
    "items",
    multiple=True,
    required=True,
    help="Line item 'DESCRIPTION;QTY;PRICE[;DISCOUNT%[;TAX%[;PRODUCT_ID]]]' (repeatable)",
)
@click.option("--recurring", type=click.Choice(FREQUENCIES), help="Set recurrence frequency")
@click.option("--recurrence-start", help="First occurrence date")
@click.option("--recurrence-end", help="Last date an occurrence may fall on")
@click.option("--no-recurrence-end", is_flag=True, help="Recur with no end date")
@click.option("--stop-recurring", is_flag=True, help="Turn recurrence off")
@click.pass_context
def update_invoice(
    ctx,
    invoice_id: int,
    customer_id: int | None,
    invoice_number: str | None,
    invoice_date: str | None,
    due_date: str | None,
    no_due: bool,
    status: str | None,
    notes: str | None,
    terms: str | None,
    items: tuple[str, ...],
    recurring: str | None,
    recurrence_start: str | None,
    recurrence_end: str | None,
    no_recurrence_end: bool,
    stop_recurring: bool,
):
    """Replace an invoice and all of its line items.

    Header options that are left out keep their current value. The line
    items given with --item replace every existing line item.

    Examples:
        ledgerly invoice update 3 --item "Design;3;50" --item "Travel;1;120"
        ledgerly invoice update 3 --status sent --item "Design;3;50"
        ledgerly invoice update 3 --no-due --item "Design;3;50"
    """
    service = InvoiceService(ctx.obj["db"])
    user_id = current_user(ctx)

    existing = service.get_invoice(user_id, invoice_id)
    if existing is None:
        click.echo(f"Error: Invoice {invoice_id} not found", err=True)
        ctx.exit(1)

    if recurring and stop_recurring:
        click.echo("Error: --recurring and --stop-recurring cannot be combined.", err=True)
        ctx.exit(1)
    if (due_date and no_due) or (recurrence_end and no_recurrence_end):
        click.echo("Error: A date cannot be both given and cleared.", err=True)
        ctx.exit(1)

    issued = (
        parse_or_exit(ctx, parse_date, invoice_date, "invoice date")
        if invoice_date
        else existing.invoice_date
    )
    is_recurring = (existing.is_recurring or recurring is not None) and not stop_recurring
    frequency = RecurrenceFrequency(recurring) if recurring else existing.recurrence_frequency
    start = _optional_date(ctx, recurrence_start, "recurrence start date")
    if start is None:
        start = existing.recurrence_start_date or (issued if is_recurring else None)
    end = _optional_date(ctx, recurrence_end, "recurrence end date")
    if end is None and not no_recurrence_end:
        end = existing.recurrence_end_date
    due = _optional_date(ctx, due_date, "due date", base=issued)
    if due is None and not no_due:
        due = existing.due_date

    draft = InvoiceDraft(
        customer_id=customer_id if customer_id is not None else existing.customer_id,
        invoice_number=invoice_number or existing.invoice_number,
        invoice_date=issued,
        due_date=due,
        status=InvoiceStatus(status) if status else existing.status,
        notes=notes if notes is not None else existing.notes,
        terms=terms if terms is not None else existing.terms,
        is_recurring=is_recurring,
        recurrence_frequency=frequency if is_recurring else None,
        recurrence_start_date=start if is_recurring else None,
        recurrence_end_date=end if is_recurring else None,
    )
    line_items = _parse_items(ctx, items)

    try:
        service.update_invoice(user_id, invoice_id, draft, line_items)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Updated invoice {invoice_id}")
    _echo_invoice(service.get_invoice(user_id, invoice_id))


@invoice_group.command("show")
@click.argument("invoice_id", type=int)
@click.pass_context
def show_invoice(ctx, invoice_id: int):
    """Show an invoice with its line items."""
    service = InvoiceService(ctx.obj["db"])
    user_id = current_user(ctx)

    invoice = service.get_invoice(user_id, invoice_id)
    if invoice is None:
        click.echo(f"Error: Invoice {invoice_id} not found", err=True)
        ctx.exit(1)

    click.echo(f"\nInvoice {invoice.id}")
    click.echo("=" * 80)
    click.echo(f"  Customer ID: {invoice.customer_id}")
    click.echo(f"  Date: {invoice.invoice_date}")
    if invoice.due_date:
        click.echo(f"  Due: {invoice.due_date}")
    if invoice.parent_invoice_id:
        click.echo(f"  Generated from invoice: {invoice.parent_invoice_id}")
    if invoice.is_recurring:
        click.echo(
            f"  Recurs {invoice.recurrence_frequency.value}, next on {invoice.next_recurrence_date}"
        )
    click.echo("\nLine items:")
    click.echo("-" * 80)
    for item in service.get_line_items(user_id, invoice_id):
        click.echo(
            f"ID: {item.id:4d} | {item.description[:30]:30s} | {item.quantity:>8} x "
            f"${item.unit_price:>10,.2f} | -{item.discount_percentage}% +{item.tax_percentage}% | "
            f"${item.line_total:>10,.2f}"
        )
    click.echo("-" * 80)
    _echo_invoice(invoice)
    click.echo(f"  Paid: ${invoice.paid_amount:,.2f}")


@invoice_group.command("list")
@click.option("--status", type=click.Choice(STATUSES), help="Only invoices in this status")
@click.option("--customer", "customer_id", type=int, help="Only invoices for this customer")
@click.pass_context
def list_invoices(ctx, status: str | None, customer_id: int | None):
    """List your invoices."""
    service = InvoiceService(ctx.obj["db"])
    invoices = service.list_invoices(current_user(ctx), status=status, customer_id=customer_id)
    if not invoices:
        click.echo("No invoices found.")
        return

    click.echo(f"\nFound {len(invoices)} invoice(s):")
    click.echo("-" * 90)
    for inv in invoices:
        marker = " (recurring)" if inv.is_recurring else ""
        click.echo(
            f"ID: {inv.id:4d} | {inv.invoice_number:20s} | {inv.invoice_date} | "
            f"{inv.status.value:9s} | Total: ${inv.total_amount:>12,.2f} | "
            f"Due: ${inv.balance_due:>12,.2f}{marker}"
        )


@invoice_group.command("delete")
@click.argument("invoice_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_invoice(ctx, invoice_id: int, yes: bool):
    """Delete an invoice and its line items."""
    service = InvoiceService(ctx.obj["db"])
    user_id = current_user(ctx)

    if not yes and not click.confirm(f"Are you sure you want to delete invoice {invoice_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_invoice(user_id, invoice_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted invoice {invoice_id}")


@invoice_group.command("status")
@click.argument("invoice_id", type=int)
@click.argument("new_status", type=click.Choice(STATUSES))
@click.pass_context
def change_status(ctx, invoice_id: int, new_status: str):
    """Move an invoice to a new status.

    Allowed moves: draft -> sent, sent -> paid/overdue, overdue -> paid,
    and any open invoice -> cancelled.
    """
    service = InvoiceService(ctx.obj["db"])
    try:
        service.change_status(current_user(ctx), invoice_id, new_status)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Invoice {invoice_id} is now {new_status}")


@invoice_group.command("pay")
@click.argument("invoice_id", type=int)
@click.argument("amount")
@click.pass_context
def record_payment(ctx, invoice_id: int, amount: str):
    """Record a payment against an invoice."""
    service = InvoiceService(ctx.obj["db"])
    payment = parse_or_exit(ctx, parse_amount, amount, "amount")
    try:
        invoice = service.record_payment(current_user(ctx), invoice_id, payment)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Recorded payment of ${payment:,.2f} on invoice {invoice_id}")
    click.echo(f"  Balance due: ${invoice.balance_due:,.2f}")
    click.echo(f"  Status: {invoice.status.value}")


@invoice_group.command("mark-overdue")
@click.option("--as-of", default="today", show_default=True, help="Reference date")
@click.pass_context
def mark_overdue(ctx, as_of: str):
    """Mark sent invoices past their due date as overdue."""
    service = InvoiceService(ctx.obj["db"])
    reference = parse_or_exit(ctx, parse_date, as_of, "date")
    changed = service.mark_overdue(current_user(ctx), reference)
    if not changed:
        click.echo("No overdue invoices.")
        return
    click.echo(f"Marked {len(changed)} invoice(s) overdue: {', '.join(str(i) for i in changed)}")


@invoice_group.command("summary")
@click.pass_context
def invoice_summary(ctx):
    """Show invoice counts and totals per status."""
    service = InvoiceService(ctx.obj["db"])
    rows = service.status_summary(current_user(ctx))
    if not rows:
        click.echo("No invoices found.")
        return

    click.echo(f"\n{'Status':12s} {'Count':>6s} {'Total':>16s}")
    click.echo("-" * 36)
    for row in rows:
        click.echo(f"{row.status:12s} {row.count:6d} ${row.total_amount:>15,.2f}")


def register_commands(cli):
    """Register invoice commands with main CLI."""
    cli.add_command(invoice_group, name="invoice")
