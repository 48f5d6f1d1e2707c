"""Recurring invoice commands."""

import click
from ledgerly.cli.error_handling import current_user, handle_domain_error, parse_or_exit
from ledgerly.domain.entities import Role
from ledgerly.domain.errors import DomainError
from ledgerly.domain.invoice import InvoiceService
from ledgerly.domain.permissions import require_role
from ledgerly.domain.recurrence import InvoiceRecurrenceExecutor
from ledgerly.domain.roles import RoleService
from ledgerly.utils.date_parser import parse_date


@click.group()
def recurring_group():
    """Run and inspect recurring invoices."""
    pass


@recurring_group.command("run")
@click.option(
    "--as-of",
    default="today",
    show_default=True,
    help="Generate occurrences due on or before this date",
)
@click.pass_context
def run_recurring(ctx, as_of: str):
    """Generate every due occurrence of every recurring invoice.

    Meant to be run from a scheduler such as cron. Missed occurrences are
    caught up one by one, so running it late is safe. It writes to every
    owner's invoices and requires the admin or accountant role.

    Examples:
        ledgerly --user ops recurring run
        ledgerly --user ops recurring run --as-of 2024-06-30
    """
    db = ctx.obj["db"]
    user_id = current_user(ctx)
    reference = parse_or_exit(ctx, parse_date, as_of, "date")
    try:
        require_role(RoleService(db), user_id, Role.ADMIN, Role.ACCOUNTANT)
        created = InvoiceRecurrenceExecutor(db).generate_due(reference)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not created:
        click.echo(f"No recurring invoices due as of {reference}.")
        return
    click.echo(f"Generated {len(created)} invoice(s): {', '.join(str(i) for i in created)}")


@recurring_group.command("list")
@click.pass_context
def list_recurring(ctx):
    """List your recurring invoices and their next occurrence."""
    service = InvoiceService(ctx.obj["db"])
    templates = [inv for inv in service.list_invoices(current_user(ctx)) if inv.is_recurring]
    if not templates:
        click.echo("No recurring invoices found.")
        return

    for inv in templates:
        until = f" until {inv.recurrence_end_date}" if inv.recurrence_end_date else ""
        click.echo(
            f"ID: {inv.id:4d} | {inv.invoice_number:20s} | {inv.recurrence_frequency.value:9s} | "
            f"next {inv.next_recurrence_date}{until}"
        )


def register_commands(cli):
    """Register recurring invoice commands with main CLI."""
    cli.add_command(recurring_group, name="recurring")
