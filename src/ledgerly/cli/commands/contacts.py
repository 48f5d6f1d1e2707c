"""Customer and vendor commands."""

import click
from ledgerly.cli.error_handling import current_user, handle_domain_error
from ledgerly.domain.contacts import CustomerService, VendorService
from ledgerly.domain.errors import DomainError


@click.group()
def customer_group():
    """Manage customers."""
    pass


@customer_group.command("create")
@click.argument("company_name", metavar="COMPANY_NAME")
@click.option("--email", help="Contact email")
@click.pass_context
def create_customer(ctx, company_name: str, email: str | None):
    """Create a customer.

    Examples:
        ledgerly customer create "Acme Corp" --email billing@acme.test
    """
    service = CustomerService(ctx.obj["db"])
    user_id = current_user(ctx)
    try:
        customer_id = service.create_customer(user_id, company_name, email=email)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created customer '{company_name}' (ID: {customer_id})")


@customer_group.command("list")
@click.pass_context
def list_customers(ctx):
    """List your customers."""
    service = CustomerService(ctx.obj["db"])
    customers = service.list_customers(current_user(ctx))
    if not customers:
        click.echo("No customers found.")
        return

    click.echo("\nCustomers:")
    click.echo("-" * 60)
    for customer in customers:
        click.echo(f"ID: {customer.id:3d} | {customer.company_name:30s} | {customer.email or ''}")


@click.group()
def vendor_group():
    """Manage vendors."""
    pass


@vendor_group.command("create")
@click.argument("company_name", metavar="COMPANY_NAME")
@click.option("--email", help="Contact email")
@click.pass_context
def create_vendor(ctx, company_name: str, email: str | None):
    """Create a vendor.

    Examples:
        ledgerly vendor create "Paper Supplies Ltd"
    """
    service = VendorService(ctx.obj["db"])
    user_id = current_user(ctx)
    try:
        vendor_id = service.create_vendor(user_id, company_name, email=email)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created vendor '{company_name}' (ID: {vendor_id})")


@vendor_group.command("list")
@click.pass_context
def list_vendors(ctx):
    """List your vendors."""
    service = VendorService(ctx.obj["db"])
    vendors = service.list_vendors(current_user(ctx))
    if not vendors:
        click.echo("No vendors found.")
        return

    click.echo("\nVendors:")
    click.echo("-" * 60)
    for vendor in vendors:
        click.echo(f"ID: {vendor.id:3d} | {vendor.company_name:30s} | {vendor.email or ''}")


def register_commands(cli):
    """Register customer and vendor commands with main CLI."""
    cli.add_command(customer_group, name="customer")
    cli.add_command(vendor_group, name="vendor")
