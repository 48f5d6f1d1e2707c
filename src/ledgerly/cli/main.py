"""Main CLI entry point."""

import logging

import click
from ledgerly.database.factories import create_database, create_sqlite_database

# Import and register all commands at module level
from ledgerly.cli.commands import (
    contacts,
    invoice,
    purchase_order,
    recurring,
    role,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERLY_DB_PATH environment variable)",
    envvar="LEDGERLY_DB_PATH",
)
@click.option(
    "--db-url",
    help="SQLAlchemy database URL; takes precedence over --db-path "
    "(LEDGERLY_DATABASE_URL environment variable)",
    envvar="LEDGERLY_DATABASE_URL",
)
@click.option(
    "--user",
    "user_id",
    help="ID of the user running the command (overrides LEDGERLY_USER environment variable)",
    envvar="LEDGERLY_USER",
)
@click.option("--verbose", "-v", is_flag=True, help="Log database and service activity")
@click.pass_context
def cli(ctx, db_path: str | None, db_url: str | None, user_id: str | None, verbose: bool):
    """Ledgerly - small-business invoicing and purchasing.

    Create invoices and purchase orders with priced line items, run
    recurring invoices and manage user roles.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj["user"] = user_id

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        if db_url:
            db = create_database(db_url)
        else:
            db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
contacts.register_commands(cli)
invoice.register_commands(cli)
purchase_order.register_commands(cli)
recurring.register_commands(cli)
role.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
