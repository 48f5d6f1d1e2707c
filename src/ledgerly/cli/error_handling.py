"""CLI error handling helpers."""

import logging

import click

from ledgerly.domain.errors import DomainError, PartialWriteError

logger = logging.getLogger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    if isinstance(error, PartialWriteError):
        logger.error("Partial write: %s", error)
        click.echo("Warning: the record may be left in an inconsistent state.", err=True)
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def current_user(ctx: click.Context) -> str:
    """Return the caller's user id, or exit when none was given."""
    user_id = ctx.obj.get("user")
    if not user_id:
        click.echo("Error: No user given. Use --user or set LEDGERLY_USER.", err=True)
        ctx.exit(1)
    return user_id


def parse_or_exit(ctx: click.Context, parser, value: str, label: str):
    """Apply ``parser`` to a raw option value, exiting with an error message on failure."""
    try:
        return parser(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)
