"""User role commands."""

import click
from ledgerly.cli.error_handling import current_user, handle_domain_error
from ledgerly.domain.entities import Role
from ledgerly.domain.errors import DomainError
from ledgerly.domain.roles import RoleService, describe_roles

ROLES = [r.value for r in Role]


@click.group()
def role_group():
    """Manage user roles."""
    pass


@role_group.command("register")
@click.pass_context
def register_user(ctx):
    """Give the current user the default role."""
    service = RoleService(ctx.obj["db"])
    user_id = current_user(ctx)
    if service.register_user(user_id):
        click.echo(f"Registered {user_id} with role user")
    else:
        click.echo(f"{user_id} already has roles: {describe_roles(service.get_roles(user_id))}")


@role_group.command("show")
@click.argument("user_id", required=False)
@click.pass_context
def show_roles(ctx, user_id: str | None):
    """Show the roles of USER_ID (defaults to the current user)."""
    service = RoleService(ctx.obj["db"])
    target = user_id or current_user(ctx)
    roles = describe_roles(service.get_roles(target))
    click.echo(f"{target}: {roles or '(no roles)'}")


@role_group.command("set")
@click.argument("user_id")
@click.argument("role", type=click.Choice(ROLES))
@click.pass_context
def set_role(ctx, user_id: str, role: str):
    """Replace all roles of USER_ID with ROLE (admin only)."""
    service = RoleService(ctx.obj["db"])
    try:
        service.set_role(current_user(ctx), user_id, role)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"{user_id} now has role {role}")


@role_group.command("grant")
@click.argument("user_id")
@click.argument("role", type=click.Choice(ROLES))
@click.pass_context
def grant_role(ctx, user_id: str, role: str):
    """Add ROLE to USER_ID (admin only)."""
    service = RoleService(ctx.obj["db"])
    try:
        added = service.grant_role(current_user(ctx), user_id, role)
    except DomainError as e:
        handle_domain_error(ctx, e)
    if added:
        click.echo(f"Granted {role} to {user_id}")
    else:
        click.echo(f"{user_id} already has role {role}")


@role_group.command("revoke")
@click.argument("user_id")
@click.argument("role", type=click.Choice(ROLES))
@click.pass_context
def revoke_role(ctx, user_id: str, role: str):
    """Remove ROLE from USER_ID (admin only)."""
    service = RoleService(ctx.obj["db"])
    try:
        removed = service.revoke_role(current_user(ctx), user_id, role)
    except DomainError as e:
        handle_domain_error(ctx, e)
    if removed:
        click.echo(f"Revoked {role} from {user_id}")
    else:
        click.echo(f"{user_id} does not have role {role}")


@role_group.command("list")
@click.pass_context
def list_roles(ctx):
    """List role assignments (every user's for admins, your own otherwise)."""
    service = RoleService(ctx.obj["db"])
    assignments = service.list_role_assignments(current_user(ctx))
    if not assignments:
        click.echo("No role assignments found.")
        return

    for assignment in assignments:
        granted_by = f" (granted by {assignment.created_by})" if assignment.created_by else ""
        click.echo(f"{assignment.user_id:30s} {assignment.role.value:12s}{granted_by}")


@role_group.command("bootstrap-admin")
@click.pass_context
def bootstrap_admin(ctx):
    """Make the current user the first administrator.

    Only works while no administrator exists.
    """
    service = RoleService(ctx.obj["db"])
    user_id = current_user(ctx)
    try:
        service.bootstrap_admin(user_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"{user_id} is now an administrator")


def register_commands(cli):
    """Register role commands with main CLI."""
    cli.add_command(role_group, name="role")
