"""Role predicates used to gate operations.

The database layer is the authoritative ownership check; these helpers gate
role-restricted operations (role management) and let the CLI hide actions a
caller cannot perform.
"""

from typing import Protocol

from ledgerly.domain.entities import Role
from ledgerly.domain.errors import AuthorizationError, ValidationError, admin_required


class RoleLookup(Protocol):
    def has_role(self, user_id: str, role: Role | str) -> bool: ...


def require_user(user_id: str | None) -> str:
    """Return ``user_id`` or raise ValidationError when the caller is anonymous."""
    if user_id is None or not str(user_id).strip():
        raise ValidationError("A user id is required (use --user or LEDGERLY_USER)")
    return str(user_id).strip()


def require_role(roles: RoleLookup, user_id: str, *allowed: Role) -> None:
    """Raise AuthorizationError unless ``user_id`` holds one of ``allowed``."""
    if not any(roles.has_role(user_id, role) for role in allowed):
        names = ", ".join(role.value for role in allowed)
        raise AuthorizationError(f"This action requires one of the roles: {names}")


def require_admin(roles: RoleLookup, user_id: str) -> None:
    """Raise AuthorizationError unless ``user_id`` is an administrator."""
    if not roles.has_role(user_id, Role.ADMIN):
        raise AuthorizationError(admin_required())
