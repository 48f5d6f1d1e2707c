"""User role domain service."""

import logging
from typing import Optional

from ledgerly.database.base import Database
from ledgerly.domain.entities import Role, UserRole
from ledgerly.domain.errors import ConflictError, ValidationError
from ledgerly.domain.permissions import require_admin, require_user

logger = logging.getLogger(__name__)


def parse_role(value: str | Role) -> Role:
    """Convert a role name to Role, raising ValidationError if unknown."""
    try:
        return Role(value)
    except ValueError:
        allowed = ", ".join(r.value for r in Role)
        raise ValidationError(f"Unknown role '{value}'. Expected one of: {allowed}")


class RoleService:
    """Service for role assignments and role predicates.

    A user may hold several roles. ``set_role`` replaces all of a user's
    roles with one, ``grant_role``/``revoke_role`` add and remove single
    roles. Every mutation is admin-only.
    """

    def __init__(self, db: Database):
        """Initialize role service.

        Args:
            db: Database instance
        """
        self.db = db

    def register_user(self, user_id: str) -> bool:
        """Give a new account the default ``user`` role.

        Only the first call for a user assigns anything; later calls leave
        the user's roles untouched.

        Returns:
            True if the default role was assigned
        """
        user_id = require_user(user_id)
        if self.db.list_user_roles(user_id):
            return False
        self.db.insert_user_role(user_id, Role.USER.value)
        logger.info("Registered user %s with default role", user_id)
        return True

    def get_roles(self, user_id: str) -> list[Role]:
        """Roles currently held by a user."""
        return [assignment.role for assignment in self.db.list_user_roles(user_id)]

    def has_role(self, user_id: str, role: Role | str) -> bool:
        """Check role membership."""
        return parse_role(role) in self.get_roles(user_id)

    def is_admin(self, user_id: str) -> bool:
        """Check whether the user is an administrator."""
        return self.has_role(user_id, Role.ADMIN)

    def list_role_assignments(self, actor_id: str) -> list[UserRole]:
        """List role rows visible to ``actor_id``.

        Administrators see every assignment, everyone else only their own.
        """
        actor_id = require_user(actor_id)
        if self.is_admin(actor_id):
            return self.db.list_user_roles()
        return self.db.list_user_roles(actor_id)

    def set_role(self, actor_id: str, target_id: str, role: Role | str) -> None:
        """Replace every role of ``target_id`` with ``role``.

        Raises:
            AuthorizationError: If the actor is not an administrator
            ValidationError: If the change would remove the last administrator
        """
        actor_id = require_user(actor_id)
        target_id = require_user(target_id)
        new_role = parse_role(role)
        require_admin(self, actor_id)
        if new_role != Role.ADMIN:
            self._guard_last_admin(target_id)

        self.db.replace_user_roles(target_id, new_role.value, created_by=actor_id)
        logger.info("User %s set role of %s to %s", actor_id, target_id, new_role.value)

    def grant_role(self, actor_id: str, target_id: str, role: Role | str) -> bool:
        """Add ``role`` to ``target_id``.

        Returns:
            False if the user already held the role
        """
        actor_id = require_user(actor_id)
        target_id = require_user(target_id)
        new_role = parse_role(role)
        require_admin(self, actor_id)
        if self.has_role(target_id, new_role):
            return False

        self.db.insert_user_role(target_id, new_role.value, created_by=actor_id)
        logger.info("User %s granted %s to %s", actor_id, new_role.value, target_id)
        return True

    def revoke_role(self, actor_id: str, target_id: str, role: Role | str) -> bool:
        """Remove ``role`` from ``target_id``.

        Returns:
            False if the user did not hold the role
        """
        actor_id = require_user(actor_id)
        target_id = require_user(target_id)
        old_role = parse_role(role)
        require_admin(self, actor_id)
        if old_role == Role.ADMIN:
            self._guard_last_admin(target_id)

        removed = self.db.delete_user_role(target_id, old_role.value)
        if removed:
            logger.info("User %s revoked %s from %s", actor_id, old_role.value, target_id)
        return removed

    def bootstrap_admin(self, user_id: str) -> None:
        """Make ``user_id`` the first administrator.

        Raises:
            ConflictError: If an administrator already exists
        """
        user_id = require_user(user_id)
        if self.db.count_role_holders(Role.ADMIN.value) > 0:
            raise ConflictError("An administrator already exists; ask them to grant roles")
        self.register_user(user_id)
        self.db.insert_user_role(user_id, Role.ADMIN.value, created_by=user_id)
        logger.info("Bootstrapped %s as first administrator", user_id)

    def _guard_last_admin(self, target_id: str) -> None:
        if self.is_admin(target_id) and self.db.count_role_holders(Role.ADMIN.value) <= 1:
            raise ValidationError(f"Cannot remove the last administrator ({target_id})")


def describe_roles(roles: list[Role]) -> Optional[str]:
    """Comma separated role names, or None for a user without roles."""
    if not roles:
        return None
    return ", ".join(sorted(role.value for role in roles))
