"""Application service: Assign Role use case.

Only administrators change roles, and an administrator cannot remove
their own admin role.  While the directory has no administrator at all,
anyone may assign a role so the first admin can be created.
"""

from __future__ import annotations

from stockledger.application.authorization import require_admin
from stockledger.domain.exceptions import InvalidStateError, ValidationError
from stockledger.domain.repository.user_directory import ADMIN_ROLE, ROLES, UserDirectory
from stockledger.logging_config import get_logger

logger = get_logger("application.assign_role")


class AssignRoleHandler:

    def __init__(self, directory: UserDirectory) -> None:
        self._directory = directory

    def handle(self, actor_id: str, user_id: str, role: str) -> None:
        user_id = (user_id or "").strip()
        if not user_id:
            raise ValidationError("User id is required")
        if role not in ROLES:
            raise ValidationError(f"Unknown role {role!r}; expected one of {', '.join(ROLES)}")

        if not self._directory.has_admin():
            self._directory.set_role(user_id, role, granted_by=None)
            logger.warning("role_assigned_without_admin", extra={"user_id": user_id, "role": role})
            return

        require_admin(self._directory, actor_id)
        if actor_id == user_id and role != ADMIN_ROLE:
            raise InvalidStateError("You cannot remove your own admin privileges.")

        self._directory.set_role(user_id, role, granted_by=actor_id)
        logger.info(
            "role_assigned",
            extra={"user_id": user_id, "role": role, "actor_id": actor_id},
        )
