"""Abstract store of user roles."""

from __future__ import annotations

from abc import abstractmethod

from stockledger.domain.repository.authorizer import Authorizer

ADMIN_ROLE = "admin"
USER_ROLE = "user"
ROLES = (ADMIN_ROLE, USER_ROLE)


class UserDirectory(Authorizer):

    @abstractmethod
    def get_role(self, user_id: str) -> str | None:
        """Return the user's role, or None for an unknown user."""

    @abstractmethod
    def has_admin(self) -> bool:
        """Return True if at least one user holds the admin role."""

    @abstractmethod
    def set_role(self, user_id: str, role: str, granted_by: str | None) -> None:
        """Assign ``role`` to ``user_id``.

        The grant is checked against current store contents as part of the
        write: ``granted_by`` must still be an admin, or, when it is None,
        no admin may exist yet.

        Raises:
            ConcurrentModificationError: the grant no longer holds.
        """
