"""Shared admin check for privileged use cases."""

from __future__ import annotations

from stockledger.domain.exceptions import NotAuthorizedError
from stockledger.domain.repository.authorizer import Authorizer


def require_admin(authorizer: Authorizer, actor_id: str) -> None:
    """Raise NotAuthorizedError unless the actor is an administrator."""
    if not actor_id or not authorizer.is_admin(actor_id):
        raise NotAuthorizedError("Access denied. Admin privileges required.")
