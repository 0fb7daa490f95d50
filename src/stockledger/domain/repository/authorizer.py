"""Capability check consumed by admin-only operations."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Authorizer(ABC):

    @abstractmethod
    def is_admin(self, actor_id: str) -> bool:
        """Return True if the actor holds administrative capability."""
