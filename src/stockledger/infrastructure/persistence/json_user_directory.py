"""User roles kept in the store's ``users`` collection."""

from __future__ import annotations

from stockledger.domain.exceptions import ConcurrentModificationError
from stockledger.domain.repository.user_directory import ADMIN_ROLE, UserDirectory
from stockledger.infrastructure.persistence.json_document_store import (
    Document,
    JsonDocumentStore,
)


class JsonUserDirectory(UserDirectory):

    def __init__(self, store: JsonDocumentStore) -> None:
        self._store = store

    def is_admin(self, actor_id: str) -> bool:
        return self.get_role(actor_id) == ADMIN_ROLE

    def get_role(self, user_id: str) -> str | None:
        return _role(self._store.read(), user_id)

    def has_admin(self) -> bool:
        return _has_admin(self._store.read())

    def set_role(self, user_id: str, role: str, granted_by: str | None) -> None:
        def assign(document: Document) -> None:
            if granted_by is None:
                if _has_admin(document):
                    raise ConcurrentModificationError("An administrator already exists")
            elif _role(document, granted_by) != ADMIN_ROLE:
                raise ConcurrentModificationError(f"User {granted_by} is no longer an admin")
            document["users"].setdefault(user_id, {})["role"] = role

        self._store.update(assign)


def _role(document: Document, user_id: str) -> str | None:
    user = document["users"].get(user_id)
    return user.get("role") if user is not None else None


def _has_admin(document: Document) -> bool:
    return any(user.get("role") == ADMIN_ROLE for user in document["users"].values())
