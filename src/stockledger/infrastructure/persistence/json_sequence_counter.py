"""Named counters kept in the store's ``counters`` collection."""

from __future__ import annotations

from stockledger.domain.repository.sequence_counter import SequenceCounter
from stockledger.infrastructure.persistence.json_document_store import (
    Document,
    JsonDocumentStore,
)


class JsonSequenceCounter(SequenceCounter):

    def __init__(self, store: JsonDocumentStore) -> None:
        self._store = store

    def current(self, name: str) -> int:
        return int(self._store.read()["counters"].get(name, 0))

    def compare_and_set(self, name: str, expected: int, new: int) -> bool:
        def swap(document: Document) -> bool:
            counters = document["counters"]
            if int(counters.get(name, 0)) != expected:
                return False
            counters[name] = new
            return True

        return self._store.update(swap)
