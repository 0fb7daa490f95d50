"""JSON-file-backed implementation of InventoryRepository."""

from __future__ import annotations

from stockledger.domain.model.inventory import InventoryItem
from stockledger.domain.repository.inventory_repository import InventoryRepository
from stockledger.infrastructure.persistence.json_document_store import JsonDocumentStore
from stockledger.infrastructure.persistence.serialization import inventory_from_raw


class JsonInventoryRepository(InventoryRepository):

    def __init__(self, store: JsonDocumentStore) -> None:
        self._store = store

    def get_by_serial_number(self, serial_number: str) -> InventoryItem | None:
        raw = self._load_raw().get(serial_number)
        return inventory_from_raw(raw) if raw is not None else None

    def list_by_category(self, equipment_category: str) -> list[InventoryItem]:
        items = (inventory_from_raw(raw) for raw in self._load_raw().values())
        return [item for item in items if item.equipment_category == equipment_category]

    def list_all(self) -> list[InventoryItem]:
        return [inventory_from_raw(raw) for raw in self._load_raw().values()]

    def _load_raw(self) -> dict[str, dict]:
        return self._store.read()["inventory"]
