"""JSON-file-backed implementation of OrderRepository.

Orders are written only through the store's batch commit, which also
maintains each order's ``version``.
"""

from __future__ import annotations

from stockledger.domain.model.order import Order
from stockledger.domain.repository.order_repository import OrderRepository
from stockledger.infrastructure.persistence.json_document_store import JsonDocumentStore
from stockledger.infrastructure.persistence.serialization import order_from_raw


class JsonOrderRepository(OrderRepository):

    def __init__(self, store: JsonDocumentStore) -> None:
        self._store = store

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> int:
        orders = self._load_raw()
        if not orders:
            return 1
        return max(int(key) for key in orders) + 1

    def get_by_id(self, order_id: int) -> Order | None:
        raw = self._load_raw().get(str(order_id))
        return order_from_raw(raw) if raw is not None else None

    def get_by_order_number(self, order_number: str) -> Order | None:
        for raw in self._load_raw().values():
            if raw.get("order_number") == order_number:
                return order_from_raw(raw)
        return None

    def list_all(self) -> list[Order]:
        orders = [order_from_raw(raw) for raw in self._load_raw().values()]
        return sorted(orders, key=lambda o: o.id)

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> dict[str, dict]:
        return self._store.read()["orders"]
