"""JSON-file-backed implementation of TransactionRepository."""

from __future__ import annotations

from stockledger.domain.model.transaction import Transaction, TransactionType
from stockledger.domain.repository.transaction_repository import TransactionRepository
from stockledger.infrastructure.persistence.json_document_store import JsonDocumentStore
from stockledger.infrastructure.persistence.serialization import transaction_from_raw


class JsonTransactionRepository(TransactionRepository):

    def __init__(self, store: JsonDocumentStore) -> None:
        self._store = store

    # --- TransactionRepository interface ---------------------------------------

    def max_transaction_id(self) -> int:
        ledger = self._load_raw()
        if not ledger:
            return 0
        return max(int(key) for key in ledger)

    def get_by_id(self, transaction_id: int) -> Transaction | None:
        raw = self._load_raw().get(str(transaction_id))
        return transaction_from_raw(raw) if raw is not None else None

    def list_by_serial_number(self, serial_number: str) -> list[Transaction]:
        matches = [
            transaction_from_raw(raw)
            for raw in self._load_raw().values()
            if raw.get("serial_number") == serial_number
        ]
        return sorted(matches, key=lambda t: (t.date, t.transaction_id))

    def find_reversal(self, original_transaction_id: int) -> Transaction | None:
        for raw in self._load_raw().values():
            if (
                raw.get("type") == TransactionType.CANCELLATION.value
                and raw.get("original_transaction_id") == original_transaction_id
            ):
                return transaction_from_raw(raw)
        return None

    def list_all(self) -> list[Transaction]:
        entries = [transaction_from_raw(raw) for raw in self._load_raw().values()]
        return sorted(entries, key=lambda t: t.transaction_id)

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> dict[str, dict]:
        return self._store.read()["transactions"]
