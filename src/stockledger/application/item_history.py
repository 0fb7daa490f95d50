"""Application service: Item History use case (query).

Shows a unit's ledger entries next to its materialized status and the
statuses derived by replaying the ledger, so operators can see when the
two disagree.
"""

from __future__ import annotations

from stockledger.application.dto import ItemHistoryDTO
from stockledger.application.mapping import transaction_to_dto
from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.repository.inventory_repository import InventoryRepository
from stockledger.domain.repository.transaction_repository import TransactionRepository
from stockledger.domain.service.status_resolver import (
    resolve_effective_status,
    resolve_status,
)


class ItemHistoryHandler:

    def __init__(
        self,
        inventory_repo: InventoryRepository,
        transaction_repo: TransactionRepository,
    ) -> None:
        self._inventory_repo = inventory_repo
        self._transaction_repo = transaction_repo

    def handle(self, serial_number: str) -> ItemHistoryDTO:
        item = self._inventory_repo.get_by_serial_number(serial_number)
        history = self._transaction_repo.list_by_serial_number(serial_number)
        if item is None and not history:
            raise EntityNotFoundError(f"No record of serial number {serial_number}")

        return ItemHistoryDTO(
            serial_number=serial_number,
            materialized_status=item.status.value if item else None,
            resolved_status=resolve_status(history).value,
            effective_status=resolve_effective_status(history).value,
            transactions=[transaction_to_dto(txn) for txn in history],
        )
