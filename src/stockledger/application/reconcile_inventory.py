"""Application service: Reconcile Inventory use case.

Inventory status is materialized: each workflow that moves a unit writes
the new status itself.  This check replays every unit's ledger history
(with cancellations applied) and reports the rows whose stored status
disagrees.  With ``repair`` the derived status is written back.
"""

from __future__ import annotations

from collections import defaultdict

from stockledger.application.authorization import require_admin
from stockledger.application.batching import commit_in_chunks
from stockledger.application.dto import ReconciliationReport, StatusMismatch
from stockledger.domain.model.transaction import Transaction
from stockledger.domain.repository.authorizer import Authorizer
from stockledger.domain.repository.inventory_repository import InventoryRepository
from stockledger.domain.repository.transaction_repository import TransactionRepository
from stockledger.domain.repository.write_batch import BatchWriter, WriteBatch
from stockledger.domain.service.status_resolver import resolve_effective_status
from stockledger.logging_config import get_logger

logger = get_logger("application.reconcile_inventory")


class ReconcileInventoryHandler:

    def __init__(
        self,
        inventory_repo: InventoryRepository,
        transaction_repo: TransactionRepository,
        batch_writer: BatchWriter,
        authorizer: Authorizer,
    ) -> None:
        self._inventory_repo = inventory_repo
        self._transaction_repo = transaction_repo
        self._batch_writer = batch_writer
        self._authorizer = authorizer

    def handle(self, actor_id: str | None = None, repair: bool = False) -> ReconciliationReport:
        """Compare materialized and derived status for every unit.

        Repairing requires an admin ``actor_id``.  Each repaired row is
        written only if its stored status has not changed since the check.
        """
        if repair:
            require_admin(self._authorizer, actor_id or "")

        histories: dict[str, list[Transaction]] = defaultdict(list)
        for txn in self._transaction_repo.list_all():
            histories[txn.serial_number].append(txn)

        items = self._inventory_repo.list_all()
        mismatches: list[StatusMismatch] = []
        repairs: list[WriteBatch] = []

        for item in items:
            history = sorted(
                histories.get(item.serial_number, []),
                key=lambda t: (t.date, t.transaction_id),
            )
            derived = resolve_effective_status(history)
            if derived == item.status:
                continue

            mismatches.append(
                StatusMismatch(
                    serial_number=item.serial_number,
                    materialized_status=item.status.value,
                    resolved_status=derived.value,
                )
            )
            if repair:
                stored = item.status
                item.status = derived
                group = WriteBatch()
                group.put_inventory_item(item, expected_status=stored)
                repairs.append(group)

        if mismatches:
            logger.warning(
                "inventory_status_mismatch",
                extra={"items_checked": len(items), "mismatches": len(mismatches)},
            )
        if repairs:
            commit_in_chunks(self._batch_writer, repairs)
            logger.info("inventory_status_repaired", extra={"repaired": len(repairs)})

        return ReconciliationReport(
            items_checked=len(items),
            mismatches=mismatches,
            repaired=len(repairs),
        )
