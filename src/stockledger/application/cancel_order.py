"""Application service: Cancel Order use case.

Cancelling an order rewrites three collections together:

* one ``Cancellation`` ledger entry per order line, pointing back at the
  line's original transaction,
* the line's inventory row, returned to ``Active``,
* the order itself, moved to the terminal ``Cancelled`` status.

All of it goes into a single atomic batch.  The order write is
conditional on the revision that was read, so a second cancellation
racing on the same order fails instead of writing a second set of
reversals.

Lines whose original transaction is missing from the ledger are skipped
and reported back, not treated as fatal.

When the writes do not fit into one batch the cancellation is split: an
intent recording the reason, actor and reversal ids is written to the
order first, the lines follow in chunks, and the order is flipped last.
Running the cancellation again on an order that still carries an intent
finishes it without duplicating reversals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from stockledger.application.authorization import require_admin
from stockledger.application.batching import commit_in_chunks
from stockledger.application.dto import CancellationResult
from stockledger.domain.clock import Clock, utc_now
from stockledger.domain.exceptions import (
    EntityNotFoundError,
    InvalidStateError,
    ValidationError,
)
from stockledger.domain.model.order import CancellationIntent, Order
from stockledger.domain.repository.authorizer import Authorizer
from stockledger.domain.repository.inventory_repository import InventoryRepository
from stockledger.domain.repository.order_repository import OrderRepository
from stockledger.domain.repository.transaction_repository import TransactionRepository
from stockledger.domain.repository.write_batch import BatchWriter, WriteBatch
from stockledger.domain.service.sequence_allocator import SequenceAllocator
from stockledger.logging_config import get_logger

logger = get_logger("application.cancel_order")


@dataclass
class _ReversalPlan:
    lines: list[WriteBatch] = field(default_factory=list)
    reversal_ids: list[int] = field(default_factory=list)
    missing_ids: list[int] = field(default_factory=list)
    inventory_updated: int = 0

    @property
    def write_count(self) -> int:
        return sum(len(line) for line in self.lines)


class CancelOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        transaction_repo: TransactionRepository,
        inventory_repo: InventoryRepository,
        batch_writer: BatchWriter,
        allocator: SequenceAllocator,
        authorizer: Authorizer,
        clock: Clock | None = None,
    ) -> None:
        self._order_repo = order_repo
        self._transaction_repo = transaction_repo
        self._inventory_repo = inventory_repo
        self._batch_writer = batch_writer
        self._allocator = allocator
        self._authorizer = authorizer
        self._clock = clock or utc_now

    def handle(self, order_id: int, actor_id: str, reason: str) -> CancellationResult:
        """Cancel an order and reverse every line it reserved.

        Preconditions are checked in order and the first failure wins:
        admin capability, order exists, not already cancelled, not
        delivered, has line items.  None of them writes anything.
        """
        require_admin(self._authorizer, actor_id)

        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        order.ensure_cancellable()

        if order.cancellation_intent is not None:
            logger.info(
                "cancellation_resumed",
                extra={"order_id": order.id, "order_number": order.order_number},
            )
            return self._finish(order, batches_committed=0)

        if not reason or not reason.strip():
            raise ValidationError("Cancellation reason is required")
        reason = reason.strip()

        now = self._clock()
        allocated = self._allocator.allocate(len(order.transaction_ids))
        reversal_map = dict(zip(order.transaction_ids, allocated))

        plan = self._plan(order, reversal_map, reason, actor_id, now)
        if plan.write_count + 1 <= self._batch_writer.max_batch_size:
            return self._cancel_in_one_batch(order, plan, reason, actor_id, now)

        logger.info(
            "cancellation_split",
            extra={
                "order_id": order.id,
                "writes": plan.write_count + 1,
                "max_batch_size": self._batch_writer.max_batch_size,
            },
        )
        expected_version = order.version
        order.begin_cancellation(
            CancellationIntent(
                reason=reason,
                actor_id=actor_id,
                requested_at=now,
                reversal_ids=reversal_map,
            )
        )
        intent_batch = WriteBatch()
        intent_batch.put_order(order, expected_version)
        self._batch_writer.commit(intent_batch)

        reloaded = self._order_repo.get_by_id(order.id)
        if reloaded is None:
            raise EntityNotFoundError(f"Order #{order.id} not found")
        return self._finish(reloaded, batches_committed=1)

    # --- Single batch ---------------------------------------------------------

    def _cancel_in_one_batch(
        self,
        order: Order,
        plan: _ReversalPlan,
        reason: str,
        actor_id: str,
        now: datetime,
    ) -> CancellationResult:
        batch = WriteBatch()
        for line in plan.lines:
            batch.extend(line)

        expected_version = order.version
        order.cancel(reason, actor_id, now, plan.reversal_ids, plan.missing_ids)
        batch.put_order(order, expected_version)
        self._batch_writer.commit(batch)

        return self._result(order, plan, batches_committed=1)

    # --- Split path -----------------------------------------------------------

    def _finish(self, order: Order, batches_committed: int) -> CancellationResult:
        """Write outstanding lines for an order carrying an intent, then flip it."""
        intent = order.cancellation_intent
        if intent is None:
            raise InvalidStateError(
                f"Order {order.order_number} has no cancellation in progress"
            )

        plan = self._plan(
            order,
            intent.reversal_ids,
            intent.reason,
            intent.actor_id,
            intent.requested_at,
            skip_written=True,
        )
        batches_committed += commit_in_chunks(self._batch_writer, plan.lines)

        final = WriteBatch()
        expected_version = order.version
        order.cancel(
            intent.reason,
            intent.actor_id,
            intent.requested_at,
            plan.reversal_ids,
            plan.missing_ids,
        )
        final.put_order(order, expected_version)
        self._batch_writer.commit(final)

        return self._result(order, plan, batches_committed + 1)

    # --- Planning -------------------------------------------------------------

    def _plan(
        self,
        order: Order,
        reversal_map: dict[int, int],
        reason: str,
        actor_id: str,
        at: datetime,
        skip_written: bool = False,
    ) -> _ReversalPlan:
        """Build the writes for every line, one group per line.

        With ``skip_written`` a line that already has a Cancellation entry
        in the ledger is counted as reversed under that entry's id but not
        written again.
        """
        plan = _ReversalPlan()

        for original_id in order.transaction_ids:
            original = self._transaction_repo.get_by_id(original_id)
            if original is None:
                logger.warning(
                    "cancellation_line_missing",
                    extra={
                        "order_number": order.order_number,
                        "transaction_id": original_id,
                    },
                )
                plan.missing_ids.append(original_id)
                continue

            if skip_written:
                written = self._transaction_repo.find_reversal(original_id)
                if written is not None:
                    plan.reversal_ids.append(written.transaction_id)
                    continue

            reversal_id = reversal_map[original_id]
            plan.reversal_ids.append(reversal_id)

            line = WriteBatch()
            line.insert_transaction(
                original.reversal(reversal_id, order.order_number, reason, actor_id, at)
            )
            item = self._inventory_repo.get_by_serial_number(original.serial_number)
            if item is not None:
                item.restore()
                line.put_inventory_item(item)
                plan.inventory_updated += 1
            else:
                logger.info(
                    "cancellation_inventory_missing",
                    extra={"serial_number": original.serial_number},
                )
            plan.lines.append(line)

        return plan

    @staticmethod
    def _result(order: Order, plan: _ReversalPlan, batches_committed: int) -> CancellationResult:
        logger.info(
            "order_cancelled",
            extra={
                "order_id": order.id,
                "order_number": order.order_number,
                "cancelled_count": len(plan.reversal_ids),
                "missing_count": len(plan.missing_ids),
                "batches": batches_committed,
            },
        )
        return CancellationResult(
            order_id=order.id,
            order_number=order.order_number,
            cancelled_count=len(plan.reversal_ids),
            reversal_transaction_ids=list(plan.reversal_ids),
            missing_transaction_ids=list(plan.missing_ids),
            inventory_updated=plan.inventory_updated,
            batches_committed=batches_committed,
        )
