"""Application service: Deliver Order use case.

Records the signed delivery of an order.  Original ledger entries are
never touched: each reserved line gets a second ``Stock_Out`` entry with
status ``Delivered`` (the "dual Stock_Out" the status resolver expects),
its inventory row moves to ``Delivered`` and the order's delivery status
is set, all in one batch.
"""

from __future__ import annotations

from stockledger.application.dto import DeliveryResult
from stockledger.domain.clock import Clock, utc_now
from stockledger.domain.exceptions import EntityNotFoundError, ValidationError
from stockledger.domain.repository.inventory_repository import InventoryRepository
from stockledger.domain.repository.order_repository import OrderRepository
from stockledger.domain.repository.transaction_repository import TransactionRepository
from stockledger.domain.repository.write_batch import BatchWriter, WriteBatch
from stockledger.domain.service.sequence_allocator import SequenceAllocator
from stockledger.logging_config import get_logger

logger = get_logger("application.deliver_order")


class DeliverOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        transaction_repo: TransactionRepository,
        inventory_repo: InventoryRepository,
        batch_writer: BatchWriter,
        allocator: SequenceAllocator,
        clock: Clock | None = None,
    ) -> None:
        self._order_repo = order_repo
        self._transaction_repo = transaction_repo
        self._inventory_repo = inventory_repo
        self._batch_writer = batch_writer
        self._allocator = allocator
        self._clock = clock or utc_now

    def handle(self, actor_id: str, order_id: int) -> DeliveryResult:
        if not actor_id:
            raise ValidationError("User not authenticated")

        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        # Check the order can move before spending ids on it.
        order.ensure_deliverable()

        originals = []
        missing: list[int] = []
        for transaction_id in order.transaction_ids:
            original = self._transaction_repo.get_by_id(transaction_id)
            if original is None:
                logger.warning(
                    "delivery_line_missing",
                    extra={"order_number": order.order_number, "transaction_id": transaction_id},
                )
                missing.append(transaction_id)
            else:
                originals.append(original)

        now = self._clock()
        delivery_ids = self._allocator.allocate(len(originals)) if originals else []

        writes = WriteBatch()
        for delivery_id, original in zip(delivery_ids, originals):
            writes.insert_transaction(original.delivery_confirmation(delivery_id, actor_id, now))
            item = self._inventory_repo.get_by_serial_number(original.serial_number)
            if item is not None:
                item.deliver()
                writes.put_inventory_item(item)

        expected_version = order.version
        order.mark_delivered(delivery_ids)
        writes.put_order(order, expected_version)
        self._batch_writer.commit(writes)

        logger.info(
            "order_delivered",
            extra={"order_number": order.order_number, "lines": len(delivery_ids)},
        )
        return DeliveryResult(
            order_id=order.id,
            order_number=order.order_number,
            delivery_transaction_ids=list(delivery_ids),
            missing_transaction_ids=missing,
        )
