"""Application service: Create Order use case.

Creates a stock-out order for a set of serialized units.  For each unit a
``Stock_Out`` entry with status ``Reserved`` is appended to the ledger and
its inventory row is flipped to ``Reserved``; the order is inserted in the
same batch.

Steps:
1. Validate the request and reject a duplicate order number.
2. Load every unit and check it is still available (phase 1, no writes).
3. Allocate one ledger id per unit.
4. Commit ledger entries, inventory updates and the order together.
"""

from __future__ import annotations

from stockledger.application.dto import CreateOrderResult, OrderItemSpec
from stockledger.domain.clock import Clock, utc_now
from stockledger.domain.exceptions import (
    EntityNotFoundError,
    InvalidStateError,
    ValidationError,
)
from stockledger.domain.model.inventory import InventoryItem
from stockledger.domain.model.order import Order
from stockledger.domain.model.transaction import (
    SOURCE_STOCK_OUT,
    Transaction,
    TransactionType,
)
from stockledger.domain.model.value_objects import ItemStatus, Warranty
from stockledger.domain.repository.inventory_repository import InventoryRepository
from stockledger.domain.repository.order_repository import OrderRepository
from stockledger.domain.repository.write_batch import BatchWriter, WriteBatch
from stockledger.domain.service.sequence_allocator import SequenceAllocator
from stockledger.logging_config import get_logger

logger = get_logger("application.create_order")


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        inventory_repo: InventoryRepository,
        batch_writer: BatchWriter,
        allocator: SequenceAllocator,
        clock: Clock | None = None,
    ) -> None:
        self._order_repo = order_repo
        self._inventory_repo = inventory_repo
        self._batch_writer = batch_writer
        self._allocator = allocator
        self._clock = clock or utc_now

    def handle(
        self,
        actor_id: str,
        order_number: str,
        dealer: str,
        client: str,
        location: str,
        items: list[OrderItemSpec],
    ) -> CreateOrderResult:
        if not actor_id:
            raise ValidationError("User not authenticated")
        if not items:
            raise ValidationError("No items selected for the order")
        if 2 * len(items) + 1 > self._batch_writer.max_batch_size:
            raise ValidationError(
                f"Too many items for one order ({len(items)}); "
                f"the store accepts {self._batch_writer.max_batch_size} writes per batch"
            )

        order_number = (order_number or "").strip()
        if not order_number:
            raise ValidationError("Order number is required")
        if self._order_repo.get_by_order_number(order_number) is not None:
            raise InvalidStateError(f"Order number {order_number} already exists")

        # Phase 1: load and validate every unit before anything is written.
        units: list[tuple[InventoryItem, Warranty]] = []
        seen: set[str] = set()
        for requested in items:
            serial = requested.serial_number.strip()
            if serial in seen:
                raise ValidationError(f"Serial number {serial} is listed twice")
            seen.add(serial)
            item = self._inventory_repo.get_by_serial_number(serial)
            if item is None:
                raise EntityNotFoundError(f"No inventory record for serial number {serial}")
            item.reserve()
            units.append((item, Warranty(requested.warranty_type, requested.warranty_period)))

        now = self._clock()
        transaction_ids = self._allocator.allocate(len(units))
        order = Order.create(
            order_id=self._order_repo.next_id(),
            order_number=order_number,
            transaction_ids=transaction_ids,
            customer_dealer=dealer,
            customer_client=client,
            location=location,
            created_by_uid=actor_id,
            created_at=now,
        )

        # Phase 2: build the writes.
        writes = WriteBatch()
        for transaction_id, (item, warranty) in zip(transaction_ids, units):
            writes.insert_transaction(
                Transaction(
                    transaction_id=transaction_id,
                    serial_number=item.serial_number,
                    type=TransactionType.STOCK_OUT,
                    status=ItemStatus.RESERVED,
                    date=now,
                    equipment_category=item.equipment_category,
                    model=item.model,
                    size=item.size,
                    location=order.location,
                    customer_dealer=order.customer_dealer,
                    customer_client=order.customer_client,
                    warranty=warranty,
                    source=SOURCE_STOCK_OUT,
                    uploaded_by_uid=actor_id,
                )
            )
            writes.put_inventory_item(item, expected_status=ItemStatus.ACTIVE)
        writes.put_order(order, expected_version=None)
        self._batch_writer.commit(writes)

        logger.info(
            "order_created",
            extra={
                "order_id": order.id,
                "order_number": order.order_number,
                "items": len(units),
            },
        )
        return CreateOrderResult(
            order_id=order.id,
            order_number=order.order_number,
            transaction_ids=list(transaction_ids),
        )
