"""Application service: Stock In use case.

Receives one serialized unit into inventory.  The inventory row and its
``Stock_In`` ledger entry are written in one batch so neither can exist
without the other.
"""

from __future__ import annotations

from stockledger.application.dto import StockInResult
from stockledger.domain.clock import Clock, utc_now
from stockledger.domain.exceptions import InvalidStateError, ValidationError
from stockledger.domain.model.inventory import InventoryItem
from stockledger.domain.model.transaction import (
    SOURCE_STOCK_IN,
    Transaction,
    TransactionType,
)
from stockledger.domain.model.value_objects import ItemStatus
from stockledger.domain.repository.inventory_repository import InventoryRepository
from stockledger.domain.repository.write_batch import BatchWriter, WriteBatch
from stockledger.domain.service.sequence_allocator import SequenceAllocator
from stockledger.logging_config import get_logger

logger = get_logger("application.stock_in")

RECEIVING_LOCATION = "HQ"


class StockInHandler:

    def __init__(
        self,
        inventory_repo: InventoryRepository,
        batch_writer: BatchWriter,
        allocator: SequenceAllocator,
        clock: Clock | None = None,
    ) -> None:
        self._inventory_repo = inventory_repo
        self._batch_writer = batch_writer
        self._allocator = allocator
        self._clock = clock or utc_now

    def handle(
        self,
        actor_id: str,
        serial_number: str,
        equipment_category: str,
        model: str,
        size: str | None = None,
        batch: str = "",
        remarks: str = "",
    ) -> StockInResult:
        if not actor_id:
            raise ValidationError("User not authenticated")
        serial_number = (serial_number or "").strip()
        if not serial_number:
            raise ValidationError("Serial number is required")
        if not equipment_category or not equipment_category.strip():
            raise ValidationError("Equipment category is required")
        if not model or not model.strip():
            raise ValidationError("Model is required")

        if self._inventory_repo.get_by_serial_number(serial_number) is not None:
            raise InvalidStateError(
                f"Item with serial number {serial_number} already exists in inventory"
            )

        size = size.strip() if size and size.strip() else None
        now = self._clock()
        transaction_id = self._allocator.allocate_one()

        item = InventoryItem(
            serial_number=serial_number,
            equipment_category=equipment_category.strip(),
            model=model.strip(),
            size=size,
            status=ItemStatus.ACTIVE,
            batch=batch,
            remark=remarks,
        )
        entry = Transaction(
            transaction_id=transaction_id,
            serial_number=serial_number,
            type=TransactionType.STOCK_IN,
            status=ItemStatus.ACTIVE,
            date=now,
            equipment_category=item.equipment_category,
            model=item.model,
            size=size,
            location=RECEIVING_LOCATION,
            source=SOURCE_STOCK_IN,
            uploaded_by_uid=actor_id,
        )

        writes = WriteBatch()
        writes.put_inventory_item(item, must_exist=False)
        writes.insert_transaction(entry)
        self._batch_writer.commit(writes)

        logger.info(
            "item_stocked_in",
            extra={"serial_number": serial_number, "transaction_id": transaction_id},
        )
        return StockInResult(serial_number=serial_number, transaction_id=transaction_id)
