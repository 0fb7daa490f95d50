"""Transaction: an immutable entry of the inventory ledger.

Ledger entries are append-only: once written, a transaction is never
updated or deleted.  Corrections are expressed as new entries, e.g. a
``Cancellation`` that points back at the entry it reverses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from stockledger.domain.model.value_objects import ItemStatus, Warranty


class TransactionType(Enum):
    STOCK_IN = "Stock_In"
    STOCK_OUT = "Stock_Out"
    CANCELLATION = "Cancellation"


# Values of the ``source`` field, identifying the workflow that wrote an entry.
SOURCE_STOCK_IN = "stock_in_manual"
SOURCE_STOCK_OUT = "stock_out_manual"
SOURCE_DELIVERY = "signed_delivery"
SOURCE_CANCELLATION = "order_cancellation"


@dataclass(frozen=True)
class Transaction:
    """A single movement of one serialized unit.

    ``original_transaction_id`` is set only on ``Cancellation`` entries;
    ``cancelled_from_order`` holds the order number they were produced for.
    """

    transaction_id: int
    serial_number: str
    type: TransactionType
    status: ItemStatus
    date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    original_transaction_id: int | None = None
    cancelled_from_order: str | None = None
    equipment_category: str | None = None
    model: str | None = None
    size: str | None = None
    location: str | None = None
    customer_dealer: str | None = None
    customer_client: str | None = None
    warranty: Warranty | None = None
    cancellation_reason: str | None = None
    source: str | None = None
    uploaded_by_uid: str | None = None

    @property
    def is_cancellation(self) -> bool:
        return self.type == TransactionType.CANCELLATION

    def reversal(
        self,
        transaction_id: int,
        order_number: str,
        reason: str,
        actor_id: str,
        at: datetime,
    ) -> Transaction:
        """Build the ``Cancellation`` entry that logically undoes this one.

        Descriptive fields are carried over so the reversal can be read on
        its own; the unit returns to ``Active``.
        """
        return Transaction(
            transaction_id=transaction_id,
            serial_number=self.serial_number,
            type=TransactionType.CANCELLATION,
            status=ItemStatus.ACTIVE,
            date=at,
            original_transaction_id=self.transaction_id,
            cancelled_from_order=order_number,
            equipment_category=self.equipment_category,
            model=self.model,
            size=self.size,
            location=self.location,
            customer_dealer=self.customer_dealer,
            customer_client=self.customer_client,
            warranty=self.warranty,
            cancellation_reason=reason,
            source=SOURCE_CANCELLATION,
            uploaded_by_uid=actor_id,
        )

    def delivery_confirmation(
        self,
        transaction_id: int,
        actor_id: str,
        at: datetime,
    ) -> Transaction:
        """Build the ``Delivered`` stock-out that follows a reservation."""
        return Transaction(
            transaction_id=transaction_id,
            serial_number=self.serial_number,
            type=TransactionType.STOCK_OUT,
            status=ItemStatus.DELIVERED,
            date=at,
            equipment_category=self.equipment_category,
            model=self.model,
            size=self.size,
            location=self.location,
            customer_dealer=self.customer_dealer,
            customer_client=self.customer_client,
            warranty=self.warranty,
            source=SOURCE_DELIVERY,
            uploaded_by_uid=actor_id,
        )
