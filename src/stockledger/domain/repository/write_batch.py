"""Atomic multi-document write batch.

A ``WriteBatch`` collects writes across the ledger, inventory and orders.
A ``BatchWriter`` commits it all-or-nothing: every precondition is checked
against current store contents first, and if any fails nothing is
written.  Each store advertises the maximum number of writes it accepts
in one batch.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from stockledger.domain.model.inventory import InventoryItem
from stockledger.domain.model.order import Order
from stockledger.domain.model.transaction import Transaction
from stockledger.domain.model.value_objects import ItemStatus


@dataclass(frozen=True)
class InsertTransaction:
    """Append a ledger entry. Fails if the id is already taken."""

    transaction: Transaction


@dataclass(frozen=True)
class PutInventoryItem:
    """Insert or overwrite an inventory row.

    With ``must_exist`` the row must already be present; otherwise it
    must be absent (insert only).  ``expected_status``, when given, is the
    status the stored row must still have.
    """

    item: InventoryItem
    must_exist: bool = True
    expected_status: ItemStatus | None = None


@dataclass(frozen=True)
class PutOrder:
    """Write an order conditionally on the revision it was read at.

    ``expected_version`` of None means the order must not exist yet.
    No other stored order may carry the same ``order_number``.
    """

    order: Order
    expected_version: int | None


Write = InsertTransaction | PutInventoryItem | PutOrder


@dataclass
class WriteBatch:
    writes: list[Write] = field(default_factory=list)

    def insert_transaction(self, transaction: Transaction) -> None:
        self.writes.append(InsertTransaction(transaction))

    def put_inventory_item(
        self,
        item: InventoryItem,
        must_exist: bool = True,
        expected_status: ItemStatus | None = None,
    ) -> None:
        self.writes.append(PutInventoryItem(item, must_exist, expected_status))

    def put_order(self, order: Order, expected_version: int | None) -> None:
        self.writes.append(PutOrder(order, expected_version))

    def extend(self, other: WriteBatch) -> None:
        self.writes.extend(other.writes)

    def __len__(self) -> int:
        return len(self.writes)

    def __bool__(self) -> bool:
        return bool(self.writes)


class BatchWriter(ABC):

    @property
    @abstractmethod
    def max_batch_size(self) -> int:
        """Maximum number of writes accepted by one ``commit``."""

    @abstractmethod
    def commit(self, batch: WriteBatch) -> None:
        """Apply every write in the batch, or none of them.

        Raises:
            ValidationError: the batch is empty or larger than
                ``max_batch_size``.
            ConcurrentModificationError: a precondition no longer holds.
            StoreUnavailableError: the store could not be written.
        """
