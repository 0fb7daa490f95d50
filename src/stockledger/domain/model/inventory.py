"""InventoryItem: one row per physical serial number.

The ``status`` field is materialized: it is written directly by the
workflows that move a unit (stock-in, order creation, delivery,
cancellation, reconciliation repair) rather than recomputed from the
ledger on every read.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from stockledger.domain.exceptions import InvalidStateError
from stockledger.domain.model.value_objects import ItemStatus


@dataclass
class InventoryItem:
    """Aggregate root for a serialized unit.

    Invariant: at most one InventoryItem exists per ``serial_number``
    (enforced by the store, which keys inventory by serial).
    """

    serial_number: str
    equipment_category: str
    model: str
    size: str | None = None
    status: ItemStatus = ItemStatus.ACTIVE
    equipment_model: str | None = None
    batch: str = ""
    remark: str = ""
    attributes: dict[str, str] = field(default_factory=dict)

    @property
    def is_available(self) -> bool:
        return self.status == ItemStatus.ACTIVE

    def reserve(self) -> None:
        """Mark the unit as held by a stock-out order."""
        if self.status != ItemStatus.ACTIVE:
            raise InvalidStateError(
                f"Item with serial number {self.serial_number} is not active "
                f"or available (status={self.status.value})"
            )
        self.status = ItemStatus.RESERVED

    def deliver(self) -> None:
        self.status = ItemStatus.DELIVERED

    def restore(self) -> None:
        """Return the unit to stock (e.g. on order cancellation)."""
        self.status = ItemStatus.ACTIVE
