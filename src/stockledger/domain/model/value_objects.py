"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from stockledger.domain.exceptions import ValidationError


class ItemStatus(Enum):
    """Lifecycle status of one physical unit.

    Shared by ledger entries (the status recorded with the movement) and
    inventory rows (the materialized current status).
    """

    ACTIVE = "Active"
    RESERVED = "Reserved"
    DELIVERED = "Delivered"


NO_WARRANTY = "No Warranty"


@dataclass(frozen=True)
class Warranty:
    """Warranty terms attached to a stock-out line.

    ``period`` is expressed in months; zero means no coverage.
    """

    type: str = NO_WARRANTY
    period: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.period, int):
            raise ValidationError(
                f"Warranty period must be an integer, got {type(self.period).__name__}"
            )
        if self.period < 0:
            raise ValidationError("Warranty period cannot be negative")
        if not self.type or not self.type.strip():
            raise ValidationError("Warranty type is required")

    def __str__(self) -> str:
        if self.period == 0:
            return self.type
        return f"{self.type} ({self.period} months)"
