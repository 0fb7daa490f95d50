"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: one unit to ship, with its warranty terms."""

    serial_number: str
    warranty_type: str = "No Warranty"
    warranty_period: int = 0


@dataclass(frozen=True)
class TransactionDTO:
    """Output: a ledger entry as displayed to the user."""

    transaction_id: int
    serial_number: str
    type: str
    status: str
    date: str
    model: str | None = None
    equipment_category: str | None = None
    original_transaction_id: int | None = None
    cancelled_from_order: str | None = None


@dataclass(frozen=True)
class OrderLineDTO:
    transaction_id: int
    serial_number: str | None  # None when the ledger entry is missing
    model: str | None
    status: str | None


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    order_number: str
    customer_dealer: str
    customer_client: str
    order_status: str
    invoice_status: str
    delivery_status: str
    created_at: str
    lines: list[OrderLineDTO]
    cancellation_reason: str | None = None
    cancellation_transaction_ids: list[int] = field(default_factory=list)
    cancellation_pending: bool = False


@dataclass(frozen=True)
class CancellationResult:
    """Output of a successful order cancellation.

    ``cancelled_count`` counts the lines that have a reversal entry;
    ``missing_transaction_ids`` lists order lines with no ledger record,
    which were skipped.  ``inventory_updated`` counts inventory rows
    written by this call.
    """

    order_id: int
    order_number: str
    cancelled_count: int
    reversal_transaction_ids: list[int]
    missing_transaction_ids: list[int]
    inventory_updated: int
    batches_committed: int

    @property
    def warning_count(self) -> int:
        return len(self.missing_transaction_ids)


@dataclass(frozen=True)
class StockInResult:
    serial_number: str
    transaction_id: int


@dataclass(frozen=True)
class CreateOrderResult:
    order_id: int
    order_number: str
    transaction_ids: list[int]


@dataclass(frozen=True)
class DeliveryResult:
    order_id: int
    order_number: str
    delivery_transaction_ids: list[int]
    missing_transaction_ids: list[int]


@dataclass(frozen=True)
class ModelCount:
    model: str
    active_count: int


@dataclass(frozen=True)
class SizeBreakdown:
    size: str
    total_active: int
    models: list[ModelCount]


@dataclass(frozen=True)
class CategoryBreakdown:
    """Output: counts for one equipment category.

    ``size_breakdown`` is empty unless the category is tracked by size.
    """

    category_name: str
    total_items: int
    active_items: int
    reserved_items: int
    delivered_items: int
    models: list[ModelCount]
    size_breakdown: list[SizeBreakdown]


@dataclass(frozen=True)
class ItemHistoryDTO:
    serial_number: str
    materialized_status: str | None  # None when no inventory row exists
    resolved_status: str
    effective_status: str
    transactions: list[TransactionDTO]


@dataclass(frozen=True)
class StatusMismatch:
    serial_number: str
    materialized_status: str
    resolved_status: str


@dataclass(frozen=True)
class ReconciliationReport:
    items_checked: int
    mismatches: list[StatusMismatch]
    repaired: int = 0

    @property
    def is_consistent(self) -> bool:
        return not self.mismatches
