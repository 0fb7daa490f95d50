"""Order aggregate — a stock-out order over serialized units.

An order references its line items by ledger transaction id (one
``Stock_Out`` entry per unit).  All status transitions are enforced here;
``Cancelled`` is terminal and a delivered order can never be cancelled.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from stockledger.domain.exceptions import InvalidStateError, ValidationError


class OrderStatus(Enum):
    PENDING = "Pending"
    INVOICED = "Invoiced"
    CANCELLED = "Cancelled"


class InvoiceStatus(Enum):
    RESERVED = "Reserved"
    INVOICED = "Invoiced"


class DeliveryStatus(Enum):
    PENDING = "Pending"
    ISSUED = "Issued"
    DELIVERED = "Delivered"


DEFAULT_CLIENT = "N/A"


@dataclass(frozen=True)
class CancellationIntent:
    """Recovery marker written before a cancellation that spans batches.

    ``reversal_ids`` maps each original transaction id to the id reserved
    for its reversal, so a resumed run writes exactly the same entries.
    """

    reason: str
    actor_id: str
    requested_at: datetime
    reversal_ids: dict[int, int]


@dataclass
class Order:
    """Aggregate root for stock-out orders.

    Use the ``Order.create()`` factory for new orders — it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.

    ``version`` is owned by the store: it is the revision the order was
    read at, and writes are accepted only while it is still current.
    """

    id: int
    order_number: str
    transaction_ids: list[int]
    customer_dealer: str = ""
    customer_client: str = DEFAULT_CLIENT
    location: str = ""
    order_status: OrderStatus = OrderStatus.PENDING
    invoice_status: InvoiceStatus = InvoiceStatus.RESERVED
    delivery_status: DeliveryStatus = DeliveryStatus.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    created_by_uid: str | None = None
    invoice_number: str | None = None
    delivery_transaction_ids: list[int] = field(default_factory=list)
    cancellation_reason: str | None = None
    cancelled_by_uid: str | None = None
    cancelled_at: datetime | None = None
    original_invoice_status: InvoiceStatus | None = None
    original_delivery_status: DeliveryStatus | None = None
    cancellation_transaction_ids: list[int] = field(default_factory=list)
    missing_transaction_ids: list[int] = field(default_factory=list)
    cancellation_intent: CancellationIntent | None = None
    version: int = 0

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        order_id: int,
        order_number: str,
        transaction_ids: list[int],
        customer_dealer: str,
        customer_client: str,
        location: str,
        created_by_uid: str,
        created_at: datetime | None = None,
    ) -> Order:
        """Create a new order, enforcing all invariants."""
        if not order_number or not order_number.strip():
            raise ValidationError("Order number is required")
        if not customer_dealer or not customer_dealer.strip():
            raise ValidationError("Dealer name is required")
        if not transaction_ids:
            raise ValidationError("No items selected for the order")
        if len(set(transaction_ids)) != len(transaction_ids):
            raise ValidationError("Order lines must reference distinct transactions")

        client = customer_client.strip() if customer_client else ""
        return Order(
            id=order_id,
            order_number=order_number.strip(),
            transaction_ids=list(transaction_ids),
            customer_dealer=customer_dealer.strip(),
            customer_client=client or DEFAULT_CLIENT,
            location=location.strip(),
            created_by_uid=created_by_uid,
            created_at=created_at or datetime.now(timezone.utc),
        )

    # --- Queries ----------------------------------------------------------------

    @property
    def is_cancelled(self) -> bool:
        return self.order_status == OrderStatus.CANCELLED

    @property
    def is_delivered(self) -> bool:
        return self.delivery_status == DeliveryStatus.DELIVERED

    @property
    def is_cancellable(self) -> bool:
        return not self.is_cancelled and not self.is_delivered

    # --- State transitions ----------------------------------------------------

    def mark_invoiced(self, invoice_number: str) -> None:
        """Transition Pending -> Invoiced."""
        if not invoice_number or not invoice_number.strip():
            raise ValidationError("Invoice number is required")
        if self.order_status != OrderStatus.PENDING:
            raise InvalidStateError(
                f"Cannot invoice order {self.order_number} — current status is "
                f"{self.order_status.value}, expected Pending"
            )
        self.order_status = OrderStatus.INVOICED
        self.invoice_status = InvoiceStatus.INVOICED
        self.invoice_number = invoice_number.strip()

    def mark_delivered(self, delivery_transaction_ids: list[int]) -> None:
        """Record signed delivery of every line.

        The matching ``Delivered`` ledger entries and inventory updates are
        written by the application handler in the same batch.
        """
        self.ensure_deliverable()
        self.delivery_status = DeliveryStatus.DELIVERED
        self.delivery_transaction_ids = list(delivery_transaction_ids)

    def ensure_deliverable(self) -> None:
        if self.is_cancelled:
            raise InvalidStateError(f"Order {self.order_number} is cancelled")
        if self.cancellation_intent is not None:
            raise InvalidStateError(
                f"Order {self.order_number} has a cancellation in progress"
            )
        if self.is_delivered:
            raise InvalidStateError(f"Order {self.order_number} is already delivered")

    def ensure_cancellable(self) -> None:
        """Check cancellation preconditions in their documented order."""
        if self.is_cancelled:
            raise InvalidStateError(f"Order {self.order_number} is already cancelled")
        if self.is_delivered:
            raise InvalidStateError(
                f"Cannot cancel order {self.order_number} — it has been delivered"
            )
        if not self.transaction_ids:
            raise InvalidStateError(
                f"No transaction IDs found for order {self.order_number}"
            )

    def begin_cancellation(self, intent: CancellationIntent) -> None:
        self.ensure_cancellable()
        if self.cancellation_intent is not None:
            raise InvalidStateError(
                f"Order {self.order_number} already has a cancellation in progress"
            )
        self.cancellation_intent = intent

    def cancel(
        self,
        reason: str,
        actor_id: str,
        cancelled_at: datetime,
        reversal_ids: list[int],
        missing_ids: list[int],
    ) -> None:
        """Transition to the terminal ``Cancelled`` status.

        The original invoice and delivery statuses are kept for audit.
        """
        self.ensure_cancellable()
        self.original_invoice_status = self.invoice_status
        self.original_delivery_status = self.delivery_status
        self.order_status = OrderStatus.CANCELLED
        self.cancellation_reason = reason
        self.cancelled_by_uid = actor_id
        self.cancelled_at = cancelled_at
        self.cancellation_transaction_ids = list(reversal_ids)
        self.missing_transaction_ids = list(missing_ids)
        self.cancellation_intent = None
