"""Domain -> DTO mapping shared by the query handlers."""

from __future__ import annotations

from stockledger.application.dto import OrderDTO, OrderLineDTO, TransactionDTO
from stockledger.domain.model.order import Order
from stockledger.domain.model.transaction import Transaction

DATE_FORMAT = "%Y-%m-%d %H:%M UTC"


def transaction_to_dto(txn: Transaction) -> TransactionDTO:
    return TransactionDTO(
        transaction_id=txn.transaction_id,
        serial_number=txn.serial_number,
        type=txn.type.value,
        status=txn.status.value,
        date=txn.date.strftime(DATE_FORMAT),
        model=txn.model,
        equipment_category=txn.equipment_category,
        original_transaction_id=txn.original_transaction_id,
        cancelled_from_order=txn.cancelled_from_order,
    )


def order_to_dto(order: Order, lines: list[Transaction | None]) -> OrderDTO:
    """``lines`` holds the ledger entry for each order line, or None if missing."""
    return OrderDTO(
        id=order.id,
        order_number=order.order_number,
        customer_dealer=order.customer_dealer,
        customer_client=order.customer_client,
        order_status=order.order_status.value,
        invoice_status=order.invoice_status.value,
        delivery_status=order.delivery_status.value,
        created_at=order.created_at.strftime(DATE_FORMAT),
        lines=[
            OrderLineDTO(
                transaction_id=transaction_id,
                serial_number=txn.serial_number if txn else None,
                model=txn.model if txn else None,
                status=txn.status.value if txn else None,
            )
            for transaction_id, txn in zip(order.transaction_ids, lines)
        ],
        cancellation_reason=order.cancellation_reason,
        cancellation_transaction_ids=list(order.cancellation_transaction_ids),
        cancellation_pending=order.cancellation_intent is not None,
    )
