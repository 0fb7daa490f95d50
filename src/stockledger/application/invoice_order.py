"""Application service: Invoice Order use case."""

from __future__ import annotations

from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.repository.order_repository import OrderRepository
from stockledger.domain.repository.write_batch import BatchWriter, WriteBatch
from stockledger.logging_config import get_logger

logger = get_logger("application.invoice_order")


class InvoiceOrderHandler:

    def __init__(self, order_repo: OrderRepository, batch_writer: BatchWriter) -> None:
        self._order_repo = order_repo
        self._batch_writer = batch_writer

    def handle(self, order_id: int, invoice_number: str) -> None:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        expected_version = order.version
        order.mark_invoiced(invoice_number)

        writes = WriteBatch()
        writes.put_order(order, expected_version)
        self._batch_writer.commit(writes)
        logger.info(
            "order_invoiced",
            extra={"order_number": order.order_number, "invoice_number": order.invoice_number},
        )
