"""Application service: Show Order use case (query)."""

from __future__ import annotations

from stockledger.application.dto import OrderDTO
from stockledger.application.mapping import order_to_dto
from stockledger.domain.exceptions import EntityNotFoundError
from stockledger.domain.repository.order_repository import OrderRepository
from stockledger.domain.repository.transaction_repository import TransactionRepository


class ShowOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        transaction_repo: TransactionRepository,
    ) -> None:
        self._order_repo = order_repo
        self._transaction_repo = transaction_repo

    def handle(self, order_id: int) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        lines = [self._transaction_repo.get_by_id(tid) for tid in order.transaction_ids]
        return order_to_dto(order, lines)
