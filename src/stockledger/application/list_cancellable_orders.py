"""Application service: list orders an admin may still cancel (query)."""

from __future__ import annotations

from stockledger.application.authorization import require_admin
from stockledger.application.dto import OrderDTO
from stockledger.application.mapping import order_to_dto
from stockledger.domain.repository.authorizer import Authorizer
from stockledger.domain.repository.order_repository import OrderRepository
from stockledger.domain.repository.transaction_repository import TransactionRepository


class ListCancellableOrdersHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        transaction_repo: TransactionRepository,
        authorizer: Authorizer,
    ) -> None:
        self._order_repo = order_repo
        self._transaction_repo = transaction_repo
        self._authorizer = authorizer

    def handle(self, actor_id: str) -> list[OrderDTO]:
        """Orders that are neither delivered nor cancelled, newest first."""
        require_admin(self._authorizer, actor_id)
        orders = [o for o in self._order_repo.list_all() if o.is_cancellable]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return [
            order_to_dto(
                order,
                [self._transaction_repo.get_by_id(tid) for tid in order.transaction_ids],
            )
            for order in orders
        ]
