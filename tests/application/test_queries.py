"""Integration tests for the order and item query handlers."""

import pytest

from stockledger.application.cancel_order import CancelOrderHandler
from stockledger.application.item_history import ItemHistoryHandler
from stockledger.application.list_cancellable_orders import ListCancellableOrdersHandler
from stockledger.application.show_order import ShowOrderHandler
from stockledger.domain.exceptions import EntityNotFoundError, NotAuthorizedError
from stockledger.domain.model.order import DeliveryStatus, OrderStatus
from stockledger.domain.model.transaction import TransactionType
from stockledger.domain.model.value_objects import ItemStatus
from tests.fakes import ADMIN, CLERK, T0, build_fakes


class TestShowOrder:

    def test_lines_include_missing_entries(self):
        fakes = build_fakes()
        fakes.reserved_order(1, {101: "SN1"})
        fakes.add_order(1, [101, 999])

        dto = ShowOrderHandler(fakes.orders, fakes.transactions).handle(1)

        assert dto.order_number == "SO-0001"
        assert dto.order_status == "Pending"
        assert [(line.transaction_id, line.serial_number) for line in dto.lines] == [
            (101, "SN1"),
            (999, None),
        ]
        assert dto.created_at == "2024-01-01 09:00 UTC"
        assert not dto.cancellation_pending

    def test_unknown_order(self):
        fakes = build_fakes()
        with pytest.raises(EntityNotFoundError):
            ShowOrderHandler(fakes.orders, fakes.transactions).handle(3)


class TestListCancellableOrders:

    def test_excludes_delivered_and_cancelled_newest_first(self):
        fakes = build_fakes()
        fakes.add_order(1, [1], created_at=T0.replace(day=1))
        fakes.add_order(2, [2], created_at=T0.replace(day=3))
        fakes.add_order(3, [3], created_at=T0.replace(day=2), order_status=OrderStatus.CANCELLED)
        fakes.add_order(4, [4], created_at=T0.replace(day=4),
                        delivery_status=DeliveryStatus.DELIVERED)
        fakes.add_order(5, [5], created_at=T0.replace(day=5), order_status=OrderStatus.INVOICED)

        handler = ListCancellableOrdersHandler(fakes.orders, fakes.transactions, fakes.authorizer)
        orders = handler.handle(ADMIN)

        assert [o.id for o in orders] == [5, 2, 1]

    def test_admin_only(self):
        fakes = build_fakes()
        handler = ListCancellableOrdersHandler(fakes.orders, fakes.transactions, fakes.authorizer)
        with pytest.raises(NotAuthorizedError):
            handler.handle(CLERK)


class TestItemHistory:

    def test_history_after_cancellation(self):
        fakes = build_fakes()
        fakes.reserved_order(1, {101: "SN1"})
        CancelOrderHandler(
            fakes.orders,
            fakes.transactions,
            fakes.inventory,
            fakes.writer,
            fakes.allocator,
            fakes.authorizer,
        ).handle(1, ADMIN, "customer request")

        dto = ItemHistoryHandler(fakes.inventory, fakes.transactions).handle("SN1")

        assert [t.type for t in dto.transactions] == ["Stock_In", "Stock_Out", "Cancellation"]
        assert dto.transactions[-1].original_transaction_id == 101
        assert dto.materialized_status == "Active"
        # The plain rule chain ignores cancellations.
        assert dto.resolved_status == "Reserved"
        assert dto.effective_status == "Active"

    def test_ledger_only_unit(self):
        fakes = build_fakes()
        fakes.add_transaction(5, "GHOST", type=TransactionType.STOCK_IN, status=ItemStatus.ACTIVE)

        dto = ItemHistoryHandler(fakes.inventory, fakes.transactions).handle("GHOST")

        assert dto.materialized_status is None
        assert dto.resolved_status == "Active"

    def test_unknown_serial(self):
        fakes = build_fakes()
        with pytest.raises(EntityNotFoundError):
            ItemHistoryHandler(fakes.inventory, fakes.transactions).handle("NOPE")
