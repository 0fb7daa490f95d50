"""Unit tests for the Order aggregate and its business rules."""

from datetime import datetime, timezone

import pytest

from stockledger.domain.exceptions import InvalidStateError, ValidationError
from stockledger.domain.model.order import (
    DEFAULT_CLIENT,
    CancellationIntent,
    DeliveryStatus,
    InvoiceStatus,
    Order,
    OrderStatus,
)

NOW = datetime(2024, 3, 1, tzinfo=timezone.utc)


def _order(**overrides):
    fields = {
        "order_id": 1,
        "order_number": "SO-1",
        "transaction_ids": [101, 102],
        "customer_dealer": "Acme",
        "customer_client": "School",
        "location": "Hall A",
        "created_by_uid": "clerk",
        "created_at": NOW,
    }
    fields.update(overrides)
    return Order.create(**fields)


def _intent():
    return CancellationIntent("wrong model", "admin", NOW, {101: 201, 102: 202})


class TestOrderCreation:

    def test_happy_path(self):
        order = _order()
        assert order.order_status == OrderStatus.PENDING
        assert order.invoice_status == InvoiceStatus.RESERVED
        assert order.delivery_status == DeliveryStatus.PENDING
        assert order.transaction_ids == [101, 102]

    def test_blank_client_defaults(self):
        assert _order(customer_client="  ").customer_client == DEFAULT_CLIENT

    def test_strips_order_number(self):
        assert _order(order_number="  SO-9 ").order_number == "SO-9"

    @pytest.mark.parametrize(
        "field, value, message",
        [
            ("order_number", " ", "Order number"),
            ("customer_dealer", "", "Dealer"),
            ("transaction_ids", [], "No items"),
            ("transaction_ids", [5, 5], "distinct"),
        ],
    )
    def test_validation(self, field, value, message):
        with pytest.raises(ValidationError, match=message):
            _order(**{field: value})


class TestOrderInvoicing:

    def test_pending_to_invoiced(self):
        order = _order()
        order.mark_invoiced(" INV-7 ")
        assert order.order_status == OrderStatus.INVOICED
        assert order.invoice_status == InvoiceStatus.INVOICED
        assert order.invoice_number == "INV-7"

    def test_cannot_invoice_twice(self):
        order = _order()
        order.mark_invoiced("INV-7")
        with pytest.raises(InvalidStateError, match="expected Pending"):
            order.mark_invoiced("INV-8")

    def test_invoice_number_required(self):
        with pytest.raises(ValidationError):
            _order().mark_invoiced("")


class TestOrderDelivery:

    def test_mark_delivered(self):
        order = _order()
        order.mark_delivered([301, 302])
        assert order.is_delivered
        assert order.delivery_transaction_ids == [301, 302]

    def test_cannot_deliver_cancelled_order(self):
        order = _order()
        order.cancel("r", "admin", NOW, [201, 202], [])
        with pytest.raises(InvalidStateError, match="cancelled"):
            order.mark_delivered([1])

    def test_cannot_deliver_during_cancellation(self):
        order = _order()
        order.begin_cancellation(_intent())
        with pytest.raises(InvalidStateError, match="in progress"):
            order.ensure_deliverable()


class TestOrderCancellation:

    def test_cancel_records_audit_fields(self):
        order = _order()
        order.mark_invoiced("INV-1")

        order.cancel("customer request", "admin", NOW, [201, 202], [])

        assert order.is_cancelled
        assert order.cancellation_reason == "customer request"
        assert order.cancelled_by_uid == "admin"
        assert order.cancelled_at == NOW
        assert order.original_invoice_status == InvoiceStatus.INVOICED
        assert order.original_delivery_status == DeliveryStatus.PENDING
        assert order.cancellation_transaction_ids == [201, 202]
        assert not order.is_cancellable

    def test_cancelled_is_terminal(self):
        order = _order()
        order.cancel("r", "admin", NOW, [201], [])
        with pytest.raises(InvalidStateError, match="already cancelled"):
            order.cancel("r", "admin", NOW, [201], [])

    def test_delivered_cannot_be_cancelled(self):
        order = _order()
        order.mark_delivered([301, 302])
        with pytest.raises(InvalidStateError, match="delivered"):
            order.ensure_cancellable()

    def test_order_without_lines_cannot_be_cancelled(self):
        order = Order(id=9, order_number="SO-9", transaction_ids=[])
        with pytest.raises(InvalidStateError, match="No transaction IDs"):
            order.ensure_cancellable()

    def test_cancel_clears_intent(self):
        order = _order()
        order.begin_cancellation(_intent())
        order.cancel("wrong model", "admin", NOW, [201, 202], [])
        assert order.cancellation_intent is None

    def test_intent_cannot_be_started_twice(self):
        order = _order()
        order.begin_cancellation(_intent())
        with pytest.raises(InvalidStateError, match="in progress"):
            order.begin_cancellation(_intent())
