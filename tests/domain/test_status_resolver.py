"""Unit tests for deriving a unit's status from its ledger history."""

from datetime import datetime, timedelta, timezone

import pytest

from stockledger.domain.model.transaction import Transaction, TransactionType
from stockledger.domain.model.value_objects import ItemStatus
from stockledger.domain.service.status_resolver import (
    effective_history,
    resolve_effective_status,
    resolve_status,
)

IN = TransactionType.STOCK_IN
OUT = TransactionType.STOCK_OUT
CANCEL = TransactionType.CANCELLATION
T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _txn(txn_id, type, status, original=None):
    return Transaction(
        transaction_id=txn_id,
        serial_number="SN1",
        type=type,
        status=status,
        date=T0 + timedelta(hours=txn_id),
        original_transaction_id=original,
    )


def _history(*entries):
    return [_txn(i, t, s) for i, (t, s) in enumerate(entries, start=1)]


class TestResolveStatus:

    def test_empty_history_is_active(self):
        assert resolve_status([]) == ItemStatus.ACTIVE

    def test_received_only_is_active(self):
        assert resolve_status(_history((IN, ItemStatus.ACTIVE))) == ItemStatus.ACTIVE

    def test_reserved_after_single_receipt(self):
        history = _history((IN, ItemStatus.ACTIVE), (OUT, ItemStatus.RESERVED))
        assert resolve_status(history) == ItemStatus.RESERVED

    def test_dual_stock_out_with_delivery_is_delivered(self):
        history = _history(
            (IN, ItemStatus.ACTIVE),
            (OUT, ItemStatus.RESERVED),
            (OUT, ItemStatus.DELIVERED),
        )
        assert resolve_status(history) == ItemStatus.DELIVERED

    @pytest.mark.parametrize(
        "out_statuses, expected",
        [
            ([ItemStatus.RESERVED], ItemStatus.RESERVED),
            ([ItemStatus.DELIVERED], ItemStatus.DELIVERED),
            ([ItemStatus.RESERVED, ItemStatus.RESERVED], ItemStatus.RESERVED),
            ([ItemStatus.DELIVERED, ItemStatus.RESERVED], ItemStatus.DELIVERED),
            ([ItemStatus.ACTIVE, ItemStatus.RESERVED, ItemStatus.RESERVED], ItemStatus.RESERVED),
        ],
    )
    def test_single_receipt_resolves_by_delivery_flag(self, out_statuses, expected):
        history = _history((IN, ItemStatus.ACTIVE), *[(OUT, s) for s in out_statuses])
        assert resolve_status(history) == expected

    def test_stock_out_without_receipt_is_reserved(self):
        assert resolve_status(_history((OUT, ItemStatus.DELIVERED))) == ItemStatus.RESERVED

    def test_more_outs_than_ins_is_reserved(self):
        history = _history(
            (IN, ItemStatus.ACTIVE),
            (IN, ItemStatus.ACTIVE),
            (OUT, ItemStatus.RESERVED),
            (OUT, ItemStatus.RESERVED),
            (OUT, ItemStatus.RESERVED),
        )
        assert resolve_status(history) == ItemStatus.RESERVED

    def test_balanced_multiple_receipts_is_active(self):
        history = _history(
            (IN, ItemStatus.ACTIVE),
            (OUT, ItemStatus.DELIVERED),
            (IN, ItemStatus.ACTIVE),
            (OUT, ItemStatus.DELIVERED),
        )
        assert resolve_status(history) == ItemStatus.ACTIVE

    def test_cancellation_entries_are_not_counted(self):
        history = _history((IN, ItemStatus.ACTIVE), (OUT, ItemStatus.RESERVED))
        history.append(_txn(3, CANCEL, ItemStatus.ACTIVE, original=2))
        assert resolve_status(history) == ItemStatus.RESERVED


class TestEffectiveHistory:

    def test_drops_reversed_entry_and_the_cancellation(self):
        history = _history((IN, ItemStatus.ACTIVE), (OUT, ItemStatus.RESERVED))
        history.append(_txn(3, CANCEL, ItemStatus.ACTIVE, original=2))

        remaining = effective_history(history)

        assert [t.transaction_id for t in remaining] == [1]

    def test_cancelled_reservation_resolves_active(self):
        history = _history((IN, ItemStatus.ACTIVE), (OUT, ItemStatus.RESERVED))
        history.append(_txn(3, CANCEL, ItemStatus.ACTIVE, original=2))
        assert resolve_effective_status(history) == ItemStatus.ACTIVE

    def test_new_reservation_after_cancellation_counts(self):
        history = _history((IN, ItemStatus.ACTIVE), (OUT, ItemStatus.RESERVED))
        history.append(_txn(3, CANCEL, ItemStatus.ACTIVE, original=2))
        history.append(_txn(4, OUT, ItemStatus.RESERVED))
        assert resolve_effective_status(history) == ItemStatus.RESERVED

    def test_history_without_cancellations_is_unchanged(self):
        history = _history((IN, ItemStatus.ACTIVE), (OUT, ItemStatus.DELIVERED))
        assert effective_history(history) == history
