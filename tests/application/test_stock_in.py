"""Integration tests for the StockIn use case."""

from datetime import datetime, timezone

import pytest

from stockledger.application.stock_in import StockInHandler
from stockledger.domain.exceptions import InvalidStateError, ValidationError
from stockledger.domain.model.transaction import SOURCE_STOCK_IN, TransactionType
from stockledger.domain.model.value_objects import ItemStatus
from tests.fakes import CLERK, build_fakes

NOW = datetime(2024, 1, 5, tzinfo=timezone.utc)


def _setup():
    fakes = build_fakes()
    handler = StockInHandler(fakes.inventory, fakes.writer, fakes.allocator, clock=lambda: NOW)
    return handler, fakes


class TestStockIn:

    def test_receives_unit(self):
        handler, fakes = _setup()

        result = handler.handle(CLERK, " SN1 ", "Interactive Flat Panel", "65M6APro", size="65")

        assert result.serial_number == "SN1"
        assert result.transaction_id == 1
        item = fakes.store.inventory["SN1"]
        assert item.status == ItemStatus.ACTIVE
        assert item.size == "65"
        entry = fakes.store.transactions[1]
        assert entry.type == TransactionType.STOCK_IN
        assert entry.status == ItemStatus.ACTIVE
        assert entry.location == "HQ"
        assert entry.source == SOURCE_STOCK_IN
        assert entry.date == NOW
        assert len(fakes.writer.commits) == 1

    def test_blank_size_is_stored_as_none(self):
        handler, fakes = _setup()
        handler.handle(CLERK, "SN1", "Projector", "P1", size="  ")
        assert fakes.store.inventory["SN1"].size is None

    def test_duplicate_serial_rejected(self):
        handler, fakes = _setup()
        fakes.add_item("SN1")

        with pytest.raises(InvalidStateError, match="already exists"):
            handler.handle(CLERK, "SN1", "Projector", "P1")

        assert fakes.store.transactions == {}

    @pytest.mark.parametrize(
        "args",
        [
            ("", "SN1", "Projector", "P1"),
            (CLERK, " ", "Projector", "P1"),
            (CLERK, "SN1", "", "P1"),
            (CLERK, "SN1", "Projector", " "),
        ],
    )
    def test_required_fields(self, args):
        handler, fakes = _setup()
        with pytest.raises(ValidationError):
            handler.handle(*args)
        assert fakes.writer.commits == []
