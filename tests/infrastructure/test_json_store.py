"""Tests for the JSON document store and the repositories on top of it."""

import json
import multiprocessing
from datetime import datetime, timezone

import pytest
from filelock import FileLock

from stockledger.application.cancel_order import CancelOrderHandler
from stockledger.application.create_order import CreateOrderHandler
from stockledger.application.dto import OrderItemSpec
from stockledger.application.stock_in import StockInHandler
from stockledger.domain.exceptions import (
    ConcurrentModificationError,
    StoreUnavailableError,
    ValidationError,
)
from stockledger.domain.model.inventory import InventoryItem
from stockledger.domain.model.order import CancellationIntent, Order, OrderStatus
from stockledger.domain.model.transaction import Transaction, TransactionType
from stockledger.domain.model.value_objects import ItemStatus, Warranty
from stockledger.domain.repository.write_batch import WriteBatch
from stockledger.infrastructure.bootstrap import build
from stockledger.infrastructure.config import Settings
from stockledger.infrastructure.persistence.json_sequence_counter import JsonSequenceCounter

NOW = datetime(2024, 5, 1, 8, 30, tzinfo=timezone.utc)


@pytest.fixture
def app(tmp_path):
    components = build(Settings(data_dir=tmp_path))
    components.users.set_role("boss", "admin", granted_by=None)
    return components


def _stock_out(txn_id, serial):
    return Transaction(
        transaction_id=txn_id,
        serial_number=serial,
        type=TransactionType.STOCK_OUT,
        status=ItemStatus.RESERVED,
        date=NOW,
        warranty=Warranty("Standard", 12),
    )


class TestDocumentStore:

    def test_creates_file_with_all_collections(self, tmp_path):
        app = build(Settings(data_dir=tmp_path / "nested"))
        raw = json.loads(app.store.file_path.read_text(encoding="utf-8"))
        assert set(raw) == {"transactions", "inventory", "orders", "users", "counters"}

    def test_transaction_round_trip(self, app):
        batch = WriteBatch()
        batch.insert_transaction(_stock_out(7, "SN1"))
        app.store.commit(batch)

        loaded = app.transactions.get_by_id(7)

        assert loaded == _stock_out(7, "SN1")
        assert app.transactions.max_transaction_id() == 7

    def test_inventory_accepts_legacy_documents(self, app):
        def seed(document):
            document["inventory"]["SN9"] = {
                "serial_number": "SN9",
                "category": "Interactive Flat Panel",
                "model": "Board",
                "description": '75" panel',
            }

        app.store.update(seed)

        item = app.inventory.get_by_serial_number("SN9")

        assert item.equipment_category == "Interactive Flat Panel"
        assert item.status == ItemStatus.ACTIVE
        assert item.attributes == {"description": '75" panel'}

    def test_order_intent_round_trip(self, app):
        order = Order(id=1, order_number="SO-1", transaction_ids=[101, 102], created_at=NOW)
        order.cancellation_intent = CancellationIntent("late", "boss", NOW, {101: 201, 102: 202})
        batch = WriteBatch()
        batch.put_order(order, expected_version=None)
        app.store.commit(batch)

        loaded = app.orders.get_by_id(1)

        assert loaded.cancellation_intent == order.cancellation_intent
        assert loaded.version == 1
        assert app.orders.get_by_order_number("SO-1").id == 1
        assert app.orders.next_id() == 2

    def test_batch_is_all_or_nothing(self, app):
        first = WriteBatch()
        first.insert_transaction(_stock_out(1, "SN1"))
        app.store.commit(first)
        before = app.store.file_path.read_text(encoding="utf-8")

        batch = WriteBatch()
        batch.insert_transaction(_stock_out(2, "SN2"))
        batch.insert_transaction(_stock_out(1, "SN1"))
        with pytest.raises(ConcurrentModificationError):
            app.store.commit(batch)

        assert app.store.file_path.read_text(encoding="utf-8") == before
        assert app.transactions.get_by_id(2) is None

    def test_stale_order_version_rejected(self, app):
        order = Order(id=1, order_number="SO-1", transaction_ids=[1], created_at=NOW)
        insert = WriteBatch()
        insert.put_order(order, expected_version=None)
        app.store.commit(insert)

        stale = WriteBatch()
        stale.put_order(order, expected_version=0)
        with pytest.raises(ConcurrentModificationError, match="concurrently"):
            app.store.commit(stale)

    def test_order_number_unique_across_ids(self, app):
        first = WriteBatch()
        first.put_order(Order(id=1, order_number="SO-1", transaction_ids=[1], created_at=NOW), None)
        app.store.commit(first)

        second = WriteBatch()
        second.put_order(Order(id=2, order_number="SO-1", transaction_ids=[2], created_at=NOW), None)
        with pytest.raises(ConcurrentModificationError, match="SO-1 already exists"):
            app.store.commit(second)

        assert app.orders.get_by_id(2) is None

    def test_inventory_expected_status(self, app):
        insert = WriteBatch()
        insert.put_inventory_item(InventoryItem("SN1", "Panel", "X"), must_exist=False)
        app.store.commit(insert)

        update = WriteBatch()
        update.put_inventory_item(
            InventoryItem("SN1", "Panel", "X", status=ItemStatus.DELIVERED),
            expected_status=ItemStatus.RESERVED,
        )
        with pytest.raises(ConcurrentModificationError, match="expected Reserved"):
            app.store.commit(update)

    def test_batch_limit(self, tmp_path):
        app = build(Settings(data_dir=tmp_path, max_batch_size=2))
        batch = WriteBatch()
        for txn_id in (1, 2, 3):
            batch.insert_transaction(_stock_out(txn_id, f"SN{txn_id}"))
        with pytest.raises(ValidationError, match="exceeds"):
            app.store.commit(batch)

    def test_corrupt_file_is_store_unavailable(self, app):
        app.store.file_path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StoreUnavailableError):
            app.transactions.max_transaction_id()

    def test_lock_held_elsewhere_times_out(self, tmp_path):
        app = build(Settings(data_dir=tmp_path, lock_timeout=0.1))
        holder = FileLock(f"{app.store.file_path}.lock")

        with holder:
            with pytest.raises(StoreUnavailableError, match="Timed out"):
                app.store.read()

        assert app.store.read()["orders"] == {}

    def test_counter_compare_and_set(self, app):
        counter = JsonSequenceCounter(app.store)
        assert counter.compare_and_set("transactions", 0, 5)
        assert not counter.compare_and_set("transactions", 0, 9)
        assert counter.current("transactions") == 5


def _allocate_in_child(data_dir, worker, count):
    app = build(Settings(data_dir=data_dir))
    ids = []
    while len(ids) < count:
        try:
            ids.append(app.allocator.allocate_one())
        except ConcurrentModificationError:
            continue
    (data_dir / f"ids-{worker}.json").write_text(json.dumps(ids), encoding="utf-8")


def _increment_in_child(data_dir, count):
    store = build(Settings(data_dir=data_dir)).store

    def bump(document):
        document["counters"]["hits"] = document["counters"].get("hits", 0) + 1

    for _ in range(count):
        store.update(bump)


def _run_workers(target, args_per_worker):
    context = multiprocessing.get_context("fork")
    workers = [context.Process(target=target, args=args) for args in args_per_worker]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join(timeout=120)
    assert [worker.exitcode for worker in workers] == [0] * len(workers)


@pytest.mark.skipif(
    "fork" not in multiprocessing.get_all_start_methods(), reason="needs fork"
)
class TestMultiProcess:

    def test_separate_processes_never_share_ids(self, tmp_path):
        build(Settings(data_dir=tmp_path))

        _run_workers(_allocate_in_child, [(tmp_path, n, 100) for n in (1, 2)])

        ids = []
        for worker in (1, 2):
            ids += json.loads((tmp_path / f"ids-{worker}.json").read_text(encoding="utf-8"))
        assert len(ids) == 200
        assert sorted(ids) == list(range(1, 201))

    def test_updates_from_separate_processes_are_not_lost(self, tmp_path):
        app = build(Settings(data_dir=tmp_path))

        _run_workers(_increment_in_child, [(tmp_path, 100), (tmp_path, 100)])

        assert app.store.read()["counters"]["hits"] == 200


class TestUserDirectory:

    def test_roles(self, app):
        app.users.set_role("clerk", "user", granted_by="boss")
        assert app.users.is_admin("boss")
        assert not app.users.is_admin("clerk")
        assert not app.users.is_admin("stranger")
        assert app.users.get_role("clerk") == "user"

    def test_grant_by_non_admin_rejected(self, app):
        with pytest.raises(ConcurrentModificationError, match="no longer an admin"):
            app.users.set_role("clerk", "admin", granted_by="clerk")
        assert app.users.get_role("clerk") is None

    def test_bootstrap_grant_rejected_once_admin_exists(self, app):
        assert app.users.has_admin()
        with pytest.raises(ConcurrentModificationError, match="already exists"):
            app.users.set_role("mallory", "admin", granted_by=None)
        assert not app.users.is_admin("mallory")


class TestEndToEndOnDisk:

    def test_stock_in_order_and_cancel(self, app):
        stock_in = StockInHandler(app.inventory, app.store, app.allocator)
        for serial in ("SN1", "SN2"):
            stock_in.handle("clerk", serial, "Interactive Flat Panel", "65M6APro")
        created = CreateOrderHandler(app.orders, app.inventory, app.store, app.allocator).handle(
            "clerk", "SO-1", "Acme", "", "Hall A",
            [OrderItemSpec("SN1"), OrderItemSpec("SN2")],
        )

        result = CancelOrderHandler(
            app.orders, app.transactions, app.inventory, app.store, app.allocator, app.users
        ).handle(created.order_id, "boss", "customer request")

        assert created.transaction_ids == [3, 4]
        assert result.reversal_transaction_ids == [5, 6]
        assert app.orders.get_by_id(created.order_id).order_status == OrderStatus.CANCELLED
        assert app.inventory.get_by_serial_number("SN1").status == ItemStatus.ACTIVE
        assert app.transactions.find_reversal(3).transaction_id == 5
        assert [t.transaction_id for t in app.transactions.list_by_serial_number("SN1")] == [1, 3, 5]
