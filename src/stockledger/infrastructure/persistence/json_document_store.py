"""Single-file JSON document store.

All collections live in one file so a batch touching the ledger,
inventory and orders can be committed with a single atomic file
replace.  Every read and read-modify-write holds an exclusive lock on a
sidecar ``<store>.lock`` file, so writers in separate processes are
serialized as well as threads within one.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TypeVar

from filelock import FileLock, Timeout

from stockledger.domain.exceptions import (
    ConcurrentModificationError,
    StoreUnavailableError,
    ValidationError,
)
from stockledger.domain.repository.write_batch import (
    BatchWriter,
    InsertTransaction,
    PutInventoryItem,
    PutOrder,
    WriteBatch,
)
from stockledger.infrastructure.persistence.serialization import (
    inventory_to_raw,
    order_to_raw,
    transaction_to_raw,
)
from stockledger.logging_config import get_logger

logger = get_logger("infrastructure.json_document_store")

T = TypeVar("T")

COLLECTIONS = ("transactions", "inventory", "orders", "users", "counters")

Document = dict[str, dict[str, Any]]


class JsonDocumentStore(BatchWriter):

    def __init__(
        self,
        file_path: Path,
        max_batch_size: int,
        lock_timeout: float = 10.0,
    ) -> None:
        self._file_path = file_path
        self._max_batch_size = max_batch_size
        self._lock = threading.Lock()
        self._file_lock = FileLock(f"{file_path}.lock", timeout=lock_timeout)
        self._ensure_file()

    @property
    def file_path(self) -> Path:
        return self._file_path

    # --- Reads and read-modify-write --------------------------------------------

    def read(self) -> Document:
        """Return a fresh parse of the whole document."""
        with self._exclusive():
            return self._load_raw()

    def update(self, mutate: Callable[[Document], T]) -> T:
        """Apply ``mutate`` to a fresh copy and persist it.

        If ``mutate`` raises, the file is left untouched.
        """
        with self._exclusive():
            document = self._load_raw()
            result = mutate(document)
            self._persist_raw(document)
            return result

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        with self._lock:
            try:
                self._file_lock.acquire()
            except Timeout as exc:
                raise StoreUnavailableError(
                    f"Timed out waiting for the lock on {self._file_path}"
                ) from exc
            except OSError as exc:
                raise StoreUnavailableError(
                    f"Cannot lock store {self._file_path}: {exc}"
                ) from exc
            try:
                yield
            finally:
                self._file_lock.release()

    # --- BatchWriter interface --------------------------------------------------

    @property
    def max_batch_size(self) -> int:
        return self._max_batch_size

    def commit(self, batch: WriteBatch) -> None:
        if not batch:
            raise ValidationError("Cannot commit an empty batch")
        if len(batch) > self._max_batch_size:
            raise ValidationError(
                f"Batch of {len(batch)} writes exceeds the limit of {self._max_batch_size}"
            )
        self.update(lambda document: _apply(document, batch))
        logger.debug("batch_applied", extra={"writes": len(batch)})

    # --- File helpers -----------------------------------------------------------

    def _load_raw(self) -> Document:
        try:
            document = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StoreUnavailableError(
                f"Cannot read store {self._file_path}: {exc}"
            ) from exc
        if not isinstance(document, dict):
            raise StoreUnavailableError(f"Store {self._file_path} is not a JSON object")
        for name in COLLECTIONS:
            document.setdefault(name, {})
        return document

    def _persist_raw(self, document: Document) -> None:
        directory = self._file_path.parent
        try:
            fd, tmp_name = tempfile.mkstemp(dir=directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(json.dumps(document, indent=2) + "\n")
                os.replace(tmp_name, self._file_path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StoreUnavailableError(
                f"Cannot write store {self._file_path}: {exc}"
            ) from exc

    def _ensure_file(self) -> None:
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreUnavailableError(
                f"Cannot create data directory {self._file_path.parent}: {exc}"
            ) from exc
        with self._exclusive():
            if not self._file_path.exists():
                self._persist_raw({name: {} for name in COLLECTIONS})


# --- Batch application --------------------------------------------------------


def _apply(document: Document, batch: WriteBatch) -> None:
    """Check and apply each write in order against ``document``.

    Raising leaves the caller's copy half-applied, but ``update`` never
    persists it.
    """
    for write in batch.writes:
        if isinstance(write, InsertTransaction):
            _insert_transaction(document["transactions"], write)
        elif isinstance(write, PutInventoryItem):
            _put_inventory_item(document["inventory"], write)
        elif isinstance(write, PutOrder):
            _put_order(document["orders"], write)
        else:
            raise ValidationError(f"Unsupported write {write!r}")


def _insert_transaction(ledger: dict[str, Any], write: InsertTransaction) -> None:
    key = str(write.transaction.transaction_id)
    if key in ledger:
        raise ConcurrentModificationError(
            f"Transaction {key} already exists in the ledger"
        )
    ledger[key] = transaction_to_raw(write.transaction)


def _put_inventory_item(inventory: dict[str, Any], write: PutInventoryItem) -> None:
    serial = write.item.serial_number
    stored = inventory.get(serial)
    if write.must_exist and stored is None:
        raise ConcurrentModificationError(f"Inventory item {serial} no longer exists")
    if not write.must_exist and stored is not None:
        raise ConcurrentModificationError(f"Inventory item {serial} already exists")
    if write.expected_status is not None:
        current = (stored or {}).get("status") or "Active"
        if current != write.expected_status.value:
            raise ConcurrentModificationError(
                f"Inventory item {serial} is {current}, expected "
                f"{write.expected_status.value}"
            )
    inventory[serial] = inventory_to_raw(write.item)


def _put_order(orders: dict[str, Any], write: PutOrder) -> None:
    key = str(write.order.id)
    stored = orders.get(key)
    number = write.order.order_number
    for other_key, other in orders.items():
        if other_key != key and other.get("order_number") == number:
            raise ConcurrentModificationError(f"Order number {number} already exists")
    if write.expected_version is None:
        if stored is not None:
            raise ConcurrentModificationError(f"Order #{key} already exists")
        new_version = 1
    else:
        current = stored.get("version", 0) if stored is not None else None
        if current != write.expected_version:
            raise ConcurrentModificationError(
                f"Order #{key} was modified concurrently "
                f"(expected revision {write.expected_version}, found {current})"
            )
        new_version = write.expected_version + 1
    raw = order_to_raw(write.order)
    raw["version"] = new_version
    orders[key] = raw
