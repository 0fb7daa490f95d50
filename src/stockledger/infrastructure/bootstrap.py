"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from dataclasses import dataclass

from stockledger.domain.service.sequence_allocator import SequenceAllocator
from stockledger.infrastructure.config import Settings
from stockledger.infrastructure.persistence.json_document_store import JsonDocumentStore
from stockledger.infrastructure.persistence.json_inventory_repository import (
    JsonInventoryRepository,
)
from stockledger.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from stockledger.infrastructure.persistence.json_sequence_counter import (
    JsonSequenceCounter,
)
from stockledger.infrastructure.persistence.json_transaction_repository import (
    JsonTransactionRepository,
)
from stockledger.infrastructure.persistence.json_user_directory import JsonUserDirectory


@dataclass(frozen=True)
class Components:
    settings: Settings
    store: JsonDocumentStore
    transactions: JsonTransactionRepository
    inventory: JsonInventoryRepository
    orders: JsonOrderRepository
    users: JsonUserDirectory
    allocator: SequenceAllocator


def document_store(settings: Settings) -> JsonDocumentStore:
    return JsonDocumentStore(
        settings.store_path, settings.max_batch_size, lock_timeout=settings.lock_timeout
    )


def build(settings: Settings) -> Components:
    store = document_store(settings)
    transactions = JsonTransactionRepository(store)
    return Components(
        settings=settings,
        store=store,
        transactions=transactions,
        inventory=JsonInventoryRepository(store),
        orders=JsonOrderRepository(store),
        users=JsonUserDirectory(store),
        allocator=SequenceAllocator(
            transactions,
            JsonSequenceCounter(store),
            max_attempts=settings.allocation_attempts,
        ),
    )
