"""Domain service: derive an item's lifecycle status from its ledger history.

A unit normally sees one ``Stock_In`` and then one or two ``Stock_Out``
entries: the reservation written when an order is created, and a second
``Delivered`` stock-out written when the signed delivery comes back.  The
rules below resolve that "dual Stock_Out" case by flag rather than by
count, then fall back to comparing inbound and outbound movements.

The rules form a precedence chain; their order matters.
"""

from __future__ import annotations

from collections.abc import Iterable

from stockledger.domain.model.transaction import Transaction, TransactionType
from stockledger.domain.model.value_objects import ItemStatus


def resolve_status(history: Iterable[Transaction]) -> ItemStatus:
    """Return the status implied by a unit's transaction history.

    ``Cancellation`` entries are not counted; see ``effective_history``
    for the variant that honours them.
    """
    in_count = 0
    out_count = 0
    any_delivered = False

    for txn in history:
        if txn.type == TransactionType.STOCK_IN:
            in_count += 1
        elif txn.type == TransactionType.STOCK_OUT:
            out_count += 1
            if txn.status == ItemStatus.DELIVERED:
                any_delivered = True

    if in_count == 0 and out_count == 0:
        return ItemStatus.ACTIVE
    # A single receipt with outbound activity resolves by the delivery flag:
    # reservation + delivery confirmation, or repeated reservations.
    if in_count == 1 and out_count >= 1:
        return ItemStatus.DELIVERED if any_delivered else ItemStatus.RESERVED
    if out_count > 0 and in_count == 0:
        # ordered but never received
        return ItemStatus.RESERVED
    if out_count > in_count:
        return ItemStatus.RESERVED
    return ItemStatus.ACTIVE


def effective_history(history: Iterable[Transaction]) -> list[Transaction]:
    """Drop the entries that cancellations have undone.

    A ``Cancellation`` removes the entry named by its
    ``original_transaction_id``; the cancellation itself is dropped too.
    Order of the remaining entries is preserved.
    """
    entries = list(history)
    reversed_ids = {
        txn.original_transaction_id
        for txn in entries
        if txn.is_cancellation and txn.original_transaction_id is not None
    }
    return [
        txn
        for txn in entries
        if not txn.is_cancellation and txn.transaction_id not in reversed_ids
    ]


def resolve_effective_status(history: Iterable[Transaction]) -> ItemStatus:
    """Resolve status after applying cancellations to the history."""
    return resolve_status(effective_history(history))
