"""Packing groups of writes into store-sized atomic batches.

A group (for example one order line's reversal plus its inventory
update) is never split across batches.  Atomicity across batches is not
guaranteed; callers that need recovery record an intent first.
"""

from __future__ import annotations

from collections.abc import Iterable

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.repository.write_batch import BatchWriter, WriteBatch
from stockledger.logging_config import get_logger

logger = get_logger("application.batching")


def pack(groups: Iterable[WriteBatch], max_batch_size: int) -> list[WriteBatch]:
    """Greedily pack groups, in order, into batches of at most ``max_batch_size``."""
    batches: list[WriteBatch] = []
    current = WriteBatch()
    for group in groups:
        if len(group) > max_batch_size:
            raise ValidationError(
                f"A group of {len(group)} writes exceeds the batch limit of {max_batch_size}"
            )
        if len(current) + len(group) > max_batch_size:
            batches.append(current)
            current = WriteBatch()
        current.extend(group)
    if current:
        batches.append(current)
    return batches


def commit_in_chunks(writer: BatchWriter, groups: Iterable[WriteBatch]) -> int:
    """Commit groups sequentially in packed batches; return the batch count."""
    batches = pack(groups, writer.max_batch_size)
    for index, batch in enumerate(batches, start=1):
        writer.commit(batch)
        logger.debug(
            "batch_committed",
            extra={"batch": index, "of": len(batches), "writes": len(batch)},
        )
    return len(batches)
