"""Domain service: Sequence Allocator.

Hands out consecutive ledger transaction ids.  The next id is one past
the larger of the ledger's highest id and the ``transactions`` counter;
the range is claimed with a compare-and-set on the counter, so two
callers racing on the same snapshot cannot both win it.  A caller that
loses re-reads and tries again.

An unreadable ledger is an error, never an empty ledger: falling back to
1 would reissue ids that are already in use.
"""

from __future__ import annotations

from stockledger.domain.exceptions import ConcurrentModificationError, ValidationError
from stockledger.domain.repository.sequence_counter import SequenceCounter
from stockledger.domain.repository.transaction_repository import TransactionRepository
from stockledger.logging_config import get_logger

logger = get_logger("domain.sequence_allocator")

TRANSACTION_SEQUENCE = "transactions"
DEFAULT_MAX_ATTEMPTS = 5


class SequenceAllocator:

    def __init__(
        self,
        transaction_repo: TransactionRepository,
        counter: SequenceCounter,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        if max_attempts < 1:
            raise ValidationError("Allocation attempts must be at least 1")
        self._transaction_repo = transaction_repo
        self._counter = counter
        self._max_attempts = max_attempts

    def allocate(self, count: int) -> list[int]:
        """Reserve ``count`` consecutive ids and return them in order.

        Raises:
            ValidationError: ``count`` is less than 1.
            StoreUnavailableError: the ledger or counter could not be read.
            ConcurrentModificationError: every attempt lost to another writer.
        """
        if count < 1:
            raise ValidationError(f"Id count must be at least 1, got {count}")

        for attempt in range(1, self._max_attempts + 1):
            issued = self._counter.current(TRANSACTION_SEQUENCE)
            base = max(issued, self._transaction_repo.max_transaction_id())
            last = base + count
            if self._counter.compare_and_set(TRANSACTION_SEQUENCE, issued, last):
                ids = list(range(base + 1, last + 1))
                logger.debug(
                    "ids_allocated",
                    extra={"first_id": ids[0], "last_id": last, "attempt": attempt},
                )
                return ids
            logger.info("allocation_conflict", extra={"attempt": attempt})

        raise ConcurrentModificationError(
            f"Could not allocate {count} transaction id(s) after "
            f"{self._max_attempts} attempts"
        )

    def allocate_one(self) -> int:
        return self.allocate(1)[0]
