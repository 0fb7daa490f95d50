"""Abstract repository for the transaction ledger.

Defined in the domain layer so the domain never depends on
infrastructure.  The ledger is append-only: there is no ``save`` here,
new entries are written only through a ``WriteBatch``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.transaction import Transaction


class TransactionRepository(ABC):

    @abstractmethod
    def max_transaction_id(self) -> int:
        """Return the highest transaction id in the ledger, or 0 if empty.

        Raises StoreUnavailableError if the ledger cannot be read.
        """

    @abstractmethod
    def get_by_id(self, transaction_id: int) -> Transaction | None:
        """Return a ledger entry by its transaction id, or None."""

    @abstractmethod
    def list_by_serial_number(self, serial_number: str) -> list[Transaction]:
        """Return every entry for a unit, oldest first (date, then id)."""

    @abstractmethod
    def find_reversal(self, original_transaction_id: int) -> Transaction | None:
        """Return the cancellation entry that reverses the given id, or None."""

    @abstractmethod
    def list_all(self) -> list[Transaction]:
        """Return every ledger entry ordered by transaction id."""
