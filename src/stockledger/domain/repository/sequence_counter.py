"""Abstract atomic counter used to hand out ledger ids."""

from __future__ import annotations

from abc import ABC, abstractmethod


class SequenceCounter(ABC):

    @abstractmethod
    def current(self, name: str) -> int:
        """Return the last value issued for ``name``, or 0 if never used."""

    @abstractmethod
    def compare_and_set(self, name: str, expected: int, new: int) -> bool:
        """Set ``name`` to ``new`` only if it still equals ``expected``.

        Returns False, without writing, when another writer got there first.
        """
