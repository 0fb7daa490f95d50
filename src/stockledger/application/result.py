"""Structured success/failure envelope for callers that prefer values.

Handlers raise typed DomainExceptions.  ``OperationResult.capture`` runs a
handler call and folds the outcome into a value carrying either the
handler's return value or the failure kind and a readable detail.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from stockledger.domain.exceptions import DomainException, ErrorKind

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    ok: bool
    value: T | None = None
    error_kind: ErrorKind | None = None
    detail: str = ""

    @staticmethod
    def success(value: T) -> OperationResult[T]:
        return OperationResult(ok=True, value=value)

    @staticmethod
    def failure(exc: DomainException) -> OperationResult[T]:
        return OperationResult(ok=False, error_kind=exc.kind, detail=str(exc))

    @staticmethod
    def capture(operation: Callable[[], T]) -> OperationResult[T]:
        """Run ``operation``; domain errors become a failed result.

        Anything that is not a DomainException propagates unchanged.
        """
        try:
            return OperationResult.success(operation())
        except DomainException as exc:
            return OperationResult.failure(exc)
