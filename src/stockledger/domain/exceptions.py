"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.

Every exception carries a ``kind`` so callers can branch on the failure
category without parsing message text.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    NOT_AUTHORIZED = "NotAuthorized"
    NOT_FOUND = "NotFound"
    INVALID_STATE = "InvalidState"
    INVALID_ARGUMENT = "InvalidArgument"
    PARTIAL_DATA_MISSING = "PartialDataMissing"
    STORE_UNAVAILABLE = "StoreUnavailable"


class DomainException(Exception):
    """Base class for all domain errors."""

    kind: ErrorKind = ErrorKind.INVALID_STATE


class NotAuthorizedError(DomainException):
    """The acting user lacks the capability required for the operation."""

    kind = ErrorKind.NOT_AUTHORIZED


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    kind = ErrorKind.NOT_FOUND


class InvalidStateError(DomainException):
    """The entity is in a state that does not permit the transition."""

    kind = ErrorKind.INVALID_STATE


class ConcurrentModificationError(InvalidStateError):
    """A conditional write lost against a concurrent writer."""


class ValidationError(DomainException):
    """An argument or configuration value was rejected."""

    kind = ErrorKind.INVALID_ARGUMENT


class StoreUnavailableError(DomainException):
    """The backing store could not be read or written."""

    kind = ErrorKind.STORE_UNAVAILABLE
