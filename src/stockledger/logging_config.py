"""Logging setup for stockledger.

Modules obtain loggers through ``get_logger`` so everything lives under
the ``stockledger`` namespace.  Log calls use short snake_case event names
with structured fields passed via ``extra=``; ``StructuredFormatter``
renders those fields as one JSON object per line.
"""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

_LOGGER_PREFIX = "stockledger"

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


class _JSONEncoder(json.JSONEncoder):
    """Handle datetime and Enum values in log payloads."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, val in vars(record).items():
            if key not in _STDLIB_KEYS and key not in payload:
                payload[key] = val

        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            payload["exc_type"] = type(exc).__name__
            payload["exc_message"] = str(exc)
            kind = getattr(exc, "kind", None)
            if kind is not None:
                payload["exc_kind"] = kind
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, cls=_JSONEncoder, default=str)


class _PlainFormatter(logging.Formatter):
    """Human-readable lines with structured extras appended as key=value."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)-7s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = [
            f"{key}={val.value if isinstance(val, Enum) else val}"
            for key, val in vars(record).items()
            if key not in _STDLIB_KEYS
        ]
        if extras:
            line = f"{line} [{' '.join(extras)}]"
        return line


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the stockledger namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


def configure_logging(level: str | int = logging.WARNING, json_output: bool = False) -> None:
    """Install a single stderr handler on the package logger.

    Safe to call more than once; earlier handlers are replaced.
    """
    root = logging.getLogger(_LOGGER_PREFIX)
    reset_logging()
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter() if json_output else _PlainFormatter())
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False


def reset_logging() -> None:
    """Remove handlers installed by ``configure_logging``."""
    root = logging.getLogger(_LOGGER_PREFIX)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.NOTSET)
    root.propagate = True
