"""Runtime settings read from the environment.

A ``.env`` file in the working directory is loaded first (python-dotenv),
so deployments can keep their settings next to the data.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from stockledger.application.category_breakdown import DEFAULT_SIZE_TRACKED_CATEGORIES
from stockledger.domain.exceptions import ValidationError

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"

# Firestore's documented per-batch write ceiling.
DEFAULT_MAX_BATCH_SIZE = 500
MIN_BATCH_SIZE = 2
DEFAULT_ALLOCATION_ATTEMPTS = 5
# Seconds to wait for another process holding the store lock.
DEFAULT_LOCK_TIMEOUT = 10.0
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    data_dir: Path = DEFAULT_DATA_DIR
    max_batch_size: int = DEFAULT_MAX_BATCH_SIZE
    allocation_attempts: int = DEFAULT_ALLOCATION_ATTEMPTS
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT
    size_tracked_categories: tuple[str, ...] = DEFAULT_SIZE_TRACKED_CATEGORIES
    log_level: str = "WARNING"
    log_json: bool = False

    def __post_init__(self) -> None:
        if self.max_batch_size < MIN_BATCH_SIZE:
            raise ValidationError(
                f"Max batch size must be at least {MIN_BATCH_SIZE}, got {self.max_batch_size}"
            )
        if self.allocation_attempts < 1:
            raise ValidationError("Allocation attempts must be at least 1")
        if self.lock_timeout <= 0:
            raise ValidationError(f"Lock timeout must be positive, got {self.lock_timeout}")
        if self.log_level not in _LOG_LEVELS:
            raise ValidationError(f"Unknown log level {self.log_level!r}")

    @property
    def store_path(self) -> Path:
        return self.data_dir / "stockledger.json"

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``environ`` (defaults to ``os.environ``)."""
        if environ is None:
            load_dotenv()
            environ = os.environ

        categories = environ.get("STOCKLEDGER_SIZE_TRACKED_CATEGORIES")
        return Settings(
            data_dir=Path(environ.get("STOCKLEDGER_DATA_DIR") or DEFAULT_DATA_DIR),
            max_batch_size=_int(environ, "STOCKLEDGER_MAX_BATCH_SIZE", DEFAULT_MAX_BATCH_SIZE),
            allocation_attempts=_int(
                environ, "STOCKLEDGER_ALLOCATION_ATTEMPTS", DEFAULT_ALLOCATION_ATTEMPTS
            ),
            lock_timeout=_float(environ, "STOCKLEDGER_LOCK_TIMEOUT", DEFAULT_LOCK_TIMEOUT),
            size_tracked_categories=(
                tuple(c.strip() for c in categories.split(",") if c.strip())
                if categories is not None
                else DEFAULT_SIZE_TRACKED_CATEGORIES
            ),
            log_level=environ.get("STOCKLEDGER_LOG_LEVEL", "WARNING").upper(),
            log_json=environ.get("STOCKLEDGER_LOG_JSON", "false").lower() in ("1", "true", "yes"),
        )


def _int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValidationError(f"{name} must be an integer, got {raw!r}") from exc


def _float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValidationError(f"{name} must be a number, got {raw!r}") from exc
