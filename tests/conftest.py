import pytest

from stockledger.logging_config import reset_logging


@pytest.fixture(autouse=True)
def _restore_logging():
    """Undo any handler a CLI invocation installed on the package logger."""
    yield
    reset_logging()
