"""
Pytest fixtures for the CRM finance core test suite.

Provides:
- Structured logging setup and a log capture fixture
- A deterministic clock
- Bundled core settings

Record builders live in ``tests/factories.py``.
"""

import json
import logging
from datetime import datetime, timezone
from io import StringIO

import pytest

from crm_config import get_active_settings
from crm_kernel.domain.clock import DeterministicClock
from crm_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

# Reference instant used across the suite: Wednesday 2024-05-15 12:00 UTC
NOW = datetime(2024, 5, 15, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture crm_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            compute_quote_totals(items)
            logs = captured_logs()
            assert any(r["message"] == "quote_totals_computed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("crm_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Time and settings
# =============================================================================


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(NOW)


@pytest.fixture
def settings():
    return get_active_settings()
