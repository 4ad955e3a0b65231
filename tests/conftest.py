"""
Pytest fixtures for the field expense test suite.

Provides:
- Structured logging configured once per session
- ``captured_logs`` for asserting on emitted JSON log records
- In-memory SQLite sessions with all ORM tables created
- A deterministic clock pinned inside the default entry window
- Default settings / provider fixtures
"""

import json
import logging
from datetime import datetime, timezone
from io import StringIO

import pytest

from fieldforce_kernel.db.engine import (
    create_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from fieldforce_kernel.domain.clock import DeterministicClock
from fieldforce_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from fieldforce_modules.expense.models import AppSettings
from fieldforce_modules.expense.settings import SettingsProvider

# 21:15 -- after the default 20:00 entry start hour
EVENING = datetime(2026, 3, 10, 21, 15, tzinfo=timezone.utc)


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
    Capture fieldforce logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            ...
            logs = captured_logs()
            assert any(r["message"] == "expense_submitted" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("fieldforce")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def db_engine():
    """Fresh in-memory SQLite database with all tables."""
    engine = init_engine_from_url("sqlite://")
    create_tables()
    yield engine
    reset_engine()


@pytest.fixture
def session(db_engine):
    session = get_session()
    yield session
    session.rollback()
    session.close()


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(EVENING)


@pytest.fixture
def settings() -> AppSettings:
    """The shipped default rate table."""
    return AppSettings()


@pytest.fixture
def settings_provider(settings) -> SettingsProvider:
    return SettingsProvider(settings=settings)
