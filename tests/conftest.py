"""Shared pytest fixtures for the test suite."""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from sensorhub.lib.config import Settings
from sensorhub.lib.config.testing import set_settings
from sensorhub.lib.reading import Reading

_SQL_DIR = Path(__file__).parent.parent / "sensorhub" / "lib" / "sql"


@pytest.fixture(autouse=True)
def configure_caplog(caplog):
    """Ensure caplog captures logs from the sensorhub namespace."""
    caplog.set_level(logging.DEBUG, logger="sensorhub")


@pytest.fixture(autouse=True)
def reset_settings():
    """Reset global settings after each test to avoid cross-test pollution."""
    yield
    set_settings(None)


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a fresh temporary SQLite database.

    The schema is created with sync sqlite3 from the same SQL templates the
    application uses. The database file is cleaned up with tmp_path.
    """
    db_file = tmp_path / "test.sqlite3"
    test_settings = Settings(
        _env_file=None,
        db_path=str(db_file),
        db_timeout_sec=1.0,
        polling_frequency_sec=0.01,
    )
    set_settings(test_settings)

    conn = sqlite3.connect(str(db_file))
    conn.executescript((_SQL_DIR / "init_reading_table.sql").read_text())
    conn.executescript((_SQL_DIR / "idx_reading.sql").read_text())
    conn.close()

    return test_settings


@pytest.fixture
def stored_rows(settings):
    """Return a callable listing all stored (temperature, humidity, timestamp) rows."""

    def _rows() -> list[tuple[str, str, str]]:
        conn = sqlite3.connect(settings.db_path)
        try:
            return conn.execute(
                "SELECT temperature, humidity, timestamp FROM reading ORDER BY id"
            ).fetchall()
        finally:
            conn.close()

    return _rows


@pytest.fixture
def frozen_time():
    """Return a fixed datetime for deterministic tests."""
    return datetime(2024, 1, 1, 0, 0, 0)


@pytest.fixture
def sample_reading(frozen_time):
    """Create a reading within all thresholds."""
    return Reading(temperature="24.5", humidity="55", timestamp=frozen_time)


@pytest.fixture
def alert_reading(frozen_time):
    """Create a reading raising both a temperature and a humidity alert."""
    return Reading(temperature="42.5", humidity="35", timestamp=frozen_time)


@pytest.fixture
def mock_gateway():
    """Create a mock messaging gateway resolving to a fixed destination."""
    gateway = MagicMock()
    gateway.resolve_destination = AsyncMock(return_value="120363@g.us")
    gateway.send = AsyncMock(return_value=None)
    return gateway
