"""Tests for the insert-if-new persistence gate."""
import sqlite3
from datetime import datetime

import pytest

from sensorhub.lib.config import Settings
from sensorhub.lib.db import PersistenceGate, get_latest_reading, init_db, ping
from sensorhub.lib.exceptions import StorageUnavailableError
from sensorhub.lib.reading import Reading


class TestInsertIfNew:
    """Tests for PersistenceGate.insert_if_new."""

    @pytest.fixture
    def gate(self, settings):
        return PersistenceGate(settings)

    @pytest.mark.asyncio
    async def test_first_insert_then_duplicate(self, gate, sample_reading, stored_rows):
        assert await gate.insert_if_new(sample_reading) is True
        assert await gate.insert_if_new(sample_reading) is False

        assert stored_rows() == [("24.5", "55", "2024-01-01T00:00:00")]

    @pytest.mark.asyncio
    async def test_equal_reading_instances_are_duplicates(self, gate, frozen_time, stored_rows):
        first = Reading("24.5", "55", frozen_time)
        second = Reading("24.5", "55", datetime(2024, 1, 1, 0, 0, 0))

        assert await gate.insert_if_new(first) is True
        assert await gate.insert_if_new(second) is False
        assert len(stored_rows()) == 1

    @pytest.mark.asyncio
    async def test_new_timestamp_is_new_reading(self, gate, sample_reading, stored_rows):
        later = Reading(
            sample_reading.temperature,
            sample_reading.humidity,
            datetime(2024, 1, 1, 0, 0, 3),
        )

        assert await gate.insert_if_new(sample_reading) is True
        assert await gate.insert_if_new(later) is True
        assert len(stored_rows()) == 2

    @pytest.mark.asyncio
    async def test_values_compared_as_exact_text(self, gate, frozen_time, stored_rows):
        """'55' and '55.0' are different readings, comparison is not numeric."""
        assert await gate.insert_if_new(Reading("24.5", "55", frozen_time)) is True
        assert await gate.insert_if_new(Reading("24.5", "55.0", frozen_time)) is True
        assert len(stored_rows()) == 2

    @pytest.mark.asyncio
    async def test_logs_new_reading(self, gate, sample_reading, caplog):
        await gate.insert_if_new(sample_reading)
        assert "Stored new reading" in caplog.text

    @pytest.mark.asyncio
    async def test_unreachable_store_raises(self, tmp_path, sample_reading):
        settings = Settings(
            _env_file=None,
            db_path=str(tmp_path / "missing" / "dir" / "db.sqlite3"),
        )
        gate = PersistenceGate(settings)

        with pytest.raises(StorageUnavailableError):
            await gate.insert_if_new(sample_reading)


class TestSchema:
    """Tests for schema creation and the uniqueness constraint."""

    @pytest.mark.asyncio
    async def test_init_db_is_idempotent(self, tmp_path, sample_reading):
        settings = Settings(_env_file=None, db_path=str(tmp_path / "fresh.sqlite3"))

        await init_db(settings)
        await init_db(settings)

        assert await PersistenceGate(settings).insert_if_new(sample_reading) is True

    def test_unique_index_rejects_duplicate_triple(self, settings):
        conn = sqlite3.connect(settings.db_path)
        try:
            sql = "INSERT INTO reading (temperature, humidity, timestamp) VALUES (?, ?, ?)"
            conn.execute(sql, ("24.5", "55", "2024-01-01T00:00:00"))
            with pytest.raises(sqlite3.IntegrityError):
                conn.execute(sql, ("24.5", "55", "2024-01-01T00:00:00"))
        finally:
            conn.close()


class TestQueries:
    """Tests for read queries."""

    @pytest.mark.asyncio
    async def test_latest_reading_none_when_empty(self, settings):
        assert await get_latest_reading(settings) is None

    @pytest.mark.asyncio
    async def test_latest_reading_is_most_recent(self, settings, sample_reading):
        gate = PersistenceGate(settings)
        later = Reading("25.0", "54", datetime(2024, 1, 1, 0, 0, 3))
        await gate.insert_if_new(later)
        await gate.insert_if_new(sample_reading)

        latest = await get_latest_reading(settings)

        assert latest == {
            "temperature": "25.0",
            "humidity": "54",
            "timestamp": "2024-01-01T00:00:03",
        }

    @pytest.mark.asyncio
    async def test_ping_unreachable_store(self, tmp_path):
        settings = Settings(_env_file=None, db_path=str(tmp_path / "nope" / "db.sqlite3"))
        with pytest.raises(StorageUnavailableError):
            await ping(settings)
