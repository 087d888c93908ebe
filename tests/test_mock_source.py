"""Tests for the mock reading source."""
from datetime import datetime
from unittest.mock import patch

import pytest

from sensorhub.lib.mock import MockReadingSource


class TestMockReadingSource:

    @pytest.mark.asyncio
    async def test_same_second_returns_same_reading(self):
        source = MockReadingSource()
        with patch("sensorhub.lib.mock.datetime") as mock_dt:
            mock_dt.now.return_value = datetime(2024, 1, 1, 0, 0, 0, 250000)
            first = await source.fetch_latest()
            second = await source.fetch_latest()

        assert first is second
        assert first.timestamp == datetime(2024, 1, 1, 0, 0, 0)

    @pytest.mark.asyncio
    async def test_values_within_bounds(self):
        source = MockReadingSource()
        with patch("sensorhub.lib.mock.datetime") as mock_dt:
            for second in range(50):
                mock_dt.now.return_value = datetime(2024, 1, 1, 0, 0, second)
                reading = await source.fetch_latest()
                assert 25.0 <= float(reading.temperature) <= 45.0
                assert 30.0 <= float(reading.humidity) <= 90.0
