"""Mock reading source for development.

Provides a ReadingSource implementation that generates realistic data
without a live upstream. Used by the ingestion service when
MOCK_UPSTREAM=1 is set.
"""

import random
from datetime import datetime

from sensorhub.lib.reading import Reading


def _random_walk(
    current: float, drift: float, min_val: float, max_val: float
) -> float:
    """Generate next value using random walk with bounds."""
    change = random.gauss(0, drift)
    new_val = current + change
    return max(min_val, min(max_val, new_val))


class MockReadingSource:
    """Mock upstream producing one new reading per second.

    Temperature wanders within 25-45 and humidity within 30-90, so both
    threshold alerts show up now and then. Readings are stamped to the
    second, so polling faster than once a second yields duplicates just like
    the real source does.
    """

    def __init__(self) -> None:
        self._temperature = random.uniform(30.0, 35.0)
        self._humidity = random.uniform(50.0, 60.0)
        self._last: Reading | None = None

    async def fetch_latest(self) -> Reading:
        now = datetime.now().replace(microsecond=0)
        if self._last is not None and self._last.timestamp == now:
            return self._last
        self._temperature = _random_walk(
            self._temperature, drift=0.5, min_val=25.0, max_val=45.0
        )
        self._humidity = _random_walk(
            self._humidity, drift=1.0, min_val=30.0, max_val=90.0
        )
        self._last = Reading(
            temperature=f"{self._temperature:.1f}",
            humidity=f"{self._humidity:.1f}",
            timestamp=now,
        )
        return self._last
