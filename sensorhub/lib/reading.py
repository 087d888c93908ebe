"""Domain model for environmental sensor readings."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Reading:
    """One temperature/humidity sample as reported by the upstream source.

    Temperature and humidity keep the exact decimal text received, two
    readings are the same iff all three fields are equal.
    """

    temperature: str
    humidity: str
    timestamp: datetime

    @property
    def key(self) -> tuple[str, str, str]:
        """Return the (temperature, humidity, timestamp) triple as stored."""
        return (self.temperature, self.humidity, self.timestamp.isoformat())

    def __str__(self) -> str:
        return f"{self.temperature}°C, {self.humidity}% at {self.timestamp.isoformat()}"
