"""Client for the upstream source of sensor readings.

The source exposes the latest readings over HTTP as JSON, either a single
object or a list whose first element is the most recent reading:

    [{"temperature": "24.5", "humidity": "61", "timestamp": "2024-01-01T00:00:00"}]
"""

import asyncio
import json
import urllib.request
from datetime import datetime
from typing import Annotated, Any, Protocol

from pydantic import BaseModel, BeforeValidator, ConfigDict, ValidationError

from sensorhub.lib.config import UpstreamSettings
from sensorhub.lib.exceptions import FetchError
from sensorhub.lib.reading import Reading
from sensorhub.logging import get_logger

logger = get_logger("lib.upstream")


def _to_decimal_text(v: Any) -> Any:
    """Accept numbers as their decimal text, keep strings untouched."""
    if isinstance(v, bool):
        return v
    if isinstance(v, int | float):
        return str(v)
    if isinstance(v, str):
        return v.strip()
    return v


_DecimalText = Annotated[str, BeforeValidator(_to_decimal_text)]


class ReadingPayload(BaseModel):
    """Validated reading as received from the upstream source."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    temperature: _DecimalText
    humidity: _DecimalText
    timestamp: datetime

    def to_reading(self) -> Reading:
        return Reading(
            temperature=self.temperature,
            humidity=self.humidity,
            timestamp=self.timestamp,
        )


def parse_latest(body: Any) -> Reading:
    """Extract the latest reading from a decoded upstream response.

    Raises:
        FetchError: If the response is empty or malformed.
    """
    if isinstance(body, list):
        if not body:
            raise FetchError("Upstream returned no readings")
        body = body[0]
    if not isinstance(body, dict):
        raise FetchError(f"Unexpected upstream payload: {body!r}")
    try:
        return ReadingPayload.model_validate(body).to_reading()
    except ValidationError as e:
        raise FetchError(f"Malformed upstream reading: {e}") from e


class ReadingSource(Protocol):
    """Protocol for sources of the latest sensor reading."""

    async def fetch_latest(self) -> Reading: ...


class UpstreamClient:
    """Fetches the latest reading from the upstream HTTP endpoint."""

    def __init__(self, settings: UpstreamSettings) -> None:
        self._settings = settings

    def _get(self) -> Any:
        req = urllib.request.Request(
            self._settings.url,
            headers={"Accept": "application/json"},
            method="GET",
        )
        with urllib.request.urlopen(req, timeout=self._settings.timeout_sec) as resp:
            return json.loads(resp.read().decode("utf-8"))

    async def fetch_latest(self) -> Reading:
        """Return the most recent reading reported by the upstream source.

        Raises:
            FetchError: On network errors, timeouts, or bad payloads.
        """
        try:
            body = await asyncio.to_thread(self._get)
        except OSError as e:
            raise FetchError(f"Upstream unreachable: {e}") from e
        except ValueError as e:
            raise FetchError(f"Upstream returned invalid JSON: {e}") from e
        reading = parse_latest(body)
        logger.debug("Fetched reading %s", reading)
        return reading
