"""Latest reading endpoint, used by the dashboard gauges."""

from datetime import datetime

from starlette.requests import Request
from starlette.responses import JSONResponse

from sensorhub.lib.db import StoredReading, get_latest_reading
from sensorhub.lib.exceptions import StorageError
from sensorhub.logging import get_logger

logger = get_logger("server.api.gauge")


def format_timestamp(raw: str) -> str:
    """Format a stored ISO timestamp as local YYYY-MM-DDTHH:MM:SS."""
    ts = datetime.fromisoformat(raw)
    if ts.tzinfo is not None:
        ts = ts.astimezone()
    return ts.strftime("%Y-%m-%dT%H:%M:%S")


def _serialize(row: StoredReading) -> dict[str, str]:
    return {
        "temperature": str(row["temperature"]),
        "humidity": str(row["humidity"]),
        "timestamp": format_timestamp(row["timestamp"]),
    }


async def get_gauge(request: Request) -> JSONResponse:
    """Return the most recent stored reading."""
    try:
        latest = await get_latest_reading(request.app.state.settings)
    except StorageError:
        logger.exception("Database error fetching latest reading")
        return JSONResponse({"error": "Database unavailable"}, status_code=503)

    if latest is None:
        return JSONResponse({"error": "No data found"}, status_code=404)
    return JSONResponse(_serialize(latest))
