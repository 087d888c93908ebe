"""Health check endpoint for monitoring service status."""

import asyncio
from datetime import UTC, datetime

from starlette.requests import Request
from starlette.responses import JSONResponse

from sensorhub.lib.config import Settings
from sensorhub.lib.db import get_latest_reading, ping
from sensorhub.lib.exceptions import StorageError
from sensorhub.logging import get_logger

logger = get_logger("server.api.health")


async def _check_database(settings: Settings) -> tuple[bool, str]:
    """Check if database is accessible."""
    try:
        await ping(settings)
        return True, "ok"
    except StorageError as e:
        logger.error("Database health check failed: %s", e)
        return False, str(e)


async def _check_ingestion(settings: Settings) -> tuple[bool, str | None]:
    """Check if any reading has been stored yet."""
    try:
        latest = await get_latest_reading(settings)
        if latest is None:
            return False, "no data"
        return True, latest["timestamp"]
    except StorageError as e:
        logger.error("Ingestion health check failed: %s", e)
        return False, str(e)


async def health_check(request: Request) -> JSONResponse:
    """Return health status of the application and its dependencies."""
    settings = request.app.state.settings
    (db_ok, db_status), (ingest_ok, ingest_last) = await asyncio.gather(
        _check_database(settings),
        _check_ingestion(settings),
    )

    return JSONResponse(
        {
            "status": "healthy" if db_ok else "unhealthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "checks": {
                "database": {"ok": db_ok, "status": db_status},
                "ingestion": {"ok": ingest_ok, "last_reading": ingest_last},
            },
        },
        status_code=200 if db_ok else 503,
    )
