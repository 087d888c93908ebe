"""Database query functions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sensorhub.lib.db.connection import Database, load_template, storage_errors
from sensorhub.lib.db.types import StoredReading

if TYPE_CHECKING:
    from sensorhub.lib.config import Settings


async def get_latest_reading(settings: Settings) -> StoredReading | None:
    """Return the most recent stored reading, or None if the table is empty."""
    with storage_errors():
        async with Database.from_settings(settings) as db:
            row = await db.fetchone(load_template("latest_reading.sql"))
    return cast(StoredReading | None, row)


async def ping(settings: Settings) -> None:
    """Run a trivial query, raising a StorageError if the store is unusable."""
    with storage_errors():
        async with Database.from_settings(settings) as db:
            await db.fetchone("SELECT 1")
