"""Insert-if-new persistence of sensor readings.

A reading is stored at most once: the exact (temperature, humidity,
timestamp) triple is looked up and only inserted when absent. The lookup and
the insert run in the same immediate transaction, and a unique index on the
triple rejects any duplicate that still slips through.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import aiosqlite

from sensorhub.lib.db.connection import Database, load_template, storage_errors
from sensorhub.lib.reading import Reading
from sensorhub.logging import get_logger

if TYPE_CHECKING:
    from sensorhub.lib.config import Settings

logger = get_logger("lib.db.gate")


class PersistenceGate:
    """Persists each distinct reading exactly once."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    async def insert_if_new(self, reading: Reading) -> bool:
        """Store the reading unless an identical one is already stored.

        Returns:
            True if the reading was inserted, False if it was a duplicate.

        Raises:
            StorageUnavailableError: If the store cannot be reached.
            StorageQueryError: If the store rejects the statements.
        """
        params = reading.key
        with storage_errors():
            async with Database.from_settings(self._settings) as db:
                try:
                    async with db.transaction():
                        row = await db.fetchone(
                            load_template("reading_exists.sql"), params
                        )
                        if row is not None and row["count"] > 0:
                            logger.debug("Reading already stored: %s", reading)
                            return False
                        await db.execute(
                            load_template("insert_reading.sql"), params
                        )
                except aiosqlite.IntegrityError:
                    logger.debug("Reading stored concurrently: %s", reading)
                    return False

        logger.info("Stored new reading: %s", reading)
        return True
