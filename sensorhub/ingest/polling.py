"""Poll the upstream source for new readings, and persist results in Sqlite.

Every tick fetches the latest reading, stores it if it has not been seen
before, and only for a newly stored reading checks the thresholds and sends
the resulting alerts. A reading seen again on a later tick is ignored, so
each reading alerts at most once. Polling frequency defaults to 3 seconds.
"""

from typing import override

from sensorhub.lib.alerts import evaluate
from sensorhub.lib.config import Settings, get_settings
from sensorhub.lib.db import PersistenceGate, init_db
from sensorhub.lib.exceptions import FetchError, StorageError
from sensorhub.lib.notifications import AlertDispatcher, get_gateway
from sensorhub.lib.polling import PollingService
from sensorhub.lib.reading import Reading
from sensorhub.lib.upstream import ReadingSource, UpstreamClient
from sensorhub.logging import configure, get_logger

logger = get_logger("ingest.polling")


class IngestionService(PollingService[Reading]):
    """Polling service for the upstream temperature/humidity source."""

    def __init__(
        self,
        settings: Settings,
        source: ReadingSource,
        gate: PersistenceGate,
        dispatcher: AlertDispatcher,
    ) -> None:
        super().__init__(name="ingest", frequency_sec=settings.polling.frequency_sec)
        self._settings = settings
        self._source = source
        self._gate = gate
        self._dispatcher = dispatcher
        self._schema_ready = False

    async def _ensure_schema(self) -> bool:
        """Create the database schema unless already done, False on failure."""
        if self._schema_ready:
            return True
        try:
            await init_db(self._settings)
        except StorageError as e:
            logger.error("Database initialization failed: %s", e)
            return False
        self._schema_ready = True
        return True

    @override
    async def initialize(self) -> None:
        """Create the database schema if needed.

        A failure is retried at the start of every tick until it succeeds.
        """
        await self._ensure_schema()

    @override
    async def cleanup(self) -> None:
        """Nothing to release, connections are opened per tick."""

    @override
    async def poll(self) -> Reading | None:
        """Fetch the latest reading from the upstream source."""
        try:
            reading = await self._source.fetch_latest()
        except FetchError as e:
            logger.warning("Fetch failed: %s", e)
            return None
        logger.debug("Read %s", reading)
        return reading

    @override
    async def persist(self, reading: Reading) -> bool:
        """Store the reading if new; storage failures count as not stored."""
        if not await self._ensure_schema():
            return False
        try:
            return await self._gate.insert_if_new(reading)
        except StorageError as e:
            logger.error("Could not store reading %s: %s", reading, e)
            return False

    @override
    async def on_new(self, reading: Reading) -> None:
        """Check the new reading against thresholds and send any alerts."""
        alerts = evaluate([reading], self._settings.thresholds)
        if not alerts:
            return
        logger.info("Reading %s raised %d alert(s)", reading, len(alerts))
        await self._dispatcher.notify(alerts)


def _create_source(settings: Settings) -> ReadingSource:
    """Create reading source based on configuration."""
    if settings.upstream.mock:
        from sensorhub.lib.mock import MockReadingSource

        logger.info("Using mock reading source")
        return MockReadingSource()
    return UpstreamClient(settings.upstream)


def create_service(settings: Settings) -> IngestionService:
    """Wire up the ingestion service from settings."""
    return IngestionService(
        settings,
        source=_create_source(settings),
        gate=PersistenceGate(settings),
        dispatcher=AlertDispatcher(get_gateway(settings.gateway)),
    )


def main() -> None:
    """Main entry point for the ingestion service."""
    configure()
    service = create_service(get_settings())
    service.run()


if __name__ == "__main__":
    main()
