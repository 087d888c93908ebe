"""Generic async polling service abstraction.

Provides a reusable base class for services that follow the
poll → persist → (if new) process pattern on a fixed cadence.
"""
import asyncio
import signal
from abc import ABC, abstractmethod
from types import FrameType

from sensorhub.logging import get_logger


class PollingService[T](ABC):
    """Abstract base class for async polling services.

    Implements the common polling loop pattern with:
    - Fixed polling cadence, skipping periods missed by a slow tick
    - Serialized ticks (a tick never overlaps another one)
    - Graceful shutdown handling
    - Error recovery
    """

    def __init__(self, name: str, frequency_sec: float) -> None:
        """Initialize the polling service.

        Args:
            name: Service name for logging.
            frequency_sec: Polling frequency in seconds.
        """
        self.name = name
        self.frequency_sec = frequency_sec
        self._shutdown_requested = False
        self._tick_lock = asyncio.Lock()
        self._logger = get_logger(f"polling.{name}")

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize any resources needed before polling starts."""

    @abstractmethod
    async def cleanup(self) -> None:
        """Clean up resources before exit."""

    @abstractmethod
    async def poll(self) -> T | None:
        """Fetch the next item.

        Returns:
            The polled item, or None if polling failed and should be skipped.
        """

    @abstractmethod
    async def persist(self, item: T) -> bool:
        """Persist the item.

        Returns:
            True if the item was new and stored, False otherwise.
        """

    @abstractmethod
    async def on_new(self, item: T) -> None:
        """Process an item that was just stored for the first time."""

    def on_poll_error(self, error: Exception) -> None:
        """Handle an unexpected error raised during a tick.

        Override to customize error handling. Default logs the error.
        """
        self._logger.exception("%s poll error: %s", self.name, error)

    def _handle_shutdown(self, signum: int, frame: FrameType | None) -> None:
        """Handle shutdown signals gracefully."""
        signal_name = signal.Signals(signum).name
        self._logger.info("Received %s, initiating graceful shutdown...", signal_name)
        self._shutdown_requested = True

    def _setup_signal_handlers(self) -> None:
        """Register signal handlers for graceful shutdown."""
        signal.signal(signal.SIGTERM, self._handle_shutdown)
        signal.signal(signal.SIGINT, self._handle_shutdown)

    async def _poll_cycle(self) -> None:
        """Execute a single poll → persist → process cycle."""
        item = await self.poll()
        if item is None:
            return
        if await self.persist(item):
            await self.on_new(item)

    async def tick(self) -> bool:
        """Run one cycle unless another one is still in progress.

        Returns:
            True if the cycle ran, False if it was skipped.
        """
        if self._tick_lock.locked():
            self._logger.warning("Previous tick still running, skipping")
            return False
        async with self._tick_lock:
            try:
                await self._poll_cycle()
            except Exception as e:
                self.on_poll_error(e)
        return True

    async def _run_loop(self) -> None:
        """Run the async polling loop with precise timing."""
        await self.initialize()
        self._logger.info("%s polling service started", self.name)

        loop = asyncio.get_running_loop()

        try:
            while not self._shutdown_requested:
                cycle_start = loop.time()
                await self.tick()

                elapsed = loop.time() - cycle_start
                if elapsed > self.frequency_sec:
                    missed = int(elapsed // self.frequency_sec)
                    self._logger.warning(
                        "Tick took %.2fs, skipping %d missed period(s)",
                        elapsed,
                        missed,
                    )
                # Sleep until the next cadence boundary
                sleep_time = self.frequency_sec - (elapsed % self.frequency_sec)
                if not self._shutdown_requested:
                    await asyncio.sleep(sleep_time)
        finally:
            self._logger.info("Cleaning up resources...")
            await self.cleanup()
            self._logger.info("%s shutdown complete", self.name)

    def run(self) -> None:
        """Run the polling loop.

        This is the main entry point. It:
        1. Sets up signal handlers for graceful shutdown
        2. Calls initialize()
        3. Enters the polling loop (poll → persist → process)
        4. Calls cleanup() on exit
        """
        self._setup_signal_handlers()
        asyncio.run(self._run_loop())
