"""Database connection management.

Provides async database operations using aiosqlite for non-blocking
database access throughout the application.

Connections are short-lived: callers open one per unit of work
(one per ingestion tick, one per API request) and close it when done:

    async with Database.from_settings(settings) as db:
        await db.execute(...)

Driver errors are translated into the storage exceptions of
sensorhub.lib.exceptions by storage_errors().
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from functools import cache
from pathlib import Path
from typing import TYPE_CHECKING, Any, cast

import aiosqlite

from sensorhub.lib.db.types import SQLParams
from sensorhub.lib.exceptions import (
    DatabaseNotConnectedError,
    StorageQueryError,
    StorageUnavailableError,
)
from sensorhub.logging import get_logger

if TYPE_CHECKING:
    from sensorhub.lib.config import Settings

_logger = get_logger("lib.db")

# SQL templates directory
_SQL_DIR = Path(__file__).resolve().parent.parent / "sql"


@cache
def load_template(name: str) -> str:
    """Load and cache a SQL template file.

    Raises:
        FileNotFoundError: If the template file does not exist, with a message
            indicating the expected location.
    """
    path = _SQL_DIR / name
    if not path.exists():
        raise FileNotFoundError(f"SQL template not found: {path}")
    return path.read_text()


def _dict_factory(
    cursor: aiosqlite.Cursor, row: tuple[Any, ...]
) -> dict[str, Any]:
    """Convert a row to a dictionary using column names."""
    desc: tuple[Any, ...] = cursor.description or ()
    return {col[0]: row[idx] for idx, col in enumerate(desc)}


@contextmanager
def storage_errors() -> Iterator[None]:
    """Translate aiosqlite errors into storage exceptions.

    OperationalError covers unopenable files, locked databases and I/O
    failures, all of which mean the store cannot be used right now.
    """
    try:
        yield
    except aiosqlite.OperationalError as e:
        raise StorageUnavailableError(str(e)) from e
    except aiosqlite.Error as e:
        raise StorageQueryError(str(e)) from e


class Database:
    """Async database connection wrapper."""

    def __init__(self, db_path: str, timeout_sec: float = 5.0):
        self._db_path = db_path
        self._timeout_sec = timeout_sec
        self._connection: aiosqlite.Connection | None = None
        self._in_transaction = False

    @classmethod
    def from_settings(cls, settings: Settings) -> Database:
        return cls(settings.db_path, settings.db_timeout_sec)

    async def connect(self) -> None:
        """Open the database connection."""
        if self._connection is None:
            self._connection = await aiosqlite.connect(
                self._db_path,
                timeout=self._timeout_sec,
            )
            self._connection.row_factory = _dict_factory  # type: ignore[assignment]

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    async def __aenter__(self) -> Database:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Context manager for database transactions.

        Takes the write lock up front (BEGIN IMMEDIATE) so reads made inside
        the block cannot be invalidated by another writer before commit.
        All operations are committed together on success, or rolled back if
        an exception occurs.
        """
        if self._connection is None:
            raise DatabaseNotConnectedError()
        self._in_transaction = True
        await self._connection.execute("BEGIN IMMEDIATE")
        try:
            yield
            await self._connection.commit()
        except BaseException:
            await self._connection.rollback()
            raise
        finally:
            self._in_transaction = False

    async def execute(self, sql: str, params: SQLParams = ()) -> int:
        """Execute a SQL statement.

        Auto-commits unless inside a transaction() context.

        Returns:
            Number of rows affected by the statement.
        """
        if self._connection is None:
            raise DatabaseNotConnectedError()
        cursor = await self._connection.execute(sql, params)
        if not self._in_transaction:
            await self._connection.commit()
        return cursor.rowcount

    async def executescript(self, sql: str) -> None:
        """Execute multiple SQL statements."""
        if self._connection is None:
            raise DatabaseNotConnectedError()
        await self._connection.executescript(sql)

    async def fetchone(
        self, sql: str, params: SQLParams = ()
    ) -> dict[str, Any] | None:
        """Fetch a single row."""
        if self._connection is None:
            raise DatabaseNotConnectedError()
        async with self._connection.execute(sql, params) as cursor:
            row = await cursor.fetchone()
            return cast(dict[str, Any] | None, row)

    async def execute_pragma(self, pragma: str) -> None:
        """Execute a PRAGMA statement directly on the connection."""
        if self._connection is None:
            raise DatabaseNotConnectedError()
        await self._connection.execute(pragma)


async def init_db(settings: Settings) -> None:
    """Create the reading table and its indexes if they do not exist.

    Raises:
        StorageUnavailableError: If the database file cannot be opened.
    """
    with storage_errors():
        async with Database.from_settings(settings) as db:
            await db.execute_pragma("PRAGMA journal_mode=WAL")
            await db.execute(load_template("init_reading_table.sql"))
            await db.executescript(load_template("idx_reading.sql"))
    _logger.info("Initialized database: %s", settings.db_path)
