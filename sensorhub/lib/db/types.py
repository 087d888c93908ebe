"""Type definitions for database operations."""

from typing import Any, TypedDict

type SQLParams = tuple[Any, ...] | dict[str, Any]
"""SQL parameter types: positional tuple or named dict for query binding."""


class StoredReading(TypedDict):
    """Reading row as persisted in the database."""

    temperature: str
    humidity: str
    timestamp: str
