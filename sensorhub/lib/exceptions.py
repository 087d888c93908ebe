"""Custom exceptions for the SensorHub application.

Provides a hierarchy of domain-specific exceptions. Each pipeline component
translates low-level errors (socket, JSON, SQLite) into one of these at its
boundary, so the ingestion loop only ever has to handle this hierarchy.
"""


class SensorHubError(Exception):
    """Base exception for all application errors."""


class FetchError(SensorHubError):
    """Raised when the upstream source is unreachable or returns bad data."""


class DatabaseError(SensorHubError):
    """Base exception for database-related errors."""


class DatabaseNotConnectedError(DatabaseError):
    """Raised when attempting database operations without a connection."""

    def __init__(self, message: str = "Database not connected") -> None:
        super().__init__(message)


class StorageError(DatabaseError):
    """Base exception for failed reading storage operations."""


class StorageUnavailableError(StorageError):
    """Raised when the reading store cannot be reached."""


class StorageQueryError(StorageError):
    """Raised when a query against the reading store is rejected."""


class NotificationError(SensorHubError):
    """Base exception for notification-related errors."""


class GatewayResolutionError(NotificationError):
    """Raised when the gateway destination lookup fails."""


class DispatchError(NotificationError):
    """Raised when a single outbound message could not be sent."""
