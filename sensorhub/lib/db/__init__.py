"""Async database operations for the SensorHub application.

This package provides async database operations using aiosqlite for non-blocking
database access throughout the application.
"""

from sensorhub.lib.db.connection import Database as Database
from sensorhub.lib.db.connection import init_db as init_db
from sensorhub.lib.db.connection import load_template as load_template
from sensorhub.lib.db.connection import storage_errors as storage_errors
from sensorhub.lib.db.gate import PersistenceGate as PersistenceGate
from sensorhub.lib.db.queries import get_latest_reading as get_latest_reading
from sensorhub.lib.db.queries import ping as ping
from sensorhub.lib.db.types import SQLParams as SQLParams
from sensorhub.lib.db.types import StoredReading as StoredReading
