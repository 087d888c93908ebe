"""Logging setup shared by the ingestion service and the read API.

Everything logs below the 'sensorhub' logger; uvicorn is routed through the
same stderr handler so both processes produce one uniform format.
"""

import logging
import sys

_configured = False

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s - %(message)s"


def configure(level: int = logging.INFO) -> None:
    """Attach the stderr handler once per process, later calls are no-ops."""
    global _configured
    if _configured:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    app_log = logging.getLogger("sensorhub")
    app_log.setLevel(level)
    app_log.addHandler(handler)

    uv_log = logging.getLogger("uvicorn")
    uv_log.handlers.clear()
    uv_log.addHandler(handler)

    # aiosqlite logs every statement at DEBUG, once per tick
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return the 'sensorhub.<name>' logger, e.g. get_logger("lib.db")."""
    return logging.getLogger(f"sensorhub.{name}")
