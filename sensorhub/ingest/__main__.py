"""Ingestion service entrypoint.

Polls the upstream source for the latest temperature and humidity reading,
persists new readings to the database, and sends alerts when thresholds
are exceeded.

Usage: python -m sensorhub.ingest
"""

from sensorhub.ingest.polling import main

if __name__ == "__main__":
    main()
