"""Tests for the read API endpoints."""
import json
import sqlite3
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from starlette.middleware.cors import CORSMiddleware

from sensorhub.lib.exceptions import StorageUnavailableError
from sensorhub.server.api.gauge import format_timestamp, get_gauge
from sensorhub.server.api.health import health_check
from sensorhub.server.entrypoint import create_app


def make_request(settings):
    """Create a mock Starlette request carrying the app settings."""
    request = MagicMock()
    request.app.state.settings = settings
    return request


def insert_row(settings, temperature, humidity, timestamp):
    conn = sqlite3.connect(settings.db_path)
    conn.execute(
        "INSERT INTO reading (temperature, humidity, timestamp) VALUES (?, ?, ?)",
        (temperature, humidity, timestamp),
    )
    conn.commit()
    conn.close()


class TestFormatTimestamp:

    def test_naive_timestamp(self):
        assert format_timestamp("2024-01-01T00:00:00") == "2024-01-01T00:00:00"

    def test_drops_microseconds(self):
        assert format_timestamp("2024-01-01T08:30:15.123456") == "2024-01-01T08:30:15"


class TestGauge:

    @pytest.mark.asyncio
    async def test_not_found_when_empty(self, settings):
        response = await get_gauge(make_request(settings))

        assert response.status_code == 404
        assert json.loads(response.body) == {"error": "No data found"}

    @pytest.mark.asyncio
    async def test_returns_latest_reading(self, settings):
        insert_row(settings, "24.5", "55", "2024-01-01T00:00:00")
        insert_row(settings, "25.0", "54", "2024-01-01T00:00:03")

        response = await get_gauge(make_request(settings))

        assert response.status_code == 200
        assert json.loads(response.body) == {
            "temperature": "25.0",
            "humidity": "54",
            "timestamp": "2024-01-01T00:00:03",
        }

    @pytest.mark.asyncio
    async def test_storage_error(self, settings):
        with patch(
            "sensorhub.server.api.gauge.get_latest_reading",
            new_callable=AsyncMock,
            side_effect=StorageUnavailableError("unable to open database file"),
        ):
            response = await get_gauge(make_request(settings))

        assert response.status_code == 503


class TestHealthCheck:

    @pytest.mark.asyncio
    async def test_healthy_with_data(self, settings):
        insert_row(settings, "24.5", "55", "2024-01-01T00:00:00")

        response = await health_check(make_request(settings))

        body = json.loads(response.body)
        assert response.status_code == 200
        assert body["status"] == "healthy"
        assert body["checks"]["database"] == {"ok": True, "status": "ok"}
        assert body["checks"]["ingestion"] == {
            "ok": True,
            "last_reading": "2024-01-01T00:00:00",
        }

    @pytest.mark.asyncio
    async def test_healthy_without_data(self, settings):
        response = await health_check(make_request(settings))

        body = json.loads(response.body)
        assert response.status_code == 200
        assert body["checks"]["ingestion"] == {"ok": False, "last_reading": "no data"}

    @pytest.mark.asyncio
    async def test_unhealthy_when_database_fails(self, settings):
        with (
            patch(
                "sensorhub.server.api.health._check_database",
                new_callable=AsyncMock,
                return_value=(False, "unable to open database file"),
            ),
            patch(
                "sensorhub.server.api.health._check_ingestion",
                new_callable=AsyncMock,
                return_value=(False, "unable to open database file"),
            ),
        ):
            response = await health_check(make_request(settings))

        assert response.status_code == 503
        assert b'"status":"unhealthy"' in response.body


class TestCreateApp:

    def test_routes_and_state(self, settings):
        app = create_app(settings)

        paths = {route.path for route in app.routes}
        assert {"/health", "/api/gauge"} <= paths
        assert app.state.settings is settings

    def test_cors_restricted_to_origin(self, settings):
        app = create_app(settings)

        cors = [m for m in app.user_middleware if m.cls is CORSMiddleware]
        assert len(cors) == 1
        assert cors[0].kwargs["allow_origins"] == ["http://localhost:3001"]
        assert cors[0].kwargs["allow_methods"] == ["GET", "OPTIONS"]
