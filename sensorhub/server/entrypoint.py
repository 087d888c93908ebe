"""Application factory for the web server."""

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.routing import Route

from sensorhub.lib.config import Settings, get_settings
from sensorhub.logging import configure

from .api.gauge import get_gauge
from .api.health import health_check


def create_app(settings: Settings | None = None) -> Starlette:
    """Create and configure the Starlette application.

    Database connections are opened per request, the settings object is
    shared through app.state.

    Returns:
        Configured Starlette application instance.
    """
    configure()
    settings = settings or get_settings()

    routes = [
        Route("/health", health_check),
        Route("/api/gauge", get_gauge),
    ]
    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=[settings.server.allow_origin],
            allow_methods=["GET", "OPTIONS"],
            allow_headers=["Content-Type"],
        ),
    ]

    app = Starlette(routes=routes, middleware=middleware)
    app.state.settings = settings
    return app
