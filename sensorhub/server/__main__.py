"""Web server entrypoint.

Runs the Starlette web application using uvicorn. For production,
use uvicorn directly:

    uvicorn sensorhub.server.entrypoint:create_app --factory --port 5000

Usage: python -m sensorhub.server
"""
import uvicorn


def main() -> None:
    """Run the web server for local development."""
    uvicorn.run(
        "sensorhub.server.entrypoint:create_app",
        factory=True,
        host="0.0.0.0",
        port=5000,
        reload=True,
    )


if __name__ == "__main__":
    main()
