"""Centralized configuration for the SensorHub application.

This package provides:
- Enums for measure names and units
- Pydantic settings models for configuration
"""

from .enums import MeasureName, Unit
from .settings import (
    GatewaySettings,
    PollingSettings,
    ServerSettings,
    Settings,
    ThresholdSettings,
    UpstreamSettings,
    get_settings,
)

__all__ = [
    # Enums
    "MeasureName",
    "Unit",
    # Settings models
    "GatewaySettings",
    "PollingSettings",
    "ServerSettings",
    "Settings",
    "ThresholdSettings",
    "UpstreamSettings",
    # Functions
    "get_settings",
]
