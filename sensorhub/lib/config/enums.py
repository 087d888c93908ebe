"""Enumerations for the SensorHub application."""

from enum import StrEnum


class Unit(StrEnum):
    """Measurement units for sensor readings."""

    CELSIUS = "°C"
    PERCENT = "%"


class MeasureName(StrEnum):
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
