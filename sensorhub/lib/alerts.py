"""Threshold evaluation for sensor readings.

Pure functions classifying readings against the configured thresholds and
formatting the alert texts sent out by the notification gateway. Values are
parsed from their decimal text; anything that does not parse is logged and
treated as within range, so malformed data never raises a false alert.
"""

import math
from collections.abc import Iterable

from sensorhub.lib.config import MeasureName, ThresholdSettings, Unit
from sensorhub.lib.reading import Reading
from sensorhub.logging import get_logger

logger = get_logger("lib.alerts")

DEFAULT_THRESHOLDS = ThresholdSettings()


def _parse_value(reading: Reading, name: MeasureName) -> float | None:
    """Parse a measure of the reading, returning None if not numeric."""
    raw = getattr(reading, name)
    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.warning(
            "Non-numeric %s %r in reading at %s, skipping threshold check",
            name,
            raw,
            reading.timestamp.isoformat(),
        )
        return None
    if math.isnan(value):
        logger.warning(
            "NaN %s in reading at %s, skipping threshold check",
            name,
            reading.timestamp.isoformat(),
        )
        return None
    return value


def is_high_temperature(
    reading: Reading, thresholds: ThresholdSettings = DEFAULT_THRESHOLDS
) -> bool:
    """Return True if the temperature is strictly above the maximum."""
    value = _parse_value(reading, MeasureName.TEMPERATURE)
    return value is not None and value > thresholds.max_temperature


def is_high_or_low_humidity(
    reading: Reading, thresholds: ThresholdSettings = DEFAULT_THRESHOLDS
) -> bool:
    """Return True if the humidity is outside the [min, max] band."""
    value = _parse_value(reading, MeasureName.HUMIDITY)
    if value is None:
        return False
    return value < thresholds.min_humidity or value > thresholds.max_humidity


def describe_temperature_alert(reading: Reading) -> str:
    return (
        f"🚨 High temperature alert at {reading.timestamp.isoformat()}: "
        f"{reading.temperature} {Unit.CELSIUS}"
    )


def describe_humidity_alert(reading: Reading) -> str:
    return (
        f"💧 Humidity alert at {reading.timestamp.isoformat()}: "
        f"{reading.humidity}{Unit.PERCENT}"
    )


def evaluate(
    readings: Iterable[Reading],
    thresholds: ThresholdSettings = DEFAULT_THRESHOLDS,
) -> list[str]:
    """Build the alert texts for a batch of readings.

    All temperature alerts come first, in reading order, followed by all
    humidity alerts.
    """
    readings = list(readings)
    temperature_alerts = [
        describe_temperature_alert(r)
        for r in readings
        if is_high_temperature(r, thresholds)
    ]
    humidity_alerts = [
        describe_humidity_alert(r)
        for r in readings
        if is_high_or_low_humidity(r, thresholds)
    ]
    return temperature_alerts + humidity_alerts
