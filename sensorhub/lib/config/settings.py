"""Settings models and configuration loading for the SensorHub application."""

from functools import cached_property, lru_cache
from typing import Annotated, Any, Self

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    HttpUrl,
    SecretStr,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

# Alerting thresholds of the deployed sensor
_MAX_TEMPERATURE = 40.0  # °C, alert strictly above
_MIN_HUMIDITY = 40.0  # %, alert strictly below
_MAX_HUMIDITY = 80.0  # %, alert strictly above


def _parse_bool(v: Any) -> bool:
    """Parse boolean from string '1'/'0' or actual bool."""
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        return v == "1"
    return bool(v)


def _validate_http_url_or_empty(v: str) -> str:
    """Validate HTTP URL format, allowing empty string."""
    if not v:
        return v
    HttpUrl(v)
    return v


_BoolFromStr = Annotated[bool, BeforeValidator(_parse_bool)]
_HttpUrlOrEmpty = Annotated[str, AfterValidator(_validate_http_url_or_empty)]


class ThresholdSettings(BaseModel):
    """Sensor threshold settings."""

    model_config = ConfigDict(frozen=True)

    max_temperature: float = _MAX_TEMPERATURE
    min_humidity: float = _MIN_HUMIDITY
    max_humidity: float = _MAX_HUMIDITY


class PollingSettings(BaseModel):
    """Ingestion polling settings."""

    model_config = ConfigDict(frozen=True)

    frequency_sec: float = 3.0


class UpstreamSettings(BaseModel):
    """Upstream reading source settings."""

    model_config = ConfigDict(frozen=True)

    url: str = "http://localhost:3000/api/sensor/all"
    timeout_sec: float = 5.0
    mock: bool = False


class GatewaySettings(BaseModel):
    """Messaging gateway settings."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    api_url: str = "https://api.fonnte.com"
    token: SecretStr = SecretStr("")
    target: str = ""
    group_name: str = ""
    timeout_sec: float = 5.0


class ServerSettings(BaseModel):
    """Read API settings."""

    model_config = ConfigDict(frozen=True)

    allow_origin: str = "http://localhost:3001"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    db_path: str = "sensor.sqlite3"
    db_timeout_sec: float = Field(default=5.0, gt=0)

    # Polling
    polling_frequency_sec: float = Field(default=3.0, gt=0)

    # Upstream
    mock_upstream: _BoolFromStr = False
    upstream_url: _HttpUrlOrEmpty = "http://localhost:3000/api/sensor/all"
    upstream_timeout_sec: float = Field(default=5.0, gt=0)

    # Thresholds
    max_temperature: float = _MAX_TEMPERATURE
    min_humidity: float = Field(default=_MIN_HUMIDITY, ge=0, le=100)
    max_humidity: float = Field(default=_MAX_HUMIDITY, ge=0, le=100)

    # Messaging gateway
    enable_notifications: _BoolFromStr = False
    gateway_api_url: _HttpUrlOrEmpty = "https://api.fonnte.com"
    gateway_token: SecretStr = SecretStr("")
    gateway_target: str = ""
    gateway_group_name: str = ""
    gateway_timeout_sec: float = Field(default=5.0, gt=0)

    # Read API
    allow_origin: str = "http://localhost:3001"

    @cached_property
    def thresholds(self) -> ThresholdSettings:
        """Get threshold settings as nested object."""
        return ThresholdSettings(
            max_temperature=self.max_temperature,
            min_humidity=self.min_humidity,
            max_humidity=self.max_humidity,
        )

    @cached_property
    def polling(self) -> PollingSettings:
        """Get polling settings."""
        return PollingSettings(frequency_sec=self.polling_frequency_sec)

    @cached_property
    def upstream(self) -> UpstreamSettings:
        """Get upstream source settings."""
        return UpstreamSettings(
            url=self.upstream_url,
            timeout_sec=self.upstream_timeout_sec,
            mock=self.mock_upstream,
        )

    @cached_property
    def gateway(self) -> GatewaySettings:
        """Get messaging gateway settings."""
        return GatewaySettings(
            enabled=self.enable_notifications,
            api_url=self.gateway_api_url.rstrip("/"),
            token=self.gateway_token,
            target=self.gateway_target,
            group_name=self.gateway_group_name,
            timeout_sec=self.gateway_timeout_sec,
        )

    @cached_property
    def server(self) -> ServerSettings:
        """Get read API settings."""
        return ServerSettings(allow_origin=self.allow_origin)

    @model_validator(mode="after")
    def validate_settings(self) -> Self:
        """Validate cross-field configuration constraints."""
        errors: list[str] = []

        if self.min_humidity >= self.max_humidity:
            errors.append(
                f"MIN_HUMIDITY ({self.min_humidity}) must be less than "
                f"MAX_HUMIDITY ({self.max_humidity})"
            )

        if not self.mock_upstream and not self.upstream_url:
            errors.append("UPSTREAM_URL is not set and MOCK_UPSTREAM is off")

        if self.enable_notifications:
            missing = []
            if not self.gateway_api_url:
                missing.append("GATEWAY_API_URL")
            if not self.gateway_token.get_secret_value():
                missing.append("GATEWAY_TOKEN")
            if not self.gateway_target and not self.gateway_group_name:
                missing.append("GATEWAY_TARGET or GATEWAY_GROUP_NAME")
            if missing:
                errors.append(
                    f"Notifications enabled but missing: {', '.join(missing)}"
                )

        if errors:
            raise ValueError(
                "Configuration validation failed:\n  - "
                + "\n  - ".join(errors)
            )

        return self


# Settings override for testing - allows injecting custom Settings without
# modifying environment variables or clearing the lru_cache.
_settings_override: Settings | None = None


@lru_cache(maxsize=1)
def _load_settings() -> Settings:
    """Load settings from environment (cached)."""
    return Settings()


def get_settings() -> Settings:
    """Get the global settings instance.

    Only entrypoints call this; pipeline components receive the Settings
    object through their constructors. For testing, use set_settings()
    from sensorhub.lib.config.testing to override.
    """
    if _settings_override is not None:
        return _settings_override
    return _load_settings()
