"""
Shared configuration management for the WeatherKit token proxy.
"""

import math
from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TOKEN_TTL_SECONDS = 1800
MIN_TOKEN_TTL_SECONDS = 300
MAX_TOKEN_TTL_SECONDS = 3600
WEATHERKIT_BASE_URL = "https://weatherkit.apple.com/api/v1/weather/en"


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    env: str = Field(default="local", validation_alias=AliasChoices("ACCESS_ENV", "env"))
    log_level: str = Field(default="info", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))

    # Server
    host: str = "0.0.0.0"
    port: int = 8787


class WeatherProxyConfig(BaseConfig):
    """Settings for the WeatherKit proxy service.

    All values come from the environment (or ``.env``). The private key is
    kept as a plain string here and handed to the key loader untouched.
    """

    service_name: str = "weather"

    # WeatherKit credentials
    weatherkit_team_id: str = ""
    weatherkit_service_id: str = ""
    weatherkit_key_id: str = ""
    weatherkit_p8: str = Field(default="", repr=False)
    weatherkit_token_ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS

    # Upstream
    weatherkit_base_url: str = WEATHERKIT_BASE_URL
    weatherkit_country_code: str = "US"

    # CORS
    allowed_origins: str = ""
    allowed_origin: str = ""

    @field_validator(
        "weatherkit_team_id",
        "weatherkit_service_id",
        "weatherkit_key_id",
        "weatherkit_p8",
        "allowed_origins",
        "allowed_origin",
        mode="before",
    )
    @classmethod
    def _strip(cls, value: Any) -> str:
        return str(value if value is not None else "").strip()

    @field_validator("weatherkit_token_ttl_seconds", mode="before")
    @classmethod
    def _coerce_ttl(cls, value: Any) -> int:
        """Unparseable or non-positive values fall back to the default."""
        text = str(value if value is not None else "").strip()
        if not text:
            return DEFAULT_TOKEN_TTL_SECONDS
        try:
            raw = float(text)
        except ValueError:
            return DEFAULT_TOKEN_TTL_SECONDS
        if not math.isfinite(raw) or raw <= 0:
            return DEFAULT_TOKEN_TTL_SECONDS
        return max(MIN_TOKEN_TTL_SECONDS, min(MAX_TOKEN_TTL_SECONDS, math.floor(raw)))

    @property
    def signing_configured(self) -> bool:
        """True when every value needed to mint a token is present."""
        return all((
            self.weatherkit_team_id,
            self.weatherkit_service_id,
            self.weatherkit_key_id,
            self.weatherkit_p8,
        ))


def get_config(**overrides: Any) -> WeatherProxyConfig:
    """Get configuration for the proxy service."""
    return WeatherProxyConfig(**overrides)
