"""
Application configuration using Pydantic Settings.

Values come from environment variables prefixed with WEATHERCOMPARE_
(nested models use "__", e.g. WEATHERCOMPARE_GOOGLE_WEATHER__API_KEY)
and from a .env file in the working directory.
"""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..api.services.azure_maps.azure_maps_client import AzureMapsConfig
from ..api.services.base_client import ProviderConfig
from ..api.services.foreca.foreca_client import ForecaConfig
from ..api.services.google_weather.google_weather_client import (
    GoogleWeatherConfig,
)
from ..api.services.open_meteo.open_meteo_client import OpenMeteoConfig
from ..core.models import DEFAULT_SOURCE_ORDER, SourceKind


class CacheSettings(BaseModel):
    backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"
    default_ttl: float = 15 * 60
    source_ttls: dict[str, float] = Field(
        default_factory=lambda: {SourceKind.GOOGLE_WEATHER.value: 30 * 60}
    )
    location_ttl: float = 60 * 60


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env."""

    # App
    app_name: str = "WeatherCompare"
    version: str = "1.0.0"
    environment: Literal["development", "production", "test"] = (
        "development"
    )
    demo_mode: bool = False
    api_prefix: str = ""
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"
    log_dir: str | None = "logs"
    json_logs: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    metrics_enabled: bool = True

    # Forecast window
    enabled_sources: list[SourceKind] = Field(
        default_factory=lambda: list(DEFAULT_SOURCE_ORDER)
    )
    hourly_hours: int = Field(240, ge=1)
    daily_days: int = Field(10, ge=1)
    calendar_timezone: str = "UTC"

    # Providers
    google_weather: GoogleWeatherConfig = Field(
        default_factory=GoogleWeatherConfig
    )
    azure_maps: AzureMapsConfig = Field(default_factory=AzureMapsConfig)
    foreca: ForecaConfig = Field(default_factory=ForecaConfig)
    open_meteo: OpenMeteoConfig = Field(default_factory=OpenMeteoConfig)

    cache: CacheSettings = Field(default_factory=CacheSettings)

    model_config = SettingsConfigDict(
        env_prefix="WEATHERCOMPARE_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("enabled_sources")
    @classmethod
    def _keep_fixed_order(cls, sources: list[SourceKind]) -> list[SourceKind]:
        """Sources are always reported in the fixed provider order."""
        wanted = set(sources)
        return [s for s in DEFAULT_SOURCE_ORDER if s in wanted]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def provider(self, source: SourceKind) -> ProviderConfig:
        return getattr(self, source.value)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
