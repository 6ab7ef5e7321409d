"""
Canonical data model shared by every provider.

All values are expressed in canonical units after normalization:
- temperature / feelsLike: °F
- windSpeed: mph
- precipitation.amount: mm (rounded once, at normalization time)
- precipitation.probability: 0-100 or the "n/a" sentinel

Models serialize to camelCase JSON (by_alias) which is the stable
contract consumed by the UI.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Provider omitted the probability; distinct from an explicit 0
NOT_AVAILABLE = "n/a"

Probability = float | Literal["n/a"]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class SourceKind(str, Enum):
    """Configured forecast providers, in response order."""

    GOOGLE_WEATHER = "google_weather"
    AZURE_MAPS = "azure_maps"
    FORECA = "foreca"
    OPEN_METEO = "open_meteo"


DEFAULT_SOURCE_ORDER: tuple[SourceKind, ...] = (
    SourceKind.GOOGLE_WEATHER,
    SourceKind.AZURE_MAPS,
    SourceKind.FORECA,
    SourceKind.OPEN_METEO,
)


class PrecipitationType(str, Enum):
    RAIN = "rain"
    SNOW = "snow"
    ICE = "ice"
    MIXED = "mixed"
    UNDEFINED = "undefined"


class WeatherIcon(str, Enum):
    """Canonical icon set (AccuWeather naming, superset of all providers)."""

    SUNNY = "sunny"
    MOSTLY_SUNNY = "mostly-sunny"
    PARTLY_SUNNY = "partly-sunny"
    INTERMITTENT_CLOUDS = "intermittent-clouds"
    HAZY_SUNSHINE = "hazy-sunshine"
    MOSTLY_CLOUDY = "mostly-cloudy"
    CLOUDY = "cloudy"
    DREARY = "dreary"
    FOG = "fog"
    SHOWERS = "showers"
    MOSTLY_CLOUDY_SHOWERS = "mostly-cloudy-showers"
    PARTLY_SUNNY_SHOWERS = "partly-sunny-showers"
    THUNDERSTORMS = "thunderstorms"
    MOSTLY_CLOUDY_THUNDERSTORMS = "mostly-cloudy-thunderstorms"
    PARTLY_SUNNY_THUNDERSTORMS = "partly-sunny-thunderstorms"
    RAIN = "rain"
    FLURRIES = "flurries"
    MOSTLY_CLOUDY_FLURRIES = "mostly-cloudy-flurries"
    PARTLY_SUNNY_FLURRIES = "partly-sunny-flurries"
    SNOW = "snow"
    MOSTLY_CLOUDY_SNOW = "mostly-cloudy-snow"
    ICE = "ice"
    SLEET = "sleet"
    FREEZING_RAIN = "freezing-rain"
    RAIN_AND_SNOW = "rain-and-snow"
    HOT = "hot"
    COLD = "cold"
    WINDY = "windy"
    CLEAR_NIGHT = "clear-night"
    MOSTLY_CLEAR_NIGHT = "mostly-clear-night"
    PARTLY_CLOUDY_NIGHT = "partly-cloudy-night"
    INTERMITTENT_CLOUDS_NIGHT = "intermittent-clouds-night"
    HAZY_NIGHT = "hazy-night"
    MOSTLY_CLOUDY_NIGHT = "mostly-cloudy-night"
    PARTLY_CLOUDY_SHOWERS_NIGHT = "partly-cloudy-showers-night"
    MOSTLY_CLOUDY_SHOWERS_NIGHT = "mostly-cloudy-showers-night"
    PARTLY_CLOUDY_THUNDERSTORMS_NIGHT = "partly-cloudy-thunderstorms-night"
    MOSTLY_CLOUDY_THUNDERSTORMS_NIGHT = "mostly-cloudy-thunderstorms-night"
    MOSTLY_CLOUDY_FLURRIES_NIGHT = "mostly-cloudy-flurries-night"
    MOSTLY_CLOUDY_SNOW_NIGHT = "mostly-cloudy-snow-night"
    UNKNOWN = "unknown"


class Coordinates(CamelModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90, description="Latitude")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude")


class Location(CamelModel):
    """Resolved location. Immutable once resolved."""

    model_config = ConfigDict(frozen=True)

    zip_code: str | None = Field(None, description="5-digit US ZIP code")
    city: str = Field("", description="City / municipality")
    state: str = Field("", description="State or subdivision")
    country: str = Field("US", description="Country code")
    coordinates: Coordinates

    @property
    def key(self) -> str:
        """Stable identifier used for cache keys."""
        if self.zip_code:
            return self.zip_code
        return (
            f"{self.coordinates.latitude:.4f},"
            f"{self.coordinates.longitude:.4f}"
        )


class Precipitation(CamelModel):
    probability: Probability = Field(
        NOT_AVAILABLE, description="Chance of precipitation (%) or 'n/a'"
    )
    amount: float = Field(0.0, ge=0, description="Amount (mm)")
    type: PrecipitationType = Field(
        PrecipitationType.UNDEFINED,
        description="rain|snow|ice|mixed|undefined",
    )

    @field_validator("type", mode="before")
    @classmethod
    def _undefined_when_missing(cls, value):
        return PrecipitationType.UNDEFINED if value is None else value


class NormalizedObservation(CamelModel):
    """One forecast point (hour or day) in canonical units."""

    timestamp: int = Field(..., description="Epoch milliseconds (UTC)")
    temperature: float | None = Field(None, description="Temperature (°F)")
    feels_like: float | None = Field(None, description="Feels-like (°F)")
    humidity: float | None = Field(
        None, ge=0, le=100, description="Relative humidity (%)"
    )
    wind_speed: float | None = Field(None, ge=0, description="Wind (mph)")
    wind_direction: float | None = Field(
        None, description="Wind direction (degrees)"
    )
    precipitation: Precipitation = Field(default_factory=Precipitation)
    weather_condition: str = ""
    icon: WeatherIcon = WeatherIcon.UNKNOWN

    @property
    def moment(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc)


class PaginationInfo(CamelModel):
    """Stitching provenance reported alongside paginated series."""

    pages_requested: int = 0
    total_hours_retrieved: int = 0
    hours_from_api: int = 0
    hours_from_mock_data: int = 0
    hours_from_primary: int = 0
    hours_from_fallback: int = 0
    hours_requested: int = 0
    failed_requests: int = 0


class ForecastSeries(CamelModel):
    """Complete forecast for one (location, source) pair."""

    source: SourceKind
    display_name: str = ""
    location: Location
    current: NormalizedObservation | None = None
    hourly: list[NormalizedObservation | None] = Field(default_factory=list)
    daily: list[NormalizedObservation] = Field(default_factory=list)
    last_updated: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    is_error: bool = False
    error_message: str | None = None
    rate_limited: bool = False
    is_mock_data: bool = False
    mock_data_reason: str | None = None
    pagination_info: PaginationInfo | None = None
    attempts: int | None = Field(
        None, description="Provider attempts used (diagnostics)"
    )

    @classmethod
    def error(
        cls,
        source: SourceKind,
        location: Location,
        message: str,
        display_name: str = "",
        rate_limited: bool = False,
        attempts: int | None = None,
    ) -> "ForecastSeries":
        return cls(
            source=source,
            display_name=display_name,
            location=location,
            is_error=True,
            error_message=message,
            rate_limited=rate_limited,
            attempts=attempts,
        )


class AgreementLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class AgreementResult(CamelModel):
    property_name: str
    agrees: bool = True
    difference: float = 0.0
    agreement_level: AgreementLevel = AgreementLevel.HIGH
    values_compared: int = 0


class DayComparison(CamelModel):
    day: date
    temperature: AgreementResult
    feels_like: AgreementResult
    precipitation_probability: AgreementResult
    is_dry_day: bool


class PrecipitationBar(CamelModel):
    """Run of consecutive hours with measurable precipitation."""

    start_hour: int
    end_hour: int
    duration_hours: int
    max_intensity: float = Field(..., description="Peak amount (mm)")
    avg_intensity: float = Field(..., description="Mean amount (mm)")
    display_class: str
    has_thunderstorm: bool = False
    is_isolated: bool = False


class SourcePrecipitationSummary(CamelModel):
    source: SourceKind
    intensities: list[str | None] = Field(default_factory=list)
    display_classes: list[str | None] = Field(default_factory=list)
    probability_categories: list[str | None] = Field(default_factory=list)
    bars: list[PrecipitationBar] = Field(default_factory=list)


class ComparisonReport(CamelModel):
    """Cross-source comparison for one location."""

    location: Location
    generated_at: datetime
    sources: list[SourceKind]
    available_sources: list[SourceKind]
    current: list[AgreementResult]
    days: list[DayComparison]
    hourly_precipitation: list[SourcePrecipitationSummary]
