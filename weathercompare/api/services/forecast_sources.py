"""
Forecast source registry.

Display names follow what users recognise (Azure Maps serves AccuWeather
data, Open-Meteo serves NOAA models). Source identifiers accepted on the
HTTP API are normalized here, so "googleweather", "google_weather" and
"Google" all resolve to the same provider.
"""

from dataclasses import dataclass

from ...core.models import DEFAULT_SOURCE_ORDER, SourceKind


@dataclass(frozen=True)
class ForecastSourceInfo:
    source: SourceKind
    display_name: str
    provider: str
    requires_api_key: bool
    max_hours: int
    has_daily_product: bool


FORECAST_SOURCES: dict[SourceKind, ForecastSourceInfo] = {
    SourceKind.GOOGLE_WEATHER: ForecastSourceInfo(
        source=SourceKind.GOOGLE_WEATHER,
        display_name="Google",
        provider="Google Weather API",
        requires_api_key=True,
        max_hours=240,
        has_daily_product=False,
    ),
    SourceKind.AZURE_MAPS: ForecastSourceInfo(
        source=SourceKind.AZURE_MAPS,
        display_name="AccuWeather",
        provider="Azure Maps Weather",
        requires_api_key=True,
        max_hours=240,
        has_daily_product=True,
    ),
    SourceKind.FORECA: ForecastSourceInfo(
        source=SourceKind.FORECA,
        display_name="Foreca",
        provider="Foreca (RapidAPI)",
        requires_api_key=True,
        max_hours=168,
        has_daily_product=False,
    ),
    SourceKind.OPEN_METEO: ForecastSourceInfo(
        source=SourceKind.OPEN_METEO,
        display_name="NOAA",
        provider="Open-Meteo",
        requires_api_key=False,
        max_hours=240,
        has_daily_product=True,
    ),
}

_ALIASES: dict[str, SourceKind] = {
    "googleweather": SourceKind.GOOGLE_WEATHER,
    "google": SourceKind.GOOGLE_WEATHER,
    "azuremaps": SourceKind.AZURE_MAPS,
    "azure": SourceKind.AZURE_MAPS,
    "accuweather": SourceKind.AZURE_MAPS,
    "foreca": SourceKind.FORECA,
    "openmeteo": SourceKind.OPEN_METEO,
    "noaa": SourceKind.OPEN_METEO,
}


def display_name(source: SourceKind) -> str:
    return FORECAST_SOURCES[source].display_name


def parse_source(value: str) -> SourceKind:
    """Resolve a user-supplied source name; raises ValueError if unknown."""
    compact = value.strip().lower().replace(" ", "").replace("-", "")
    for source in DEFAULT_SOURCE_ORDER:
        if compact in (source.value, source.value.replace("_", "")):
            return source
    if compact in _ALIASES:
        return _ALIASES[compact]
    valid = ", ".join(s.value for s in DEFAULT_SOURCE_ORDER)
    raise ValueError(f"Unknown forecast source '{value}'. Valid: {valid}")
