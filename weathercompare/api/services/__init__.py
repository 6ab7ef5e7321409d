"""
Forecast provider services.

Clients (one per provider, async httpx):
- GoogleWeatherClient  - hourly, paginated (stitched), metric tagged
- AzureMapsClient      - AccuWeather hourly + daily, address search
- ForecaClient         - RapidAPI Foreca current + hourly (7 days)
- OpenMeteoClient      - NOAA models, current + hourly + daily

Orchestration:
- ProviderClientFactory      - builds clients from config
- LocationResolver           - ZIP / "lat,lon" -> Location
- ForecastComparisonService  - concurrent fan-out, caching, comparison
"""

from typing import Any

__all__ = [
    "AzureMapsClient",
    "BaseProviderClient",
    "ForecaClient",
    "ForecastComparisonService",
    "GoogleWeatherClient",
    "LocationResolver",
    "OpenMeteoClient",
    "ProviderClientFactory",
    "RetryExecutor",
    "build_forecast_service",
]


def __getattr__(name: str) -> Any:
    """Lazy loading to avoid circular imports with the config package."""
    import importlib

    lazy_imports: dict[str, tuple[str, str]] = {
        "AzureMapsClient": (
            ".azure_maps.azure_maps_client",
            "AzureMapsClient",
        ),
        "BaseProviderClient": (".base_client", "BaseProviderClient"),
        "ForecaClient": (".foreca.foreca_client", "ForecaClient"),
        "ForecastComparisonService": (
            ".forecast_service",
            "ForecastComparisonService",
        ),
        "GoogleWeatherClient": (
            ".google_weather.google_weather_client",
            "GoogleWeatherClient",
        ),
        "LocationResolver": (".location_resolver", "LocationResolver"),
        "OpenMeteoClient": (
            ".open_meteo.open_meteo_client",
            "OpenMeteoClient",
        ),
        "ProviderClientFactory": (
            ".provider_factory",
            "ProviderClientFactory",
        ),
        "RetryExecutor": (".retry", "RetryExecutor"),
        "build_forecast_service": (
            ".forecast_service",
            "build_forecast_service",
        ),
    }

    if name in lazy_imports:
        module_path, attr_name = lazy_imports[name]
        module = importlib.import_module(module_path, package=__name__)
        return getattr(module, attr_name)

    raise AttributeError(f"Module '{__name__}' has no attribute '{name}'")
