"""
Shared fixtures and configuration for the test suite.

Time is frozen at FIXED_NOW so hourly grids, daily windows and cache
expiry are deterministic. Provider HTTP traffic is mocked with respx.
"""

from datetime import datetime, timedelta, timezone

import pytest

from weathercompare.core.data_processing.series_builder import (
    ForecastSeriesBuilder,
)
from weathercompare.core.models import (
    Coordinates,
    Location,
    NormalizedObservation,
    Precipitation,
    SourceKind,
)
from weathercompare.core.normalization import UnitNormalizer

FIXED_NOW = datetime(2025, 5, 23, 14, 20, tzinfo=timezone.utc)
GRID_START = FIXED_NOW.replace(minute=0)
HOUR_MS = 3_600_000


def ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def hour_ms(offset: int) -> int:
    """Epoch ms of GRID_START + offset hours."""
    return ms(GRID_START + timedelta(hours=offset))


def make_observation(
    timestamp: int,
    temperature: float | None = 70.0,
    feels_like: float | None = 68.0,
    probability=10.0,
    amount: float = 0.0,
    condition: str = "Sunny",
) -> NormalizedObservation:
    return NormalizedObservation(
        timestamp=timestamp,
        temperature=temperature,
        feels_like=feels_like,
        humidity=55.0,
        wind_speed=5.0,
        wind_direction=180.0,
        precipitation=Precipitation(probability=probability, amount=amount),
        weather_condition=condition,
    )


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def grid_hour():
    """Epoch ms for an hour offset on the frozen hourly grid."""
    return hour_ms


@pytest.fixture
def observation_factory():
    return make_observation


@pytest.fixture
def normalizer():
    return UnitNormalizer()


@pytest.fixture
def builder(normalizer, fixed_clock):
    return ForecastSeriesBuilder(
        normalizer, hourly_hours=240, daily_days=10, clock=fixed_clock
    )


@pytest.fixture
def nyc_location():
    return Location(
        zip_code="10001",
        city="New York",
        state="NY",
        coordinates=Coordinates(latitude=40.7506, longitude=-73.9972),
    )


@pytest.fixture
def coordinate_location():
    return Location(
        coordinates=Coordinates(latitude=40.7506, longitude=-73.9972)
    )


@pytest.fixture
def all_sources():
    return [
        SourceKind.GOOGLE_WEATHER,
        SourceKind.AZURE_MAPS,
        SourceKind.FORECA,
        SourceKind.OPEN_METEO,
    ]


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow running tests")
    config.addinivalue_line("markers", "api: API related tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        node = item.nodeid.lower()
        if "/api/" in node or "routes" in node:
            item.add_marker(pytest.mark.api)
        if "integration" in node:
            item.add_marker(pytest.mark.integration)
        elif "unit" in node:
            item.add_marker(pytest.mark.unit)
