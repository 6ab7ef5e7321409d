"""
HTTP-level tests for the weather and system routes.

The app runs in demo mode, so the real service graph is built by the
lifespan without any network access. Error mapping is exercised with a
stub service injected through dependency_overrides.
"""

import pytest
from fastapi.testclient import TestClient

from weathercompare.api.dependencies import get_forecast_service
from weathercompare.config import Settings
from weathercompare.core.exceptions import (
    LocationResolutionError,
    NetworkError,
    OperationCancelledError,
)
from weathercompare.main import create_application


def demo_settings(**overrides) -> Settings:
    values = dict(
        environment="test", demo_mode=True, metrics_enabled=False
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def client():
    app = create_application(demo_settings())
    with TestClient(app) as test_client:
        yield test_client


class StubService:
    """Raises the configured error from every lookup."""

    def __init__(self, error: Exception):
        self.error = error

    async def get_forecast(self, *args, **kwargs):
        raise self.error

    async def get_all_forecasts(self, *args, **kwargs):
        raise self.error

    async def compare(self, *args, **kwargs):
        raise self.error


def stub_client(error: Exception) -> TestClient:
    app = create_application(demo_settings())
    app.dependency_overrides[get_forecast_service] = lambda: StubService(
        error
    )
    return TestClient(app)


# ============================================================================
# SYSTEM
# ============================================================================


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_root(client):
    assert client.get("/").json()["message"] == "WeatherCompare API"


def test_status(client):
    body = client.get("/status").json()

    assert body["demoMode"] is True
    assert body["environment"] == "test"
    assert body["sources"] == [
        "google_weather",
        "azure_maps",
        "foreca",
        "open_meteo",
    ]


def test_cache_clear(client):
    response = client.post("/cache/clear")

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert "entries removed" in response.json()["message"]


def test_service_unavailable_without_lifespan():
    app = create_application(demo_settings())
    response = TestClient(app).get("/weather/10001/all")
    assert response.status_code == 503


# ============================================================================
# WEATHER
# ============================================================================


def test_single_source(client):
    response = client.get("/weather/10001", params={"source": "google"})

    assert response.status_code == 200
    body = response.json()
    assert body["source"] == "google_weather"
    assert body["displayName"] == "Google"
    assert body["isMockData"] is True
    assert body["isError"] is False
    assert len(body["hourly"]) == 240
    assert len(body["daily"]) == 10
    assert body["paginationInfo"]["hoursFromMockData"] == 240
    assert "feelsLike" in body["current"]
    assert "probability" in body["current"]["precipitation"]


def test_unknown_source(client):
    response = client.get("/weather/10001", params={"source": "weatherbit"})

    assert response.status_code == 400
    assert "Unknown forecast source" in response.json()["detail"]


def test_source_required(client):
    assert client.get("/weather/10001").status_code == 422


@pytest.mark.parametrize("key", ["1234", "abcde", "91.0,10.0"])
def test_invalid_location_key(client, key):
    response = client.get(f"/weather/{key}/all")
    assert response.status_code == 400


def test_all_sources_in_order(client):
    response = client.get("/weather/40.7506,-73.9972/all")

    assert response.status_code == 200
    body = response.json()
    assert [s["displayName"] for s in body] == [
        "Google",
        "AccuWeather",
        "Foreca",
        "NOAA",
    ]
    assert body[0]["location"]["coordinates"]["latitude"] == 40.7506


def test_comparison(client):
    response = client.get("/weather/10001/comparison")

    assert response.status_code == 200
    body = response.json()
    assert len(body["days"]) == 10
    assert len(body["availableSources"]) == 4
    assert {c["propertyName"] for c in body["current"]} == {
        "temperature",
        "feelsLike",
        "precipitationProbability",
    }
    assert isinstance(body["days"][0]["isDryDay"], bool)

    # Demo data rains on alternate afternoons
    summary = body["hourlyPrecipitation"][0]
    assert len(summary["probabilityCategories"]) == 240
    assert summary["bars"]
    bar = summary["bars"][0]
    assert bar["displayClass"].startswith("precip-")
    assert bar["durationHours"] == bar["endHour"] - bar["startHour"] + 1


# ============================================================================
# ERROR MAPPING
# ============================================================================


@pytest.mark.parametrize(
    "error,status_code",
    [
        (LocationResolutionError("No location found for '00000'"), 404),
        (NetworkError("search timed out", "azure_maps"), 502),
        (OperationCancelledError("Client disconnected"), 499),
    ],
)
def test_error_status(error, status_code):
    response = stub_client(error).get("/weather/00000/all")
    assert response.status_code == status_code


def test_upstream_detail_not_leaked():
    error = NetworkError("secret upstream detail", "azure_maps")
    response = stub_client(error).get("/weather/00000/comparison")

    assert response.json()["detail"] == "Unable to resolve location"
