"""
Unit tests for GoogleWeatherClient.

respx mocks for httpx:
- Paginated hourly forecast stitched to 240 hours
- Rejected continuation token -> offset-coordinate fallback
- Unit tags overriding the documented metric defaults
- Error classification (auth, rate limit, transient 5xx)
"""

from datetime import timedelta

import pytest
import respx
from httpx import Response

from weathercompare.api.services.google_weather.google_weather_client import (
    FORECAST_PATH,
    GoogleWeatherClient,
    GoogleWeatherConfig,
)
from weathercompare.core.exceptions import (
    AuthError,
    NetworkError,
    RateLimitError,
)
from weathercompare.core.models import PrecipitationType, WeatherIcon

from ...conftest import GRID_START

BASE_URL = "https://weather.googleapis.com"
PRIMARY_LATITUDE = "40.7506"
PRIMARY_LONGITUDE = "-73.9972"


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def google_config():
    """Fast config: no page delay, no backoff."""
    return GoogleWeatherConfig(
        api_key="test-key",
        retry_attempts=3,
        retry_delay=0,
        page_delay=0,
    )


@pytest.fixture
def google_client(google_config, builder):
    return GoogleWeatherClient(google_config, builder)


def google_hour(offset: int, **overrides) -> dict:
    start = GRID_START + timedelta(hours=offset)
    hour = {
        "interval": {
            "startTime": start.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "endTime": (start + timedelta(hours=1)).strftime(
                "%Y-%m-%dT%H:%M:%SZ"
            ),
        },
        "isDaytime": True,
        "weatherCondition": {
            "type": "CLOUDY",
            "description": {"text": "Cloudy", "languageCode": "en"},
        },
        "temperature": {"degrees": 20.0, "unit": "CELSIUS"},
        "feelsLikeTemperature": {"degrees": 19.0, "unit": "CELSIUS"},
        "relativeHumidity": 60,
        "wind": {
            "direction": {"degrees": 270, "cardinal": "WEST"},
            "speed": {"value": 10, "unit": "KILOMETERS_PER_HOUR"},
        },
        "precipitation": {
            "probability": {"percent": 10, "type": "RAIN"},
            "qpf": {"quantity": 0, "unit": "MILLIMETERS"},
        },
    }
    hour.update(overrides)
    return hour


def page(start: int, count: int, token: str | None = None) -> dict:
    hours = [google_hour(h) for h in range(start, start + count)]
    body = {"forecastHours": hours}
    if token:
        body["nextPageToken"] = token
    return body


def is_fallback(request) -> bool:
    params = request.url.params
    return (
        params["location.latitude"] != PRIMARY_LATITUDE
        or params["location.longitude"] != PRIMARY_LONGITUDE
    )


# ============================================================================
# PAGINATION
# ============================================================================


@pytest.mark.asyncio
async def test_pages_stitched_to_full_series(google_client, nyc_location):
    """Ten 24-hour pages linked by tokens fill the 240-hour grid."""

    def handler(request):
        token = request.url.params.get("pageToken")
        index = int(token) if token else 0
        next_token = str(index + 1) if index < 9 else None
        return Response(200, json=page(index * 24, 24, next_token))

    with respx.mock(base_url=BASE_URL) as mock:
        route = mock.get(FORECAST_PATH).mock(side_effect=handler)
        async with google_client:
            series = await google_client.fetch(nyc_location)

    assert route.call_count == 10
    assert all(hour is not None for hour in series.hourly)
    info = series.pagination_info
    assert info.pages_requested == 10
    assert info.total_hours_retrieved == 240
    assert info.hours_from_api == 240
    assert info.hours_from_mock_data == 0

    first_request = route.calls[0].request
    assert first_request.url.params["key"] == "test-key"
    assert first_request.url.params["hours"] == "240"
    assert "pageToken" not in first_request.url.params


@pytest.mark.asyncio
async def test_rejected_token_switches_to_fallback(
    google_client, nyc_location
):
    """Token dies after 3 pages: >= 72 hours, pagesRequested == 3."""

    def handler(request):
        if is_fallback(request):
            return Response(200, json=page(0, 96))
        token = request.url.params.get("pageToken")
        if token == "3":
            return Response(
                400,
                json={
                    "error": {
                        "code": 400,
                        "message": "Invalid page_token",
                        "status": "INVALID_ARGUMENT",
                    }
                },
            )
        index = int(token) if token else 0
        return Response(200, json=page(index * 24, 24, str(index + 1)))

    with respx.mock(base_url=BASE_URL) as mock:
        route = mock.get(FORECAST_PATH).mock(side_effect=handler)
        async with google_client:
            series = await google_client.fetch(nyc_location)

    info = series.pagination_info
    assert info.pages_requested == 3
    assert info.total_hours_retrieved == 96
    assert info.hours_from_primary == 72
    assert info.hours_from_fallback == 24
    assert sum(hour is not None for hour in series.hourly) == 96
    assert not series.is_error

    fallback_calls = [c for c in route.calls if is_fallback(c.request)]
    assert fallback_calls
    assert fallback_calls[0].request.url.params["location.latitude"] == (
        "40.7606"
    )


@pytest.mark.asyncio
async def test_failing_page_keeps_partial_series(google_client, nyc_location):
    """Page 5 keeps failing with 500: the first 96 hours survive."""

    def handler(request):
        token = request.url.params.get("pageToken")
        index = int(token) if token else 0
        if index == 4:
            return Response(500, json={"error": {"code": 500}})
        return Response(200, json=page(index * 24, 24, str(index + 1)))

    with respx.mock(base_url=BASE_URL) as mock:
        route = mock.get(FORECAST_PATH).mock(side_effect=handler)
        async with google_client:
            series = await google_client.fetch(nyc_location)

    # 4 good pages, then the 5th page tried retry_attempts times
    assert route.call_count == 7
    assert not series.is_error
    assert sum(hour is not None for hour in series.hourly) == 96
    info = series.pagination_info
    assert info.pages_requested == 4
    assert info.total_hours_retrieved == 96
    assert info.hours_requested == 240
    assert info.failed_requests == 1


@pytest.mark.asyncio
async def test_ceiling_bounds_requests(builder, nyc_location):
    config = GoogleWeatherConfig(
        api_key="test-key", retry_delay=0, page_delay=0, max_pages=4
    )

    def handler(request):
        token = request.url.params.get("pageToken")
        index = int(token) if token else 0
        return Response(200, json=page(index, 1, str(index + 1)))

    with respx.mock(base_url=BASE_URL) as mock:
        route = mock.get(FORECAST_PATH).mock(side_effect=handler)
        async with GoogleWeatherClient(config, builder) as client:
            series = await client.fetch(nyc_location)

    assert route.call_count == 4
    assert series.pagination_info.total_hours_retrieved == 4


# ============================================================================
# PARSING / UNITS
# ============================================================================


@pytest.mark.asyncio
async def test_unit_tags_respected(google_client, nyc_location):
    hour = google_hour(
        0,
        precipitation={
            "probability": {"percent": 80, "type": "SNOW"},
            "qpf": {"quantity": 0.1, "unit": "INCHES"},
        },
    )
    with respx.mock(base_url=BASE_URL) as mock:
        mock.get(FORECAST_PATH).mock(
            return_value=Response(200, json={"forecastHours": [hour]})
        )
        async with google_client:
            series = await google_client.fetch(nyc_location)

    current = series.current
    assert current.temperature == 68.0
    assert current.feels_like == 66.2
    assert current.wind_speed == 6.2
    assert current.precipitation.amount == 2.5
    assert current.precipitation.probability == 80
    assert current.precipitation.type == PrecipitationType.SNOW
    assert current.weather_condition == "Cloudy"
    assert current.icon == WeatherIcon.CLOUDY
    assert series.display_name == "Google"


@pytest.mark.asyncio
async def test_daily_derived_from_hours(google_client, nyc_location):
    with respx.mock(base_url=BASE_URL) as mock:
        mock.get(FORECAST_PATH).mock(
            return_value=Response(200, json=page(0, 48))
        )
        async with google_client:
            series = await google_client.fetch(nyc_location)

    assert len(series.daily) == 3
    assert series.daily[0].temperature == 68.0


# ============================================================================
# ERRORS
# ============================================================================


@pytest.mark.asyncio
async def test_missing_key_fails_before_request(builder, nyc_location):
    client = GoogleWeatherClient(
        GoogleWeatherConfig(retry_delay=0, page_delay=0), builder
    )
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as mock:
        route = mock.get(FORECAST_PATH)
        with pytest.raises(AuthError, match="API key not configured"):
            await client.fetch(nyc_location)
    await client.close()

    assert not route.called


@pytest.mark.asyncio
async def test_forbidden_is_auth_error(google_client, nyc_location):
    with respx.mock(base_url=BASE_URL) as mock:
        route = mock.get(FORECAST_PATH).mock(return_value=Response(403))
        async with google_client:
            with pytest.raises(AuthError):
                await google_client.fetch(nyc_location)

    assert route.call_count == 1


@pytest.mark.asyncio
async def test_rate_limit_not_retried(google_client, nyc_location):
    with respx.mock(base_url=BASE_URL) as mock:
        route = mock.get(FORECAST_PATH).mock(
            return_value=Response(429, headers={"Retry-After": "30"})
        )
        async with google_client:
            with pytest.raises(RateLimitError) as exc_info:
                await google_client.fetch(nyc_location)

    assert route.call_count == 1
    assert exc_info.value.retry_after == 30
    assert exc_info.value.attempts == 1


@pytest.mark.asyncio
async def test_server_errors_retried(google_client, nyc_location):
    with respx.mock(base_url=BASE_URL) as mock:
        route = mock.get(FORECAST_PATH).mock(
            side_effect=[
                Response(503),
                Response(502),
                Response(200, json=page(0, 24)),
            ]
        )
        async with google_client:
            series = await google_client.fetch(nyc_location)

    assert route.call_count == 3
    assert series.attempts == 3


@pytest.mark.asyncio
async def test_server_errors_exhaust_retries(google_client, nyc_location):
    with respx.mock(base_url=BASE_URL) as mock:
        route = mock.get(FORECAST_PATH).mock(return_value=Response(500))
        async with google_client:
            with pytest.raises(NetworkError) as exc_info:
                await google_client.fetch(nyc_location)

    assert route.call_count == 3
    assert exc_info.value.attempts == 3
