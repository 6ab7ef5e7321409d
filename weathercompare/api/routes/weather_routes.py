"""
Forecast endpoints.

- GET /weather/{location_key}?source=...   one source
- GET /weather/{location_key}/all          every configured source
- GET /weather/{location_key}/comparison   cross-source agreement

location_key is a 5-digit US ZIP code or "lat,lon".
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger

from ...core.cancellation import CancellationToken
from ...core.exceptions import (
    ForecastError,
    InvalidLocationKeyError,
    LocationResolutionError,
    OperationCancelledError,
)
from ...core.models import ComparisonReport, ForecastSeries
from ..dependencies import get_cancel_token, get_forecast_service
from ..services.forecast_service import ForecastComparisonService
from ..services.forecast_sources import parse_source

router = APIRouter(prefix="/weather", tags=["Weather"])

# Non-standard "client closed request"
CLIENT_CLOSED_REQUEST = 499


def _http_error(error: ForecastError) -> HTTPException:
    if isinstance(error, InvalidLocationKeyError):
        return HTTPException(status.HTTP_400_BAD_REQUEST, error.message)
    if isinstance(error, LocationResolutionError):
        return HTTPException(status.HTTP_404_NOT_FOUND, error.message)
    if isinstance(error, OperationCancelledError):
        return HTTPException(CLIENT_CLOSED_REQUEST, error.message)
    logger.error(f"Location lookup failed: {error}")
    return HTTPException(
        status.HTTP_502_BAD_GATEWAY, "Unable to resolve location"
    )


@router.get("/{location_key}", response_model=ForecastSeries)
async def get_forecast(
    location_key: str,
    source: str = Query(..., description="Forecast source id"),
    force_refresh: bool = Query(False, description="Bypass the cache"),
    service: ForecastComparisonService = Depends(get_forecast_service),
    cancel_token: CancellationToken = Depends(get_cancel_token),
):
    """
    Forecast from a single source.

    **Example:** `GET /weather/10001?source=open_meteo`

    **Response (abridged):**
    ```json
    {
        "source": "open_meteo",
        "displayName": "NOAA",
        "location": {"zipCode": "10001", "city": "New York"},
        "current": {"temperature": 71.2, "precipitation": {...}},
        "hourly": [...],
        "daily": [...],
        "lastUpdated": "2025-05-23T14:05:00Z",
        "isError": false
    }
    ```
    """
    try:
        kind = parse_source(source)
    except ValueError as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(e)) from e

    try:
        return await service.get_forecast(
            location_key, kind, force_refresh, cancel_token
        )
    except ForecastError as e:
        raise _http_error(e) from e


@router.get("/{location_key}/all", response_model=list[ForecastSeries])
async def get_all_forecasts(
    location_key: str,
    force_refresh: bool = Query(False, description="Bypass the cache"),
    service: ForecastComparisonService = Depends(get_forecast_service),
    cancel_token: CancellationToken = Depends(get_cancel_token),
):
    """
    Forecasts from every configured source, in fixed order.

    Failing sources are reported in place with `isError: true` (and
    `rateLimited: true` when throttled); the array length never changes.
    """
    try:
        return await service.get_all_forecasts(
            location_key, force_refresh, cancel_token
        )
    except ForecastError as e:
        raise _http_error(e) from e


@router.get("/{location_key}/comparison", response_model=ComparisonReport)
async def get_comparison(
    location_key: str,
    force_refresh: bool = Query(False, description="Bypass the cache"),
    service: ForecastComparisonService = Depends(get_forecast_service),
    cancel_token: CancellationToken = Depends(get_cancel_token),
):
    """
    Agreement between sources for current conditions and each day.

    **Response (abridged):**
    ```json
    {
        "availableSources": ["google_weather", "open_meteo"],
        "current": [
            {"propertyName": "temperature", "agrees": true,
             "difference": 2.5, "agreementLevel": "high"}
        ],
        "days": [{"day": "2025-05-23", "isDryDay": true, ...}]
    }
    ```
    """
    try:
        return await service.compare(
            location_key, force_refresh, cancel_token
        )
    except ForecastError as e:
        raise _http_error(e) from e
