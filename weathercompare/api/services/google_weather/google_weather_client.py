"""
Google Weather Client - hourly forecast via `forecast/hours:lookup`.

The API serves roughly one day per page even when 240 hours are
requested, and its `nextPageToken` is frequently rejected on reuse.
Pages are therefore pulled through the TimeSeriesStitcher, which falls
back to slightly offset coordinates when a token is rejected and
reports provenance in `paginationInfo`.

Units: metric by default (°C, km/h, mm) but every value is tagged, and
tags win over the default.

There is no daily product; daily records are derived from hourly data.

API Documentation:
https://developers.google.com/maps/documentation/weather/hourly-forecast
"""

from typing import Any

import httpx

from ....core.cancellation import CancellationToken
from ....core.exceptions import ForecastError, PaginationTokenInvalid
from ....core.models import Location, PaginationInfo, SourceKind
from ....core.normalization.intermediate import (
    ProviderPayload,
    RawObservation,
)
from ....core.stitching import (
    PageRequest,
    PageResult,
    TimeSeriesStitcher,
)
from ..base_client import BaseProviderClient, ProviderConfig
from ..retry import RetryExecutor
from .google_weather_parser import parse_forecast_page

FORECAST_PATH = "/v1/forecast/hours:lookup"


class GoogleWeatherConfig(ProviderConfig):
    """
    Google Weather configuration.

    Attributes:
        page_size: Hours requested per page
        page_delay: Fixed delay between page requests (seconds)
        max_pages: Ceiling on page requests (primary + fallback)
    """

    base_url: str = "https://weather.googleapis.com"
    timeout: float = 15.0
    page_size: int = 24
    page_delay: float = 0.5
    max_pages: int = 20


class GoogleWeatherClient(BaseProviderClient):
    source = SourceKind.GOOGLE_WEATHER
    display_name = "Google"

    config: GoogleWeatherConfig

    def _classify_client_error(
        self, response: httpx.Response, path: str, params: dict[str, Any]
    ) -> ForecastError:
        body = response.text.lower()
        if response.status_code == 400 and (
            "pageToken" in params
            or "page_token" in body
            or "pagetoken" in body
        ):
            return PaginationTokenInvalid(
                f"Page token rejected (HTTP 400): {response.text[:200]}",
                self.source.value,
            )
        return super()._classify_client_error(response, path, params)

    async def _fetch_payload(
        self,
        location: Location,
        retry: RetryExecutor,
        cancel_token: CancellationToken,
    ) -> tuple[ProviderPayload, PaginationInfo | None]:
        api_key = self._require_api_key()
        hours = self.builder.hourly_hours
        latitude = location.coordinates.latitude
        longitude = location.coordinates.longitude

        async def fetch_page(
            request: PageRequest,
        ) -> PageResult[RawObservation]:
            params: dict[str, Any] = {
                "key": api_key,
                "location.latitude": round(
                    latitude + request.latitude_offset, 4
                ),
                "location.longitude": round(
                    longitude + request.longitude_offset, 4
                ),
                "hours": hours,
                "pageSize": self.config.page_size,
            }
            if request.page_token:
                params["pageToken"] = request.page_token
            body = await self._get_json(retry, FORECAST_PATH, params)
            points, next_token = parse_forecast_page(body)
            return PageResult(points=points, next_page_token=next_token)

        stitcher = TimeSeriesStitcher(
            hours_requested=hours,
            max_iterations=self.config.max_pages,
            page_delay=self.config.page_delay,
            label=self.label,
        )
        result = await stitcher.stitch(fetch_page, cancel_token)

        payload = ProviderPayload(source=self.source, hourly=result.points)
        return payload, result.provenance.to_pagination_info()
