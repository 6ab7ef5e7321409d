"""
Azure Maps Client - AccuWeather-backed forecasts and address search.

Endpoints:
- GET /weather/forecast/hourly/json (duration=240)
- GET /weather/forecast/daily/json (duration=10)
- GET /search/address/json (ZIP code -> coordinates)

The hourly and daily calls run concurrently. Current conditions are the
first hourly point.

API Documentation:
https://learn.microsoft.com/en-us/rest/api/maps/weather
"""

import asyncio
from typing import Any

from loguru import logger

from ....core.cancellation import CancellationToken
from ....core.models import Location, PaginationInfo, SourceKind
from ....core.normalization.intermediate import ProviderPayload
from ..base_client import BaseProviderClient, ProviderConfig
from ..retry import RetryExecutor
from .azure_maps_parser import (
    parse_address_search,
    parse_daily_forecast,
    parse_hourly_forecast,
)

HOURLY_PATH = "/weather/forecast/hourly/json"
DAILY_PATH = "/weather/forecast/daily/json"
SEARCH_PATH = "/search/address/json"

WEATHER_API_VERSION = "1.1"
SEARCH_API_VERSION = "1.0"


class AzureMapsConfig(ProviderConfig):
    base_url: str = "https://atlas.microsoft.com"
    language: str = "en-US"


class AzureMapsClient(BaseProviderClient):
    source = SourceKind.AZURE_MAPS
    display_name = "AccuWeather"

    config: AzureMapsConfig

    def _weather_params(
        self, location: Location, duration: int
    ) -> dict[str, Any]:
        coordinates = location.coordinates
        return {
            "api-version": WEATHER_API_VERSION,
            "subscription-key": self._require_api_key(),
            "query": f"{coordinates.latitude},{coordinates.longitude}",
            "duration": duration,
            "unit": "imperial",
            "language": self.config.language,
        }

    async def _fetch_payload(
        self,
        location: Location,
        retry: RetryExecutor,
        cancel_token: CancellationToken,
    ) -> tuple[ProviderPayload, PaginationInfo | None]:
        tasks = [
            asyncio.ensure_future(
                self._get_json(
                    retry,
                    HOURLY_PATH,
                    self._weather_params(location, self.builder.hourly_hours),
                )
            ),
            asyncio.ensure_future(
                self._get_json(
                    retry,
                    DAILY_PATH,
                    self._weather_params(location, self.builder.daily_days),
                )
            ),
        ]
        try:
            hourly_body, daily_body = await asyncio.gather(*tasks)
        except BaseException:
            # One call failed: stop the other and collect its outcome
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        cancel_token.raise_if_cancelled()

        hourly = parse_hourly_forecast(hourly_body)
        daily = parse_daily_forecast(daily_body)
        logger.debug(
            f"AccuWeather: {len(hourly)} hourly, {len(daily)} daily "
            f"records for {location.key}"
        )
        payload = ProviderPayload(
            source=self.source,
            current=hourly[0] if hourly else None,
            hourly=hourly,
            daily=daily,
        )
        return payload, None

    async def search_address(self, query: str) -> Location:
        """Geocode a US ZIP code (or free-form address) to a Location."""
        params = {
            "api-version": SEARCH_API_VERSION,
            "subscription-key": self._require_api_key(),
            "query": query,
            "countrySet": "US",
            "limit": 1,
        }
        body = await self._get_json(self._new_retry(), SEARCH_PATH, params)
        location = parse_address_search(body, query)
        logger.info(
            f"Resolved '{query}' -> {location.city}, {location.state} "
            f"({location.coordinates.latitude:.4f}, "
            f"{location.coordinates.longitude:.4f})"
        )
        return location
