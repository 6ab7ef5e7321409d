"""
Open-Meteo Client - NOAA-backed forecast (reported as "NOAA").

Single request to /v1/forecast returning current conditions, 240 hourly
rows and 10 daily rows in imperial units. No API key.

API Documentation:
https://open-meteo.com/en/docs
"""

from ....core.cancellation import CancellationToken
from ....core.models import Location, PaginationInfo, SourceKind
from ....core.normalization.intermediate import ProviderPayload
from ..base_client import BaseProviderClient, ProviderConfig
from ..retry import RetryExecutor
from .open_meteo_parser import (
    DAILY_VARIABLES,
    HOURLY_VARIABLES,
    parse_current,
    parse_daily,
    parse_hourly,
)

FORECAST_PATH = "/v1/forecast"


class OpenMeteoConfig(ProviderConfig):
    base_url: str = "https://api.open-meteo.com"


class OpenMeteoClient(BaseProviderClient):
    source = SourceKind.OPEN_METEO
    display_name = "NOAA"
    requires_api_key = False

    async def _fetch_payload(
        self,
        location: Location,
        retry: RetryExecutor,
        cancel_token: CancellationToken,
    ) -> tuple[ProviderPayload, PaginationInfo | None]:
        params = {
            "latitude": location.coordinates.latitude,
            "longitude": location.coordinates.longitude,
            "hourly": ",".join(HOURLY_VARIABLES),
            "daily": ",".join(DAILY_VARIABLES),
            "current_weather": "true",
            "temperature_unit": "fahrenheit",
            "windspeed_unit": "mph",
            "precipitation_unit": "inch",
            "timezone": "auto",
            "forecast_days": max(self.builder.daily_days, 1),
        }
        body = await self._get_json(retry, FORECAST_PATH, params)

        hourly = parse_hourly(body)
        payload = ProviderPayload(
            source=self.source,
            current=parse_current(body, hourly),
            hourly=hourly,
            daily=parse_daily(body),
        )
        return payload, None
