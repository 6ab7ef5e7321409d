"""
Foreca Client - RapidAPI hosted Foreca weather.

Workflow:
1. GET /location/search/{zip}?country=us -> Foreca location id
   (coordinates are passed straight through as "lon,lat")
2. GET /current/{id}          -> current conditions
3. GET /forecast/hourly/{id}  -> up to 168 hourly periods (7 days)

Hours past day 7 stay empty on the hourly grid. There is no daily
product; daily records are derived from hourly data.

API Documentation:
https://rapidapi.com/foreca-ltd-foreca-ltd-default/api/foreca-weather
"""

from typing import Any

from ....core.cancellation import CancellationToken
from ....core.models import Location, PaginationInfo, SourceKind
from ....core.normalization.intermediate import ProviderPayload
from ..base_client import BaseProviderClient, ProviderConfig
from ..retry import RetryExecutor
from .foreca_parser import parse_current, parse_hourly, parse_location_id


class ForecaConfig(ProviderConfig):
    """
    Foreca configuration.

    Attributes:
        rapidapi_host: Value for the x-rapidapi-host header
        periods: Hourly periods requested (API maximum 168)
    """

    base_url: str = "https://foreca-weather.p.rapidapi.com"
    rapidapi_host: str = "foreca-weather.p.rapidapi.com"
    periods: int = 168


class ForecaClient(BaseProviderClient):
    source = SourceKind.FORECA
    display_name = "Foreca"

    config: ForecaConfig

    def _headers(self) -> dict[str, str]:
        return {
            "x-rapidapi-host": self.config.rapidapi_host,
            "x-rapidapi-key": self._require_api_key(),
        }

    def _unit_params(self) -> dict[str, Any]:
        return {"tempunit": "F", "windunit": "MPH", "lang": "en"}

    async def _location_id(
        self, location: Location, retry: RetryExecutor
    ) -> str:
        if not location.zip_code:
            coordinates = location.coordinates
            return f"{coordinates.longitude},{coordinates.latitude}"
        body = await self._get_json(
            retry,
            f"/location/search/{location.zip_code}",
            {"country": "us", "lang": "en"},
            self._headers(),
        )
        return parse_location_id(body, location.zip_code)

    async def _fetch_payload(
        self,
        location: Location,
        retry: RetryExecutor,
        cancel_token: CancellationToken,
    ) -> tuple[ProviderPayload, PaginationInfo | None]:
        location_id = await self._location_id(location, retry)
        cancel_token.raise_if_cancelled()

        current_body = await self._get_json(
            retry,
            f"/current/{location_id}",
            self._unit_params(),
            self._headers(),
        )
        cancel_token.raise_if_cancelled()

        hourly_body = await self._get_json(
            retry,
            f"/forecast/hourly/{location_id}",
            {
                **self._unit_params(),
                "periods": min(self.config.periods, self.builder.hourly_hours),
                "dataset": "full",
            },
            self._headers(),
        )

        payload = ProviderPayload(
            source=self.source,
            current=parse_current(current_body),
            hourly=parse_hourly(hourly_body),
        )
        return payload, None
