"""
Location key -> Location.

Accepted keys:
- 5-digit US ZIP code, geocoded through Azure Maps address search
- "lat,lon" decimal coordinates, used as-is (no geocoding)

Geocoding results are cached for an hour. In demo mode ZIP codes
resolve to a fixed demo location without any network access.
"""

import re

from loguru import logger

from ...core.demo import mock_location
from ...core.exceptions import (
    InvalidLocationKeyError,
    LocationResolutionError,
)
from ...core.models import Coordinates, Location
from ...infrastructure.cache import ResponseCache
from .azure_maps.azure_maps_client import AzureMapsClient

ZIP_PATTERN = re.compile(r"^\d{5}$")
COORDINATE_PATTERN = re.compile(
    r"^\s*(-?\d{1,3}(?:\.\d+)?)\s*,\s*(-?\d{1,3}(?:\.\d+)?)\s*$"
)

LOCATION_CACHE_SOURCE = "location"


def parse_coordinates(location_key: str) -> Coordinates | None:
    match = COORDINATE_PATTERN.match(location_key)
    if match is None:
        return None
    latitude, longitude = (float(g) for g in match.groups())
    try:
        return Coordinates(latitude=latitude, longitude=longitude)
    except ValueError as e:
        raise InvalidLocationKeyError(
            f"Coordinates out of range: '{location_key}'"
        ) from e


def validate_location_key(location_key: str) -> str:
    key = location_key.strip()
    if ZIP_PATTERN.match(key) or parse_coordinates(key) is not None:
        return key
    raise InvalidLocationKeyError(
        f"Invalid location '{location_key}': expected a 5-digit ZIP code "
        f"or 'lat,lon'"
    )


class LocationResolver:
    def __init__(
        self,
        geocoder: AzureMapsClient | None,
        cache: ResponseCache[Location],
        demo_mode: bool = False,
    ):
        self.geocoder = geocoder
        self.cache = cache
        self.demo_mode = demo_mode

    async def resolve(self, location_key: str) -> Location:
        key = validate_location_key(location_key)

        coordinates = parse_coordinates(key)
        if coordinates is not None:
            return Location(coordinates=coordinates)

        if self.demo_mode:
            return mock_location(key)

        cached = await self.cache.get(key, LOCATION_CACHE_SOURCE)
        if cached is not None:
            return cached.payload

        if self.geocoder is None:
            raise LocationResolutionError(
                f"No geocoder configured to resolve '{key}'"
            )

        location = await self.geocoder.search_address(key)
        await self.cache.set(key, LOCATION_CACHE_SOURCE, location)
        logger.debug(f"Location '{key}' cached")
        return location
