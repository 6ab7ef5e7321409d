"""
Azure Maps (AccuWeather) payloads -> RawObservation / Location.

Requested with unit=imperial; values come tagged ("F", "mi/h", "in").
Daily records are stamped at 12:00 UTC of the forecast date so every
source lines up on the same daily grid.
"""

from typing import Any

from ....core.data_processing.daily_aggregation import noon_utc_ms
from ....core.exceptions import LocationResolutionError, UpstreamSchemaError
from ....core.models import (
    Coordinates,
    Location,
    PrecipitationType,
    SourceKind,
)
from ....core.normalization.field_result import (
    extract_list,
    extract_number,
    extract_text,
    parse_calendar_date,
    parse_timestamp_ms,
)
from ....core.normalization.icons import (
    accuweather_icon,
    precip_type_from_probabilities,
)
from ....core.normalization.intermediate import RawObservation, RawValue

SOURCE = SourceKind.AZURE_MAPS.value
PRECIPITATION_TYPES = {t.value for t in PrecipitationType}


def _tagged(payload: Any, path: str) -> RawValue:
    return RawValue(
        extract_number(payload, f"{path}.value").unwrap(SOURCE),
        extract_text(payload, f"{path}.unit").unwrap(SOURCE),
    )


def _number(payload: Any, path: str) -> float | None:
    return extract_number(payload, path).unwrap(SOURCE)


def _forecasts(body: Any) -> list[Any]:
    if not isinstance(body, dict):
        raise UpstreamSchemaError("Response body is not an object", SOURCE)
    return extract_list(body, "forecasts").unwrap(SOURCE) or []


def _icon_code(payload: Any, path: str) -> int | None:
    code = _number(payload, path)
    return None if code is None else int(code)


def _precip_type(period: Any) -> PrecipitationType | None:
    if period.get("hasPrecipitation") is False:
        return None
    return precip_type_from_probabilities(
        _number(period, "rainProbability"),
        _number(period, "snowProbability"),
        _number(period, "iceProbability"),
    )


def parse_hourly_forecast(body: Any) -> list[RawObservation]:
    observations = []
    for hour in _forecasts(body):
        if not isinstance(hour, dict):
            raise UpstreamSchemaError(
                "forecast entry is not an object", SOURCE
            )
        timestamp = parse_timestamp_ms(hour.get("date"), "date").unwrap(
            SOURCE
        )
        observations.append(
            RawObservation(
                timestamp=timestamp,
                temperature=_tagged(hour, "temperature"),
                feels_like=_tagged(hour, "realFeelTemperature"),
                humidity=_number(hour, "relativeHumidity"),
                wind_speed=_tagged(hour, "wind.speed"),
                wind_direction=_number(hour, "wind.direction.degrees"),
                precip_probability=_number(hour, "precipitationProbability"),
                precip_amount=_tagged(hour, "totalLiquid"),
                precip_type=_precip_type(hour),
                condition=extract_text(
                    hour, "iconPhrase", default=""
                ).unwrap(SOURCE),
                icon=accuweather_icon(_icon_code(hour, "iconCode")),
            )
        )
    return observations


def _daily_precip_type(day: Any) -> PrecipitationType | None:
    declared = extract_text(day, "precipitationType").unwrap(SOURCE)
    if declared and declared.lower() in PRECIPITATION_TYPES:
        return PrecipitationType(declared.lower())
    return _precip_type(day)


def parse_daily_forecast(body: Any) -> list[RawObservation]:
    observations = []
    for forecast in _forecasts(body):
        if not isinstance(forecast, dict):
            raise UpstreamSchemaError(
                "forecast entry is not an object", SOURCE
            )
        day = parse_calendar_date(forecast.get("date"), "date").unwrap(SOURCE)
        period = forecast.get("day") or {}
        observations.append(
            RawObservation(
                timestamp=noon_utc_ms(day),
                temperature=_tagged(forecast, "temperature.maximum"),
                feels_like=_tagged(forecast, "realFeelTemperature.maximum"),
                humidity=_number(period, "relativeHumidity"),
                wind_speed=_tagged(period, "wind.speed"),
                wind_direction=_number(period, "wind.direction.degrees"),
                precip_probability=_number(
                    period, "precipitationProbability"
                ),
                precip_amount=_tagged(period, "totalLiquid"),
                precip_type=_daily_precip_type(period),
                condition=extract_text(
                    period, "iconPhrase", default=""
                ).unwrap(SOURCE),
                icon=accuweather_icon(_icon_code(period, "iconCode")),
            )
        )
    return observations


def parse_address_search(body: Any, query: str) -> Location:
    """First search result -> Location; no result is a resolution error."""
    results = []
    if isinstance(body, dict):
        results = extract_list(body, "results").unwrap(SOURCE) or []
    if not results:
        raise LocationResolutionError(
            f"No location found for '{query}'", SOURCE
        )
    first = results[0]
    latitude = extract_number(first, "position.lat").unwrap(SOURCE)
    longitude = extract_number(first, "position.lon").unwrap(SOURCE)
    if latitude is None or longitude is None:
        raise UpstreamSchemaError(
            f"Search result for '{query}' has no position", SOURCE
        )
    address = first.get("address") or {}
    return Location(
        zip_code=extract_text(address, "postalCode").unwrap(SOURCE) or query,
        city=extract_text(address, "municipality", default="").unwrap(SOURCE),
        state=extract_text(
            address, "countrySubdivision", default=""
        ).unwrap(SOURCE),
        country=extract_text(
            address, "countryCode", default="US"
        ).unwrap(SOURCE),
        coordinates=Coordinates(latitude=latitude, longitude=longitude),
    )
