"""
Foreca (RapidAPI) payloads -> RawObservation.

Values carry no unit tags. Requests ask for tempunit=F and windunit=MPH;
precipitation is always reported in millimeters, so every value is left
untagged and resolved against the provider's documented defaults.
"""

from typing import Any

from ....core.exceptions import LocationResolutionError, UpstreamSchemaError
from ....core.models import SourceKind
from ....core.normalization.field_result import (
    extract_list,
    extract_number,
    extract_text,
    parse_timestamp_ms,
)
from ....core.normalization.icons import (
    foreca_condition,
    precip_type_from_foreca_symbol,
)
from ....core.normalization.intermediate import RawObservation, RawValue

SOURCE = SourceKind.FORECA.value


def _number(payload: Any, path: str) -> float | None:
    return extract_number(payload, path).unwrap(SOURCE)


def parse_observation(
    entry: Any, amount_field: str = "precipAccum"
) -> RawObservation:
    if not isinstance(entry, dict):
        raise UpstreamSchemaError("Foreca entry is not an object", SOURCE)

    symbol = extract_text(entry, "symbol").unwrap(SOURCE)
    phrase = extract_text(entry, "symbolPhrase").unwrap(SOURCE)
    description, icon = foreca_condition(symbol, phrase)

    return RawObservation(
        timestamp=parse_timestamp_ms(entry.get("time"), "time").unwrap(
            SOURCE
        ),
        temperature=RawValue(_number(entry, "temperature")),
        feels_like=RawValue(_number(entry, "feelsLikeTemp")),
        humidity=_number(entry, "relHumidity"),
        wind_speed=RawValue(_number(entry, "windSpeed")),
        wind_direction=_number(entry, "windDir"),
        precip_probability=_number(entry, "precipProb"),
        precip_amount=RawValue(_number(entry, amount_field)),
        precip_type=precip_type_from_foreca_symbol(symbol),
        condition=description,
        icon=icon,
    )


def parse_current(body: Any) -> RawObservation:
    if not isinstance(body, dict) or not isinstance(body.get("current"), dict):
        raise UpstreamSchemaError("Missing 'current' object", SOURCE)
    return parse_observation(body["current"], amount_field="precipRate")


def parse_hourly(body: Any) -> list[RawObservation]:
    if not isinstance(body, dict):
        raise UpstreamSchemaError("Response body is not an object", SOURCE)
    entries = extract_list(body, "forecast").unwrap(SOURCE) or []
    return [parse_observation(entry) for entry in entries]


def parse_location_id(body: Any, query: str) -> str:
    locations = []
    if isinstance(body, dict):
        locations = extract_list(body, "locations").unwrap(SOURCE) or []
    if not locations:
        raise LocationResolutionError(
            f"Foreca has no location for '{query}'", SOURCE
        )
    location_id = extract_text(locations[0], "id").unwrap(SOURCE)
    if not location_id:
        raise UpstreamSchemaError("Foreca location has no id", SOURCE)
    return location_id
