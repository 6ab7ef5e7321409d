"""
Google Weather `forecast/hours:lookup` payload -> RawObservation.

Every value carries its own unit tag (e.g. temperature.unit="CELSIUS",
wind.speed.unit="KILOMETERS_PER_HOUR", qpf.unit="MILLIMETERS"); the tag
is passed through untouched and resolved by the UnitNormalizer.
"""

from typing import Any

from ....core.exceptions import UpstreamSchemaError
from ....core.models import SourceKind
from ....core.normalization.field_result import (
    extract_list,
    extract_number,
    extract_text,
    parse_timestamp_ms,
)
from ....core.normalization.icons import (
    GOOGLE_PRECIP_TYPES,
    google_icon,
    precip_type_from_google_condition,
)
from ....core.normalization.intermediate import RawObservation, RawValue

SOURCE = SourceKind.GOOGLE_WEATHER.value


def _tagged(hour: Any, value_path: str, unit_path: str) -> RawValue:
    return RawValue(
        extract_number(hour, value_path).unwrap(SOURCE),
        extract_text(hour, unit_path).unwrap(SOURCE),
    )


def parse_forecast_hour(hour: Any) -> RawObservation:
    if not isinstance(hour, dict):
        raise UpstreamSchemaError(
            "forecastHours entry is not an object", SOURCE
        )

    timestamp = parse_timestamp_ms(
        (hour.get("interval") or {}).get("startTime"), "interval.startTime"
    ).unwrap(SOURCE)

    condition_type = extract_text(hour, "weatherCondition.type").unwrap(SOURCE)
    description = extract_text(
        hour, "weatherCondition.description.text", default=""
    ).unwrap(SOURCE)
    is_day = hour.get("isDaytime", True) is not False

    precip_kind = extract_text(
        hour, "precipitation.probability.type"
    ).unwrap(SOURCE)
    probability = extract_number(
        hour, "precipitation.probability.percent"
    ).unwrap(SOURCE)
    precip_type = None
    if probability:
        precip_type = GOOGLE_PRECIP_TYPES.get(precip_kind or "")
    if precip_type is None:
        precip_type = precip_type_from_google_condition(condition_type)

    return RawObservation(
        timestamp=timestamp,
        temperature=_tagged(hour, "temperature.degrees", "temperature.unit"),
        feels_like=_tagged(
            hour, "feelsLikeTemperature.degrees", "feelsLikeTemperature.unit"
        ),
        humidity=extract_number(hour, "relativeHumidity").unwrap(SOURCE),
        wind_speed=_tagged(hour, "wind.speed.value", "wind.speed.unit"),
        wind_direction=extract_number(
            hour, "wind.direction.degrees"
        ).unwrap(SOURCE),
        precip_probability=probability,
        precip_amount=_tagged(
            hour, "precipitation.qpf.quantity", "precipitation.qpf.unit"
        ),
        precip_type=precip_type,
        condition=description or (condition_type or ""),
        icon=google_icon(condition_type, is_day),
    )


def parse_forecast_page(
    body: Any,
) -> tuple[list[RawObservation], str | None]:
    """Hours on this page plus the continuation token, if any."""
    if not isinstance(body, dict):
        raise UpstreamSchemaError("Response body is not an object", SOURCE)
    hours = extract_list(body, "forecastHours").unwrap(SOURCE) or []
    token = extract_text(body, "nextPageToken").unwrap(SOURCE)
    return [parse_forecast_hour(h) for h in hours], token or None
