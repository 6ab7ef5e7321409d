"""
Open-Meteo `/v1/forecast` payload -> RawObservation.

The response is columnar: `hourly.time[i]` lines up with
`hourly.temperature_2m[i]` and so on. Unit tags come from the
`hourly_units` / `daily_units` / `current_weather_units` blocks
("°F", "mp/h", "inch"). Times are local wall-clock strings
(timezone=auto) and are shifted by `utc_offset_seconds`.
"""

from typing import Any

from ....core.data_processing.daily_aggregation import noon_utc_ms
from ....core.exceptions import UpstreamSchemaError
from ....core.models import SourceKind
from ....core.normalization.field_result import (
    extract_list,
    extract_number,
    extract_text,
    parse_calendar_date,
    parse_timestamp_ms,
)
from ....core.normalization.icons import (
    precip_type_from_wmo_code,
    wmo_condition,
)
from ....core.normalization.intermediate import RawObservation, RawValue

SOURCE = SourceKind.OPEN_METEO.value

HOURLY_VARIABLES = (
    "temperature_2m",
    "apparent_temperature",
    "relativehumidity_2m",
    "windspeed_10m",
    "winddirection_10m",
    "precipitation_probability",
    "precipitation",
    "weathercode",
    "is_day",
)

DAILY_VARIABLES = (
    "weathercode",
    "temperature_2m_max",
    "apparent_temperature_max",
    "precipitation_sum",
    "precipitation_probability_max",
    "windspeed_10m_max",
    "winddirection_10m_dominant",
)


class _Columns:
    """Row access over one columnar block plus its units block."""

    def __init__(self, body: dict[str, Any], block: str):
        self.block = block
        self.values = body.get(block) or {}
        self.units = body.get(f"{block}_units") or {}
        if not isinstance(self.values, dict):
            raise UpstreamSchemaError(f"'{block}' is not an object", SOURCE)
        self.times = extract_list(self.values, "time").unwrap(SOURCE) or []

    def number(self, name: str, index: int) -> float | None:
        return extract_number(self.values, f"{name}.{index}").unwrap(SOURCE)

    def unit(self, name: str) -> str | None:
        return extract_text(self.units, name).unwrap(SOURCE)

    def tagged(self, name: str, index: int) -> RawValue:
        return RawValue(self.number(name, index), self.unit(name))


def _weather(code: float | None, is_day: bool):
    weather_code = None if code is None else int(code)
    description, icon = wmo_condition(weather_code, is_day)
    return description, icon, precip_type_from_wmo_code(weather_code)


def _utc_offset(body: dict[str, Any]) -> int:
    offset = extract_number(body, "utc_offset_seconds", default=0.0)
    return int(offset.unwrap(SOURCE) or 0)


def parse_hourly(body: Any) -> list[RawObservation]:
    if not isinstance(body, dict):
        raise UpstreamSchemaError("Response body is not an object", SOURCE)
    columns = _Columns(body, "hourly")
    offset = _utc_offset(body)

    observations = []
    for i, raw_time in enumerate(columns.times):
        timestamp = parse_timestamp_ms(
            raw_time, f"hourly.time.{i}", offset
        ).unwrap(SOURCE)
        is_day = columns.number("is_day", i) != 0
        description, icon, precip_type = _weather(
            columns.number("weathercode", i), is_day
        )
        observations.append(
            RawObservation(
                timestamp=timestamp,
                temperature=columns.tagged("temperature_2m", i),
                feels_like=columns.tagged("apparent_temperature", i),
                humidity=columns.number("relativehumidity_2m", i),
                wind_speed=columns.tagged("windspeed_10m", i),
                wind_direction=columns.number("winddirection_10m", i),
                precip_probability=columns.number(
                    "precipitation_probability", i
                ),
                precip_amount=columns.tagged("precipitation", i),
                precip_type=precip_type,
                condition=description,
                icon=icon,
            )
        )
    return observations


def parse_daily(body: Any) -> list[RawObservation]:
    if not isinstance(body, dict):
        raise UpstreamSchemaError("Response body is not an object", SOURCE)
    columns = _Columns(body, "daily")

    observations = []
    for i, raw_day in enumerate(columns.times):
        day = parse_calendar_date(raw_day, f"daily.time.{i}").unwrap(SOURCE)
        description, icon, precip_type = _weather(
            columns.number("weathercode", i), True
        )
        observations.append(
            RawObservation(
                timestamp=noon_utc_ms(day),
                temperature=columns.tagged("temperature_2m_max", i),
                feels_like=columns.tagged("apparent_temperature_max", i),
                wind_speed=columns.tagged("windspeed_10m_max", i),
                wind_direction=columns.number(
                    "winddirection_10m_dominant", i
                ),
                precip_probability=columns.number(
                    "precipitation_probability_max", i
                ),
                precip_amount=columns.tagged("precipitation_sum", i),
                precip_type=precip_type,
                condition=description,
                icon=icon,
            )
        )
    return observations


def parse_current(
    body: Any, hourly: list[RawObservation]
) -> RawObservation | None:
    """
    `current_weather` enriched with the nearest hourly point.

    current_weather only carries temperature, wind and weather code, so
    feels-like, humidity and precipitation come from the hourly record
    closest in time.
    """
    if not isinstance(body, dict):
        return None
    current = body.get("current_weather")
    if not isinstance(current, dict):
        return None

    timestamp = parse_timestamp_ms(
        current.get("time"), "current_weather.time", _utc_offset(body)
    ).unwrap(SOURCE)
    units = body.get("current_weather_units") or {}
    hourly_units = body.get("hourly_units") or {}

    def tagged(name: str, hourly_name: str) -> RawValue:
        unit = extract_text(units, name).unwrap(SOURCE)
        if unit is None:
            unit = extract_text(hourly_units, hourly_name).unwrap(SOURCE)
        return RawValue(
            extract_number(current, name).unwrap(SOURCE), unit
        )

    is_day = extract_number(current, "is_day").unwrap(SOURCE) != 0
    description, icon, precip_type = _weather(
        extract_number(current, "weathercode").unwrap(SOURCE), is_day
    )
    nearest = min(
        hourly, key=lambda h: abs(h.timestamp - timestamp), default=None
    )

    return RawObservation(
        timestamp=timestamp,
        temperature=tagged("temperature", "temperature_2m"),
        feels_like=nearest.feels_like if nearest else RawValue(),
        humidity=nearest.humidity if nearest else None,
        wind_speed=tagged("windspeed", "windspeed_10m"),
        wind_direction=extract_number(current, "winddirection").unwrap(
            SOURCE
        ),
        precip_probability=(
            nearest.precip_probability if nearest else None
        ),
        precip_amount=nearest.precip_amount if nearest else RawValue(),
        precip_type=precip_type,
        condition=description,
        icon=icon,
    )
