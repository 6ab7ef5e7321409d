"""
Hourly -> daily aggregation for providers without a daily product.

Aggregation runs on unrounded canonical values so precipitation is
rounded exactly once, when the daily record is normalized:
- temperature / feels-like: max (numpy.max)
- humidity / wind speed: mean (numpy.mean)
- precipitation probability: max
- precipitation amount: sum (numpy.sum)
- condition / icon: from the wettest hour, else the midday hour
"""

from collections import defaultdict
from datetime import date, datetime, timezone, tzinfo

import numpy as np

from ..models import SourceKind
from ..normalization.intermediate import RawObservation, RawValue
from ..normalization.unit_normalizer import (
    CANONICAL_UNITS,
    Quantity,
    UnitNormalizer,
)


def noon_utc_ms(day: date) -> int:
    """Canonical timestamp for a daily record: 12:00 UTC of the date."""
    moment = datetime(day.year, day.month, day.day, 12, tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


def local_date(timestamp_ms: int, tz: tzinfo) -> date:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=tz).date()


def _stat(values: list[float | None], func) -> float | None:
    present = [v for v in values if v is not None]
    if not present:
        return None
    return float(func(np.asarray(present, dtype=float)))


def aggregate_hourly_to_daily(
    hourly: list[RawObservation],
    source: SourceKind,
    normalizer: UnitNormalizer,
    tz: tzinfo = timezone.utc,
) -> list[RawObservation]:
    """
    Group hourly records by calendar day in `tz` and summarize each day.

    Returned records are tagged with canonical units, so normalizing them
    again is a no-op apart from the one-time rounding.
    """
    buckets: dict[date, list[RawObservation]] = defaultdict(list)
    for record in hourly:
        buckets[local_date(record.timestamp, tz)].append(record)

    temperature_unit = CANONICAL_UNITS[Quantity.TEMPERATURE]
    wind_unit = CANONICAL_UNITS[Quantity.WIND_SPEED]
    precip_unit = CANONICAL_UNITS[Quantity.PRECIPITATION]

    daily: list[RawObservation] = []
    for day in sorted(buckets):
        records = buckets[day]
        temperatures = [
            normalizer.convert(source, Quantity.TEMPERATURE, r.temperature)
            for r in records
        ]
        feels_like = [
            normalizer.convert(source, Quantity.TEMPERATURE, r.feels_like)
            for r in records
        ]
        winds = [
            normalizer.convert(source, Quantity.WIND_SPEED, r.wind_speed)
            for r in records
        ]
        amounts = [
            normalizer.convert(source, Quantity.PRECIPITATION, r.precip_amount)
            for r in records
        ]

        wettest = max(
            records,
            key=lambda r: normalizer.convert(
                source, Quantity.PRECIPITATION, r.precip_amount
            )
            or 0.0,
        )
        has_rain = (_stat(amounts, np.max) or 0.0) > 0
        representative = (
            wettest if has_rain else records[len(records) // 2]
        )

        daily.append(
            RawObservation(
                timestamp=noon_utc_ms(day),
                temperature=RawValue(
                    _stat(temperatures, np.max), temperature_unit
                ),
                feels_like=RawValue(
                    _stat(feels_like, np.max), temperature_unit
                ),
                humidity=_stat([r.humidity for r in records], np.mean),
                wind_speed=RawValue(_stat(winds, np.mean), wind_unit),
                wind_direction=representative.wind_direction,
                precip_probability=_stat(
                    [r.precip_probability for r in records], np.max
                ),
                precip_amount=RawValue(
                    _stat(amounts, np.sum) or 0.0, precip_unit
                ),
                precip_type=representative.precip_type,
                condition=representative.condition,
                icon=representative.icon,
            )
        )
    return daily
