"""
Assembles a ForecastSeries from a parsed provider payload.

- Normalizes every intermediate record (units + one-time rounding)
- Aligns hourly points onto a fixed-length grid starting at the top of
  the current hour; empty slots stay None ("no data for that hour")
- Derives daily records from hourly data when the provider has no daily
  product
- Aligns daily records so index 0 is today in the calendar timezone for
  every source
"""

from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from ..models import (
    ForecastSeries,
    Location,
    NormalizedObservation,
    PaginationInfo,
)
from ..normalization.intermediate import ProviderPayload
from ..normalization.unit_normalizer import UnitNormalizer
from .daily_aggregation import aggregate_hourly_to_daily

HOUR_MS = 3_600_000


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def floor_to_hour(moment: datetime) -> datetime:
    return moment.replace(minute=0, second=0, microsecond=0)


def align_hourly(
    observations: list[NormalizedObservation],
    start_ms: int,
    hours: int,
) -> list[NormalizedObservation | None]:
    """
    Place observations on a fixed hourly grid.

    Points outside [start, start + hours) are dropped; when two points
    fall in the same slot the first one wins.
    """
    grid: list[NormalizedObservation | None] = [None] * hours
    for observation in observations:
        slot = (observation.timestamp - start_ms) // HOUR_MS
        if 0 <= slot < hours and grid[slot] is None:
            grid[slot] = observation
    return grid


def align_daily(
    observations: list[NormalizedObservation],
    first_day: date,
    days: int,
) -> list[NormalizedObservation]:
    """Sort, dedupe by UTC date and keep `days` entries from first_day."""
    by_day: dict[date, NormalizedObservation] = {}
    for observation in sorted(observations, key=lambda o: o.timestamp):
        day = observation.moment.date()
        if day < first_day or day in by_day:
            continue
        by_day[day] = observation
    return [by_day[day] for day in sorted(by_day)][:days]


class ForecastSeriesBuilder:
    """Turns ProviderPayload into the canonical ForecastSeries."""

    def __init__(
        self,
        normalizer: UnitNormalizer,
        hourly_hours: int = 240,
        daily_days: int = 10,
        calendar_timezone: str = "UTC",
        clock: Callable[[], datetime] = utc_now,
    ):
        self.normalizer = normalizer
        self.hourly_hours = hourly_hours
        self.daily_days = daily_days
        self.tz = ZoneInfo(calendar_timezone)
        self.clock = clock

    def grid_start(self) -> datetime:
        return floor_to_hour(self.clock().astimezone(timezone.utc))

    def today(self) -> date:
        return self.clock().astimezone(self.tz).date()

    def day_window(self) -> list[date]:
        today = self.today()
        return [today + timedelta(days=i) for i in range(self.daily_days)]

    def build(
        self,
        payload: ProviderPayload,
        location: Location,
        display_name: str = "",
        pagination_info: PaginationInfo | None = None,
        attempts: int | None = None,
    ) -> ForecastSeries:
        source = payload.source
        start_ms = int(self.grid_start().timestamp() * 1000)

        hourly_points = [
            self.normalizer.normalize(source, record)
            for record in payload.hourly
        ]
        hourly = align_hourly(hourly_points, start_ms, self.hourly_hours)

        daily_records = payload.daily or aggregate_hourly_to_daily(
            payload.hourly, source, self.normalizer, self.tz
        )
        daily = align_daily(
            [self.normalizer.normalize(source, r) for r in daily_records],
            self.today(),
            self.daily_days,
        )

        if payload.current is not None:
            current = self.normalizer.normalize(source, payload.current)
        else:
            current = next((h for h in hourly if h is not None), None)

        return ForecastSeries(
            source=source,
            display_name=display_name,
            location=location,
            current=current,
            hourly=hourly,
            daily=daily,
            last_updated=self.clock(),
            pagination_info=pagination_info,
            attempts=attempts,
        )
