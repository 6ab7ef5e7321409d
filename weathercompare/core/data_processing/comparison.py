"""
Aggregation & Comparison Engine.

Agreement for a property at a time slot:
- Only values that are present and not the "n/a" sentinel are compared
- Fewer than 2 valid values -> {agrees: true, difference: 0, level: high}
- difference = max - min
- level = high if difference <= T, medium if <= 2T, else low
- agrees = difference <= T

Thresholds T: 5 °F for temperature / feels-like, 20 percentage points for
precipitation probability.

Dry day: every source with data reports < 0.5 mm for every hour of the
calendar day; hours without data are skipped, not counted as zero.
"""

from collections.abc import Iterable, Sequence
from datetime import date, datetime, timezone, tzinfo

import numpy as np

from ..models import (
    NOT_AVAILABLE,
    AgreementLevel,
    AgreementResult,
    ComparisonReport,
    DayComparison,
    ForecastSeries,
    NormalizedObservation,
    PrecipitationBar,
    SourcePrecipitationSummary,
)
from .daily_aggregation import local_date
from .precipitation import (
    DISPLAY_CLASSES,
    PrecipitationSegment,
    analyze_precipitation_bars,
    classify_intensity,
    probability_category,
)

TEMPERATURE = "temperature"
FEELS_LIKE = "feelsLike"
PRECIPITATION_PROBABILITY = "precipitationProbability"

AGREEMENT_THRESHOLDS: dict[str, float] = {
    TEMPERATURE: 5.0,
    FEELS_LIKE: 5.0,
    PRECIPITATION_PROBABILITY: 20.0,
}

DRY_DAY_THRESHOLD_MM = 0.5


def observation_value(
    observation: NormalizedObservation | None, property_name: str
) -> float | None:
    """Comparable value of a property; None when missing or 'n/a'."""
    if observation is None:
        return None
    if property_name == TEMPERATURE:
        return observation.temperature
    if property_name == FEELS_LIKE:
        return observation.feels_like
    if property_name == PRECIPITATION_PROBABILITY:
        probability = observation.precipitation.probability
        return None if probability == NOT_AVAILABLE else float(probability)
    raise ValueError(f"Unknown comparable property: {property_name}")


def calculate_agreement(
    values: Iterable[float | str | None],
    property_name: str,
    threshold: float | None = None,
) -> AgreementResult:
    if threshold is None:
        threshold = AGREEMENT_THRESHOLDS[property_name]

    valid = [
        float(v)
        for v in values
        if v is not None and v != NOT_AVAILABLE
    ]
    if len(valid) < 2:
        return AgreementResult(
            property_name=property_name,
            agrees=True,
            difference=0.0,
            agreement_level=AgreementLevel.HIGH,
            values_compared=len(valid),
        )

    difference = float(np.ptp(np.asarray(valid)))
    if difference <= threshold:
        level = AgreementLevel.HIGH
    elif difference <= 2 * threshold:
        level = AgreementLevel.MEDIUM
    else:
        level = AgreementLevel.LOW

    return AgreementResult(
        property_name=property_name,
        agrees=difference <= threshold,
        difference=round(difference, 2),
        agreement_level=level,
        values_compared=len(valid),
    )


def compare_observations(
    observations: Sequence[NormalizedObservation | None],
    property_name: str,
    threshold: float | None = None,
) -> AgreementResult:
    return calculate_agreement(
        (observation_value(o, property_name) for o in observations),
        property_name,
        threshold,
    )


def is_dry_day(
    series_list: Sequence[ForecastSeries],
    day: date,
    tz: tzinfo = timezone.utc,
    threshold_mm: float = DRY_DAY_THRESHOLD_MM,
) -> bool:
    """
    True iff no source forecasts >= threshold in any hour of `day`.

    A day with no hourly data from any source is vacuously dry.
    """
    for series in series_list:
        if series.is_error:
            continue
        for hour in series.hourly:
            if hour is None or local_date(hour.timestamp, tz) != day:
                continue
            if hour.precipitation.amount >= threshold_mm:
                return False
    return True


def daily_observation(
    series: ForecastSeries, index: int
) -> NormalizedObservation | None:
    if series.is_error or index >= len(series.daily):
        return None
    return series.daily[index]


def summarize_hourly_precipitation(
    series: ForecastSeries,
) -> SourcePrecipitationSummary:
    intensities: list[str | None] = []
    classes: list[str | None] = []
    categories: list[str | None] = []
    for hour in series.hourly:
        if hour is None:
            intensities.append(None)
            classes.append(None)
            categories.append(None)
            continue
        intensity = classify_intensity(hour.precipitation.amount)
        intensities.append(intensity.value)
        classes.append(DISPLAY_CLASSES[intensity])
        categories.append(probability_category(hour.precipitation.probability))
    return SourcePrecipitationSummary(
        source=series.source,
        intensities=intensities,
        display_classes=classes,
        probability_categories=categories,
        bars=[
            bar_from_segment(segment)
            for segment in analyze_precipitation_bars(series.hourly)
        ],
    )


def bar_from_segment(segment: PrecipitationSegment) -> PrecipitationBar:
    return PrecipitationBar(
        start_hour=segment.start_hour,
        end_hour=segment.end_hour,
        duration_hours=segment.duration_hours,
        max_intensity=segment.max_intensity,
        avg_intensity=round(segment.avg_intensity, 2),
        display_class=segment.display_class,
        has_thunderstorm=segment.has_thunderstorm,
        is_isolated=segment.is_isolated,
    )


def build_comparison_report(
    series_list: Sequence[ForecastSeries],
    days: Sequence[date],
    tz: tzinfo = timezone.utc,
    generated_at: datetime | None = None,
) -> ComparisonReport:
    """
    Cross-source comparison for current conditions and each day.

    `days` is the shared daily window; day index i of every series is
    expected to correspond to days[i].
    """
    if not series_list:
        raise ValueError("At least one forecast series is required")

    available = [s for s in series_list if not s.is_error]
    currents = [s.current for s in available]

    current = [
        compare_observations(currents, TEMPERATURE),
        compare_observations(currents, FEELS_LIKE),
        compare_observations(currents, PRECIPITATION_PROBABILITY),
    ]

    day_rows: list[DayComparison] = []
    for index, day in enumerate(days):
        observations = [daily_observation(s, index) for s in available]
        day_rows.append(
            DayComparison(
                day=day,
                temperature=compare_observations(observations, TEMPERATURE),
                feels_like=compare_observations(observations, FEELS_LIKE),
                precipitation_probability=compare_observations(
                    observations, PRECIPITATION_PROBABILITY
                ),
                is_dry_day=is_dry_day(available, day, tz),
            )
        )

    return ComparisonReport(
        location=series_list[0].location,
        generated_at=generated_at or datetime.now(timezone.utc),
        sources=[s.source for s in series_list],
        available_sources=[s.source for s in available],
        current=current,
        days=day_rows,
        hourly_precipitation=[
            summarize_hourly_precipitation(s) for s in available
        ],
    )
