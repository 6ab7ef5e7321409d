"""
Precipitation classification for display.

Intensity buckets (canonical mm per hour):
    none      < 0.1
    drizzle   [0.1, 0.3]
    light     (0.3, 2]
    moderate  (2, 5]
    heavy     > 5

Probability categories:
    very-low < 15 <= low < 35 <= medium < 65 <= high < 85 <= very-high

Bar segments group consecutive hours with >= 0.1 mm into one
continuous bar, tracking peak/average intensity and thunderstorms.
"""

from dataclasses import dataclass, field
from enum import Enum

from ..models import NOT_AVAILABLE, NormalizedObservation, Probability

MEASURABLE_PRECIPITATION_MM = 0.1


class PrecipitationIntensity(str, Enum):
    NONE = "none"
    DRIZZLE = "drizzle"
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"


DISPLAY_CLASSES: dict[PrecipitationIntensity, str] = {
    PrecipitationIntensity.NONE: "precip-none",
    PrecipitationIntensity.DRIZZLE: "precip-drizzle",
    PrecipitationIntensity.LIGHT: "precip-light-rain",
    PrecipitationIntensity.MODERATE: "precip-moderate-rain",
    PrecipitationIntensity.HEAVY: "precip-heavy-rain",
}


def classify_intensity(amount_mm: float) -> PrecipitationIntensity:
    if amount_mm < 0.1:
        return PrecipitationIntensity.NONE
    if amount_mm <= 0.3:
        return PrecipitationIntensity.DRIZZLE
    if amount_mm <= 2:
        return PrecipitationIntensity.LIGHT
    if amount_mm <= 5:
        return PrecipitationIntensity.MODERATE
    return PrecipitationIntensity.HEAVY


def display_class(amount_mm: float) -> str:
    return DISPLAY_CLASSES[classify_intensity(amount_mm)]


def probability_category(probability: Probability) -> str | None:
    """Qualitative bucket for a probability; None for the 'n/a' sentinel."""
    if probability == NOT_AVAILABLE:
        return None
    if probability < 15:
        return "very-low"
    if probability < 35:
        return "low"
    if probability < 65:
        return "medium"
    if probability < 85:
        return "high"
    return "very-high"


@dataclass
class PrecipitationSegment:
    start_hour: int
    end_hour: int
    amounts: list[float] = field(default_factory=list)
    has_thunderstorm: bool = False

    @property
    def max_intensity(self) -> float:
        return max(self.amounts)

    @property
    def avg_intensity(self) -> float:
        return sum(self.amounts) / len(self.amounts)

    @property
    def display_class(self) -> str:
        return display_class(self.max_intensity)

    @property
    def is_isolated(self) -> bool:
        return self.start_hour == self.end_hour

    @property
    def duration_hours(self) -> int:
        return self.end_hour - self.start_hour + 1


def _is_thunder(observation: NormalizedObservation) -> bool:
    return "thunder" in observation.weather_condition.lower()


def analyze_precipitation_bars(
    hours: list[NormalizedObservation | None],
) -> list[PrecipitationSegment]:
    """Group consecutive measurable-precipitation hours into segments."""
    segments: list[PrecipitationSegment] = []
    current: PrecipitationSegment | None = None

    for index, hour in enumerate(hours):
        amount = hour.precipitation.amount if hour is not None else 0.0
        if hour is not None and amount >= MEASURABLE_PRECIPITATION_MM:
            if current is None:
                current = PrecipitationSegment(
                    start_hour=index, end_hour=index
                )
            current.end_hour = index
            current.amounts.append(amount)
            current.has_thunderstorm = current.has_thunderstorm or _is_thunder(
                hour
            )
        elif current is not None:
            segments.append(current)
            current = None

    if current is not None:
        segments.append(current)
    return segments
