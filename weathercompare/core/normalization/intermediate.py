"""
Provider-neutral intermediate representation.

Per-provider parsers turn raw JSON into these records; values keep the
unit tag the provider attached (if any) so the UnitNormalizer can decide
between the tag and the provider's documented default.
"""

from dataclasses import dataclass, field

from ..models import PrecipitationType, SourceKind, WeatherIcon


@dataclass(frozen=True)
class RawValue:
    value: float | None = None
    unit: str | None = None


@dataclass
class RawObservation:
    timestamp: int
    temperature: RawValue = field(default_factory=RawValue)
    feels_like: RawValue = field(default_factory=RawValue)
    humidity: float | None = None
    wind_speed: RawValue = field(default_factory=RawValue)
    wind_direction: float | None = None
    precip_probability: float | None = None
    precip_amount: RawValue = field(default_factory=RawValue)
    precip_type: PrecipitationType | None = None
    condition: str = ""
    icon: WeatherIcon = WeatherIcon.UNKNOWN


@dataclass
class ProviderPayload:
    """
    Parsed provider response, tagged with the provider kind.

    `daily` may be empty for providers without a daily product; the
    series builder derives it from `hourly` in that case.
    """

    source: SourceKind
    current: RawObservation | None = None
    hourly: list[RawObservation] = field(default_factory=list)
    daily: list[RawObservation] = field(default_factory=list)
