"""
Unit Normalizer - provider-native units to canonical units.

Canonical units:
- Temperature: °F
- Wind speed: mph
- Precipitation: mm
- Precipitation probability: percent (0-100) or the "n/a" sentinel

Unit resolution:
1. Every provider has a documented default unit per quantity
   (PROVIDER_UNIT_TABLE).
2. If a value carries an explicit unit tag in the payload, the tag wins
   over the documented default. Providers occasionally document one unit
   and return another (Google Weather precipitation).
3. An unrecognized precipitation tag is converted as inches (the less
   trusted unit) and logged as a warning. Unrecognized temperature or
   wind tags fall back to the documented default, also with a warning.

Precipitation rounding (applied exactly once, here):
- < 0.1 mm  -> 0.0
- >= 0.1 mm -> nearest 0.1 mm (half-up)
"""

import math
from copy import deepcopy
from enum import Enum

from loguru import logger

from ..models import (
    NOT_AVAILABLE,
    NormalizedObservation,
    Precipitation,
    Probability,
    SourceKind,
)
from .intermediate import RawObservation, RawValue


class Quantity(str, Enum):
    TEMPERATURE = "temperature"
    WIND_SPEED = "wind_speed"
    PRECIPITATION = "precipitation"


FAHRENHEIT = "F"
CELSIUS = "C"
MPH = "mph"
KMH = "km/h"
MS = "m/s"
INCHES = "in"
MILLIMETERS = "mm"

CANONICAL_UNITS: dict[Quantity, str] = {
    Quantity.TEMPERATURE: FAHRENHEIT,
    Quantity.WIND_SPEED: MPH,
    Quantity.PRECIPITATION: MILLIMETERS,
}

# Tag vocabulary (lower-cased) observed across provider payloads
UNIT_ALIASES: dict[Quantity, dict[str, str]] = {
    Quantity.TEMPERATURE: {
        "f": FAHRENHEIT,
        "°f": FAHRENHEIT,
        "fahrenheit": FAHRENHEIT,
        "c": CELSIUS,
        "°c": CELSIUS,
        "celsius": CELSIUS,
    },
    Quantity.WIND_SPEED: {
        "mph": MPH,
        "mi/h": MPH,
        "mp/h": MPH,
        "miles_per_hour": MPH,
        "km/h": KMH,
        "kmh": KMH,
        "kph": KMH,
        "kilometers_per_hour": KMH,
        "m/s": MS,
        "ms": MS,
        "meters_per_second": MS,
    },
    Quantity.PRECIPITATION: {
        "in": INCHES,
        "inch": INCHES,
        "inches": INCHES,
        "mm": MILLIMETERS,
        "millimeter": MILLIMETERS,
        "millimeters": MILLIMETERS,
    },
}

# Documented default unit per provider (what we request / what the
# provider documents when no tag is present)
PROVIDER_UNIT_TABLE: dict[SourceKind, dict[Quantity, str]] = {
    SourceKind.GOOGLE_WEATHER: {
        Quantity.TEMPERATURE: CELSIUS,
        Quantity.WIND_SPEED: KMH,
        Quantity.PRECIPITATION: MILLIMETERS,
    },
    SourceKind.AZURE_MAPS: {
        Quantity.TEMPERATURE: FAHRENHEIT,
        Quantity.WIND_SPEED: MPH,
        Quantity.PRECIPITATION: INCHES,
    },
    SourceKind.FORECA: {
        Quantity.TEMPERATURE: FAHRENHEIT,
        Quantity.WIND_SPEED: MPH,
        Quantity.PRECIPITATION: MILLIMETERS,
    },
    SourceKind.OPEN_METEO: {
        Quantity.TEMPERATURE: FAHRENHEIT,
        Quantity.WIND_SPEED: MPH,
        Quantity.PRECIPITATION: INCHES,
    },
}


class UnitConversionUtils:
    """Unit conversions. All helpers pass None through unchanged."""

    @staticmethod
    def inches_to_mm(inches: float | None) -> float | None:
        """1 in = 25.4 mm."""
        if inches is None:
            return None
        return inches * 25.4

    @staticmethod
    def celsius_to_fahrenheit(celsius: float | None) -> float | None:
        """°F = °C x 9/5 + 32."""
        if celsius is None:
            return None
        return celsius * 9.0 / 5.0 + 32.0

    @staticmethod
    def kmh_to_mph(kmh: float | None) -> float | None:
        """1 km/h = 0.621371 mph."""
        if kmh is None:
            return None
        return kmh * 0.621371

    @staticmethod
    def ms_to_mph(ms: float | None) -> float | None:
        """1 m/s = 2.23694 mph."""
        if ms is None:
            return None
        return ms * 2.23694


def round_half_up(value: float, digits: int = 1) -> float:
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def round_precipitation(amount_mm: float | None) -> float:
    """Canonical precipitation rounding: < 0.1 mm is 0.0, else 0.1 mm."""
    if amount_mm is None or amount_mm < 0.1:
        return 0.0
    return round_half_up(amount_mm, 1)


class UnitNormalizer:
    """
    Converts intermediate provider records into NormalizedObservation.

    One instance is constructed at startup and shared by every provider
    client. The unit table can be overridden per instance for tests or
    when a provider changes its documented defaults.
    """

    _CONVERTERS = {
        (Quantity.TEMPERATURE, CELSIUS): (
            UnitConversionUtils.celsius_to_fahrenheit
        ),
        (Quantity.WIND_SPEED, KMH): UnitConversionUtils.kmh_to_mph,
        (Quantity.WIND_SPEED, MS): UnitConversionUtils.ms_to_mph,
        (Quantity.PRECIPITATION, INCHES): UnitConversionUtils.inches_to_mm,
    }

    def __init__(
        self,
        unit_table: dict[SourceKind, dict[Quantity, str]] | None = None,
    ):
        self.unit_table = deepcopy(unit_table or PROVIDER_UNIT_TABLE)

    def default_unit(self, source: SourceKind, quantity: Quantity) -> str:
        return self.unit_table.get(source, {}).get(
            quantity, CANONICAL_UNITS[quantity]
        )

    def resolve_unit(
        self, source: SourceKind, quantity: Quantity, tag: str | None
    ) -> str:
        """Pick the unit for a value: explicit tag first, then default."""
        default = self.default_unit(source, quantity)
        if tag is None or not str(tag).strip():
            return default

        resolved = UNIT_ALIASES[quantity].get(str(tag).strip().lower())
        if resolved is not None:
            if resolved != default:
                logger.debug(
                    f"{source.value}: {quantity.value} tagged '{tag}' "
                    f"overrides documented default '{default}'"
                )
            return resolved

        if quantity is Quantity.PRECIPITATION:
            logger.warning(
                f"{source.value}: unknown precipitation unit '{tag}', "
                f"assuming inches"
            )
            return INCHES

        logger.warning(
            f"{source.value}: unknown {quantity.value} unit '{tag}', "
            f"using documented default '{default}'"
        )
        return default

    def convert(
        self, source: SourceKind, quantity: Quantity, raw: RawValue
    ) -> float | None:
        """Convert to the canonical unit without rounding."""
        if raw.value is None:
            return None
        unit = self.resolve_unit(source, quantity, raw.unit)
        converter = self._CONVERTERS.get((quantity, unit))
        if converter is None:
            return float(raw.value)
        return converter(raw.value)

    def temperature(self, source: SourceKind, raw: RawValue) -> float | None:
        value = self.convert(source, Quantity.TEMPERATURE, raw)
        return None if value is None else round_half_up(value, 1)

    def wind_speed(self, source: SourceKind, raw: RawValue) -> float | None:
        value = self.convert(source, Quantity.WIND_SPEED, raw)
        if value is None:
            return None
        return max(round_half_up(value, 1), 0.0)

    def precipitation_amount(self, source: SourceKind, raw: RawValue) -> float:
        """Amount in mm, rounded once. Missing amounts default to 0.0."""
        return round_precipitation(
            self.convert(source, Quantity.PRECIPITATION, raw)
        )

    @staticmethod
    def probability(value: float | None) -> Probability:
        if value is None:
            return NOT_AVAILABLE
        return min(max(float(value), 0.0), 100.0)

    @staticmethod
    def humidity(value: float | None) -> float | None:
        if value is None:
            return None
        return min(max(float(value), 0.0), 100.0)

    def normalize(
        self, source: SourceKind, raw: RawObservation
    ) -> NormalizedObservation:
        return NormalizedObservation(
            timestamp=raw.timestamp,
            temperature=self.temperature(source, raw.temperature),
            feels_like=self.temperature(source, raw.feels_like),
            humidity=self.humidity(raw.humidity),
            wind_speed=self.wind_speed(source, raw.wind_speed),
            wind_direction=raw.wind_direction,
            precipitation=Precipitation(
                probability=self.probability(raw.precip_probability),
                amount=self.precipitation_amount(source, raw.precip_amount),
                type=raw.precip_type,
            ),
            weather_condition=raw.condition,
            icon=raw.icon,
        )
