"""
Deterministic mock forecasts for demo mode.

Produces a ProviderPayload per source so mock data goes through the same
normalization path as live data (amounts are tagged in inches and
converted to mm by the UnitNormalizer).

Pattern per day:
- even day offsets are dry (< 0.016 in per hour)
- odd day offsets rain in the afternoon (hours 12-18 local)
- temperature follows a simple diurnal curve around 65 °F
"""

import random
from datetime import datetime, timedelta, timezone

from ..models import Coordinates, Location, PrecipitationType, SourceKind
from ..normalization.icons import accuweather_icon
from ..normalization.intermediate import (
    ProviderPayload,
    RawObservation,
    RawValue,
)

MOCK_REASON = "Demo mode enabled"

# Per-source bias so sources disagree a little
SOURCE_TEMPERATURE_BIAS: dict[SourceKind, float] = {
    SourceKind.GOOGLE_WEATHER: 0.0,
    SourceKind.AZURE_MAPS: 1.5,
    SourceKind.FORECA: -1.0,
    SourceKind.OPEN_METEO: 2.5,
}


def mock_location(location_key: str) -> Location:
    """Fixed demo location; coordinate keys keep their coordinates."""
    if "," in location_key:
        latitude, longitude = (float(p) for p in location_key.split(","))
        return Location(
            city="Demo City",
            state="NY",
            coordinates=Coordinates(latitude=latitude, longitude=longitude),
        )
    return Location(
        zip_code=location_key,
        city="Demo City",
        state="NY",
        coordinates=Coordinates(latitude=40.7128, longitude=-74.006),
    )


class MockDataGenerator:
    def __init__(self, hours: int = 240):
        self.hours = hours

    def generate(
        self, location: Location, source: SourceKind, now: datetime
    ) -> ProviderPayload:
        rng = random.Random(f"{location.key}:{source.value}")
        start = now.astimezone(timezone.utc).replace(
            minute=0, second=0, microsecond=0
        )
        first_day = start.date()
        bias = SOURCE_TEMPERATURE_BIAS.get(source, 0.0)

        hourly: list[RawObservation] = []
        for offset in range(self.hours):
            moment = start + timedelta(hours=offset)
            hourly.append(
                self._hour(
                    rng,
                    moment,
                    rainy_day=(moment.date() - first_day).days % 2 == 1,
                    bias=bias,
                )
            )

        return ProviderPayload(
            source=source,
            current=hourly[0] if hourly else None,
            hourly=hourly,
        )

    @staticmethod
    def _hour(
        rng: random.Random, moment: datetime, rainy_day: bool, bias: float
    ) -> RawObservation:
        hour = moment.hour
        raining = rainy_day and 12 <= hour <= 18

        if 6 <= hour <= 18:
            factor = (hour - 6) / 12
        elif hour < 6:
            factor = 0.0
        else:
            factor = (24 - hour) / 6
        temperature = 65 + 15 * factor + bias

        if raining:
            amount_in = rng.uniform(0.02, 0.16)
            probability = float(rng.randint(50, 100))
            thunder = rng.random() > 0.7
            icon_code = 15 if thunder else 18
            condition = "Thunderstorms" if thunder else "Rain"
            precip_type = PrecipitationType.RAIN
        else:
            amount_in = rng.uniform(0.0, 0.015)
            probability = float(rng.randint(0, 30))
            icon_code = 1 if 6 <= hour <= 18 else 33
            condition = "Sunny" if icon_code == 1 else "Clear"
            precip_type = None

        return RawObservation(
            timestamp=int(moment.timestamp() * 1000),
            temperature=RawValue(temperature, "F"),
            feels_like=RawValue(temperature - 2, "F"),
            humidity=float(50 + rng.randint(0, 30)),
            wind_speed=RawValue(float(rng.randint(2, 15)), "mph"),
            wind_direction=float(rng.randint(0, 359)),
            precip_probability=probability,
            precip_amount=RawValue(amount_in, "in"),
            precip_type=precip_type,
            condition=condition,
            icon=accuweather_icon(icon_code),
        )
