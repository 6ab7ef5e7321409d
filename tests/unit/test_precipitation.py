"""Unit tests for precipitation classification and bar segments."""

import pytest

from weathercompare.core.data_processing import (
    PrecipitationIntensity,
    analyze_precipitation_bars,
    classify_intensity,
    display_class,
    probability_category,
)
from weathercompare.core.models import NOT_AVAILABLE

from ..conftest import hour_ms, make_observation


class TestIntensity:
    @pytest.mark.parametrize(
        "amount,expected",
        [
            (0.0, PrecipitationIntensity.NONE),
            (0.09, PrecipitationIntensity.NONE),
            (0.1, PrecipitationIntensity.DRIZZLE),
            (0.3, PrecipitationIntensity.DRIZZLE),
            (0.4, PrecipitationIntensity.LIGHT),
            (2.0, PrecipitationIntensity.LIGHT),
            (2.1, PrecipitationIntensity.MODERATE),
            (5.0, PrecipitationIntensity.MODERATE),
            (5.1, PrecipitationIntensity.HEAVY),
        ],
    )
    def test_buckets(self, amount, expected):
        assert classify_intensity(amount) == expected

    def test_display_class(self):
        assert display_class(0.0) == "precip-none"
        assert display_class(7.5) == "precip-heavy-rain"


class TestProbabilityCategory:
    @pytest.mark.parametrize(
        "probability,expected",
        [
            (0, "very-low"),
            (14, "very-low"),
            (15, "low"),
            (35, "medium"),
            (65, "high"),
            (85, "very-high"),
            (100, "very-high"),
        ],
    )
    def test_categories(self, probability, expected):
        assert probability_category(probability) == expected

    def test_not_available(self):
        assert probability_category(NOT_AVAILABLE) is None


class TestSegments:
    def hours(self, amounts, conditions=None):
        conditions = conditions or {}
        return [
            None
            if amount is None
            else make_observation(
                hour_ms(i), amount=amount, condition=conditions.get(i, "Rain")
            )
            for i, amount in enumerate(amounts)
        ]

    def test_consecutive_hours_grouped(self):
        segments = analyze_precipitation_bars(
            self.hours([0.0, 0.2, 1.0, 3.0, 0.0, 0.5, 0.0])
        )

        assert len(segments) == 2
        first, second = segments
        assert (first.start_hour, first.end_hour) == (1, 3)
        assert first.duration_hours == 3
        assert first.max_intensity == 3.0
        assert first.avg_intensity == pytest.approx(1.4)
        assert first.display_class == "precip-moderate-rain"
        assert second.is_isolated

    def test_missing_hours_end_segment(self):
        segments = analyze_precipitation_bars(self.hours([1.0, None, 1.0]))
        assert len(segments) == 2

    def test_segment_running_to_end(self):
        segments = analyze_precipitation_bars(self.hours([0.0, 0.4, 0.4]))
        assert segments[0].end_hour == 2

    def test_thunderstorm_flag(self):
        segments = analyze_precipitation_bars(
            self.hours([1.0, 2.0], conditions={1: "Thunderstorms"})
        )
        assert segments[0].has_thunderstorm

    def test_dry_series(self):
        assert analyze_precipitation_bars(self.hours([0.0, 0.05])) == []
