"""Unit tests for weather code -> icon / precipitation type mapping."""

import pytest

from weathercompare.core.models import PrecipitationType, WeatherIcon
from weathercompare.core.normalization.icons import (
    accuweather_icon,
    foreca_condition,
    google_icon,
    precip_type_from_foreca_symbol,
    precip_type_from_google_condition,
    precip_type_from_probabilities,
    precip_type_from_wmo_code,
    wmo_condition,
)


class TestIcons:
    def test_accuweather_codes(self):
        assert accuweather_icon(1) is WeatherIcon.SUNNY
        assert accuweather_icon(15) is WeatherIcon.THUNDERSTORMS
        assert accuweather_icon(999) is WeatherIcon.UNKNOWN
        assert accuweather_icon(None) is WeatherIcon.UNKNOWN

    def test_wmo_day_and_night(self):
        assert wmo_condition(0, True) == ("Clear sky", WeatherIcon.SUNNY)
        assert wmo_condition(0, False)[1] is WeatherIcon.CLEAR_NIGHT
        assert wmo_condition(12345)[1] is WeatherIcon.UNKNOWN

    def test_foreca_symbol(self):
        description, icon = foreca_condition("d000")
        assert description == "Clear"
        assert icon is WeatherIcon.SUNNY
        assert foreca_condition("n000")[1] is WeatherIcon.CLEAR_NIGHT

    def test_foreca_phrase_wins(self):
        assert foreca_condition("d620", "light rain")[0] == "light rain"

    def test_google_condition(self):
        assert google_icon("CLEAR", True) is WeatherIcon.SUNNY
        assert google_icon("NOT_A_CONDITION") is WeatherIcon.UNKNOWN


class TestPrecipitationType:
    def test_highest_probability_wins(self):
        assert (
            precip_type_from_probabilities(60, 10, 0)
            is PrecipitationType.RAIN
        )
        assert (
            precip_type_from_probabilities(5, 40, 0)
            is PrecipitationType.SNOW
        )

    def test_tie_is_mixed(self):
        assert (
            precip_type_from_probabilities(30, 30, 0)
            is PrecipitationType.MIXED
        )

    def test_no_probability_is_undefined(self):
        assert precip_type_from_probabilities(0, 0, 0) is None
        assert precip_type_from_probabilities(None, None, None) is None

    @pytest.mark.parametrize(
        "symbol,expected",
        [
            ("d620", PrecipitationType.RAIN),
            ("n920", PrecipitationType.SNOW),
            ("d930", PrecipitationType.MIXED),
            ("d940", PrecipitationType.ICE),
            ("d000", None),
            ("", None),
        ],
    )
    def test_foreca_symbol(self, symbol, expected):
        assert precip_type_from_foreca_symbol(symbol) is expected

    @pytest.mark.parametrize(
        "code,expected",
        [
            (61, PrecipitationType.RAIN),
            (73, PrecipitationType.SNOW),
            (66, PrecipitationType.ICE),
            (95, PrecipitationType.RAIN),
            (2, None),
        ],
    )
    def test_wmo_code(self, code, expected):
        assert precip_type_from_wmo_code(code) is expected

    def test_google_condition(self):
        assert (
            precip_type_from_google_condition("HEAVY_SNOW")
            is PrecipitationType.SNOW
        )
        assert (
            precip_type_from_google_condition("FREEZING_RAIN")
            is PrecipitationType.ICE
        )
        assert precip_type_from_google_condition("CLEAR") is None
