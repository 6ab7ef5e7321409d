"""
Provider weather codes -> canonical icon, description and precipitation
type.

Tables:
- AccuWeather icon codes 1-44 (Azure Maps)
- WMO weather interpretation codes (Open-Meteo)
- Foreca symbols "dNNN" / "nNNN" (d = day, n = night)
- Google Weather condition types
"""

from ..models import PrecipitationType, WeatherIcon

Icon = WeatherIcon

ACCUWEATHER_ICONS: dict[int, WeatherIcon] = {
    1: Icon.SUNNY,
    2: Icon.MOSTLY_SUNNY,
    3: Icon.PARTLY_SUNNY,
    4: Icon.INTERMITTENT_CLOUDS,
    5: Icon.HAZY_SUNSHINE,
    6: Icon.MOSTLY_CLOUDY,
    7: Icon.CLOUDY,
    8: Icon.DREARY,
    11: Icon.FOG,
    12: Icon.SHOWERS,
    13: Icon.MOSTLY_CLOUDY_SHOWERS,
    14: Icon.PARTLY_SUNNY_SHOWERS,
    15: Icon.THUNDERSTORMS,
    16: Icon.MOSTLY_CLOUDY_THUNDERSTORMS,
    17: Icon.PARTLY_SUNNY_THUNDERSTORMS,
    18: Icon.RAIN,
    19: Icon.FLURRIES,
    20: Icon.MOSTLY_CLOUDY_FLURRIES,
    21: Icon.PARTLY_SUNNY_FLURRIES,
    22: Icon.SNOW,
    23: Icon.MOSTLY_CLOUDY_SNOW,
    24: Icon.ICE,
    25: Icon.SLEET,
    26: Icon.FREEZING_RAIN,
    29: Icon.RAIN_AND_SNOW,
    30: Icon.HOT,
    31: Icon.COLD,
    32: Icon.WINDY,
    33: Icon.CLEAR_NIGHT,
    34: Icon.MOSTLY_CLEAR_NIGHT,
    35: Icon.PARTLY_CLOUDY_NIGHT,
    36: Icon.INTERMITTENT_CLOUDS_NIGHT,
    37: Icon.HAZY_NIGHT,
    38: Icon.MOSTLY_CLOUDY_NIGHT,
    39: Icon.PARTLY_CLOUDY_SHOWERS_NIGHT,
    40: Icon.MOSTLY_CLOUDY_SHOWERS_NIGHT,
    41: Icon.PARTLY_CLOUDY_THUNDERSTORMS_NIGHT,
    42: Icon.MOSTLY_CLOUDY_THUNDERSTORMS_NIGHT,
    43: Icon.MOSTLY_CLOUDY_FLURRIES_NIGHT,
    44: Icon.MOSTLY_CLOUDY_SNOW_NIGHT,
}

# code: (description, day icon, night icon)
WMO_CODES: dict[int, tuple[str, WeatherIcon, WeatherIcon]] = {
    0: ("Clear sky", Icon.SUNNY, Icon.CLEAR_NIGHT),
    1: ("Mainly clear", Icon.MOSTLY_SUNNY, Icon.MOSTLY_CLEAR_NIGHT),
    2: ("Partly cloudy", Icon.PARTLY_SUNNY, Icon.PARTLY_CLOUDY_NIGHT),
    3: ("Overcast", Icon.CLOUDY, Icon.CLOUDY),
    45: ("Fog", Icon.FOG, Icon.FOG),
    48: ("Depositing rime fog", Icon.FOG, Icon.FOG),
    51: (
        "Light drizzle",
        Icon.PARTLY_SUNNY_SHOWERS,
        Icon.PARTLY_CLOUDY_SHOWERS_NIGHT,
    ),
    53: (
        "Moderate drizzle",
        Icon.PARTLY_SUNNY_SHOWERS,
        Icon.PARTLY_CLOUDY_SHOWERS_NIGHT,
    ),
    55: ("Dense drizzle", Icon.SHOWERS, Icon.MOSTLY_CLOUDY_SHOWERS_NIGHT),
    56: ("Light freezing drizzle", Icon.FREEZING_RAIN, Icon.FREEZING_RAIN),
    57: ("Dense freezing drizzle", Icon.FREEZING_RAIN, Icon.FREEZING_RAIN),
    61: (
        "Slight rain",
        Icon.PARTLY_SUNNY_SHOWERS,
        Icon.PARTLY_CLOUDY_SHOWERS_NIGHT,
    ),
    63: ("Moderate rain", Icon.RAIN, Icon.RAIN),
    65: ("Heavy rain", Icon.RAIN, Icon.RAIN),
    66: ("Light freezing rain", Icon.FREEZING_RAIN, Icon.FREEZING_RAIN),
    67: ("Heavy freezing rain", Icon.FREEZING_RAIN, Icon.FREEZING_RAIN),
    71: (
        "Slight snow fall",
        Icon.PARTLY_SUNNY_FLURRIES,
        Icon.MOSTLY_CLOUDY_FLURRIES_NIGHT,
    ),
    73: ("Moderate snow fall", Icon.SNOW, Icon.MOSTLY_CLOUDY_SNOW_NIGHT),
    75: ("Heavy snow fall", Icon.SNOW, Icon.MOSTLY_CLOUDY_SNOW_NIGHT),
    77: ("Snow grains", Icon.SNOW, Icon.MOSTLY_CLOUDY_SNOW_NIGHT),
    80: (
        "Slight rain showers",
        Icon.PARTLY_SUNNY_SHOWERS,
        Icon.PARTLY_CLOUDY_SHOWERS_NIGHT,
    ),
    81: (
        "Moderate rain showers",
        Icon.SHOWERS,
        Icon.MOSTLY_CLOUDY_SHOWERS_NIGHT,
    ),
    82: ("Violent rain showers", Icon.RAIN, Icon.RAIN),
    85: (
        "Slight snow showers",
        Icon.PARTLY_SUNNY_FLURRIES,
        Icon.MOSTLY_CLOUDY_FLURRIES_NIGHT,
    ),
    86: ("Heavy snow showers", Icon.SNOW, Icon.MOSTLY_CLOUDY_SNOW_NIGHT),
    95: (
        "Thunderstorm",
        Icon.THUNDERSTORMS,
        Icon.MOSTLY_CLOUDY_THUNDERSTORMS_NIGHT,
    ),
    96: (
        "Thunderstorm with slight hail",
        Icon.THUNDERSTORMS,
        Icon.MOSTLY_CLOUDY_THUNDERSTORMS_NIGHT,
    ),
    99: (
        "Thunderstorm with heavy hail",
        Icon.THUNDERSTORMS,
        Icon.MOSTLY_CLOUDY_THUNDERSTORMS_NIGHT,
    ),
}

# symbol code: (description, day icon, night icon)
FORECA_SYMBOLS: dict[str, tuple[str, WeatherIcon, WeatherIcon]] = {
    "000": ("Clear", Icon.SUNNY, Icon.CLEAR_NIGHT),
    "100": ("Mostly Clear", Icon.MOSTLY_SUNNY, Icon.MOSTLY_CLEAR_NIGHT),
    "200": ("Partly Cloudy", Icon.PARTLY_SUNNY, Icon.PARTLY_CLOUDY_NIGHT),
    "210": ("Partly Cloudy", Icon.PARTLY_SUNNY, Icon.PARTLY_CLOUDY_NIGHT),
    "300": ("Cloudy", Icon.CLOUDY, Icon.CLOUDY),
    "400": ("Overcast", Icon.CLOUDY, Icon.CLOUDY),
    "500": ("Fog", Icon.FOG, Icon.FOG),
    "600": (
        "Light Rain",
        Icon.PARTLY_SUNNY_SHOWERS,
        Icon.PARTLY_CLOUDY_SHOWERS_NIGHT,
    ),
    "610": (
        "Rain Showers",
        Icon.PARTLY_SUNNY_SHOWERS,
        Icon.PARTLY_CLOUDY_SHOWERS_NIGHT,
    ),
    "620": ("Rain", Icon.RAIN, Icon.RAIN),
    "700": ("Heavy Rain", Icon.RAIN, Icon.RAIN),
    "800": (
        "Thunderstorms",
        Icon.THUNDERSTORMS,
        Icon.MOSTLY_CLOUDY_THUNDERSTORMS_NIGHT,
    ),
    "900": (
        "Light Snow",
        Icon.PARTLY_SUNNY_FLURRIES,
        Icon.MOSTLY_CLOUDY_FLURRIES_NIGHT,
    ),
    "910": ("Snow Showers", Icon.SNOW, Icon.MOSTLY_CLOUDY_SNOW_NIGHT),
    "920": ("Snow", Icon.SNOW, Icon.MOSTLY_CLOUDY_SNOW_NIGHT),
    "930": ("Sleet", Icon.SLEET, Icon.SLEET),
    "940": ("Freezing Rain", Icon.FREEZING_RAIN, Icon.FREEZING_RAIN),
}

# condition type: (day icon, night icon)
GOOGLE_CONDITIONS: dict[str, tuple[WeatherIcon, WeatherIcon]] = {
    "CONDITION_UNSPECIFIED": (Icon.UNKNOWN, Icon.UNKNOWN),
    "CLEAR": (Icon.SUNNY, Icon.CLEAR_NIGHT),
    "MOSTLY_CLEAR": (Icon.MOSTLY_SUNNY, Icon.MOSTLY_CLEAR_NIGHT),
    "PARTLY_CLOUDY": (Icon.PARTLY_SUNNY, Icon.PARTLY_CLOUDY_NIGHT),
    "MOSTLY_CLOUDY": (Icon.MOSTLY_CLOUDY, Icon.MOSTLY_CLOUDY_NIGHT),
    "CLOUDY": (Icon.CLOUDY, Icon.CLOUDY),
    "FOG": (Icon.FOG, Icon.FOG),
    "LIGHT_FOG": (Icon.FOG, Icon.FOG),
    "LIGHT_RAIN": (
        Icon.PARTLY_SUNNY_SHOWERS,
        Icon.PARTLY_CLOUDY_SHOWERS_NIGHT,
    ),
    "RAIN_SHOWERS": (Icon.SHOWERS, Icon.MOSTLY_CLOUDY_SHOWERS_NIGHT),
    "RAIN": (Icon.RAIN, Icon.RAIN),
    "HEAVY_RAIN": (Icon.RAIN, Icon.RAIN),
    "LIGHT_SNOW": (
        Icon.PARTLY_SUNNY_FLURRIES,
        Icon.MOSTLY_CLOUDY_FLURRIES_NIGHT,
    ),
    "SNOW": (Icon.SNOW, Icon.MOSTLY_CLOUDY_SNOW_NIGHT),
    "HEAVY_SNOW": (Icon.SNOW, Icon.MOSTLY_CLOUDY_SNOW_NIGHT),
    "RAIN_AND_SNOW": (Icon.RAIN_AND_SNOW, Icon.RAIN_AND_SNOW),
    "FREEZING_DRIZZLE": (Icon.FREEZING_RAIN, Icon.FREEZING_RAIN),
    "FREEZING_RAIN": (Icon.FREEZING_RAIN, Icon.FREEZING_RAIN),
    "LIGHT_FREEZING_RAIN": (Icon.FREEZING_RAIN, Icon.FREEZING_RAIN),
    "HEAVY_FREEZING_RAIN": (Icon.FREEZING_RAIN, Icon.FREEZING_RAIN),
    "ICE_PELLETS": (Icon.SLEET, Icon.SLEET),
    "HEAVY_ICE_PELLETS": (Icon.SLEET, Icon.SLEET),
    "LIGHT_ICE_PELLETS": (Icon.SLEET, Icon.SLEET),
    "THUNDERSTORM": (
        Icon.THUNDERSTORMS,
        Icon.MOSTLY_CLOUDY_THUNDERSTORMS_NIGHT,
    ),
    "THUNDERSHOWER": (
        Icon.THUNDERSTORMS,
        Icon.MOSTLY_CLOUDY_THUNDERSTORMS_NIGHT,
    ),
    "WINDY": (Icon.WINDY, Icon.WINDY),
    "HAZE": (Icon.HAZY_SUNSHINE, Icon.HAZY_NIGHT),
    "SMOKE": (Icon.HAZY_SUNSHINE, Icon.HAZY_NIGHT),
    "DUST": (Icon.HAZY_SUNSHINE, Icon.HAZY_NIGHT),
    "TORNADO": (Icon.THUNDERSTORMS, Icon.THUNDERSTORMS),
    "HURRICANE": (Icon.THUNDERSTORMS, Icon.THUNDERSTORMS),
}

GOOGLE_PRECIP_TYPES: dict[str, PrecipitationType] = {
    "RAIN": PrecipitationType.RAIN,
    "LIGHT_RAIN": PrecipitationType.RAIN,
    "HEAVY_RAIN": PrecipitationType.RAIN,
    "SNOW": PrecipitationType.SNOW,
    "RAIN_AND_SNOW": PrecipitationType.MIXED,
    "MIXED": PrecipitationType.MIXED,
    "ICE": PrecipitationType.ICE,
    "ICE_PELLETS": PrecipitationType.ICE,
    "FREEZING_RAIN": PrecipitationType.ICE,
    "HAIL": PrecipitationType.ICE,
}


def accuweather_icon(code: int | None) -> WeatherIcon:
    if code is None:
        return Icon.UNKNOWN
    return ACCUWEATHER_ICONS.get(int(code), Icon.UNKNOWN)


def wmo_condition(
    code: int | None, is_day: bool = True
) -> tuple[str, WeatherIcon]:
    if code is None or int(code) not in WMO_CODES:
        return "Unknown", Icon.UNKNOWN
    description, day_icon, night_icon = WMO_CODES[int(code)]
    return description, day_icon if is_day else night_icon


def foreca_condition(
    symbol: str | None, phrase: str | None = None
) -> tuple[str, WeatherIcon]:
    if not symbol:
        return phrase or "Unknown", Icon.UNKNOWN
    is_day = symbol[0] == "d"
    entry = FORECA_SYMBOLS.get(symbol[1:])
    if entry is None:
        return phrase or "Unknown", Icon.UNKNOWN
    description, day_icon, night_icon = entry
    return phrase or description, day_icon if is_day else night_icon


def google_icon(condition: str | None, is_day: bool = True) -> WeatherIcon:
    if not condition or condition not in GOOGLE_CONDITIONS:
        return Icon.UNKNOWN
    day_icon, night_icon = GOOGLE_CONDITIONS[condition]
    return day_icon if is_day else night_icon


def precip_type_from_probabilities(
    rain: float | None, snow: float | None, ice: float | None
) -> PrecipitationType | None:
    """Highest probability wins; a tie at the top is 'mixed'."""
    ranked = sorted(
        [
            (rain or 0.0, PrecipitationType.RAIN),
            (snow or 0.0, PrecipitationType.SNOW),
            (ice or 0.0, PrecipitationType.ICE),
        ],
        key=lambda item: item[0],
        reverse=True,
    )
    top_probability, top_type = ranked[0]
    if top_probability <= 0:
        return None
    if ranked[1][0] == top_probability:
        return PrecipitationType.MIXED
    return top_type


def precip_type_from_foreca_symbol(
    symbol: str | None,
) -> PrecipitationType | None:
    if not symbol or len(symbol) < 2 or not symbol[1:].isdigit():
        return None
    code = int(symbol[1:])
    if 600 <= code < 900:
        return PrecipitationType.RAIN
    if 900 <= code < 930:
        return PrecipitationType.SNOW
    if code == 930:
        return PrecipitationType.MIXED
    if code == 940:
        return PrecipitationType.ICE
    return None


def precip_type_from_wmo_code(code: int | None) -> PrecipitationType | None:
    if code is None:
        return None
    code = int(code)
    if code in (56, 57, 66, 67):
        return PrecipitationType.ICE
    if 71 <= code <= 77 or code in (85, 86):
        return PrecipitationType.SNOW
    if 51 <= code <= 65 or 80 <= code <= 82 or code >= 95:
        return PrecipitationType.RAIN
    return None


def precip_type_from_google_condition(
    condition: str | None,
) -> PrecipitationType | None:
    if not condition:
        return None
    if "ICE" in condition or "FREEZING" in condition:
        return PrecipitationType.ICE
    if "RAIN_AND_SNOW" in condition or "MIXED" in condition:
        return PrecipitationType.MIXED
    if "SNOW" in condition or "FLURR" in condition:
        return PrecipitationType.SNOW
    if (
        "RAIN" in condition
        or "SHOWER" in condition
        or "STORM" in condition
        or condition == "DRIZZLE"
    ):
        return PrecipitationType.RAIN
    return None
