from .comparison import (
    AGREEMENT_THRESHOLDS,
    build_comparison_report,
    calculate_agreement,
    compare_observations,
    is_dry_day,
)
from .precipitation import (
    PrecipitationIntensity,
    analyze_precipitation_bars,
    classify_intensity,
    display_class,
    probability_category,
)
from .series_builder import ForecastSeriesBuilder, align_daily, align_hourly

__all__ = [
    "AGREEMENT_THRESHOLDS",
    "ForecastSeriesBuilder",
    "PrecipitationIntensity",
    "align_daily",
    "align_hourly",
    "analyze_precipitation_bars",
    "build_comparison_report",
    "calculate_agreement",
    "classify_intensity",
    "compare_observations",
    "display_class",
    "is_dry_day",
    "probability_category",
]
