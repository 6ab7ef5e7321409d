from .time_series_stitcher import (
    DEFAULT_FALLBACK_OFFSETS,
    PageRequest,
    PageResult,
    StitchProvenance,
    StitchResult,
    TimeSeriesStitcher,
    bounded_iterations,
)

__all__ = [
    "DEFAULT_FALLBACK_OFFSETS",
    "PageRequest",
    "PageResult",
    "StitchProvenance",
    "StitchResult",
    "TimeSeriesStitcher",
    "bounded_iterations",
]
