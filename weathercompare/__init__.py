"""
weathercompare - multi-provider weather forecast comparison.

Fetches forecasts from several independent providers, normalizes them to
canonical units (°F, mph, mm), stitches paginated hourly series, caches
the results and computes cross-source agreement metrics.
"""

__version__ = "1.0.0"
