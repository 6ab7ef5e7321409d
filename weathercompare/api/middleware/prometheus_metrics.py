"""Prometheus counters for provider fetches and cache lookups."""

from prometheus_client import Counter, Histogram

PROVIDER_FETCHES_TOTAL = Counter(
    "weathercompare_provider_fetches_total",
    "Provider forecast fetches by outcome",
    ["source", "outcome"],
)

PROVIDER_FETCH_DURATION = Histogram(
    "weathercompare_provider_fetch_duration_seconds",
    "Time spent fetching and normalizing one provider forecast",
    ["source"],
)

CACHE_LOOKUPS = Counter(
    "weathercompare_cache_lookups_total",
    "Response cache lookups",
    ["cache", "result"],
)
