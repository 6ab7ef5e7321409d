"""
Forecast Comparison Service.

Fans out to every configured source concurrently, isolates per-source
failures into error envelopes, caches successful series and feeds the
comparison engine.

Flow per request:
1. Resolve the location key (ZIP or "lat,lon")
2. For each source, in fixed order: cache -> provider client -> cache
3. Errors become ForecastSeries(isError=True); rate limits additionally
   set rateLimited=True. Neither is cached.
4. Comparison runs over the successful series only
"""

import asyncio
import time
from collections.abc import Callable
from datetime import datetime

from loguru import logger

from ...core.cancellation import CancellationToken
from ...core.data_processing.comparison import build_comparison_report
from ...core.data_processing.series_builder import (
    ForecastSeriesBuilder,
    utc_now,
)
from ...core.demo import MOCK_REASON, MockDataGenerator
from ...core.exceptions import (
    ForecastError,
    OperationCancelledError,
    RateLimitError,
)
from ...core.models import (
    ComparisonReport,
    ForecastSeries,
    Location,
    PaginationInfo,
    SourceKind,
)
from ...core.normalization.unit_normalizer import UnitNormalizer
from ...infrastructure.cache import RedisResponseCache, ResponseCache
from ..middleware.prometheus_metrics import (
    PROVIDER_FETCH_DURATION,
    PROVIDER_FETCHES_TOTAL,
)
from .base_client import BaseProviderClient
from .forecast_sources import display_name
from .location_resolver import LocationResolver
from .provider_factory import ProviderClientFactory


class ForecastComparisonService:
    def __init__(
        self,
        clients: dict[SourceKind, BaseProviderClient],
        resolver: LocationResolver,
        cache: ResponseCache[ForecastSeries],
        builder: ForecastSeriesBuilder,
        sources: list[SourceKind],
        demo_mode: bool = False,
        production: bool = False,
        mock_generator: MockDataGenerator | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.clients = clients
        self.resolver = resolver
        self.cache = cache
        self.builder = builder
        self.sources = list(sources)
        self.demo_mode = demo_mode
        self.production = production
        self.mock_generator = mock_generator or MockDataGenerator(
            hours=builder.hourly_hours
        )
        self.clock = clock

    async def resolve_location(self, location_key: str) -> Location:
        return await self.resolver.resolve(location_key)

    async def get_forecast(
        self,
        location_key: str,
        source: SourceKind,
        force_refresh: bool = False,
        cancel_token: CancellationToken | None = None,
    ) -> ForecastSeries:
        location = await self.resolve_location(location_key)
        return await self._fetch_source(
            location, source, force_refresh, cancel_token
        )

    async def get_all_forecasts(
        self,
        location_key: str,
        force_refresh: bool = False,
        cancel_token: CancellationToken | None = None,
    ) -> list[ForecastSeries]:
        """One series per configured source, always in the same order."""
        location = await self.resolve_location(location_key)
        results = await asyncio.gather(
            *(
                self._fetch_source(
                    location, source, force_refresh, cancel_token
                )
                for source in self.sources
            )
        )
        failed = [r.source.value for r in results if r.is_error]
        logger.info(
            f"Forecasts for {location.key}: "
            f"{len(results) - len(failed)}/{len(results)} sources ok"
            + (f" (failed: {', '.join(failed)})" if failed else "")
        )
        return list(results)

    async def compare(
        self,
        location_key: str,
        force_refresh: bool = False,
        cancel_token: CancellationToken | None = None,
    ) -> ComparisonReport:
        series = await self.get_all_forecasts(
            location_key, force_refresh, cancel_token
        )
        return build_comparison_report(
            series,
            self.builder.day_window(),
            tz=self.builder.tz,
            generated_at=self.clock(),
        )

    async def clear_cache(self) -> int:
        return await self.cache.invalidate_all()

    async def close(self) -> None:
        await self.cache.close()
        await self.resolver.cache.close()

    async def _fetch_source(
        self,
        location: Location,
        source: SourceKind,
        force_refresh: bool,
        cancel_token: CancellationToken | None,
    ) -> ForecastSeries:
        name = display_name(source)

        if self.demo_mode:
            return self._mock_series(location, source)

        if not force_refresh:
            cached = await self.cache.get(location.key, source.value)
            if cached is not None:
                PROVIDER_FETCHES_TOTAL.labels(
                    source=source.value, outcome="cached"
                ).inc()
                return cached.payload

        client = self.clients.get(source)
        if client is None:
            return ForecastSeries.error(
                source, location, f"{name} is not configured", name
            )

        started = time.perf_counter()
        try:
            series = await client.fetch(location, cancel_token)
        except OperationCancelledError:
            raise
        except RateLimitError as e:
            logger.warning(f"{name} rate limited for {location.key}: {e}")
            self._record(source, "rate_limited")
            return ForecastSeries.error(
                source,
                location,
                self._error_message(name, e),
                name,
                rate_limited=True,
                attempts=e.attempts,
            )
        except ForecastError as e:
            logger.error(
                f"{name} failed for {location.key} after "
                f"{e.attempts or 0} attempt(s): "
                f"{type(e).__name__}: {e}"
            )
            self._record(source, "error")
            return ForecastSeries.error(
                source,
                location,
                self._error_message(name, e),
                name,
                attempts=e.attempts,
            )
        except Exception as e:
            logger.exception(f"Unexpected error from {name}: {e}")
            self._record(source, "error")
            return ForecastSeries.error(
                source, location, self._error_message(name, e), name
            )
        finally:
            PROVIDER_FETCH_DURATION.labels(source=source.value).observe(
                time.perf_counter() - started
            )

        self._record(source, "success")
        await self.cache.set(location.key, source.value, series)
        return series

    def _error_message(self, name: str, error: Exception) -> str:
        if self.production:
            return f"Unable to retrieve forecast from {name}"
        return f"Unable to retrieve forecast from {name}: {error}"

    @staticmethod
    def _record(source: SourceKind, outcome: str) -> None:
        PROVIDER_FETCHES_TOTAL.labels(
            source=source.value, outcome=outcome
        ).inc()

    def _mock_series(
        self, location: Location, source: SourceKind
    ) -> ForecastSeries:
        payload = self.mock_generator.generate(location, source, self.clock())
        hours = len(payload.hourly)
        series = self.builder.build(
            payload,
            location,
            display_name=display_name(source),
            pagination_info=PaginationInfo(
                total_hours_retrieved=hours,
                hours_from_mock_data=hours,
                hours_requested=self.builder.hourly_hours,
            ),
        )
        self._record(source, "mock")
        return series.model_copy(
            update={"is_mock_data": True, "mock_data_reason": MOCK_REASON}
        )


def build_forecast_service(
    settings, clock: Callable[[], datetime] = utc_now
) -> tuple[ForecastComparisonService, list[BaseProviderClient]]:
    """
    Wire the service graph from Settings.

    Returns the service plus every provider client it owns, so the
    caller (the FastAPI lifespan) can close them on shutdown.
    """
    normalizer = UnitNormalizer()
    builder = ForecastSeriesBuilder(
        normalizer,
        hourly_hours=settings.hourly_hours,
        daily_days=settings.daily_days,
        calendar_timezone=settings.calendar_timezone,
        clock=clock,
    )
    factory = ProviderClientFactory(
        builder,
        google_weather=settings.google_weather,
        azure_maps=settings.azure_maps,
        foreca=settings.foreca,
        open_meteo=settings.open_meteo,
    )
    clients = factory.create_all(settings.enabled_sources)
    owned: list[BaseProviderClient] = list(clients.values())

    geocoder = clients.get(SourceKind.AZURE_MAPS)
    if geocoder is None:
        geocoder = factory.create_azure_maps()
        owned.append(geocoder)

    cache_settings = settings.cache
    if cache_settings.backend == "redis":
        forecast_cache = RedisResponseCache.from_url(
            cache_settings.redis_url,
            ForecastSeries,
            prefix="weather",
            default_ttl=cache_settings.default_ttl,
            source_ttls=cache_settings.source_ttls,
        )
        location_cache = RedisResponseCache.from_url(
            cache_settings.redis_url,
            Location,
            prefix="location",
            default_ttl=cache_settings.location_ttl,
        )
    else:
        forecast_cache = ResponseCache(
            prefix="weather",
            default_ttl=cache_settings.default_ttl,
            source_ttls=cache_settings.source_ttls,
        )
        location_cache = ResponseCache(
            prefix="location", default_ttl=cache_settings.location_ttl
        )

    resolver = LocationResolver(
        geocoder, location_cache, demo_mode=settings.demo_mode
    )
    service = ForecastComparisonService(
        clients=clients,
        resolver=resolver,
        cache=forecast_cache,
        builder=builder,
        sources=settings.enabled_sources,
        demo_mode=settings.demo_mode,
        production=settings.is_production,
        clock=clock,
    )
    logger.info(
        f"Forecast service ready | sources={len(clients)} "
        f"demo_mode={settings.demo_mode} cache={cache_settings.backend}"
    )
    return service, owned
