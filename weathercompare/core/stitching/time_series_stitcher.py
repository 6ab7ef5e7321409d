"""
Time-Series Stitcher - full-length hourly series from paginated providers.

Some providers answer a 240-hour request with a ~24-hour window plus an
opaque continuation token that frequently becomes invalid on reuse.

Algorithm:
1. Initial request for the full span (no token).
2. While collected < requested and a token is present: request the next
   page. A rejected token (PaginationTokenInvalid) switches to fallback.
3. Fallback: supplementary requests with a small coordinate offset so the
   provider serves a fresh window instead of the rejected token.
4. Deduplicate by timestamp: first-seen value wins.
5. Sort ascending, truncate to the requested span.
6. Report provenance (pages, hours from primary vs fallback).

Requests are sequential with a fixed inter-request delay and run inside
a bounded iterator (max iterations + cancellation token). Fewer hours
than requested is a partial success, not an error. A page that fails
(network or schema) after data was collected ends pagination with what
was gathered; a failure before any data is collected propagates.
"""

from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from typing import Generic, Protocol, TypeVar

from loguru import logger

from ..cancellation import CancellationToken
from ..exceptions import (
    NetworkError,
    PaginationTokenInvalid,
    UpstreamSchemaError,
)
from ..models import PaginationInfo


class Timestamped(Protocol):
    timestamp: int


T = TypeVar("T", bound=Timestamped)

# (latitude offset, longitude offset) in degrees, roughly 1 km
DEFAULT_FALLBACK_OFFSETS: tuple[tuple[float, float], ...] = (
    (0.01, 0.0),
    (0.0, 0.01),
    (-0.01, 0.0),
    (0.0, -0.01),
)

PRIMARY = "primary"
FALLBACK = "fallback"


@dataclass(frozen=True)
class PageRequest:
    page_token: str | None = None
    latitude_offset: float = 0.0
    longitude_offset: float = 0.0

    @property
    def is_fallback(self) -> bool:
        return self.latitude_offset != 0.0 or self.longitude_offset != 0.0


@dataclass
class PageResult(Generic[T]):
    points: list[T]
    next_page_token: str | None = None


@dataclass
class StitchProvenance:
    hours_requested: int = 0
    pages_requested: int = 0
    fallback_requests: int = 0
    total_hours_retrieved: int = 0
    hours_from_primary: int = 0
    hours_from_fallback: int = 0
    iterations: int = 0
    token_rejections: int = 0
    failed_requests: int = 0
    ceiling_reached: bool = False

    @property
    def complete(self) -> bool:
        return self.total_hours_retrieved >= self.hours_requested

    def to_pagination_info(
        self, hours_from_mock_data: int = 0
    ) -> PaginationInfo:
        return PaginationInfo(
            pages_requested=self.pages_requested,
            total_hours_retrieved=self.total_hours_retrieved,
            hours_from_api=self.hours_from_primary + self.hours_from_fallback,
            hours_from_mock_data=hours_from_mock_data,
            hours_from_primary=self.hours_from_primary,
            hours_from_fallback=self.hours_from_fallback,
            hours_requested=self.hours_requested,
            failed_requests=self.failed_requests,
        )


@dataclass
class StitchResult(Generic[T]):
    points: list[T] = field(default_factory=list)
    provenance: StitchProvenance = field(default_factory=StitchProvenance)


PageFetcher = Callable[[PageRequest], Awaitable[PageResult[T]]]


async def bounded_iterations(
    max_iterations: int, cancel_token: CancellationToken | None = None
) -> AsyncIterator[int]:
    """Yield iteration indexes up to a hard ceiling, honoring cancellation."""
    for iteration in range(max_iterations):
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        yield iteration


class TimeSeriesStitcher:
    """Merges paginated batches into one deduplicated, ordered series."""

    def __init__(
        self,
        hours_requested: int = 240,
        max_iterations: int = 20,
        page_delay: float = 0.5,
        fallback_offsets: tuple[tuple[float, float], ...] = (
            DEFAULT_FALLBACK_OFFSETS
        ),
        label: str = "stitcher",
    ):
        if hours_requested <= 0:
            raise ValueError("hours_requested must be positive")
        if max_iterations <= 0:
            raise ValueError("max_iterations must be positive")
        self.hours_requested = hours_requested
        self.max_iterations = max_iterations
        self.page_delay = page_delay
        self.fallback_offsets = fallback_offsets
        self.label = label

    async def stitch(
        self,
        fetch_page: PageFetcher,
        cancel_token: CancellationToken | None = None,
    ) -> StitchResult:
        token = cancel_token or CancellationToken()
        provenance = StitchProvenance(hours_requested=self.hours_requested)
        merged: dict[int, T] = {}
        origin: dict[int, str] = {}
        offsets = iter(self.fallback_offsets)

        pending: PageRequest | None = PageRequest()
        exhausted = True

        async for iteration in bounded_iterations(self.max_iterations, token):
            if pending is None:
                exhausted = False
                break
            if iteration > 0:
                await token.sleep(self.page_delay)
                token.raise_if_cancelled()

            request = pending
            provenance.iterations += 1
            try:
                page = await fetch_page(request)
            except PaginationTokenInvalid as e:
                provenance.token_rejections += 1
                logger.warning(
                    f"{self.label}: continuation token rejected after "
                    f"{provenance.pages_requested} page(s), "
                    f"switching to fallback ({e.message})"
                )
                pending = self._next_fallback(offsets)
                continue
            except (NetworkError, UpstreamSchemaError) as e:
                if not merged:
                    raise
                provenance.failed_requests += 1
                logger.warning(
                    f"{self.label}: request {provenance.iterations} failed "
                    f"with {len(merged)}/{self.hours_requested} hours "
                    f"collected, keeping partial series ({e.message})"
                )
                pending = None
                exhausted = False
                break

            added = self._merge(merged, origin, page.points, request)
            if request.is_fallback:
                provenance.fallback_requests += 1
            else:
                provenance.pages_requested += 1

            logger.debug(
                f"{self.label}: request {provenance.iterations} "
                f"({'fallback' if request.is_fallback else 'primary'}) "
                f"returned {len(page.points)} points, {added} new, "
                f"total {len(merged)}/{self.hours_requested}"
            )

            if len(merged) >= self.hours_requested:
                exhausted = False
                break

            if page.next_page_token:
                pending = PageRequest(
                    page_token=page.next_page_token,
                    latitude_offset=request.latitude_offset,
                    longitude_offset=request.longitude_offset,
                )
            elif request.is_fallback or provenance.token_rejections:
                pending = self._next_fallback(offsets)
            else:
                # Provider has no more pages to offer
                pending = None

        if exhausted and pending is not None:
            provenance.ceiling_reached = True
            logger.warning(
                f"{self.label}: iteration ceiling ({self.max_iterations}) "
                f"reached with {len(merged)}/{self.hours_requested} hours"
            )

        if not merged and provenance.token_rejections:
            raise PaginationTokenInvalid(
                "Continuation token rejected and fallback made no progress",
                self.label,
            )

        points = sorted(merged.values(), key=lambda p: p.timestamp)
        points = points[: self.hours_requested]
        kept = [origin[p.timestamp] for p in points]
        provenance.total_hours_retrieved = len(points)
        provenance.hours_from_primary = kept.count(PRIMARY)
        provenance.hours_from_fallback = kept.count(FALLBACK)

        if not provenance.complete:
            logger.info(
                f"{self.label}: partial series, "
                f"{provenance.total_hours_retrieved}/"
                f"{self.hours_requested} hours recovered"
            )
        return StitchResult(points=points, provenance=provenance)

    @staticmethod
    def _merge(
        merged: dict[int, T],
        origin: dict[int, str],
        points: list[T],
        request: PageRequest,
    ) -> int:
        added = 0
        for point in points:
            if point.timestamp in merged:
                continue
            merged[point.timestamp] = point
            origin[point.timestamp] = (
                FALLBACK if request.is_fallback else PRIMARY
            )
            added += 1
        return added

    @staticmethod
    def _next_fallback(offsets) -> PageRequest | None:
        offset = next(offsets, None)
        if offset is None:
            return None
        latitude_offset, longitude_offset = offset
        return PageRequest(
            latitude_offset=latitude_offset,
            longitude_offset=longitude_offset,
        )
