"""
Unit tests for TimeSeriesStitcher.

Pages are served by an in-memory fake provider, so every scenario
(token rejection, fallback, iteration ceiling, cancellation) is exact.
"""

from dataclasses import dataclass

import pytest

from weathercompare.core.cancellation import CancellationToken
from weathercompare.core.exceptions import (
    NetworkError,
    OperationCancelledError,
    PaginationTokenInvalid,
    UpstreamSchemaError,
)
from weathercompare.core.stitching import (
    PageRequest,
    PageResult,
    TimeSeriesStitcher,
)

HOUR_MS = 3_600_000


@dataclass
class Point:
    timestamp: int
    value: str


def hours(start: int, count: int, tag: str = "primary") -> list[Point]:
    return [Point(h * HOUR_MS, tag) for h in range(start, start + count)]


class FakeProvider:
    """
    Serves `page_size` hours per primary page with tokens "t1", "t2"...

    Tokens listed in `rejected` raise PaginationTokenInvalid. Fallback
    requests are answered by `fallback_pages` in order.
    """

    def __init__(
        self,
        page_size: int = 24,
        total: int = 240,
        rejected: set[str] | None = None,
        fallback_pages: list[PageResult] | None = None,
    ):
        self.page_size = page_size
        self.total = total
        self.rejected = rejected or set()
        self.fallback_pages = list(fallback_pages or [])
        self.requests: list[PageRequest] = []

    async def __call__(self, request: PageRequest) -> PageResult:
        self.requests.append(request)
        if request.is_fallback:
            if self.fallback_pages:
                return self.fallback_pages.pop(0)
            return PageResult(points=[])
        if request.page_token in self.rejected:
            raise PaginationTokenInvalid("token expired", "fake")
        page = 0 if request.page_token is None else int(request.page_token[1:])
        start = page * self.page_size
        points = hours(start, min(self.page_size, self.total - start))
        next_start = start + self.page_size
        token = f"t{page + 1}" if next_start < self.total else None
        return PageResult(points=points, next_page_token=token)


@pytest.fixture
def stitcher():
    return TimeSeriesStitcher(
        hours_requested=240, max_iterations=20, page_delay=0, label="test"
    )


class TestStitching:
    @pytest.mark.asyncio
    async def test_full_series_from_pages(self, stitcher):
        provider = FakeProvider()
        result = await stitcher.stitch(provider)

        assert len(result.points) == 240
        assert result.provenance.pages_requested == 10
        assert result.provenance.complete
        assert result.provenance.hours_from_primary == 240
        assert provider.requests[0].page_token is None

    @pytest.mark.asyncio
    async def test_single_page_covering_request(self):
        stitcher = TimeSeriesStitcher(hours_requested=48, page_delay=0)
        result = await stitcher.stitch(FakeProvider(page_size=100))

        assert len(result.points) == 48
        assert result.provenance.pages_requested == 1

    @pytest.mark.asyncio
    async def test_strictly_increasing_first_seen_wins(self, stitcher):
        """Overlapping pages keep the value that arrived first."""
        pages = [
            PageResult(points=hours(0, 24, "first"), next_page_token="a"),
            PageResult(points=hours(12, 24, "second"), next_page_token=None),
        ]

        async def fetch(request: PageRequest) -> PageResult:
            return pages.pop(0)

        result = await stitcher.stitch(fetch)
        timestamps = [p.timestamp for p in result.points]

        assert timestamps == sorted(set(timestamps))
        assert len(result.points) == 36
        assert {p.value for p in result.points[:24]} == {"first"}
        assert {p.value for p in result.points[24:]} == {"second"}

    @pytest.mark.asyncio
    async def test_no_token_is_partial_success(self, stitcher):
        provider = FakeProvider(total=24)
        result = await stitcher.stitch(provider)

        assert len(result.points) == 24
        assert not result.provenance.complete
        assert len(provider.requests) == 1


class TestTokenRejection:
    @pytest.mark.asyncio
    async def test_bounded_pagination_after_three_pages(self, stitcher):
        """Token rejected after 3 pages: >= 72 hours, pagesRequested == 3."""
        provider = FakeProvider(rejected={"t3"})
        result = await stitcher.stitch(provider)
        provenance = result.provenance

        assert len(result.points) >= 72
        assert provenance.pages_requested == 3
        assert provenance.token_rejections == 1
        assert provenance.iterations <= 20
        assert not provenance.ceiling_reached

        info = provenance.to_pagination_info()
        assert info.pages_requested == 3
        assert info.hours_from_api == len(result.points)
        assert info.hours_from_mock_data == 0

    @pytest.mark.asyncio
    async def test_fallback_fills_gap(self, stitcher):
        provider = FakeProvider(
            rejected={"t1"},
            fallback_pages=[
                PageResult(points=hours(0, 48, "fallback")),
                PageResult(points=hours(48, 24, "fallback")),
            ],
        )
        result = await stitcher.stitch(provider)
        provenance = result.provenance

        assert len(result.points) == 72
        assert provenance.hours_from_primary == 24
        assert provenance.hours_from_fallback == 48
        assert provenance.fallback_requests == 4
        assert result.points[0].value == "primary"
        assert all(r.is_fallback for r in provider.requests[2:])

    @pytest.mark.asyncio
    async def test_fallback_token_stays_on_offset(self, stitcher):
        provider = FakeProvider(
            rejected={"t1"},
            fallback_pages=[
                PageResult(points=hours(24, 24), next_page_token="f1"),
                PageResult(points=hours(48, 24)),
            ],
        )
        await stitcher.stitch(provider)

        continued = provider.requests[3]
        assert continued.page_token == "f1"
        previous = provider.requests[2]
        assert continued.latitude_offset == previous.latitude_offset

    @pytest.mark.asyncio
    async def test_nothing_collected_raises(self, stitcher):
        async def always_rejected(request: PageRequest) -> PageResult:
            raise PaginationTokenInvalid("rejected", "fake")

        with pytest.raises(PaginationTokenInvalid):
            await stitcher.stitch(always_rejected)


class TestFailedPages:
    @pytest.mark.asyncio
    async def test_network_failure_keeps_collected_hours(self, stitcher):
        provider = FakeProvider()

        async def fetch(request: PageRequest) -> PageResult:
            if request.page_token == "t4":
                raise NetworkError("server error (HTTP 500)", "fake")
            return await provider(request)

        result = await stitcher.stitch(fetch)

        assert len(result.points) == 96
        assert result.provenance.pages_requested == 4
        assert result.provenance.failed_requests == 1
        assert not result.provenance.complete
        assert not result.provenance.ceiling_reached
        # No further requests after the failure
        assert len(provider.requests) == 4

        info = result.provenance.to_pagination_info()
        assert info.total_hours_retrieved == 96
        assert info.hours_requested == 240
        assert info.failed_requests == 1

    @pytest.mark.asyncio
    async def test_schema_failure_keeps_collected_hours(self, stitcher):
        provider = FakeProvider()

        async def fetch(request: PageRequest) -> PageResult:
            if request.page_token == "t2":
                raise UpstreamSchemaError("forecastHours missing", "fake")
            return await provider(request)

        result = await stitcher.stitch(fetch)

        assert len(result.points) == 48
        assert result.provenance.failed_requests == 1

    @pytest.mark.asyncio
    async def test_initial_failure_propagates(self, stitcher):
        async def fetch(request: PageRequest) -> PageResult:
            raise NetworkError("connection refused", "fake")

        with pytest.raises(NetworkError):
            await stitcher.stitch(fetch)


class TestBounds:
    @pytest.mark.asyncio
    async def test_iteration_ceiling(self):
        stitcher = TimeSeriesStitcher(
            hours_requested=240, max_iterations=5, page_delay=0
        )
        provider = FakeProvider(page_size=1)
        result = await stitcher.stitch(provider)

        assert len(provider.requests) == 5
        assert len(result.points) == 5
        assert result.provenance.ceiling_reached

    @pytest.mark.asyncio
    async def test_cancelled_before_start(self, stitcher):
        token = CancellationToken()
        token.cancel()
        provider = FakeProvider()

        with pytest.raises(OperationCancelledError):
            await stitcher.stitch(provider, token)
        assert provider.requests == []

    @pytest.mark.asyncio
    async def test_cancelled_between_pages(self, stitcher):
        token = CancellationToken()
        provider = FakeProvider()

        async def fetch(request: PageRequest) -> PageResult:
            page = await provider(request)
            token.cancel("client went away")
            return page

        with pytest.raises(OperationCancelledError, match="client went away"):
            await stitcher.stitch(fetch, token)
        assert len(provider.requests) == 1

    def test_invalid_configuration(self):
        with pytest.raises(ValueError):
            TimeSeriesStitcher(hours_requested=0)
        with pytest.raises(ValueError):
            TimeSeriesStitcher(max_iterations=0)
