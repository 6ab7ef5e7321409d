"""Unit tests for RetryExecutor."""

import pytest

from weathercompare.api.services.retry import RetryExecutor
from weathercompare.core.exceptions import (
    AuthError,
    NetworkError,
    RateLimitError,
    UpstreamSchemaError,
)


class FakeSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def flaky(failures: list[Exception], result="ok"):
    """Operation raising the queued errors before returning `result`."""
    calls = {"count": 0}

    async def operation():
        calls["count"] += 1
        if failures:
            raise failures.pop(0)
        return result

    return operation, calls


class TestRetryExecutor:
    def test_backoff_is_exponential(self):
        retry = RetryExecutor(base_delay=1.0)
        assert [retry.backoff_delay(a) for a in range(3)] == [1.0, 2.0, 4.0]

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            RetryExecutor(max_attempts=0)

    @pytest.mark.asyncio
    async def test_success_first_try(self):
        sleep = FakeSleep()
        retry = RetryExecutor(sleep=sleep)
        operation, calls = flaky([])

        assert await retry.run(operation) == "ok"
        assert retry.attempts == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_network_error_retried_with_backoff(self):
        sleep = FakeSleep()
        retry = RetryExecutor(max_attempts=3, base_delay=1.0, sleep=sleep)
        operation, calls = flaky(
            [NetworkError("timeout", "foreca"), NetworkError("503", "foreca")]
        )

        assert await retry.run(operation) == "ok"
        assert calls["count"] == 3
        assert retry.attempts == 3
        assert sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        sleep = FakeSleep()
        retry = RetryExecutor(max_attempts=3, base_delay=0.5, sleep=sleep)
        operation, calls = flaky([NetworkError("down") for _ in range(5)])

        with pytest.raises(NetworkError) as exc_info:
            await retry.run(operation)

        assert calls["count"] == 3
        assert exc_info.value.attempts == 3
        # No sleep after the final attempt
        assert sleep.delays == [0.5, 1.0]

    @pytest.mark.parametrize(
        "error",
        [
            AuthError("bad key", "azure_maps"),
            RateLimitError("429", "azure_maps", retry_after=30),
            UpstreamSchemaError("bad payload", "azure_maps"),
        ],
    )
    @pytest.mark.asyncio
    async def test_fatal_errors_not_retried(self, error):
        sleep = FakeSleep()
        retry = RetryExecutor(sleep=sleep)
        operation, calls = flaky([error])

        with pytest.raises(type(error)) as exc_info:
            await retry.run(operation)

        assert calls["count"] == 1
        assert exc_info.value.attempts == 1
        assert sleep.delays == []
