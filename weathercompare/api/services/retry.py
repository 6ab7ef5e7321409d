"""
Retry executor for provider calls.

Only retryable errors (NetworkError) are retried, with exponential
backoff: base_delay * 2**attempt. Auth, rate-limit and schema errors
propagate on the first occurrence. The attempt count is kept on the
executor and copied onto the raised error for diagnostics.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from loguru import logger

from ...core.exceptions import ForecastError

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


class RetryExecutor:
    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        sleep: Sleep = asyncio.sleep,
        label: str = "provider",
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.sleep = sleep
        self.label = label
        self.attempts = 0

    def backoff_delay(self, attempt: int) -> float:
        return self.base_delay * (2**attempt)

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        for attempt in range(self.max_attempts):
            self.attempts += 1
            try:
                return await operation()
            except ForecastError as e:
                e.attempts = self.attempts
                if not e.retryable or attempt == self.max_attempts - 1:
                    raise
                delay = self.backoff_delay(attempt)
                logger.warning(
                    f"{self.label} failed (attempt {attempt + 1}/"
                    f"{self.max_attempts}): {e}. Retrying in {delay:.1f}s"
                )
                await self.sleep(delay)
        raise AssertionError("unreachable")
