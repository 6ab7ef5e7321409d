"""Cooperative cancellation for long-running provider work."""

import asyncio

from .exceptions import OperationCancelledError


class CancellationToken:
    """
    Signals that the caller no longer needs the result.

    Pagination loops check the token between requests and wait on it
    instead of sleeping, so a cancelled lookup stops promptly.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "Request cancelled by caller") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise OperationCancelledError(self.reason or "Cancelled")

    async def sleep(self, delay: float) -> None:
        """Sleep for `delay` seconds, returning early on cancellation."""
        if delay <= 0 or self.cancelled:
            return
        try:
            await asyncio.wait_for(self._event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass
