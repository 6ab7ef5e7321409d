"""FastAPI dependencies: service access and per-request cancellation."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import suppress

from fastapi import HTTPException, Request, status

from ..config.settings import Settings
from ..core.cancellation import CancellationToken
from .services.forecast_service import ForecastComparisonService

DISCONNECT_POLL_INTERVAL = 0.5


def get_forecast_service(request: Request) -> ForecastComparisonService:
    service = getattr(request.app.state, "forecast_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Forecast service not initialized",
        )
    return service


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_cancel_token(
    request: Request,
) -> AsyncIterator[CancellationToken]:
    """
    Token cancelled when the HTTP client disconnects.

    A watcher task polls the connection while the request is in flight
    so abandoned requests stop paginating upstream.
    """
    token = CancellationToken()

    async def watch() -> None:
        while not token.cancelled:
            if await request.is_disconnected():
                token.cancel("Client disconnected")
                return
            await asyncio.sleep(DISCONNECT_POLL_INTERVAL)

    watcher = asyncio.create_task(watch())
    try:
        yield token
    finally:
        watcher.cancel()
        with suppress(asyncio.CancelledError):
            await watcher
