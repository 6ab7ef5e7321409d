"""
Shared async HTTP plumbing for forecast provider clients.

Each provider client owns one httpx.AsyncClient and turns HTTP-level
failures into the ForecastError taxonomy:

- timeouts / transport errors / 5xx -> NetworkError (retried)
- 401 / 403 or missing key          -> AuthError
- 429                               -> RateLimitError
- other 4xx or a non-JSON body      -> UpstreamSchemaError

Subclasses implement `_fetch_payload`, which returns a parsed
ProviderPayload; `fetch` turns it into a normalized ForecastSeries.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any

import httpx
from loguru import logger
from pydantic import BaseModel

from ...core.cancellation import CancellationToken
from ...core.data_processing.series_builder import ForecastSeriesBuilder
from ...core.exceptions import (
    AuthError,
    ForecastError,
    NetworkError,
    RateLimitError,
    UpstreamSchemaError,
)
from ...core.models import (
    ForecastSeries,
    Location,
    PaginationInfo,
    SourceKind,
)
from ...core.normalization.intermediate import ProviderPayload
from .retry import RetryExecutor, Sleep


class ProviderConfig(BaseModel):
    """
    Provider connection configuration.

    Attributes:
        base_url: API base endpoint
        api_key: Credential, if the provider needs one
        timeout: Overall HTTP timeout per request (seconds)
        retry_attempts: Maximum attempts for transient failures
        retry_delay: Base delay for exponential backoff (seconds)
    """

    base_url: str
    api_key: str | None = None
    timeout: float = 30.0
    retry_attempts: int = 3
    retry_delay: float = 1.0


class BaseProviderClient(ABC):
    source: SourceKind
    display_name: str = ""
    requires_api_key: bool = True

    def __init__(
        self,
        config: ProviderConfig,
        builder: ForecastSeriesBuilder,
        http_client: httpx.AsyncClient | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.config = config
        self.builder = builder
        self.sleep = sleep
        self.client = http_client or httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            headers={"Accept": "application/json"},
            follow_redirects=True,
        )
        logger.info(
            f"{type(self).__name__} initialized | "
            f"base_url={self.config.base_url}"
        )

    async def close(self):
        await self.client.aclose()
        logger.debug(f"{type(self).__name__} closed")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @property
    def label(self) -> str:
        return self.display_name or self.source.value

    def _require_api_key(self) -> str:
        key = (self.config.api_key or "").strip()
        if not key:
            raise AuthError(
                f"{self.label} API key not configured", self.source.value
            )
        return key

    def _new_retry(self) -> RetryExecutor:
        return RetryExecutor(
            max_attempts=self.config.retry_attempts,
            base_delay=self.config.retry_delay,
            sleep=self.sleep,
            label=self.label,
        )

    async def _request_json(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Single GET attempt, classified into the error taxonomy."""
        try:
            response = await asyncio.wait_for(
                self.client.get(path, params=params, headers=headers),
                timeout=self.config.timeout,
            )
        except asyncio.TimeoutError as e:
            raise NetworkError(
                f"No response from {path} within {self.config.timeout}s",
                self.source.value,
            ) from e
        except httpx.TimeoutException as e:
            raise NetworkError(
                f"Timeout calling {path}: {e}", self.source.value
            ) from e
        except httpx.TransportError as e:
            raise NetworkError(
                f"Transport error calling {path}: {e}", self.source.value
            ) from e

        self._raise_for_status(response, path, params or {})

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamSchemaError(
                f"Non-JSON response from {path}", self.source.value
            ) from e

    async def _get_json(
        self,
        retry: RetryExecutor,
        path: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        return await retry.run(
            lambda: self._request_json(path, params, headers)
        )

    def _raise_for_status(
        self, response: httpx.Response, path: str, params: dict[str, Any]
    ) -> None:
        status = response.status_code
        if status < 400:
            return
        source = self.source.value
        if status in (401, 403):
            raise AuthError(
                f"{self.label} rejected credentials (HTTP {status})", source
            )
        if status == 429:
            raise RateLimitError(
                f"{self.label} rate limit exceeded",
                source,
                retry_after=_retry_after(response),
            )
        if status >= 500:
            raise NetworkError(
                f"{self.label} server error (HTTP {status}) on {path}",
                source,
            )
        raise self._classify_client_error(response, path, params)

    def _classify_client_error(
        self, response: httpx.Response, path: str, params: dict[str, Any]
    ) -> ForecastError:
        return UpstreamSchemaError(
            f"{self.label} rejected request (HTTP {response.status_code}) "
            f"on {path}: {response.text[:200]}",
            self.source.value,
        )

    async def fetch(
        self,
        location: Location,
        cancel_token: CancellationToken | None = None,
    ) -> ForecastSeries:
        """
        Fetch, parse and normalize one forecast for `location`.

        Raises a ForecastError subclass on failure; the error's
        `attempts` reflects every HTTP attempt made for this fetch.
        """
        token = cancel_token or CancellationToken()
        token.raise_if_cancelled()
        if self.requires_api_key:
            self._require_api_key()

        retry = self._new_retry()
        try:
            payload, pagination = await self._fetch_payload(
                location, retry, token
            )
        except ForecastError as e:
            e.attempts = retry.attempts
            raise

        return self.builder.build(
            payload,
            location,
            display_name=self.display_name,
            pagination_info=pagination,
            attempts=retry.attempts,
        )

    @abstractmethod
    async def _fetch_payload(
        self,
        location: Location,
        retry: RetryExecutor,
        cancel_token: CancellationToken,
    ) -> tuple[ProviderPayload, PaginationInfo | None]:
        ...


def _retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None
