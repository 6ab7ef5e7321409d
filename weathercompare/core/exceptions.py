"""
Error taxonomy for forecast acquisition.

Every failure raised while talking to a provider is a ForecastError.
The comparison service turns them into per-source error envelopes so a
single failing provider never aborts the aggregate response:

- NetworkError: transient (timeouts, transport errors, 5xx). Retried.
- AuthError: missing/invalid credentials (401/403). Fatal, not retried.
- RateLimitError: HTTP 429 or provider throttling signal. Not retried;
  produces rateLimited=true with an empty series.
- UpstreamSchemaError: payload shape unexpected or malformed.
- PaginationTokenInvalid: continuation token rejected. Internal to the
  time-series stitcher, which switches to fallback mode.
"""


class ForecastError(Exception):
    """Base error for provider and forecast pipeline failures."""

    retryable: bool = False

    def __init__(self, message: str, source: str | None = None):
        super().__init__(message)
        self.message = message
        self.source = source
        # Filled in by RetryExecutor so diagnostics survive the raise
        self.attempts: int | None = None

    def __str__(self) -> str:
        if self.source:
            return f"[{self.source}] {self.message}"
        return self.message


class NetworkError(ForecastError):
    """Transient transport failure, timeout or upstream 5xx."""

    retryable = True


class AuthError(ForecastError):
    """Credentials missing, malformed or rejected by the provider."""


class RateLimitError(ForecastError):
    """Provider signalled throttling (HTTP 429)."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        retry_after: float | None = None,
    ):
        super().__init__(message, source)
        self.retry_after = retry_after


class UpstreamSchemaError(ForecastError):
    """Provider payload does not match the expected shape."""


class PaginationTokenInvalid(ForecastError):
    """Continuation token rejected on reuse."""


class LocationResolutionError(ForecastError):
    """Location key could not be resolved to coordinates."""


class InvalidLocationKeyError(ForecastError):
    """Location key is neither a 5-digit ZIP code nor 'lat,lon'."""


class OperationCancelledError(ForecastError):
    """Caller abandoned the request; in-flight pagination stopped."""
