"""Shared async HTTP plumbing and the tagged result type returned by adapters."""
import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from app.errors import AdapterFailure, NetworkError, UpstreamError
from app.metrics import (
    UPSTREAM_API_CALLS_TOTAL,
    UPSTREAM_API_CALL_DURATION_SECONDS,
    UPSTREAM_API_ERRORS_TOTAL,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdapterResult:
    """Outcome of one adapter call: either normalized ``data`` or a ``failure``."""

    adapter: str
    data: Any = None
    failure: Optional[AdapterFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, adapter: str, data: Any) -> "AdapterResult":
        return cls(adapter=adapter, data=data)

    @classmethod
    def failed(cls, failure: AdapterFailure) -> "AdapterResult":
        return cls(adapter=failure.adapter, failure=failure)


def failure_from_exception(adapter: str, exc: BaseException) -> AdapterFailure:
    """Classify an exception raised while fetching or parsing an upstream response.

    Timeouts and connection problems are network errors. Non-2xx responses and
    bodies that fail to decode or validate are upstream errors.
    """
    if isinstance(exc, AdapterFailure):
        return exc
    if isinstance(exc, httpx.HTTPStatusError):
        return UpstreamError(adapter, f"HTTP {exc.response.status_code}", cause=exc)
    if isinstance(exc, httpx.RequestError):
        return NetworkError(adapter, str(exc) or type(exc).__name__, cause=exc)
    if isinstance(exc, (ValidationError, ValueError, KeyError, TypeError)):
        return UpstreamError(adapter, f"malformed response: {exc}", cause=exc)
    return UpstreamError(adapter, f"unexpected error: {exc}", cause=exc)


class UpstreamHTTPClient:
    """Async HTTP client base with per-upstream metrics and logging."""

    def __init__(
        self,
        timeout: float = 5.0,
        user_agent: str = "Ye Olde Weather Dashboard",
    ):
        """Initialize the HTTP client.

        Args:
            timeout: Request timeout in seconds, applied to every call
            user_agent: User-Agent header sent upstream
        """
        self.timeout = timeout

        # Create async HTTP client with connection pooling
        self.client = httpx.AsyncClient(
            timeout=timeout,
            limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
            headers={"Accept": "application/json", "User-Agent": user_agent},
        )

    async def close(self):
        """Close the HTTP client and clean up resources."""
        await self.client.aclose()

    async def _request(
        self,
        upstream: str,
        url: str,
        params: Optional[dict] = None,
    ) -> Any:
        """Make a GET request and return the decoded JSON body.

        Args:
            upstream: Metric label identifying the upstream
            url: Absolute URL
            params: Query parameters

        Returns:
            Decoded JSON body

        Raises:
            httpx.HTTPStatusError: If response status is not 2xx
            httpx.RequestError: If request fails or times out
            ValueError: If the body is not valid JSON
        """
        name = type(self).__name__
        logger.debug(f"[{name}] GET {url} params={params}")

        start_time = time.perf_counter()

        try:
            response = await self.client.request(method="GET", url=url, params=params)

            logger.debug(f"[{name}] Response status: {response.status_code}")

            response.raise_for_status()

            response_json = response.json()

            duration = time.perf_counter() - start_time
            UPSTREAM_API_CALL_DURATION_SECONDS.labels(upstream=upstream).observe(duration)
            UPSTREAM_API_CALLS_TOTAL.labels(upstream=upstream, status="success").inc()

            return response_json

        except httpx.HTTPStatusError as e:
            self._record_error(upstream, start_time, "http_error")
            logger.warning(f"[{name}] HTTP error from {upstream}: {e}")
            raise
        except httpx.TimeoutException as e:
            self._record_error(upstream, start_time, "timeout")
            logger.warning(f"[{name}] Timeout from {upstream}: {e}")
            raise
        except httpx.RequestError as e:
            self._record_error(upstream, start_time, "connection_error")
            logger.warning(f"[{name}] Request error from {upstream}: {e}")
            raise
        except ValueError as e:
            self._record_error(upstream, start_time, "malformed")
            logger.warning(f"[{name}] Invalid JSON from {upstream}: {e}")
            raise

    @staticmethod
    def _record_error(upstream: str, start_time: float, error_type: str):
        duration = time.perf_counter() - start_time
        UPSTREAM_API_CALL_DURATION_SECONDS.labels(upstream=upstream).observe(duration)
        UPSTREAM_API_CALLS_TOTAL.labels(upstream=upstream, status="error").inc()
        UPSTREAM_API_ERRORS_TOTAL.labels(upstream=upstream, error_type=error_type).inc()
