"""FastAPI middleware for Prometheus metrics instrumentation."""
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match

from app.metrics import (
    HTTP_REQUESTS_TOTAL,
    HTTP_REQUEST_DURATION_SECONDS,
    HTTP_REQUESTS_IN_PROGRESS,
    HTTP_REQUEST_SIZE_BYTES,
    HTTP_RESPONSE_SIZE_BYTES,
)

UNMATCHED_ENDPOINT = "unmatched"


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP request metrics for Prometheus."""

    # Endpoints to exclude from metrics (like /metrics itself)
    EXCLUDE_PATHS = {"/metrics", "/health", "/ping"}

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process request and collect metrics."""
        path = request.url.path
        method = request.method

        # Skip metrics for excluded paths
        if path in self.EXCLUDE_PATHS:
            return await call_next(request)

        # Label by route template so query strings and unknown paths stay low-cardinality
        endpoint = self._route_template(request)

        content_length = request.headers.get("content-length")
        if content_length:
            try:
                HTTP_REQUEST_SIZE_BYTES.labels(
                    method=method, endpoint=endpoint
                ).observe(int(content_length))
            except ValueError:
                pass

        HTTP_REQUESTS_IN_PROGRESS.labels(method=method, endpoint=endpoint).inc()

        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception:
            status_code = 500
            raise
        finally:
            duration = time.perf_counter() - start_time
            HTTP_REQUEST_DURATION_SECONDS.labels(
                method=method, endpoint=endpoint
            ).observe(duration)

            HTTP_REQUESTS_IN_PROGRESS.labels(method=method, endpoint=endpoint).dec()

            HTTP_REQUESTS_TOTAL.labels(
                method=method, endpoint=endpoint, status_code=str(status_code)
            ).inc()

        response_size = response.headers.get("content-length")
        if response_size:
            try:
                HTTP_RESPONSE_SIZE_BYTES.labels(
                    method=method, endpoint=endpoint
                ).observe(int(response_size))
            except ValueError:
                pass

        return response

    @staticmethod
    def _route_template(request: Request) -> str:
        """Path template of the route that will serve the request, or "unmatched"."""
        for route in request.app.routes:
            match, _ = route.matches(request.scope)
            if match == Match.FULL:
                return getattr(route, "path", UNMATCHED_ENDPOINT)
        return UNMATCHED_ENDPOINT
