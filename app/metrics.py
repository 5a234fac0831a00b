"""Prometheus metrics definitions for the weather aggregation service.

Exposes metrics for:
1. HTTP API metrics (requests, latency, errors)
2. Upstream client metrics (calls, latency, errors per upstream)
3. Aggregation metrics (adapter outcomes, runs, retries, stale responses)
4. Location metrics (geolocation providers, cache hits)
"""
from prometheus_client import Counter, Histogram, Gauge

# =============================================================================
# HTTP API METRICS
# =============================================================================

HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

HTTP_REQUESTS_IN_PROGRESS = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests currently being processed",
    ["method", "endpoint"],
)

HTTP_REQUEST_SIZE_BYTES = Histogram(
    "http_request_size_bytes",
    "HTTP request body size in bytes",
    ["method", "endpoint"],
    buckets=(100, 500, 1000, 5000, 10000, 50000, 100000),
)

HTTP_RESPONSE_SIZE_BYTES = Histogram(
    "http_response_size_bytes",
    "HTTP response body size in bytes",
    ["method", "endpoint"],
    buckets=(100, 500, 1000, 5000, 10000, 50000, 100000, 500000),
)

# =============================================================================
# UPSTREAM CLIENT METRICS
# =============================================================================

# upstream: forecast, historical, air_quality, uv_index, geocoding, geolocation
UPSTREAM_API_CALLS_TOTAL = Counter(
    "upstream_api_calls_total",
    "Total number of upstream API calls",
    ["upstream", "status"],  # status: success, error
)

UPSTREAM_API_CALL_DURATION_SECONDS = Histogram(
    "upstream_api_call_duration_seconds",
    "Upstream API call latency in seconds",
    ["upstream"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

UPSTREAM_API_ERRORS_TOTAL = Counter(
    "upstream_api_errors_total",
    "Total number of upstream API errors",
    ["upstream", "error_type"],  # error_type: http_error, timeout, connection_error, malformed
)

# =============================================================================
# AGGREGATION METRICS
# =============================================================================

ADAPTER_RESULTS_TOTAL = Counter(
    "weather_adapter_results_total",
    "Adapter outcomes seen by the aggregator",
    ["adapter", "outcome"],  # outcome: ok, network_error, upstream_error, not_available
)

AGGREGATIONS_TOTAL = Counter(
    "weather_aggregations_total",
    "Total number of aggregation runs",
    ["status"],  # status: success, error
)

AGGREGATION_DURATION_SECONDS = Histogram(
    "weather_aggregation_duration_seconds",
    "Time to fan out, settle and merge all adapters",
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

AGGREGATION_RETRIES_TOTAL = Counter(
    "weather_aggregation_retries_total",
    "Number of times a whole aggregation was retried",
)

STALE_RESPONSES_DISCARDED_TOTAL = Counter(
    "weather_stale_responses_discarded_total",
    "Responses dropped because newer parameters were requested",
)

# =============================================================================
# LOCATION METRICS
# =============================================================================

GEOLOCATION_LOOKUPS_TOTAL = Counter(
    "geolocation_lookups_total",
    "IP geolocation attempts per provider",
    ["provider", "status"],  # status: success, error
)

GEOLOCATION_CACHE_HITS_TOTAL = Counter(
    "geolocation_cache_hits_total",
    "IP geolocation requests served from the cache",
)
