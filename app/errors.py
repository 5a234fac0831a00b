"""Error taxonomy for the weather aggregation pipeline."""
from typing import Optional


class InvalidUnitValue(ValueError):
    """Raised when a conversion receives a non-numeric value or an unknown unit."""


class UnrecognizedWeatherCode(ValueError):
    """Raised by strict weather code parsing for a code outside the WMO set."""

    def __init__(self, code):
        super().__init__(f"Unrecognized WMO weather code: {code!r}")
        self.code = code


class AdapterFailure(Exception):
    """Base class for a single upstream adapter failing.

    Adapter failures never propagate past the aggregator; they are carried
    inside an AdapterResult and turned into absent fields.
    """

    kind = "adapter_failure"

    def __init__(self, adapter: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(f"[{adapter}] {message}")
        self.adapter = adapter
        self.message = message
        self.cause = cause


class NetworkError(AdapterFailure):
    """Timeout or connection failure."""

    kind = "network_error"


class UpstreamError(AdapterFailure):
    """Non-2xx status or malformed response body."""

    kind = "upstream_error"


class NotAvailable(AdapterFailure):
    """Valid response that signals the upstream has no data (e.g. UV ok=false)."""

    kind = "not_available"


class AggregationError(RuntimeError):
    """Raised when the mandatory forecast adapter fails."""

    def __init__(self, message: str = "forecast unavailable", cause: Optional[AdapterFailure] = None):
        super().__init__(message)
        self.cause = cause


class LocationNotFoundError(RuntimeError):
    """Raised when no geolocation provider could resolve a location."""
