"""Upstream HTTP clients."""
from app.api.base import AdapterResult, UpstreamHTTPClient, failure_from_exception
from app.api.open_meteo_client import OpenMeteoClient
from app.api.uv_index_client import UVIndexClient
from app.api.geolocation_client import GeolocationClient

__all__ = [
    "AdapterResult",
    "UpstreamHTTPClient",
    "failure_from_exception",
    "OpenMeteoClient",
    "UVIndexClient",
    "GeolocationClient",
]
