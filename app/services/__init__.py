"""Services package."""
from app.services.weather_aggregator import WeatherAggregator
from app.services.weather_service import LatestRequestGuard, WeatherService
from app.services.location_service import GeolocationCache, LocationService

__all__ = [
    "WeatherAggregator",
    "LatestRequestGuard",
    "WeatherService",
    "GeolocationCache",
    "LocationService",
]
