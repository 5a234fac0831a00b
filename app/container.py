"""Dependency injection container for application components."""
import logging

from app.config import Settings
from app.api import GeolocationClient, OpenMeteoClient, UVIndexClient
from app.services import (
    GeolocationCache,
    LatestRequestGuard,
    LocationService,
    WeatherAggregator,
    WeatherService,
)
from app.handlers import WeatherHandler

logger = logging.getLogger(__name__)


class Container:
    """Dependency injection container.

    Initializes and wires up all application dependencies. The geolocation
    cache and the latest-request guard are owned here and shared by every
    request.
    """

    def __init__(self, settings: Settings):
        """Initialize container with all dependencies.

        Args:
            settings: Application settings
        """
        logger.info("[Container] Initializing container")
        self.settings = settings

        # Upstream clients
        self.open_meteo_client = OpenMeteoClient(
            forecast_url=settings.forecast_api_url,
            historical_url=settings.historical_api_url,
            air_quality_url=settings.air_quality_api_url,
            timeout=settings.request_timeout_seconds,
            user_agent=settings.user_agent,
            decimal_places=settings.decimal_places,
        )
        self.uv_index_client = UVIndexClient(
            base_url=settings.uv_index_api_url,
            timeout=settings.request_timeout_seconds,
            user_agent=settings.user_agent,
        )
        self.geolocation_client = GeolocationClient(
            providers=settings.geolocation_providers,
            geocoding_url=settings.geocoding_api_url,
            timeout=settings.request_timeout_seconds,
            user_agent=settings.user_agent,
        )
        logger.info(
            f"[Container] Upstream clients initialized "
            f"(timeout={settings.request_timeout_seconds}s, "
            f"geolocation providers: {', '.join(settings.geolocation_providers)})"
        )

        # Shared cross-request state
        self.geolocation_cache = GeolocationCache(
            ttl_seconds=settings.geolocation_cache_ttl_seconds
        )
        self.request_guard = LatestRequestGuard()

        # Initialize services
        self.weather_aggregator = WeatherAggregator(self.open_meteo_client, self.uv_index_client)
        self.weather_service = WeatherService(
            self.weather_aggregator,
            retry_count=settings.retry_count,
            retry_delay_seconds=settings.retry_delay_seconds,
            guard=self.request_guard,
        )
        self.location_service = LocationService(
            self.geolocation_client,
            self.geolocation_cache,
            retry_count=settings.retry_count,
            retry_delay_seconds=settings.retry_delay_seconds,
        )

        # Initialize handlers
        self.weather_handler = WeatherHandler(
            self.weather_service,
            self.location_service,
            default_units=settings.default_unit_settings,
        )

        logger.info("[Container] Container initialized successfully")

    async def shutdown(self):
        """Clean up resources on shutdown."""
        logger.info("[Container] Shutting down container")
        for name, client in (
            ("Open-Meteo", self.open_meteo_client),
            ("UV index", self.uv_index_client),
            ("Geolocation", self.geolocation_client),
        ):
            try:
                await client.close()
                logger.info(f"[Container] {name} client closed")
            except Exception as e:
                logger.error(f"[Container] Error closing {name} client: {e}")
