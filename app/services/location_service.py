"""Location detection with a single-slot cache, and city search."""
import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

import httpx

from app.api import GeolocationClient
from app.errors import LocationNotFoundError
from app.metrics import GEOLOCATION_CACHE_HITS_TOTAL
from app.models import LocationData
from app.utils.retry import retry_with_backoff

logger = logging.getLogger(__name__)


class GeolocationCache:
    """Holds one detected location for ``ttl_seconds``.

    Only successful lookups are stored. The first success fills the slot and
    later lookups are served from it until it expires.
    """

    def __init__(self, ttl_seconds: float = 3600.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._value: Optional[LocationData] = None
        self._stored_at: Optional[float] = None

    def get(self) -> Optional[LocationData]:
        if self._value is None:
            return None
        if self.clock() - self._stored_at >= self.ttl_seconds:
            logger.debug("[GeolocationCache] Entry expired")
            self.clear()
            return None
        return self._value

    def put(self, location: LocationData):
        if self.get() is not None:
            return
        self._value = location
        self._stored_at = self.clock()

    def clear(self):
        self._value = None
        self._stored_at = None


class LocationService:
    """Entry points for detecting and searching locations, both with retry."""

    def __init__(
        self,
        geolocation_client: GeolocationClient,
        cache: GeolocationCache,
        retry_count: int = 3,
        retry_delay_seconds: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize location service.

        Args:
            geolocation_client: IP geolocation and geocoding client
            cache: Single-slot cache owned by the composition root
            retry_count: Retries after a failed lookup
            retry_delay_seconds: Base delay, multiplied by the attempt number
            sleep: Awaitable sleep, injectable for tests
        """
        self.geolocation_client = geolocation_client
        self.cache = cache
        self.retry_count = retry_count
        self.retry_delay_seconds = retry_delay_seconds
        self.sleep = sleep

    async def detect_location(self) -> LocationData:
        """Location of the server's public IP, cached after the first success.

        Raises:
            LocationNotFoundError: If every attempt failed
        """
        cached = self.cache.get()
        if cached is not None:
            GEOLOCATION_CACHE_HITS_TOTAL.inc()
            logger.debug("[LocationService] Serving location from cache")
            return cached

        location = await retry_with_backoff(
            self.geolocation_client.detect_location,
            retry_count=self.retry_count,
            delay_seconds=self.retry_delay_seconds,
            retry_on=(LocationNotFoundError,),
            sleep=self.sleep,
            label="location detection",
        )
        self.cache.put(location)
        return location

    async def search_locations(self, query: str) -> list[LocationData]:
        """Search by city name. Returns an empty list if every attempt failed."""
        query = query.strip()
        if not query:
            return []
        try:
            return await retry_with_backoff(
                lambda: self.geolocation_client.search_locations(query),
                retry_count=self.retry_count,
                delay_seconds=self.retry_delay_seconds,
                retry_on=(httpx.HTTPError, ValueError),
                sleep=self.sleep,
                label="location search",
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[LocationService] Search for '{query}' failed: {e}")
            return []
