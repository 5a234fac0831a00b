"""IP geolocation providers and Open-Meteo city search."""
import logging
from typing import Any, Callable, Optional

from app.api.base import UpstreamHTTPClient
from app.errors import LocationNotFoundError
from app.metrics import GEOLOCATION_LOOKUPS_TOTAL
from app.models import LocationData

logger = logging.getLogger(__name__)


def _parse_ip_api(data: dict[str, Any]) -> LocationData:
    if data.get("status") != "success":
        raise ValueError(f"status={data.get('status')!r}")
    return LocationData(
        city=data.get("city") or "",
        latitude=data["lat"],
        longitude=data["lon"],
        state=data.get("regionName"),
        country=data.get("country"),
    )


def _parse_ipwhois(data: dict[str, Any]) -> LocationData:
    if not data.get("success"):
        raise ValueError(f"success={data.get('success')!r}")
    return LocationData(
        city=data.get("city") or "",
        latitude=data["latitude"],
        longitude=data["longitude"],
        state=data.get("region"),
        country=data.get("country"),
    )


def _parse_ipinfo(data: dict[str, Any]) -> LocationData:
    latitude, longitude = (float(part) for part in data["loc"].split(","))
    return LocationData(
        city=data.get("city") or "",
        latitude=latitude,
        longitude=longitude,
        state=data.get("region"),
        country=data.get("country"),
    )


def _parse_ipapi(data: dict[str, Any]) -> LocationData:
    if data.get("error"):
        raise ValueError(f"reason={data.get('reason')!r}")
    return LocationData(
        city=data.get("city") or "",
        latitude=data["latitude"],
        longitude=data["longitude"],
        state=data.get("region"),
        country=data.get("country_name"),
    )


PROVIDER_PARSERS: dict[str, Callable[[dict[str, Any]], LocationData]] = {
    "ip-api": _parse_ip_api,
    "ipwhois": _parse_ipwhois,
    "ipinfo": _parse_ipinfo,
    "ipapi": _parse_ipapi,
}


class GeolocationClient(UpstreamHTTPClient):
    """Resolve the caller's location by IP and search places by name."""

    def __init__(
        self,
        providers: dict[str, str],
        geocoding_url: str,
        timeout: float = 5.0,
        user_agent: str = "Ye Olde Weather Dashboard",
    ):
        """Initialize geolocation client.

        Args:
            providers: Ordered mapping of provider name to URL; names must be
                one of PROVIDER_PARSERS
            geocoding_url: Open-Meteo geocoding search endpoint
            timeout: Request timeout in seconds
            user_agent: User-Agent header sent upstream

        Raises:
            ValueError: If a provider name has no parser
        """
        super().__init__(timeout=timeout, user_agent=user_agent)
        unknown = [name for name in providers if name not in PROVIDER_PARSERS]
        if unknown:
            raise ValueError(f"Unknown geolocation providers: {unknown}")
        self.providers = dict(providers)
        self.geocoding_url = geocoding_url

    async def detect_location(self) -> LocationData:
        """Try each provider in order and return the first usable answer.

        Raises:
            LocationNotFoundError: If every provider failed
        """
        for name, url in self.providers.items():
            try:
                payload = await self._request("geolocation", url)
                location = PROVIDER_PARSERS[name](payload)
            except Exception as e:
                GEOLOCATION_LOOKUPS_TOTAL.labels(provider=name, status="error").inc()
                logger.warning(f"[GeolocationClient] Provider {name} failed: {e}")
                continue

            GEOLOCATION_LOOKUPS_TOTAL.labels(provider=name, status="success").inc()
            logger.info(
                f"[GeolocationClient] Located via {name}: {location.city} "
                f"({location.latitude}, {location.longitude})"
            )
            return location

        raise LocationNotFoundError("All geolocation providers failed")

    async def search_locations(self, query: str, count: int = 10) -> list[LocationData]:
        """Search places by name.

        Args:
            query: City name (or prefix)
            count: Maximum number of results

        Returns:
            Matching locations, empty when the upstream has no results

        Raises:
            httpx.HTTPError: On transport or status failure (the caller retries)
        """
        params = {"name": query, "count": count, "language": "en", "format": "json"}
        payload = await self._request("geocoding", self.geocoding_url, params=params)

        results: Optional[list[dict]] = payload.get("results") if isinstance(payload, dict) else None
        if not results:
            return []

        locations = []
        for result in results:
            try:
                locations.append(
                    LocationData(
                        city=result.get("name") or "",
                        latitude=result["latitude"],
                        longitude=result["longitude"],
                        state=result.get("admin1"),
                        country=result.get("country"),
                    )
                )
            except (KeyError, ValueError) as e:
                logger.warning(f"[GeolocationClient] Skipping malformed search result: {e}")

        logger.debug(f"[GeolocationClient] Search '{query}' returned {len(locations)} results")
        return locations
