"""Unit tests for IP geolocation and city search."""
import pytest
from unittest.mock import AsyncMock, Mock, patch
import httpx

from app.api import GeolocationClient
from app.errors import LocationNotFoundError

PROVIDERS = {
    "ip-api": "https://ip-api.test/json/",
    "ipwhois": "https://ipwho.test/",
    "ipinfo": "https://ipinfo.test/json",
    "ipapi": "https://ipapi.test/json/",
}

IP_API_OK = {
    "status": "success",
    "city": "New York",
    "lat": 40.71,
    "lon": -74.0,
    "regionName": "New York",
    "country": "United States",
}
IPWHOIS_OK = {
    "success": True,
    "city": "Boston",
    "latitude": 42.36,
    "longitude": -71.06,
    "region": "Massachusetts",
    "country": "United States",
}
IPINFO_OK = {"city": "Denver", "region": "Colorado", "country": "US", "loc": "39.74,-104.99"}
IPAPI_OK = {
    "city": "Austin",
    "latitude": 30.27,
    "longitude": -97.74,
    "region": "Texas",
    "country_name": "United States",
}


@pytest.fixture
def api_client():
    """Create geolocation client for testing."""
    yield GeolocationClient(
        providers=PROVIDERS,
        geocoding_url="https://geocoding.test/v1/search",
        timeout=5.0,
    )


def _response(payload):
    response = Mock()
    response.status_code = 200
    response.json.return_value = payload
    return response


class TestDetectLocation:
    @pytest.mark.asyncio
    async def test_first_provider_wins(self, api_client):
        with patch.object(api_client.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(IP_API_OK)

            location = await api_client.detect_location()

            assert location.city == "New York"
            assert location.latitude == 40.71
            assert location.state == "New York"
            assert mock_request.call_count == 1
            assert mock_request.call_args.kwargs["url"] == PROVIDERS["ip-api"]

    @pytest.mark.asyncio
    async def test_falls_back_in_order(self, api_client):
        with patch.object(api_client.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = [
                _response({"status": "fail", "message": "reserved range"}),
                httpx.ConnectError("refused"),
                _response(IPINFO_OK),
            ]

            location = await api_client.detect_location()

            assert location.city == "Denver"
            assert location.latitude == 39.74
            assert location.longitude == -104.99
            assert mock_request.call_count == 3

    @pytest.mark.asyncio
    async def test_ipwhois_mapping(self, api_client):
        with patch.object(api_client.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = [httpx.ReadTimeout("slow"), _response(IPWHOIS_OK)]

            location = await api_client.detect_location()

            assert location.city == "Boston"
            assert location.state == "Massachusetts"

    @pytest.mark.asyncio
    async def test_ipapi_mapping(self, api_client):
        with patch.object(api_client.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = [
                httpx.ConnectError("x"),
                httpx.ConnectError("x"),
                _response({"city": "Nowhere"}),
                _response(IPAPI_OK),
            ]

            location = await api_client.detect_location()

            assert location.city == "Austin"
            assert location.country == "United States"

    @pytest.mark.asyncio
    async def test_all_providers_fail(self, api_client):
        with patch.object(api_client.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = httpx.ConnectError("offline")

            with pytest.raises(LocationNotFoundError):
                await api_client.detect_location()

            assert mock_request.call_count == 4

    def test_unknown_provider_rejected(self):
        with pytest.raises(ValueError):
            GeolocationClient(providers={"geoip-x": "https://x"}, geocoding_url="https://g")


class TestSearchLocations:
    @pytest.mark.asyncio
    async def test_maps_results(self, api_client):
        payload = {
            "results": [
                {
                    "name": "Paris",
                    "latitude": 48.85,
                    "longitude": 2.35,
                    "country": "France",
                    "admin1": "Île-de-France",
                },
                {"name": "Paris", "latitude": 33.66, "longitude": -95.55, "country": "United States"},
            ]
        }
        with patch.object(api_client.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(payload)

            results = await api_client.search_locations("Paris")

            assert [r.country for r in results] == ["France", "United States"]
            assert results[0].state == "Île-de-France"
            assert results[1].state is None
            params = mock_request.call_args.kwargs["params"]
            assert params == {"name": "Paris", "count": 10, "language": "en", "format": "json"}

    @pytest.mark.asyncio
    async def test_no_results(self, api_client):
        with patch.object(api_client.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response({"generationtime_ms": 0.5})

            assert await api_client.search_locations("Xyzzy") == []

    @pytest.mark.asyncio
    async def test_skips_malformed_result(self, api_client):
        payload = {"results": [{"name": "Broken"}, {"name": "Oslo", "latitude": 59.91, "longitude": 10.75}]}
        with patch.object(api_client.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = _response(payload)

            results = await api_client.search_locations("O")

            assert [r.city for r in results] == ["Oslo"]

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, api_client):
        with patch.object(api_client.client, "request", new_callable=AsyncMock) as mock_request:
            mock_request.side_effect = httpx.ConnectError("offline")

            with pytest.raises(httpx.HTTPError):
                await api_client.search_locations("Paris")
