"""currentuvindex.com adapter."""
import logging

from app.api.base import AdapterResult, UpstreamHTTPClient, failure_from_exception
from app.errors import NotAvailable
from app.models import Coordinate, UVIndexSnapshot

logger = logging.getLogger(__name__)


class UVIndexClient(UpstreamHTTPClient):
    """Async adapter for the UV index upstream.

    A 200 response with ``ok: false`` is reported as NotAvailable, not as data.
    """

    UV_INDEX = "uv_index"

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        user_agent: str = "Ye Olde Weather Dashboard",
    ):
        super().__init__(timeout=timeout, user_agent=user_agent)
        self.base_url = base_url

    async def fetch_uv_index(self, coord: Coordinate) -> AdapterResult:
        """Fetch the current UV reading with its short forecast and history."""
        params = {"latitude": coord.latitude, "longitude": coord.longitude}
        try:
            payload = await self._request(self.UV_INDEX, self.base_url, params=params)
            if not isinstance(payload, dict) or payload.get("ok") is not True:
                raise NotAvailable(self.UV_INDEX, "upstream reported ok=false")
            snapshot = UVIndexSnapshot.model_validate(payload)
        except Exception as e:
            failure = failure_from_exception(self.UV_INDEX, e)
            logger.warning(f"[UVIndexClient] UV adapter failed: {failure}")
            return AdapterResult.failed(failure)

        return AdapterResult.success(self.UV_INDEX, snapshot)
