"""Weather entry points: retry around aggregation and latest-request-wins."""
import asyncio
import itertools
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional

from app.errors import AggregationError
from app.metrics import AGGREGATION_RETRIES_TOTAL, STALE_RESPONSES_DISCARDED_TOTAL
from app.models import (
    Coordinate,
    DailyTableRow,
    DaySelection,
    HourlyPoint,
    TimeWindow,
    WeatherRecord,
)
from app.services.day_selector import build_daily_table, select_day, select_hourly
from app.services.weather_aggregator import WeatherAggregator
from app.utils.retry import retry_with_backoff

logger = logging.getLogger(__name__)


class LatestRequestGuard:
    """Remembers the latest request started by each client.

    Every ``begin`` hands out a fresh token. A response may be applied only if
    its token is still the latest one issued to that client, so a repeated
    request with identical parameters still supersedes the earlier one.
    """

    def __init__(self):
        self._latest: dict[str, int] = {}
        self._tokens = itertools.count(1)

    def begin(self, client_id: str) -> int:
        token = next(self._tokens)
        self._latest[client_id] = token
        return token

    def is_latest(self, client_id: str, token: int) -> bool:
        return self._latest.get(client_id) == token

    def finish(self, client_id: str, token: int):
        """Forget the client once its latest request has resolved."""
        if self.is_latest(client_id, token):
            del self._latest[client_id]

    def __len__(self) -> int:
        return len(self._latest)


class WeatherService:
    """Weather fetches with retry, plus day/hourly/history views over the record."""

    def __init__(
        self,
        aggregator: WeatherAggregator,
        retry_count: int = 3,
        retry_delay_seconds: float = 1.0,
        guard: Optional[LatestRequestGuard] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize weather service.

        Args:
            aggregator: Adapter fan-out and merge
            retry_count: Retries after a failed aggregation
            retry_delay_seconds: Base delay, multiplied by the attempt number
            guard: Latest-request tracker shared across calls
            sleep: Awaitable sleep, injectable for tests
        """
        self.aggregator = aggregator
        self.retry_count = retry_count
        self.retry_delay_seconds = retry_delay_seconds
        self.guard = guard if guard is not None else LatestRequestGuard()
        self.sleep = sleep

    async def get_weather(self, coord: Coordinate, window: TimeWindow) -> WeatherRecord:
        """Aggregate with bounded retry. Each retry re-runs every adapter.

        Raises:
            AggregationError: If every attempt failed
        """
        return await retry_with_backoff(
            lambda: self.aggregator.aggregate(coord, window),
            retry_count=self.retry_count,
            delay_seconds=self.retry_delay_seconds,
            retry_on=(AggregationError,),
            sleep=self.sleep,
            label="weather aggregation",
            on_retry=AGGREGATION_RETRIES_TOTAL.inc,
        )

    async def fetch_latest(
        self, client_id: str, coord: Coordinate, window: TimeWindow
    ) -> Optional[WeatherRecord]:
        """Fetch weather for a client, dropping the result if it was superseded.

        Returns:
            The record, or None if the client started another request while
            this fetch was in flight
        """
        token = self.guard.begin(client_id)
        try:
            record = await self.get_weather(coord, window)
            if not self.guard.is_latest(client_id, token):
                STALE_RESPONSES_DISCARDED_TOTAL.inc()
                logger.info(f"[WeatherService] Discarding stale response for client {client_id}")
                return None
            return record
        finally:
            self.guard.finish(client_id, token)

    async def get_day(
        self, coord: Coordinate, day_offset: int, now: Optional[datetime] = None
    ) -> tuple[WeatherRecord, DaySelection]:
        """Fetch the smallest window covering ``day_offset`` and select that day."""
        record = await self.get_weather(coord, TimeWindow.from_day_offset(day_offset))
        return record, select_day(record, day_offset, now)

    async def get_hourly(
        self, coord: Coordinate, day_offset: int, now: Optional[datetime] = None
    ) -> list[HourlyPoint]:
        record = await self.get_weather(coord, TimeWindow.from_day_offset(day_offset))
        return select_hourly(record, day_offset, now)

    async def get_history(
        self, coord: Coordinate, past_days: int, now: Optional[datetime] = None
    ) -> list[DailyTableRow]:
        """Daily rows for the past ``past_days`` days and today, most recent first."""
        record = await self.get_weather(coord, TimeWindow(past_days=past_days, forecast_days=1))
        table = build_daily_table(record, now=now, up_to_today=True)
        return list(reversed(table))
