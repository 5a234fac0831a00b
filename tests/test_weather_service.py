"""Unit tests for WeatherService retry, latest-request guard and views."""
import asyncio
from datetime import datetime

import pytest
import pytz
from unittest.mock import AsyncMock, Mock

from app.errors import AggregationError
from app.models import Coordinate, DataSource, TimeWindow
from app.services import LatestRequestGuard, WeatherService
from app.utils.retry import retry_with_backoff

COORD = Coordinate(latitude=40.71, longitude=-74.0)
NOW = datetime(2024, 6, 1, 12, tzinfo=pytz.utc)


class FakeSleep:
    """Records requested delays instead of sleeping."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture
def record(make_record, make_forecast_payload, make_historical_payload):
    return make_record(
        forecast=make_forecast_payload(days=2),
        historical=make_historical_payload(past_days=3),
    )


@pytest.fixture
def aggregator(record):
    mock = Mock()
    mock.aggregate = AsyncMock(return_value=record)
    return mock


@pytest.fixture
def service(aggregator, fake_sleep):
    return WeatherService(aggregator, retry_count=3, retry_delay_seconds=1.0, sleep=fake_sleep)


class TestRetryWithBackoff:
    @pytest.mark.asyncio
    async def test_delays_grow_linearly(self, fake_sleep):
        operation = AsyncMock(side_effect=AggregationError())

        with pytest.raises(AggregationError):
            await retry_with_backoff(operation, retry_count=3, delay_seconds=1.0, sleep=fake_sleep)

        assert operation.await_count == 4
        assert fake_sleep.delays == [1.0, 2.0, 3.0]

    @pytest.mark.asyncio
    async def test_success_after_failure(self, fake_sleep):
        operation = AsyncMock(side_effect=[ValueError("x"), "done"])
        on_retry = Mock()

        result = await retry_with_backoff(
            operation, retry_count=3, delay_seconds=0.5, sleep=fake_sleep, on_retry=on_retry
        )

        assert result == "done"
        assert fake_sleep.delays == [0.5]
        on_retry.assert_called_once()

    @pytest.mark.asyncio
    async def test_other_errors_not_retried(self, fake_sleep):
        operation = AsyncMock(side_effect=KeyError("x"))

        with pytest.raises(KeyError):
            await retry_with_backoff(operation, retry_on=(ValueError,), sleep=fake_sleep)

        assert operation.await_count == 1
        assert fake_sleep.delays == []

    @pytest.mark.asyncio
    async def test_zero_retries(self, fake_sleep):
        operation = AsyncMock(side_effect=ValueError("x"))

        with pytest.raises(ValueError):
            await retry_with_backoff(operation, retry_count=0, sleep=fake_sleep)

        assert operation.await_count == 1


class TestGetWeather:
    @pytest.mark.asyncio
    async def test_success(self, service, aggregator, record):
        assert await service.get_weather(COORD, TimeWindow()) is record
        aggregator.aggregate.assert_awaited_once_with(COORD, TimeWindow())

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self, service, aggregator, record, fake_sleep):
        aggregator.aggregate.side_effect = [AggregationError(), AggregationError(), record]

        assert await service.get_weather(COORD, TimeWindow()) is record
        assert fake_sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise(self, service, aggregator, fake_sleep):
        aggregator.aggregate.side_effect = AggregationError()

        with pytest.raises(AggregationError):
            await service.get_weather(COORD, TimeWindow())

        assert aggregator.aggregate.await_count == 4
        assert fake_sleep.delays == [1.0, 2.0, 3.0]


class TestLatestRequestGuard:
    def test_latest_request_wins(self):
        guard = LatestRequestGuard()
        first = guard.begin("a")
        second = guard.begin("a")

        assert not guard.is_latest("a", first)
        assert guard.is_latest("a", second)

    def test_clients_are_independent(self):
        guard = LatestRequestGuard()
        a = guard.begin("a")
        b = guard.begin("b")

        assert guard.is_latest("a", a)
        assert guard.is_latest("b", b)

    def test_finish_only_forgets_latest(self):
        guard = LatestRequestGuard()
        first = guard.begin("a")
        second = guard.begin("a")
        guard.finish("a", first)
        assert len(guard) == 1

        guard.finish("a", second)
        assert len(guard) == 0


class TestFetchLatest:
    def test_injected_guard_is_kept(self, aggregator):
        guard = LatestRequestGuard()

        service = WeatherService(aggregator, guard=guard)

        assert service.guard is guard

    @pytest.mark.asyncio
    async def test_returns_record(self, service, record):
        assert await service.fetch_latest("tab-1", COORD, TimeWindow()) is record
        assert len(service.guard) == 0

    @pytest.mark.asyncio
    async def test_superseded_response_is_dropped(self, service, aggregator, record):
        release_first = asyncio.Event()
        other = Coordinate(latitude=51.5, longitude=-0.12)

        async def aggregate(coord, window):
            if coord == COORD:
                await release_first.wait()
            return record

        aggregator.aggregate.side_effect = aggregate

        first = asyncio.create_task(service.fetch_latest("tab-1", COORD, TimeWindow()))
        await asyncio.sleep(0)
        second = await service.fetch_latest("tab-1", other, TimeWindow())
        release_first.set()

        assert second is record
        assert await first is None

    @pytest.mark.asyncio
    async def test_repeated_identical_request_keeps_newest(self, service, aggregator, record):
        releases = []

        async def aggregate(coord, window):
            release = asyncio.Event()
            releases.append(release)
            await release.wait()
            return record

        aggregator.aggregate.side_effect = aggregate

        first = asyncio.create_task(service.fetch_latest("tab-1", COORD, TimeWindow()))
        second = asyncio.create_task(service.fetch_latest("tab-1", COORD, TimeWindow()))
        while len(releases) < 2:
            await asyncio.sleep(0)

        releases[0].set()
        assert await first is None

        releases[1].set()
        assert await second is record
        assert len(service.guard) == 0

    @pytest.mark.asyncio
    async def test_failure_clears_guard(self, service, aggregator):
        aggregator.aggregate.side_effect = AggregationError()

        with pytest.raises(AggregationError):
            await service.fetch_latest("tab-1", COORD, TimeWindow())

        assert len(service.guard) == 0

    @pytest.mark.asyncio
    async def test_unexpected_error_clears_guard(self, service, aggregator):
        aggregator.aggregate.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await service.fetch_latest("tab-1", COORD, TimeWindow())

        assert len(service.guard) == 0


class TestViews:
    @pytest.mark.asyncio
    async def test_get_day_requests_covering_window(self, service, aggregator):
        _, selection = await service.get_day(COORD, -2, NOW)

        aggregator.aggregate.assert_awaited_once_with(COORD, TimeWindow(past_days=2, forecast_days=1))
        assert selection.date == "2024-05-30"
        assert selection.source is DataSource.HISTORICAL

    @pytest.mark.asyncio
    async def test_get_day_future(self, service, aggregator):
        _, selection = await service.get_day(COORD, 1, NOW)

        aggregator.aggregate.assert_awaited_once_with(COORD, TimeWindow(past_days=0, forecast_days=2))
        assert selection.date == "2024-06-02"

    @pytest.mark.asyncio
    async def test_get_hourly(self, service):
        points = await service.get_hourly(COORD, 0, NOW)
        assert len(points) == 24

    @pytest.mark.asyncio
    async def test_history_is_newest_first(self, service, aggregator):
        rows = await service.get_history(COORD, 3, NOW)

        aggregator.aggregate.assert_awaited_once_with(COORD, TimeWindow(past_days=3, forecast_days=1))
        assert [row.date for row in rows] == [
            "2024-06-01",
            "2024-05-31",
            "2024-05-30",
            "2024-05-29",
        ]
        assert rows[0].source is DataSource.CURRENT
