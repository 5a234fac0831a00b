"""Unit tests for the WeatherAggregator fan-out and merge."""
import pytest
from unittest.mock import AsyncMock, Mock

from app.api import AdapterResult
from app.errors import AggregationError, NetworkError, NotAvailable, UpstreamError
from app.models import (
    AirQuality,
    AirQualityBlock,
    AirQualityHourly,
    Coordinate,
    CurrentConditions,
    DailySeries,
    ForecastBlock,
    HistoricalBlock,
    HourlySeries,
    TimeWindow,
    UVIndexSnapshot,
    WeatherCode,
    WeatherRecord,
)
from app.services import WeatherAggregator
from app.services.weather_aggregator import cast_weather_codes, daily_air_quality_aggregates
from conftest import air_quality_payload, forecast_payload, historical_payload, uv_payload

COORD = Coordinate(latitude=40.71, longitude=-74.0)


def _forecast_block(**kwargs) -> ForecastBlock:
    payload = forecast_payload(**kwargs)
    return ForecastBlock(
        timezone=payload["timezone"],
        utc_offset_seconds=payload["utc_offset_seconds"],
        current=CurrentConditions.model_validate(payload["current"]),
        hourly=HourlySeries.model_validate(payload["hourly"]),
        daily=DailySeries.model_validate(payload["daily"]),
    )


def _historical_block(past_days: int = 3) -> HistoricalBlock:
    payload = historical_payload(past_days=past_days)
    return HistoricalBlock(
        daily=DailySeries.model_validate(payload["daily"]),
        hourly=HourlySeries.model_validate(payload["hourly"]),
    )


def _air_quality_block() -> AirQualityBlock:
    payload = air_quality_payload()
    return AirQualityBlock(
        current=AirQuality.model_validate(payload["current"]),
        hourly=AirQualityHourly.model_validate(payload["hourly"]),
    )


@pytest.fixture
def open_meteo():
    """Mock Open-Meteo client where every adapter succeeds."""
    client = Mock()
    client.fetch_forecast = AsyncMock(
        return_value=AdapterResult.success("forecast", _forecast_block())
    )
    client.fetch_historical = AsyncMock(
        return_value=AdapterResult.success("historical", _historical_block())
    )
    client.fetch_air_quality = AsyncMock(
        return_value=AdapterResult.success("air_quality", _air_quality_block())
    )
    return client


@pytest.fixture
def uv_client():
    client = Mock()
    client.fetch_uv_index = AsyncMock(
        return_value=AdapterResult.success(
            "uv_index", UVIndexSnapshot.model_validate(uv_payload(uvi=4.2))
        )
    )
    return client


@pytest.fixture
def aggregator(open_meteo, uv_client):
    return WeatherAggregator(open_meteo, uv_client)


class TestAggregate:
    @pytest.mark.asyncio
    async def test_all_adapters_succeed(self, aggregator, open_meteo, uv_client):
        record = await aggregator.aggregate(COORD, TimeWindow(past_days=0, forecast_days=1))

        assert isinstance(record, WeatherRecord)
        assert record.current.temperature_2m == 22.5
        assert record.current.air_quality.european_aqi == 18.0
        assert record.current.uv_index.now.uvi == 4.2
        assert record.hourly.air_quality is not None
        assert record.historical is None

        open_meteo.fetch_forecast.assert_awaited_once_with(COORD, TimeWindow())
        open_meteo.fetch_air_quality.assert_awaited_once()
        uv_client.fetch_uv_index.assert_awaited_once_with(COORD)

    @pytest.mark.asyncio
    async def test_historical_only_requested_with_past_days(self, aggregator, open_meteo):
        await aggregator.aggregate(COORD, TimeWindow(past_days=0))
        open_meteo.fetch_historical.assert_not_called()

        record = await aggregator.aggregate(COORD, TimeWindow(past_days=3))
        open_meteo.fetch_historical.assert_awaited_once_with(COORD, TimeWindow(past_days=3))
        assert record.historical is not None
        assert record.historical.daily.time[0] == "2024-05-29"

    @pytest.mark.asyncio
    async def test_secondary_failures_degrade_fields(self, aggregator, open_meteo, uv_client):
        open_meteo.fetch_air_quality.return_value = AdapterResult.failed(
            NetworkError("air_quality", "timed out")
        )
        uv_client.fetch_uv_index.return_value = AdapterResult.failed(
            NotAvailable("uv_index", "upstream reported ok=false")
        )

        record = await aggregator.aggregate(COORD, TimeWindow())

        assert record.current.air_quality == AirQuality(pm10=0.0, pm2_5=0.0, european_aqi=0.0)
        assert record.current.uv_index is None
        assert record.hourly.air_quality is None
        assert record.daily.european_aqi_max is None
        assert record.current.temperature_2m == 22.5

    @pytest.mark.asyncio
    async def test_historical_failure_leaves_block_absent(self, aggregator, open_meteo):
        open_meteo.fetch_historical.return_value = AdapterResult.failed(
            UpstreamError("historical", "HTTP 502")
        )

        record = await aggregator.aggregate(COORD, TimeWindow(past_days=3))

        assert record.historical is None
        assert record.daily.time == ["2024-06-01"]

    @pytest.mark.asyncio
    async def test_forecast_failure_raises(self, aggregator, open_meteo):
        failure = UpstreamError("forecast", "HTTP 500")
        open_meteo.fetch_forecast.return_value = AdapterResult.failed(failure)

        with pytest.raises(AggregationError) as exc_info:
            await aggregator.aggregate(COORD, TimeWindow())

        assert exc_info.value.cause is failure

    @pytest.mark.asyncio
    async def test_adapter_exception_is_isolated(self, aggregator, uv_client):
        uv_client.fetch_uv_index.side_effect = RuntimeError("boom")

        record = await aggregator.aggregate(COORD, TimeWindow())

        assert record.current.uv_index is None
        assert record.current.air_quality.european_aqi == 18.0

    @pytest.mark.asyncio
    async def test_forecast_exception_raises_aggregation_error(self, aggregator, open_meteo):
        open_meteo.fetch_forecast.side_effect = RuntimeError("boom")

        with pytest.raises(AggregationError):
            await aggregator.aggregate(COORD, TimeWindow())

    @pytest.mark.asyncio
    async def test_same_inputs_give_equal_records(self, aggregator):
        first = await aggregator.aggregate(COORD, TimeWindow(past_days=3))
        second = await aggregator.aggregate(COORD, TimeWindow(past_days=3))

        assert first == second
        assert first is not second

    @pytest.mark.asyncio
    async def test_unknown_weather_codes_are_cast(self, aggregator, open_meteo):
        open_meteo.fetch_forecast.return_value = AdapterResult.success(
            "forecast", _forecast_block(weathercode=42)
        )

        record = await aggregator.aggregate(COORD, TimeWindow())

        assert record.current.weathercode == WeatherCode.UNKNOWN
        assert set(record.daily.weathercode) == {-1}
        assert set(record.hourly.weathercode) == {-1}

    @pytest.mark.asyncio
    async def test_daily_air_quality_aggregates_attached(self, aggregator):
        record = await aggregator.aggregate(COORD, TimeWindow())

        assert record.daily.european_aqi_max == [40.0]
        assert record.daily.european_aqi_mean[0] == pytest.approx(500 / 24)
        assert record.daily.us_aqi_max == [50.0]

    @pytest.mark.asyncio
    async def test_zero_uv_is_kept(self, aggregator, uv_client):
        uv_client.fetch_uv_index.return_value = AdapterResult.success(
            "uv_index", UVIndexSnapshot.model_validate(uv_payload(uvi=0.0))
        )

        record = await aggregator.aggregate(COORD, TimeWindow())

        assert record.current.uv_index is not None
        assert record.current.uv_index.now.uvi == 0.0


class TestHelpers:
    def test_cast_weather_codes(self):
        assert cast_weather_codes([0, 61, 42, None, 99], "test") == [0, 61, -1, -1, 99]

    def test_daily_air_quality_aggregates_without_hourly(self):
        assert daily_air_quality_aggregates(["2024-06-01"], None) == {}

    def test_daily_air_quality_aggregates_missing_date(self):
        hourly = AirQualityHourly.model_validate(air_quality_payload()["hourly"])

        aggregates = daily_air_quality_aggregates(["2024-06-01", "2024-06-02"], hourly)

        assert aggregates["pm10_max"] == [12.0, None]
        assert aggregates["pm2_5_mean"] == [5.0, None]
