"""Fan-out over the weather adapters and merge into one WeatherRecord."""
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from app.api import AdapterResult, OpenMeteoClient, UVIndexClient, failure_from_exception
from app.errors import AggregationError
from app.metrics import (
    ADAPTER_RESULTS_TOTAL,
    AGGREGATIONS_TOTAL,
    AGGREGATION_DURATION_SECONDS,
)
from app.models import (
    AirQuality,
    AirQualityBlock,
    AirQualityHourly,
    Coordinate,
    DailySeries,
    ForecastBlock,
    HistoricalBlock,
    HourlySeries,
    TimeWindow,
    WeatherCode,
    WeatherRecord,
    parse_weather_code,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldPolicy:
    """How an optional ``current`` field is filled from a secondary adapter."""

    adapter: str
    extract: Callable[[Any], Any]
    default: Any


# Air quality falls back to zeros. UV stays absent: zero UV is a real observation.
CURRENT_FIELD_POLICY: dict[str, FieldPolicy] = {
    "air_quality": FieldPolicy(
        adapter=OpenMeteoClient.AIR_QUALITY,
        extract=lambda block: block.current,
        default=AirQuality(pm10=0.0, pm2_5=0.0, european_aqi=0.0),
    ),
    "uv_index": FieldPolicy(
        adapter=UVIndexClient.UV_INDEX,
        extract=lambda snapshot: snapshot if snapshot.ok else None,
        default=None,
    ),
}

# Hourly air-quality series -> daily aggregate field prefix
AIR_QUALITY_DAILY_FIELDS = ["pm10", "pm2_5", "european_aqi", "us_aqi"]


def _numbers(values) -> list[float]:
    return [v for v in values if isinstance(v, (int, float)) and not isinstance(v, bool)]


def cast_weather_codes(codes: list[Any], label: str) -> list[int]:
    """Cast every code into the closed WMO set, logging how many were unknown."""
    cast = [int(parse_weather_code(code)) for code in codes]
    unknown = sum(
        1 for code, value in zip(codes, cast)
        if value == WeatherCode.UNKNOWN and code is not None
    )
    if unknown:
        logger.warning(f"[WeatherAggregator] {unknown} unrecognized weather codes in {label}")
    return cast


def daily_air_quality_aggregates(
    daily_time: list[str], hourly: Optional[AirQualityHourly]
) -> dict[str, list[Optional[float]]]:
    """Per-date max/mean of the hourly air-quality series, aligned to ``daily_time``.

    Hours are grouped by the calendar date prefix of their timestamp. Dates
    with no numeric samples get None.
    """
    if hourly is None:
        return {}

    by_date: dict[str, list[int]] = {}
    for index, stamp in enumerate(hourly.time):
        by_date.setdefault(stamp[:10], []).append(index)

    aggregates: dict[str, list[Optional[float]]] = {}
    for field in AIR_QUALITY_DAILY_FIELDS:
        series = getattr(hourly, field)
        if series is None:
            continue
        maxima: list[Optional[float]] = []
        means: list[Optional[float]] = []
        for day in daily_time:
            values = _numbers(series[i] for i in by_date.get(day[:10], []))
            maxima.append(max(values) if values else None)
            means.append(sum(values) / len(values) if values else None)
        aggregates[f"{field}_max"] = maxima
        aggregates[f"{field}_mean"] = means
    return aggregates


class WeatherAggregator:
    """Runs all adapters concurrently and builds the WeatherRecord.

    Only the forecast adapter is mandatory. Every other adapter failure turns
    into an absent or defaulted field.
    """

    def __init__(self, open_meteo: OpenMeteoClient, uv_client: UVIndexClient):
        """Initialize weather aggregator.

        Args:
            open_meteo: Forecast, historical and air-quality adapters
            uv_client: UV index adapter
        """
        self.open_meteo = open_meteo
        self.uv_client = uv_client

    async def aggregate(self, coord: Coordinate, window: TimeWindow) -> WeatherRecord:
        """Fetch and merge weather for a coordinate and window.

        Args:
            coord: Location to fetch
            window: Past and forecast days

        Returns:
            A fresh, immutable WeatherRecord

        Raises:
            AggregationError: If the forecast adapter failed
        """
        start_time = time.perf_counter()
        logger.debug(
            f"[WeatherAggregator] Aggregating ({coord.latitude}, {coord.longitude}) "
            f"past_days={window.past_days} forecast_days={window.forecast_days}"
        )

        calls = {
            OpenMeteoClient.FORECAST: self.open_meteo.fetch_forecast(coord, window),
            OpenMeteoClient.AIR_QUALITY: self.open_meteo.fetch_air_quality(coord, window),
            UVIndexClient.UV_INDEX: self.uv_client.fetch_uv_index(coord),
        }
        if window.past_days > 0:
            calls[OpenMeteoClient.HISTORICAL] = self.open_meteo.fetch_historical(coord, window)

        outcomes = await asyncio.gather(*calls.values(), return_exceptions=True)
        results = {
            name: self._settle(name, outcome) for name, outcome in zip(calls, outcomes)
        }

        for result in results.values():
            outcome = "ok" if result.ok else result.failure.kind
            ADAPTER_RESULTS_TOTAL.labels(adapter=result.adapter, outcome=outcome).inc()

        AGGREGATION_DURATION_SECONDS.observe(time.perf_counter() - start_time)

        forecast = results[OpenMeteoClient.FORECAST]
        if not forecast.ok:
            AGGREGATIONS_TOTAL.labels(status="error").inc()
            logger.error(f"[WeatherAggregator] Forecast unavailable: {forecast.failure}")
            raise AggregationError("forecast unavailable", cause=forecast.failure)

        record = self._merge(forecast.data, results)
        AGGREGATIONS_TOTAL.labels(status="success").inc()

        degraded = [name for name, result in results.items() if not result.ok]
        if degraded:
            logger.info(f"[WeatherAggregator] Record built without: {', '.join(degraded)}")
        return record

    @staticmethod
    def _settle(name: str, outcome: Any) -> AdapterResult:
        """Turn a gathered outcome into an AdapterResult."""
        if isinstance(outcome, AdapterResult):
            return outcome
        if isinstance(outcome, Exception):
            logger.warning(f"[WeatherAggregator] Adapter {name} raised: {outcome}")
            return AdapterResult.failed(failure_from_exception(name, outcome))
        if isinstance(outcome, BaseException):
            raise outcome
        return AdapterResult.success(name, outcome)

    def _merge(self, forecast: ForecastBlock, results: dict[str, AdapterResult]) -> WeatherRecord:
        air_quality_result = results.get(OpenMeteoClient.AIR_QUALITY)
        air_quality: Optional[AirQualityBlock] = (
            air_quality_result.data if air_quality_result and air_quality_result.ok else None
        )
        air_quality_hourly = air_quality.hourly if air_quality else None

        current_updates = {
            "weathercode": int(parse_weather_code(forecast.current.weathercode)),
        }
        for field, policy in CURRENT_FIELD_POLICY.items():
            result = results.get(policy.adapter)
            value = policy.extract(result.data) if result is not None and result.ok else None
            current_updates[field] = value if value is not None else policy.default
        current = forecast.current.model_copy(update=current_updates)

        hourly = self._normalize_hourly(forecast.hourly, "hourly").model_copy(
            update={"air_quality": air_quality_hourly}
        )
        daily = self._normalize_daily(forecast.daily, "daily").model_copy(
            update=daily_air_quality_aggregates(forecast.daily.time, air_quality_hourly)
        )

        historical = None
        historical_result = results.get(OpenMeteoClient.HISTORICAL)
        if historical_result is not None and historical_result.ok:
            block: HistoricalBlock = historical_result.data
            historical = HistoricalBlock(
                daily=self._normalize_daily(block.daily, "historical.daily"),
                hourly=self._normalize_hourly(block.hourly, "historical.hourly"),
            )

        return WeatherRecord(
            timezone=forecast.timezone,
            utc_offset_seconds=forecast.utc_offset_seconds,
            current=current,
            hourly=hourly,
            daily=daily,
            historical=historical,
        )

    @staticmethod
    def _normalize_hourly(hourly: HourlySeries, label: str) -> HourlySeries:
        return hourly.model_copy(
            update={"weathercode": cast_weather_codes(hourly.weathercode, label)}
        )

    @staticmethod
    def _normalize_daily(daily: DailySeries, label: str) -> DailySeries:
        return daily.model_copy(
            update={"weathercode": cast_weather_codes(daily.weathercode, label)}
        )
