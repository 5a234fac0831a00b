"""Open-Meteo adapters: forecast, historical re-forecast and air quality."""
import logging

from app.api.base import AdapterResult, UpstreamHTTPClient, failure_from_exception
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
)

logger = logging.getLogger(__name__)

CURRENT_VARIABLES = [
    "temperature_2m",
    "relative_humidity_2m",
    "apparent_temperature",
    "precipitation",
    "wind_speed_10m",
    "wind_direction_10m",
    "wind_gusts_10m",
    "weathercode",
    "cloud_cover",
]

HOURLY_VARIABLES = [
    "temperature_2m",
    "precipitation_probability",
    "weathercode",
    "wind_speed_10m",
    "wind_direction_10m",
    "relative_humidity_2m",
]

DAILY_VARIABLES = [
    "weathercode",
    "temperature_2m_max",
    "temperature_2m_min",
    "temperature_2m_mean",
    "precipitation_probability_max",
    "precipitation_sum",
    "wind_speed_10m_max",
    "wind_direction_10m_dominant",
    "relative_humidity_2m_max",
    "relative_humidity_2m_min",
    "relative_humidity_2m_mean",
    "sunrise",
    "sunset",
    "uv_index_max",
    "uv_index_clear_sky_max",
]

# The re-forecast archive has no precipitation probability
HISTORICAL_DAILY_VARIABLES = [v for v in DAILY_VARIABLES if v != "precipitation_probability_max"]

AIR_QUALITY_CURRENT_VARIABLES = ["pm10", "pm2_5", "european_aqi"]
AIR_QUALITY_HOURLY_VARIABLES = [
    "pm10",
    "pm2_5",
    "european_aqi",
    "us_aqi",
    "uv_index",
    "uv_index_clear_sky",
]

# Air-quality upstream caps its forecast horizon
AIR_QUALITY_MAX_FORECAST_DAYS = 7


class OpenMeteoClient(UpstreamHTTPClient):
    """Async adapters for the three Open-Meteo weather upstreams.

    Every ``fetch_*`` method returns an AdapterResult and never raises.
    """

    FORECAST = "forecast"
    HISTORICAL = "historical"
    AIR_QUALITY = "air_quality"

    def __init__(
        self,
        forecast_url: str,
        historical_url: str,
        air_quality_url: str,
        timeout: float = 5.0,
        user_agent: str = "Ye Olde Weather Dashboard",
        decimal_places: int = 3,
    ):
        """Initialize Open-Meteo client.

        Args:
            forecast_url: Forecast endpoint
            historical_url: Historical re-forecast endpoint
            air_quality_url: Air-quality endpoint
            timeout: Request timeout in seconds
            user_agent: User-Agent header sent upstream
            decimal_places: Rounding requested from the forecast upstream
        """
        super().__init__(timeout=timeout, user_agent=user_agent)
        self.forecast_url = forecast_url
        self.historical_url = historical_url
        self.air_quality_url = air_quality_url
        self.decimal_places = decimal_places

    @staticmethod
    def _location_params(coord: Coordinate) -> dict:
        return {
            "latitude": coord.latitude,
            "longitude": coord.longitude,
            "timezone": "auto",
        }

    async def fetch_forecast(self, coord: Coordinate, window: TimeWindow) -> AdapterResult:
        """Fetch current conditions plus hourly and daily forecast series.

        ``past_days`` is always 0 here so that ``daily[0]`` is today. History
        comes from the historical adapter only.
        """
        params = {
            **self._location_params(coord),
            "current": ",".join(CURRENT_VARIABLES),
            "hourly": ",".join(HOURLY_VARIABLES),
            "daily": ",".join(DAILY_VARIABLES),
            "forecast_days": window.forecast_days,
            "past_days": 0,
            "decimal_places": self.decimal_places,
        }
        try:
            payload = await self._request(self.FORECAST, self.forecast_url, params=params)
            block = ForecastBlock(
                timezone=payload.get("timezone") or "UTC",
                utc_offset_seconds=payload.get("utc_offset_seconds") or 0,
                current=CurrentConditions.model_validate(payload["current"]),
                hourly=HourlySeries.model_validate(payload["hourly"]),
                daily=DailySeries.model_validate(payload["daily"]),
            )
        except Exception as e:
            failure = failure_from_exception(self.FORECAST, e)
            logger.warning(f"[OpenMeteoClient] Forecast adapter failed: {failure}")
            return AdapterResult.failed(failure)

        logger.debug(
            f"[OpenMeteoClient] Forecast ok: {len(block.daily.time)} days, "
            f"{len(block.hourly.time)} hours, tz={block.timezone}"
        )
        return AdapterResult.success(self.FORECAST, block)

    async def fetch_historical(self, coord: Coordinate, window: TimeWindow) -> AdapterResult:
        """Fetch the re-forecast archive covering ``past_days`` plus today."""
        params = {
            **self._location_params(coord),
            "hourly": ",".join(HOURLY_VARIABLES),
            "daily": ",".join(HISTORICAL_DAILY_VARIABLES),
            "past_days": window.past_days,
            "forecast_days": 1,
            "decimal_places": self.decimal_places,
        }
        try:
            payload = await self._request(self.HISTORICAL, self.historical_url, params=params)
            block = HistoricalBlock(
                daily=DailySeries.model_validate(payload["daily"]),
                hourly=HourlySeries.model_validate(payload["hourly"]),
            )
        except Exception as e:
            failure = failure_from_exception(self.HISTORICAL, e)
            logger.warning(f"[OpenMeteoClient] Historical adapter failed: {failure}")
            return AdapterResult.failed(failure)

        logger.debug(f"[OpenMeteoClient] Historical ok: {len(block.daily.time)} days")
        return AdapterResult.success(self.HISTORICAL, block)

    async def fetch_air_quality(self, coord: Coordinate, window: TimeWindow) -> AdapterResult:
        """Fetch current air quality and the hourly AQ/UV series for the whole window."""
        params = {
            **self._location_params(coord),
            "current": ",".join(AIR_QUALITY_CURRENT_VARIABLES),
            "hourly": ",".join(AIR_QUALITY_HOURLY_VARIABLES),
            "past_days": window.past_days,
            "forecast_days": min(window.forecast_days, AIR_QUALITY_MAX_FORECAST_DAYS),
        }
        try:
            payload = await self._request(self.AIR_QUALITY, self.air_quality_url, params=params)
            current = payload.get("current")
            hourly = payload.get("hourly")
            if current is None and hourly is None:
                raise ValueError("response has neither 'current' nor 'hourly'")
            block = AirQualityBlock(
                current=AirQuality.model_validate(current) if current is not None else None,
                hourly=AirQualityHourly.model_validate(hourly) if hourly is not None else None,
            )
        except Exception as e:
            failure = failure_from_exception(self.AIR_QUALITY, e)
            logger.warning(f"[OpenMeteoClient] Air-quality adapter failed: {failure}")
            return AdapterResult.failed(failure)

        return AdapterResult.success(self.AIR_QUALITY, block)
