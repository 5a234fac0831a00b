"""Weather handler for HTTP requests."""
import logging
from datetime import datetime
from typing import Any, Optional

from app.errors import InvalidUnitValue
from app.models import (
    Coordinate,
    DailyTableRow,
    DaySelection,
    DayView,
    HourlyPoint,
    LocationData,
    TimeWindow,
    UnitSettings,
    WeatherRecord,
    WindScale,
)
from app.models.units import (
    UPSTREAM_HUMIDITY_UNIT,
    UPSTREAM_PRECIPITATION_UNIT,
    UPSTREAM_TEMPERATURE_UNIT,
    UPSTREAM_WIND_SPEED_UNIT,
)
from app.services import LocationService, WeatherService
from app.utils.feels_like import calculate_feels_like
from app.utils.indices import (
    air_quality_label,
    european_to_us_aqi,
    uv_index_label,
    uv_index_percentage,
    wind_direction_name,
)
from app.utils.unit_conversions import convert, wind_speed_to_scale

logger = logging.getLogger(__name__)


class WeatherHandler:
    """Handler for weather and location HTTP requests.

    This is the display boundary: values leave here in the caller's units,
    and derived values that cannot be computed become None ("N/A").
    """

    def __init__(
        self,
        weather_service: WeatherService,
        location_service: LocationService,
        default_units: Optional[UnitSettings] = None,
    ):
        """Initialize weather handler.

        Args:
            weather_service: Weather fetches and selections
            location_service: Location detection and search
            default_units: Units used when a request does not choose its own
        """
        self.weather_service = weather_service
        self.location_service = location_service
        self.default_units = default_units or UnitSettings()

    async def get_weather(
        self,
        lat: float,
        lon: float,
        past_days: int = 0,
        forecast_days: int = 1,
        client_id: Optional[str] = None,
    ) -> Optional[WeatherRecord]:
        """Full aggregated record in upstream units.

        Returns:
            The record, or None when ``client_id`` was given and a newer request
            from the same client superseded this one
        """
        coord = Coordinate(latitude=lat, longitude=lon)
        window = TimeWindow(past_days=past_days, forecast_days=forecast_days)
        logger.info(
            f"[WeatherHandler] GetWeather: lat={lat:.4f}, lon={lon:.4f}, "
            f"past_days={past_days}, forecast_days={forecast_days}"
        )
        if client_id:
            return await self.weather_service.fetch_latest(client_id, coord, window)
        return await self.weather_service.get_weather(coord, window)

    async def get_day(
        self,
        lat: float,
        lon: float,
        day_offset: int,
        units: Optional[UnitSettings] = None,
        now: Optional[datetime] = None,
    ) -> DayView:
        """One day rendered in the requested units."""
        coord = Coordinate(latitude=lat, longitude=lon)
        logger.info(f"[WeatherHandler] GetDay: lat={lat:.4f}, lon={lon:.4f}, day={day_offset}")
        record, selection = await self.weather_service.get_day(coord, day_offset, now)
        return self.render_day(record, selection, units or self.default_units)

    async def get_hourly(
        self, lat: float, lon: float, day_offset: int, now: Optional[datetime] = None
    ) -> list[HourlyPoint]:
        coord = Coordinate(latitude=lat, longitude=lon)
        return await self.weather_service.get_hourly(coord, day_offset, now)

    async def get_history(
        self, lat: float, lon: float, past_days: int, now: Optional[datetime] = None
    ) -> list[DailyTableRow]:
        coord = Coordinate(latitude=lat, longitude=lon)
        rows = await self.weather_service.get_history(coord, past_days, now)
        logger.info(f"[WeatherHandler] GetHistory: {len(rows)} rows for past_days={past_days}")
        return rows

    async def detect_location(self) -> LocationData:
        return await self.location_service.detect_location()

    async def search_locations(self, query: str) -> list[LocationData]:
        return await self.location_service.search_locations(query)

    def ping(self) -> dict[str, str]:
        """Health check endpoint.

        Returns:
            {"status": "pong"}
        """
        logger.debug("[WeatherHandler] Ping")
        return {"status": "pong"}

    def render_day(
        self, record: WeatherRecord, selection: DaySelection, units: UnitSettings
    ) -> DayView:
        """Convert a DaySelection into display units, rounded to ``units.precision``."""
        precision = units.precision

        def temperature(value: Any) -> Optional[float]:
            return self._display(value, UPSTREAM_TEMPERATURE_UNIT, units.temperature, precision)

        def humidity(value: Any) -> Optional[float]:
            return self._display(value, UPSTREAM_HUMIDITY_UNIT, units.humidity, precision)

        feels_like = None
        if selection.day_offset == 0 and selection.available:
            feels_like = temperature(self._feels_like(record))

        wind_beaufort = None
        if selection.wind_speed is not None:
            try:
                wind_beaufort = wind_speed_to_scale(
                    selection.wind_speed, UPSTREAM_WIND_SPEED_UNIT, WindScale.BEAUFORT
                )
            except InvalidUnitValue as e:
                logger.debug(f"[WeatherHandler] Beaufort unavailable: {e}")

        uv_reference = (
            selection.uv_index_current
            if selection.uv_index_current is not None
            else selection.uv_index_max
        )
        aqi = selection.air_quality
        european_aqi = aqi.current if aqi.current is not None else aqi.european_aqi_mean

        return DayView(
            day_offset=selection.day_offset,
            date=selection.date,
            source=selection.source,
            available=selection.available,
            temperature_unit=units.temperature.value,
            wind_speed_unit=units.wind_speed.value,
            humidity_unit=units.humidity.value,
            precipitation_unit=units.precipitation.value,
            temperature_high=temperature(selection.temperature_high),
            temperature_low=temperature(selection.temperature_low),
            temperature_mean=temperature(selection.temperature_mean),
            temperature_current=temperature(selection.temperature_current),
            temperature_high_time=selection.temperature_high_time,
            temperature_low_time=selection.temperature_low_time,
            feels_like=feels_like,
            precipitation_total=self._display(
                selection.precipitation_total,
                UPSTREAM_PRECIPITATION_UNIT,
                units.precipitation,
                precision,
            ),
            precipitation_probability=selection.precipitation_probability,
            weather_code=selection.weather_code,
            weather_description=selection.weather_description,
            wind_speed=self._display(
                selection.wind_speed, UPSTREAM_WIND_SPEED_UNIT, units.wind_speed, precision
            ),
            wind_direction=selection.wind_direction,
            wind_direction_name=wind_direction_name(selection.wind_direction),
            wind_beaufort=wind_beaufort,
            humidity_high=humidity(selection.humidity.high),
            humidity_low=humidity(selection.humidity.low),
            humidity_mean=humidity(selection.humidity.mean),
            humidity_current=humidity(selection.humidity.current),
            sunrise=selection.sunrise,
            sunset=selection.sunset,
            uv_index_max=selection.uv_index_max,
            uv_index_current=selection.uv_index_current,
            uv_index_label=uv_index_label(uv_reference) if uv_reference is not None else None,
            uv_index_percentage=(
                round(uv_index_percentage(uv_reference), precision)
                if uv_reference is not None
                else None
            ),
            european_aqi=round(european_aqi, precision) if european_aqi is not None else None,
            us_aqi=european_to_us_aqi(european_aqi) if european_aqi is not None else None,
            air_quality_label=air_quality_label(european_aqi) if european_aqi is not None else None,
        )

    @staticmethod
    def _display(value: Any, from_unit: Any, to_unit: Any, precision: int) -> Optional[float]:
        """Convert and round a value; missing or invalid values render as None."""
        if value is None:
            return None
        try:
            return round(convert(value, from_unit, to_unit), precision)
        except InvalidUnitValue as e:
            logger.debug(f"[WeatherHandler] Rendering N/A for {value!r}: {e}")
            return None

    @staticmethod
    def _feels_like(record: WeatherRecord) -> Optional[float]:
        """Feels-like from current conditions, in upstream temperature units."""
        current = record.current
        try:
            return calculate_feels_like(
                current.temperature_2m,
                current.relative_humidity_2m,
                current.wind_speed_10m,
                temperature_unit=UPSTREAM_TEMPERATURE_UNIT,
                wind_speed_unit=UPSTREAM_WIND_SPEED_UNIT,
                humidity_unit=UPSTREAM_HUMIDITY_UNIT,
            )
        except InvalidUnitValue as e:
            logger.debug(f"[WeatherHandler] Feels-like unavailable: {e}")
            return None
