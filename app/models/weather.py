"""Weather record data models using Pydantic.

Series blocks follow the upstream layout: one shared ``time`` axis with
parallel value arrays indexed identically. Missing samples are ``None``.
"""
from enum import IntEnum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.errors import UnrecognizedWeatherCode


class WeatherCode(IntEnum):
    """WMO weather interpretation codes (closed set) plus an UNKNOWN sentinel."""
    UNKNOWN = -1
    CLEAR_SKY = 0
    MAINLY_CLEAR = 1
    PARTLY_CLOUDY = 2
    OVERCAST = 3
    FOG = 45
    DEPOSITING_RIME_FOG = 48
    DRIZZLE_LIGHT = 51
    DRIZZLE_MODERATE = 52
    DRIZZLE_HEAVY = 53
    DRIZZLE_VERY_HEAVY = 54
    DRIZZLE_INTENSE = 55
    FREEZING_DRIZZLE_LIGHT = 56
    FREEZING_DRIZZLE_DENSE = 57
    RAIN_LIGHT = 61
    RAIN_MODERATE = 62
    RAIN_HEAVY = 63
    RAIN_VERY_HEAVY = 64
    RAIN_INTENSE = 65
    FREEZING_RAIN_LIGHT = 66
    FREEZING_RAIN_HEAVY = 67
    SNOW_LIGHT = 71
    SNOW_MODERATE = 72
    SNOW_HEAVY = 73
    SNOW_VERY_HEAVY = 74
    SNOW_INTENSE = 75
    SNOW_GRAINS = 77
    RAIN_SHOWERS_LIGHT = 80
    RAIN_SHOWERS_MODERATE = 81
    RAIN_SHOWERS_VIOLENT = 82
    SNOW_SHOWERS_LIGHT = 85
    SNOW_SHOWERS_HEAVY = 86
    THUNDERSTORM = 95
    THUNDERSTORM_HAIL_LIGHT = 96
    THUNDERSTORM_HAIL_MODERATE = 97
    THUNDERSTORM_HAIL_HEAVY = 98
    THUNDERSTORM_HAIL_VERY_HEAVY = 99


WEATHER_DESCRIPTIONS: dict[WeatherCode, str] = {
    WeatherCode.CLEAR_SKY: "Clear sky",
    WeatherCode.MAINLY_CLEAR: "Mainly clear",
    WeatherCode.PARTLY_CLOUDY: "Partly cloudy",
    WeatherCode.OVERCAST: "Overcast",
    WeatherCode.FOG: "Foggy",
    WeatherCode.DEPOSITING_RIME_FOG: "Foggy",
    WeatherCode.DRIZZLE_LIGHT: "Light drizzle",
    WeatherCode.DRIZZLE_MODERATE: "Moderate drizzle",
    WeatherCode.DRIZZLE_HEAVY: "Heavy drizzle",
    WeatherCode.DRIZZLE_VERY_HEAVY: "Very heavy drizzle",
    WeatherCode.DRIZZLE_INTENSE: "Intense drizzle",
    WeatherCode.FREEZING_DRIZZLE_LIGHT: "Light freezing drizzle",
    WeatherCode.FREEZING_DRIZZLE_DENSE: "Dense freezing drizzle",
    WeatherCode.RAIN_LIGHT: "Light rain",
    WeatherCode.RAIN_MODERATE: "Moderate rain",
    WeatherCode.RAIN_HEAVY: "Heavy rain",
    WeatherCode.RAIN_VERY_HEAVY: "Very heavy rain",
    WeatherCode.RAIN_INTENSE: "Intense rain",
    WeatherCode.FREEZING_RAIN_LIGHT: "Light freezing rain",
    WeatherCode.FREEZING_RAIN_HEAVY: "Heavy freezing rain",
    WeatherCode.SNOW_LIGHT: "Light snow",
    WeatherCode.SNOW_MODERATE: "Moderate snow",
    WeatherCode.SNOW_HEAVY: "Heavy snow",
    WeatherCode.SNOW_VERY_HEAVY: "Very heavy snow",
    WeatherCode.SNOW_INTENSE: "Intense snow",
    WeatherCode.SNOW_GRAINS: "Snow grains",
    WeatherCode.RAIN_SHOWERS_LIGHT: "Light rain showers",
    WeatherCode.RAIN_SHOWERS_MODERATE: "Moderate rain showers",
    WeatherCode.RAIN_SHOWERS_VIOLENT: "Violent rain showers",
    WeatherCode.SNOW_SHOWERS_LIGHT: "Light snow showers",
    WeatherCode.SNOW_SHOWERS_HEAVY: "Heavy snow showers",
    WeatherCode.THUNDERSTORM: "Thunderstorm",
    WeatherCode.THUNDERSTORM_HAIL_LIGHT: "Thunderstorm with light hail",
    WeatherCode.THUNDERSTORM_HAIL_MODERATE: "Thunderstorm with moderate hail",
    WeatherCode.THUNDERSTORM_HAIL_HEAVY: "Thunderstorm with heavy hail",
    WeatherCode.THUNDERSTORM_HAIL_VERY_HEAVY: "Thunderstorm with very heavy hail",
}


def parse_weather_code(code: Any, strict: bool = False) -> WeatherCode:
    """Cast a raw code into the closed WMO set.

    Args:
        code: Raw value from an upstream payload
        strict: If True, raise instead of returning WeatherCode.UNKNOWN

    Raises:
        UnrecognizedWeatherCode: In strict mode, for codes outside the set
    """
    try:
        parsed = WeatherCode(int(code))
        if parsed is not WeatherCode.UNKNOWN:
            return parsed
    except (TypeError, ValueError):
        pass
    if strict:
        raise UnrecognizedWeatherCode(code)
    return WeatherCode.UNKNOWN


def weather_description(code: Any) -> Optional[str]:
    """Human-readable description, None for unknown codes."""
    return WEATHER_DESCRIPTIONS.get(parse_weather_code(code))


class FrozenModel(BaseModel):
    """Base for immutable records."""
    model_config = ConfigDict(frozen=True)


class ParallelSeries(FrozenModel):
    """A block of arrays sharing one ``time`` axis.

    Every list field other than ``time`` must have the same length as ``time``.
    """
    time: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_parallel_lengths(self):
        expected = len(self.time)
        for name in type(self).model_fields:
            if name == "time":
                continue
            value = getattr(self, name)
            if isinstance(value, list) and len(value) != expected:
                raise ValueError(
                    f"Series '{name}' has {len(value)} values for {expected} timestamps"
                )
        return self


class Coordinate(FrozenModel):
    """Geographic coordinate supplied by the caller."""
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class TimeWindow(FrozenModel):
    """Requested window: days of history and days of forecast (today included)."""
    past_days: int = Field(default=0, ge=0, le=92)
    forecast_days: int = Field(default=1, ge=1, le=16)

    @classmethod
    def from_day_offset(cls, day_offset: int) -> "TimeWindow":
        """Smallest window that covers a signed day offset from today."""
        return cls(
            past_days=max(0, -day_offset),
            forecast_days=day_offset + 1 if day_offset > 0 else 1,
        )


class AirQuality(FrozenModel):
    """Instantaneous air quality snapshot."""
    pm10: Optional[float] = 0.0
    pm2_5: Optional[float] = 0.0
    european_aqi: Optional[float] = 0.0


class UVReading(FrozenModel):
    time: str
    uvi: Optional[float] = None


class UVIndexSnapshot(FrozenModel):
    """Payload of the UV index upstream, only kept when ``ok`` is true."""
    ok: bool
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    now: UVReading
    forecast: list[UVReading] = Field(default_factory=list)
    history: list[UVReading] = Field(default_factory=list)


class CurrentConditions(FrozenModel):
    """Single-instant snapshot from the forecast upstream."""
    time: Optional[str] = None
    temperature_2m: float
    relative_humidity_2m: Optional[float] = None
    apparent_temperature: Optional[float] = None
    precipitation: Optional[float] = None
    wind_speed_10m: Optional[float] = None
    wind_direction_10m: Optional[float] = None
    wind_gusts_10m: Optional[float] = None
    weathercode: int = WeatherCode.UNKNOWN
    cloud_cover: Optional[float] = None
    air_quality: Optional[AirQuality] = None
    uv_index: Optional[UVIndexSnapshot] = None


class AirQualityHourly(ParallelSeries):
    """Hourly air quality and UV series on the air-quality upstream's own time axis."""
    pm10: Optional[list[Optional[float]]] = None
    pm2_5: Optional[list[Optional[float]]] = None
    european_aqi: Optional[list[Optional[float]]] = None
    us_aqi: Optional[list[Optional[float]]] = None
    uv_index: Optional[list[Optional[float]]] = None
    uv_index_clear_sky: Optional[list[Optional[float]]] = None


class HourlySeries(ParallelSeries):
    temperature_2m: list[Optional[float]] = Field(default_factory=list)
    precipitation_probability: Optional[list[Optional[float]]] = None
    weathercode: list[Optional[int]] = Field(default_factory=list)
    wind_speed_10m: Optional[list[Optional[float]]] = None
    wind_direction_10m: Optional[list[Optional[float]]] = None
    wind_gusts_10m: Optional[list[Optional[float]]] = None
    relative_humidity_2m: Optional[list[Optional[float]]] = None
    air_quality: Optional[AirQualityHourly] = None


class DailySeries(ParallelSeries):
    """Daily aggregates. Historical blocks leave the probability fields as None."""
    weathercode: list[Optional[int]] = Field(default_factory=list)
    temperature_2m_max: list[Optional[float]] = Field(default_factory=list)
    temperature_2m_min: list[Optional[float]] = Field(default_factory=list)
    temperature_2m_mean: Optional[list[Optional[float]]] = None
    precipitation_probability_max: Optional[list[Optional[float]]] = None
    precipitation_sum: Optional[list[Optional[float]]] = None
    wind_speed_10m_max: Optional[list[Optional[float]]] = None
    wind_direction_10m_dominant: Optional[list[Optional[float]]] = None
    relative_humidity_2m_max: Optional[list[Optional[float]]] = None
    relative_humidity_2m_min: Optional[list[Optional[float]]] = None
    relative_humidity_2m_mean: Optional[list[Optional[float]]] = None
    sunrise: Optional[list[Optional[str]]] = None
    sunset: Optional[list[Optional[str]]] = None
    uv_index_max: Optional[list[Optional[float]]] = None
    uv_index_clear_sky_max: Optional[list[Optional[float]]] = None
    pm10_max: Optional[list[Optional[float]]] = None
    pm10_mean: Optional[list[Optional[float]]] = None
    pm2_5_max: Optional[list[Optional[float]]] = None
    pm2_5_mean: Optional[list[Optional[float]]] = None
    european_aqi_max: Optional[list[Optional[float]]] = None
    european_aqi_mean: Optional[list[Optional[float]]] = None
    us_aqi_max: Optional[list[Optional[float]]] = None
    us_aqi_mean: Optional[list[Optional[float]]] = None


class HistoricalBlock(FrozenModel):
    """Series from the historical re-forecast upstream covering the past_days window."""
    daily: DailySeries
    hourly: HourlySeries


class ForecastBlock(FrozenModel):
    """Normalized forecast upstream response."""
    timezone: str = "UTC"
    utc_offset_seconds: int = 0
    current: CurrentConditions
    hourly: HourlySeries
    daily: DailySeries


class AirQualityBlock(FrozenModel):
    """Normalized air-quality upstream response."""
    current: Optional[AirQuality] = None
    hourly: Optional[AirQualityHourly] = None


class WeatherRecord(FrozenModel):
    """Aggregate root: one location's merged, unit-agnostic weather.

    Values are in upstream units (Celsius, km/h, percent, mm).
    """
    timezone: str = "UTC"
    utc_offset_seconds: int = 0
    current: CurrentConditions
    hourly: HourlySeries
    daily: DailySeries
    historical: Optional[HistoricalBlock] = None
