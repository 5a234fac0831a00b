"""Day/range selection result models."""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class DataSource(str, Enum):
    """Which block of the record a value was read from."""
    CURRENT = "current"
    HISTORICAL = "historical"


class HumidityRange(BaseModel):
    high: Optional[float] = None
    low: Optional[float] = None
    mean: Optional[float] = None
    current: Optional[float] = None


class AirQualitySummary(BaseModel):
    """European AQI extremes and mean particulate levels for one day."""
    european_aqi_max: Optional[float] = None
    european_aqi_min: Optional[float] = None
    european_aqi_mean: Optional[float] = None
    pm10_mean: Optional[float] = None
    pm2_5_mean: Optional[float] = None
    current: Optional[float] = None


class DaySelection(BaseModel):
    """Values for one calendar day, in upstream units. None means "not available"."""
    day_offset: int
    date: Optional[str] = None
    source: Optional[DataSource] = None
    available: bool = False
    temperature_high: Optional[float] = None
    temperature_low: Optional[float] = None
    temperature_mean: Optional[float] = None
    temperature_current: Optional[float] = None
    temperature_high_time: Optional[str] = None
    temperature_low_time: Optional[str] = None
    apparent_temperature: Optional[float] = None
    precipitation_total: Optional[float] = None
    precipitation_probability: Optional[float] = None
    weather_code: Optional[int] = None
    weather_description: Optional[str] = None
    wind_speed: Optional[float] = None
    wind_direction: Optional[float] = None
    humidity: HumidityRange = Field(default_factory=HumidityRange)
    sunrise: Optional[str] = None
    sunset: Optional[str] = None
    uv_index_max: Optional[float] = None
    uv_index_current: Optional[float] = None
    air_quality: AirQualitySummary = Field(default_factory=AirQualitySummary)


class HourlyPoint(BaseModel):
    time: str
    temperature_2m: Optional[float] = None
    precipitation_probability: Optional[float] = None
    weathercode: Optional[int] = None
    wind_speed_10m: Optional[float] = None
    wind_direction_10m: Optional[float] = None
    relative_humidity_2m: Optional[float] = None


class DailyTableRow(BaseModel):
    """One date of the merged historical + forecast daily table."""
    date: str
    source: DataSource
    temperature_max: Optional[float] = None
    temperature_min: Optional[float] = None
    precipitation_sum: Optional[float] = None
    weathercode: Optional[int] = None


class DayView(BaseModel):
    """A DaySelection rendered in the caller's units and precision.

    Values that could not be converted are None and display as "N/A".
    """
    day_offset: int
    date: Optional[str] = None
    source: Optional[DataSource] = None
    available: bool = False
    temperature_unit: str
    wind_speed_unit: str
    humidity_unit: str
    precipitation_unit: str
    temperature_high: Optional[float] = None
    temperature_low: Optional[float] = None
    temperature_mean: Optional[float] = None
    temperature_current: Optional[float] = None
    temperature_high_time: Optional[str] = None
    temperature_low_time: Optional[str] = None
    feels_like: Optional[float] = None
    precipitation_total: Optional[float] = None
    precipitation_probability: Optional[float] = None
    weather_code: Optional[int] = None
    weather_description: Optional[str] = None
    wind_speed: Optional[float] = None
    wind_direction: Optional[float] = None
    wind_direction_name: Optional[str] = None
    wind_beaufort: Optional[int] = None
    humidity_high: Optional[float] = None
    humidity_low: Optional[float] = None
    humidity_mean: Optional[float] = None
    humidity_current: Optional[float] = None
    sunrise: Optional[str] = None
    sunset: Optional[str] = None
    uv_index_max: Optional[float] = None
    uv_index_current: Optional[float] = None
    uv_index_label: Optional[str] = None
    uv_index_percentage: Optional[float] = None
    european_aqi: Optional[float] = None
    us_aqi: Optional[int] = None
    air_quality_label: Optional[str] = None
