"""Data models package for the weather aggregation service."""
from app.models.weather import (
    WeatherCode,
    WEATHER_DESCRIPTIONS,
    parse_weather_code,
    weather_description,
    Coordinate,
    TimeWindow,
    AirQuality,
    UVReading,
    UVIndexSnapshot,
    CurrentConditions,
    AirQualityHourly,
    HourlySeries,
    DailySeries,
    HistoricalBlock,
    ForecastBlock,
    AirQualityBlock,
    WeatherRecord,
)
from app.models.units import (
    TemperatureUnit,
    WindSpeedUnit,
    WindScale,
    HumidityUnit,
    PrecipitationUnit,
    UnitSettings,
    load_unit_settings,
)
from app.models.selection import (
    DataSource,
    HumidityRange,
    AirQualitySummary,
    DaySelection,
    HourlyPoint,
    DailyTableRow,
    DayView,
)
from app.models.location import LocationData

__all__ = [
    # Weather record models
    "WeatherCode",
    "WEATHER_DESCRIPTIONS",
    "parse_weather_code",
    "weather_description",
    "Coordinate",
    "TimeWindow",
    "AirQuality",
    "UVReading",
    "UVIndexSnapshot",
    "CurrentConditions",
    "AirQualityHourly",
    "HourlySeries",
    "DailySeries",
    "HistoricalBlock",
    "ForecastBlock",
    "AirQualityBlock",
    "WeatherRecord",
    # Unit models
    "TemperatureUnit",
    "WindSpeedUnit",
    "WindScale",
    "HumidityUnit",
    "PrecipitationUnit",
    "UnitSettings",
    "load_unit_settings",
    # Selection models
    "DataSource",
    "HumidityRange",
    "AirQualitySummary",
    "DaySelection",
    "HourlyPoint",
    "DailyTableRow",
    "DayView",
    # Location models
    "LocationData",
]
