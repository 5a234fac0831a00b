"""Shared fixtures: upstream payload factories and record builders."""
from datetime import date, timedelta
from typing import Optional

import pytest

from app.models import (
    CurrentConditions,
    DailySeries,
    HistoricalBlock,
    HourlySeries,
    WeatherRecord,
)

TODAY = "2024-06-01"


def _dates(start: str, days: int) -> list[str]:
    first = date.fromisoformat(start)
    return [(first + timedelta(days=i)).isoformat() for i in range(days)]


def _hours(dates: list[str]) -> list[str]:
    return [f"{day}T{hour:02d}:00" for day in dates for hour in range(24)]


def forecast_payload(
    start: str = TODAY,
    days: int = 1,
    current_temperature: float = 22.5,
    weathercode: int = 1,
    timezone: str = "UTC",
) -> dict:
    """Forecast response. Day d peaks at 22+d (14:00) and bottoms at 15+d (00:00)."""
    dates = _dates(start, days)
    temperatures = []
    for d in range(days):
        for hour in range(24):
            rise = hour if hour <= 14 else 28 - hour
            temperatures.append(15.0 + d + rise * 0.5)
    return {
        "latitude": 40.71,
        "longitude": -74.0,
        "timezone": timezone,
        "utc_offset_seconds": 0,
        "current": {
            "time": f"{start}T12:00",
            "interval": 900,
            "temperature_2m": current_temperature,
            "relative_humidity_2m": 55.0,
            "apparent_temperature": 23.0,
            "precipitation": 0.0,
            "wind_speed_10m": 12.0,
            "wind_direction_10m": 200.0,
            "wind_gusts_10m": 25.0,
            "weathercode": weathercode,
            "cloud_cover": 20.0,
        },
        "hourly": {
            "time": _hours(dates),
            "temperature_2m": temperatures,
            "precipitation_probability": [20.0] * 24 * days,
            "weathercode": [weathercode] * 24 * days,
            "wind_speed_10m": [10.0 + d for d in range(days) for _ in range(24)],
            "wind_direction_10m": [180.0] * 24 * days,
            "relative_humidity_2m": [50.0 + hour for _ in range(days) for hour in range(24)],
        },
        "daily": {
            "time": dates,
            "weathercode": [weathercode] * days,
            "temperature_2m_max": [22.0 + d for d in range(days)],
            "temperature_2m_min": [15.0 + d for d in range(days)],
            "temperature_2m_mean": [18.0 + d for d in range(days)],
            "precipitation_probability_max": [20.0] * days,
            "precipitation_sum": [1.5] * days,
            "wind_speed_10m_max": [20.0] * days,
            "wind_direction_10m_dominant": [180.0] * days,
            "relative_humidity_2m_max": [73.0] * days,
            "relative_humidity_2m_min": [50.0] * days,
            "relative_humidity_2m_mean": [61.5] * days,
            "sunrise": [f"{day}T05:30" for day in dates],
            "sunset": [f"{day}T20:30" for day in dates],
            "uv_index_max": [7.5] * days,
            "uv_index_clear_sky_max": [8.0] * days,
        },
    }


def historical_payload(today: str = TODAY, past_days: int = 3) -> dict:
    """Re-forecast response covering ``past_days`` plus today.

    Day i (0 = oldest) peaks at 25+i (13:00) and bottoms at 12+i (00:00).
    """
    first = (date.fromisoformat(today) - timedelta(days=past_days)).isoformat()
    dates = _dates(first, past_days + 1)
    days = len(dates)
    temperatures = []
    for i in range(days):
        for hour in range(24):
            rise = hour if hour <= 13 else 26 - hour
            temperatures.append(12.0 + i + rise)
    return {
        "timezone": "UTC",
        "utc_offset_seconds": 0,
        "hourly": {
            "time": _hours(dates),
            "temperature_2m": temperatures,
            "precipitation_probability": [None] * 24 * days,
            "weathercode": [3] * 24 * days,
            "wind_speed_10m": [15.0] * 24 * days,
            "wind_direction_10m": [90.0] * 24 * days,
            "relative_humidity_2m": [60.0] * 24 * days,
        },
        "daily": {
            "time": dates,
            "weathercode": [3] * days,
            "temperature_2m_max": [25.0 + i for i in range(days)],
            "temperature_2m_min": [12.0 + i for i in range(days)],
            "temperature_2m_mean": [18.5 + i for i in range(days)],
            "precipitation_sum": [0.5] * days,
            "wind_speed_10m_max": [30.0] * days,
            "wind_direction_10m_dominant": [90.0] * days,
            "relative_humidity_2m_max": [80.0] * days,
            "relative_humidity_2m_min": [40.0] * days,
            "relative_humidity_2m_mean": [60.0] * days,
            "sunrise": [f"{day}T05:31" for day in dates],
            "sunset": [f"{day}T20:29" for day in dates],
            "uv_index_max": [6.0] * days,
            "uv_index_clear_sky_max": [7.0] * days,
        },
    }


def air_quality_payload(
    start: str = TODAY,
    days: int = 1,
    current: Optional[dict] = None,
) -> dict:
    """Air-quality response. European AQI is 20 every hour except 40 at 15:00."""
    dates = _dates(start, days)
    european = [40.0 if hour == 15 else 20.0 for _ in dates for hour in range(24)]
    return {
        "current": current if current is not None else {
            "time": f"{start}T12:00",
            "pm10": 12.0,
            "pm2_5": 5.0,
            "european_aqi": 18.0,
        },
        "hourly": {
            "time": _hours(dates),
            "pm10": [12.0] * 24 * days,
            "pm2_5": [5.0] * 24 * days,
            "european_aqi": european,
            "us_aqi": [50.0] * 24 * days,
            "uv_index": [3.0] * 24 * days,
            "uv_index_clear_sky": [3.5] * 24 * days,
        },
    }


def uv_payload(ok: bool = True, uvi: float = 4.2) -> dict:
    return {
        "ok": ok,
        "latitude": 40.71,
        "longitude": -74.0,
        "now": {"time": f"{TODAY}T12:00:00Z", "uvi": uvi},
        "forecast": [{"time": f"{TODAY}T13:00:00Z", "uvi": uvi + 0.5}],
        "history": [{"time": f"{TODAY}T11:00:00Z", "uvi": uvi - 0.5}],
    }


def build_record(
    forecast: Optional[dict] = None,
    historical: Optional[dict] = None,
) -> WeatherRecord:
    """WeatherRecord straight from payloads, bypassing the aggregator."""
    forecast = forecast or forecast_payload()
    return WeatherRecord(
        timezone=forecast["timezone"],
        utc_offset_seconds=forecast["utc_offset_seconds"],
        current=CurrentConditions.model_validate(forecast["current"]),
        hourly=HourlySeries.model_validate(forecast["hourly"]),
        daily=DailySeries.model_validate(forecast["daily"]),
        historical=(
            HistoricalBlock(
                daily=DailySeries.model_validate(historical["daily"]),
                hourly=HourlySeries.model_validate(historical["hourly"]),
            )
            if historical is not None
            else None
        ),
    )


@pytest.fixture
def make_forecast_payload():
    return forecast_payload


@pytest.fixture
def make_historical_payload():
    return historical_payload


@pytest.fixture
def make_air_quality_payload():
    return air_quality_payload


@pytest.fixture
def make_uv_payload():
    return uv_payload


@pytest.fixture
def make_record():
    return build_record
