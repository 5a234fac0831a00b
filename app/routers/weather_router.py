"""FastAPI routes for weather and location endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Header, HTTPException, Query

from app.errors import AggregationError, LocationNotFoundError
from app.models import (
    DailyTableRow,
    DayView,
    HourlyPoint,
    HumidityUnit,
    LocationData,
    PrecipitationUnit,
    TemperatureUnit,
    WeatherRecord,
    WindSpeedUnit,
)

logger = logging.getLogger(__name__)

# Create router at module level
router = APIRouter()

# Global handler reference - set during startup
_weather_handler = None

FORECAST_UNAVAILABLE = "Forecast unavailable, please retry"


def set_weather_handler(handler):
    """Set the weather handler instance (called during startup)."""
    global _weather_handler
    _weather_handler = handler
    logger.info("[WeatherRouter] Handler injected successfully")


def get_handler():
    """Get the weather handler, raising error if not initialized."""
    if _weather_handler is None:
        raise HTTPException(status_code=503, detail="Service not ready")
    return _weather_handler


@router.get(
    "/v1/weather",
    response_model=WeatherRecord,
    summary="Aggregated weather",
    description="Current conditions, hourly and daily forecast, and optional history for a location",
)
async def get_weather(
    lat: float = Query(..., description="Latitude", ge=-90, le=90),
    lon: float = Query(..., description="Longitude", ge=-180, le=180),
    past_days: int = Query(0, description="Days of history", ge=0, le=92),
    forecast_days: int = Query(1, description="Days of forecast, today included", ge=1, le=16),
    client_id: Optional[str] = Header(None, alias="X-Client-Id"),
) -> WeatherRecord:
    """Get the aggregated weather record."""
    try:
        handler = get_handler()
        record = await handler.get_weather(lat, lon, past_days, forecast_days, client_id)
    except HTTPException:
        raise
    except AggregationError as e:
        logger.error(f"[WeatherRouter] Aggregation failed in get_weather: {e}")
        raise HTTPException(status_code=503, detail=FORECAST_UNAVAILABLE)
    except Exception as e:
        logger.error(f"[WeatherRouter] Error in get_weather: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    if record is None:
        raise HTTPException(status_code=409, detail="Superseded by a newer request")
    return record


@router.get(
    "/v1/weather/day",
    response_model=DayView,
    summary="Single day",
    description="One day's values in the requested units; negative days read history",
)
async def get_day(
    lat: float = Query(..., description="Latitude", ge=-90, le=90),
    lon: float = Query(..., description="Longitude", ge=-180, le=180),
    day: int = Query(0, description="Day offset from today", ge=-92, le=15),
    temperature: Optional[TemperatureUnit] = Query(None, description="Temperature unit"),
    wind_speed: Optional[WindSpeedUnit] = Query(None, description="Wind speed unit"),
    humidity: Optional[HumidityUnit] = Query(None, description="Humidity unit"),
    precipitation: Optional[PrecipitationUnit] = Query(None, description="Precipitation unit"),
    precision: Optional[int] = Query(None, description="Decimal places", ge=0, le=5),
) -> DayView:
    """Get one day rendered in display units."""
    try:
        handler = get_handler()
        overrides = {
            "temperature": temperature,
            "wind_speed": wind_speed,
            "humidity": humidity,
            "precipitation": precipitation,
            "precision": precision,
        }
        units = handler.default_units.model_copy(
            update={key: value for key, value in overrides.items() if value is not None}
        )
        return await handler.get_day(lat, lon, day, units)
    except HTTPException:
        raise
    except AggregationError as e:
        logger.error(f"[WeatherRouter] Aggregation failed in get_day: {e}")
        raise HTTPException(status_code=503, detail=FORECAST_UNAVAILABLE)
    except Exception as e:
        logger.error(f"[WeatherRouter] Error in get_day: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get(
    "/v1/weather/hourly",
    response_model=list[HourlyPoint],
    summary="Hourly slice",
    description="Hourly values for one day",
)
async def get_hourly(
    lat: float = Query(..., description="Latitude", ge=-90, le=90),
    lon: float = Query(..., description="Longitude", ge=-180, le=180),
    day: int = Query(0, description="Day offset from today", ge=-92, le=15),
) -> list[HourlyPoint]:
    """Get the hourly points for one day."""
    try:
        handler = get_handler()
        return await handler.get_hourly(lat, lon, day)
    except HTTPException:
        raise
    except AggregationError as e:
        logger.error(f"[WeatherRouter] Aggregation failed in get_hourly: {e}")
        raise HTTPException(status_code=503, detail=FORECAST_UNAVAILABLE)
    except Exception as e:
        logger.error(f"[WeatherRouter] Error in get_hourly: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get(
    "/v1/weather/history",
    response_model=list[DailyTableRow],
    summary="Daily history",
    description="Daily rows for the past days and today, most recent first",
)
async def get_history(
    lat: float = Query(..., description="Latitude", ge=-90, le=90),
    lon: float = Query(..., description="Longitude", ge=-180, le=180),
    past_days: int = Query(7, description="Days of history", ge=1, le=92),
) -> list[DailyTableRow]:
    """Get the merged daily table."""
    try:
        handler = get_handler()
        return await handler.get_history(lat, lon, past_days)
    except HTTPException:
        raise
    except AggregationError as e:
        logger.error(f"[WeatherRouter] Aggregation failed in get_history: {e}")
        raise HTTPException(status_code=503, detail=FORECAST_UNAVAILABLE)
    except Exception as e:
        logger.error(f"[WeatherRouter] Error in get_history: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get(
    "/v1/location/detect",
    response_model=LocationData,
    summary="Detect location",
    description="Location of the service's public IP address",
)
async def detect_location() -> LocationData:
    """Detect location by IP."""
    try:
        handler = get_handler()
        return await handler.detect_location()
    except HTTPException:
        raise
    except LocationNotFoundError as e:
        logger.warning(f"[WeatherRouter] Location not found: {e}")
        raise HTTPException(status_code=404, detail="Location not found")
    except Exception as e:
        logger.error(f"[WeatherRouter] Error in detect_location: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get(
    "/v1/location/search",
    response_model=list[LocationData],
    summary="Search locations",
    description="Search places by city name",
)
async def search_locations(
    q: str = Query(..., description="City name", min_length=1),
) -> list[LocationData]:
    """Search places by name."""
    try:
        handler = get_handler()
        return await handler.search_locations(q)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[WeatherRouter] Error in search_locations: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get(
    "/ping",
    summary="Health check",
    description="Health check endpoint",
)
def ping() -> dict[str, str]:
    """Health check endpoint."""
    handler = get_handler()
    return handler.ping()
