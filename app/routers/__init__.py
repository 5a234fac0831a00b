"""Routers package."""
from app.routers.weather_router import router as weather_router, set_weather_handler

__all__ = ["weather_router", "set_weather_handler"]
