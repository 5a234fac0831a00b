"""Handlers package."""
from app.handlers.weather_handler import WeatherHandler

__all__ = ["WeatherHandler"]
