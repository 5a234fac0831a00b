"""Configuration management using Pydantic BaseSettings with JSON file support."""
import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from app.models.units import (
    HumidityUnit,
    PrecipitationUnit,
    TemperatureUnit,
    UnitSettings,
    WindSpeedUnit,
)

logger = logging.getLogger(__name__)


def flatten_json_config(config: dict[str, Any]) -> dict[str, Any]:
    """Flatten nested JSON config into flat key-value pairs.

    Supports nested structures like:
    {
        "upstreams": {"forecast_api_url": "...", "request_timeout_seconds": 5},
        "server": {"server_port": 8080}
    }

    Becomes:
    {"forecast_api_url": "...", "request_timeout_seconds": 5, "server_port": 8080}

    Keys starting with "_" (like "_comment") are skipped.
    """
    result = {}

    for key, value in config.items():
        if key.startswith("_"):
            continue

        if isinstance(value, dict):
            result.update(flatten_json_config(value))
        else:
            result[key] = value

    return result


def load_json_config(config_file: Optional[str] = None) -> dict[str, Any]:
    """Load configuration from a JSON file.

    Args:
        config_file: Path to JSON config file. If None, checks CONFIG_FILE env var.

    Returns:
        Dictionary of configuration values (flattened), or empty dict if no file found.
    """
    file_path = config_file or os.getenv("CONFIG_FILE")

    if not file_path:
        return {}

    path = Path(file_path)
    if not path.exists():
        logger.warning(f"Config file not found: {file_path}")
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            config = json.load(f)
            logger.info(f"Loaded configuration from: {file_path}")
            return flatten_json_config(config)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in config file {file_path}: {e}")
        return {}
    except OSError as e:
        logger.error(f"Error reading config file {file_path}: {e}")
        return {}


class Settings(BaseSettings):
    """Application configuration with JSON file and environment variable support.

    Configuration priority (highest to lowest):
    1. Environment variables
    2. JSON config file (specified via CONFIG_FILE env var)
    3. Default values
    """

    # Open-Meteo endpoints
    forecast_api_url: str = "https://api.open-meteo.com/v1/forecast"
    historical_api_url: str = "https://historical-forecast-api.open-meteo.com/v1/forecast"
    air_quality_api_url: str = "https://air-quality-api.open-meteo.com/v1/air-quality"
    geocoding_api_url: str = "https://geocoding-api.open-meteo.com/v1/search"

    # UV index endpoint
    uv_index_api_url: str = "https://currentuvindex.com/api/v1/uvi"

    # IP geolocation providers, tried in order (first success wins)
    geolocation_providers: dict[str, str] = {
        "ip-api": "https://ip-api.com/json/",
        "ipwhois": "https://ipwho.is/",
        "ipinfo": "https://ipinfo.io/json",
        "ipapi": "https://ipapi.co/json/",
    }
    geolocation_cache_ttl_seconds: float = 3600.0

    # Upstream request configuration
    request_timeout_seconds: float = 5.0
    user_agent: str = "Ye Olde Weather Dashboard"
    decimal_places: int = 3

    # Retry with linear backoff around a whole aggregation / location lookup
    retry_count: int = 3
    retry_delay_seconds: float = 1.0

    # Default display units
    default_temperature_unit: TemperatureUnit = TemperatureUnit.CELSIUS
    default_wind_speed_unit: WindSpeedUnit = WindSpeedUnit.KILOMETERS_PER_HOUR
    default_humidity_unit: HumidityUnit = HumidityUnit.PERCENT
    default_precipitation_unit: PrecipitationUnit = PrecipitationUnit.MILLIMETERS
    default_precision: int = 1

    # Server Configuration
    server_port: int = 8080
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def __init__(self, **kwargs):
        """Initialize settings from JSON file and environment variables.

        Priority: env vars > JSON config > defaults
        """
        json_config = load_json_config()

        # kwargs override JSON config
        merged_kwargs = {**json_config, **kwargs}

        super().__init__(**merged_kwargs)

    @property
    def default_unit_settings(self) -> UnitSettings:
        """Unit settings used when a caller does not choose its own."""
        return UnitSettings(
            temperature=self.default_temperature_unit,
            wind_speed=self.default_wind_speed_unit,
            humidity=self.default_humidity_unit,
            precipitation=self.default_precipitation_unit,
            precision=self.default_precision,
        )


# Global settings instance
settings = Settings()
