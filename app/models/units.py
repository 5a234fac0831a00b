"""Measurement unit models and user unit settings."""
import logging
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class TemperatureUnit(str, Enum):
    """Temperature scales. Celsius is the canonical base unit."""
    CELSIUS = "C"
    FAHRENHEIT = "F"
    KELVIN = "K"
    RANKINE = "R"
    REAUMUR = "Re"
    ROMER = "Ro"
    NEWTON = "N"
    DELISLE = "D"


class WindSpeedUnit(str, Enum):
    """Wind speed units. Metres per second is the canonical base unit."""
    METERS_PER_SECOND = "ms"
    KNOTS = "kts"
    MILES_PER_HOUR = "mph"
    KILOMETERS_PER_HOUR = "kmh"
    FEET_PER_SECOND = "fts"


class WindScale(str, Enum):
    """Categorical wind scales (not invertible, so not part of convert())."""
    BEAUFORT = "bf"
    FUJITA = "f"
    ENHANCED_FUJITA = "ef"
    SAFFIR_SIMPSON = "ss"


class HumidityUnit(str, Enum):
    """Relative humidity representations. Percent is the canonical base unit."""
    PERCENT = "percent"
    DECIMAL = "decimal"


class PrecipitationUnit(str, Enum):
    """Precipitation depth units. Millimetres is the canonical base unit."""
    MILLIMETERS = "mm"
    INCHES = "in"
    CENTIMETERS = "cm"


# Units the upstream forecast provider reports in
UPSTREAM_TEMPERATURE_UNIT = TemperatureUnit.CELSIUS
UPSTREAM_WIND_SPEED_UNIT = WindSpeedUnit.KILOMETERS_PER_HOUR
UPSTREAM_HUMIDITY_UNIT = HumidityUnit.PERCENT
UPSTREAM_PRECIPITATION_UNIT = PrecipitationUnit.MILLIMETERS


class UnitSettings(BaseModel):
    """Display unit preferences plus the number of decimal places to render."""
    temperature: TemperatureUnit = TemperatureUnit.CELSIUS
    wind_speed: WindSpeedUnit = WindSpeedUnit.KILOMETERS_PER_HOUR
    humidity: HumidityUnit = HumidityUnit.PERCENT
    precipitation: PrecipitationUnit = PrecipitationUnit.MILLIMETERS
    precision: int = Field(default=1, ge=0, le=5)

    model_config = ConfigDict(frozen=True)


def load_unit_settings(
    raw: Optional[dict[str, Any]], defaults: Optional[UnitSettings] = None
) -> UnitSettings:
    """Validate stored unit settings, falling back to defaults on any failure.

    Args:
        raw: Settings as read from a key-value store (may be None or malformed)
        defaults: Settings to use when validation fails

    Returns:
        Validated UnitSettings
    """
    fallback = defaults or UnitSettings()
    if not raw:
        return fallback
    try:
        return UnitSettings.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"[UnitSettings] Invalid stored settings, using defaults: {e}")
        return fallback
