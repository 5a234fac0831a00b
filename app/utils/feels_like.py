"""Apparent ("feels like") temperature.

The empirical formulas work in Fahrenheit and miles per hour, so inputs are
converted to that basis, the branch is chosen, and the result is converted
back to the caller's temperature unit.
"""
from typing import Any

from app.models.units import HumidityUnit, TemperatureUnit, WindSpeedUnit
from app.utils.unit_conversions import (
    convert_humidity,
    convert_temperature,
    convert_wind_speed,
)

HEAT_INDEX_THRESHOLD_F = 80.0
WIND_CHILL_THRESHOLD_F = 50.0
WIND_CHILL_MIN_WIND_MPH = 3.0


def calculate_heat_index(temp_f: float, humidity: float) -> float:
    """Rothfusz regression for the NWS heat index.

    Args:
        temp_f: Air temperature in Fahrenheit
        humidity: Relative humidity in percent (0-100)

    Returns:
        Heat index in Fahrenheit
    """
    t = temp_f
    r = humidity
    return (
        -42.379
        + 2.04901523 * t
        + 10.14333127 * r
        - 0.22475541 * t * r
        - 0.00683783 * t * t
        - 0.05481717 * r * r
        + 0.00122874 * t * t * r
        + 0.00085282 * t * r * r
        - 0.00000199 * t * t * r * r
    )


def calculate_wind_chill(temp_f: float, wind_mph: float) -> float:
    """NWS wind chill formula.

    Args:
        temp_f: Air temperature in Fahrenheit
        wind_mph: Wind speed in miles per hour

    Returns:
        Wind chill in Fahrenheit
    """
    v016 = wind_mph ** 0.16
    return 35.74 + 0.6215 * temp_f - 35.75 * v016 + 0.4275 * temp_f * v016


def calculate_feels_like(
    temperature: float,
    humidity: float,
    wind_speed: float,
    temperature_unit: Any = TemperatureUnit.CELSIUS,
    wind_speed_unit: Any = WindSpeedUnit.KILOMETERS_PER_HOUR,
    humidity_unit: Any = HumidityUnit.PERCENT,
) -> float:
    """Calculate the feels-like temperature.

    Branches (in Fahrenheit / mph):
    - temp above 80: heat index
    - temp at or below 50 and wind above 3: wind chill
    - otherwise: the air temperature itself

    Args:
        temperature: Air temperature in temperature_unit
        humidity: Relative humidity in humidity_unit
        wind_speed: Wind speed in wind_speed_unit
        temperature_unit: Unit of temperature, also the unit of the result
        wind_speed_unit: Unit of wind_speed
        humidity_unit: Unit of humidity

    Returns:
        Feels-like temperature in temperature_unit

    Raises:
        InvalidUnitValue: If any input is NaN or non-numeric
    """
    temp_f = convert_temperature(temperature, temperature_unit, TemperatureUnit.FAHRENHEIT)
    wind_mph = convert_wind_speed(wind_speed, wind_speed_unit, WindSpeedUnit.MILES_PER_HOUR)
    humidity_pct = convert_humidity(humidity, humidity_unit, HumidityUnit.PERCENT)

    if temp_f > HEAT_INDEX_THRESHOLD_F:
        feels_like_f = calculate_heat_index(temp_f, humidity_pct)
    elif temp_f <= WIND_CHILL_THRESHOLD_F and wind_mph > WIND_CHILL_MIN_WIND_MPH:
        feels_like_f = calculate_wind_chill(temp_f, wind_mph)
    else:
        # No adjustment zone: hand back the caller's own value untouched
        return temperature

    return convert_temperature(feels_like_f, TemperatureUnit.FAHRENHEIT, temperature_unit)
