"""Unit conversion library.

Every family converts through one canonical base unit:
- temperature: Celsius
- wind speed: metres per second
- humidity: percent
- precipitation: millimetres

convert(value, from_unit, to_unit) goes from -> base -> to. Converting a unit
to itself returns the value untouched.
"""
import math
from typing import Any, Callable, Union

from app.errors import InvalidUnitValue
from app.models.units import (
    HumidityUnit,
    PrecipitationUnit,
    TemperatureUnit,
    WindScale,
    WindSpeedUnit,
)

Number = Union[int, float]

# Conversion factors to metres per second
_WIND_TO_MS = {
    WindSpeedUnit.METERS_PER_SECOND: 1.0,
    WindSpeedUnit.KNOTS: 1852.0 / 3600.0,
    WindSpeedUnit.MILES_PER_HOUR: 0.44704,
    WindSpeedUnit.KILOMETERS_PER_HOUR: 1000.0 / 3600.0,
    WindSpeedUnit.FEET_PER_SECOND: 0.3048,
}

# Conversion factors to millimetres
_PRECIPITATION_TO_MM = {
    PrecipitationUnit.MILLIMETERS: 1.0,
    PrecipitationUnit.INCHES: 25.4,
    PrecipitationUnit.CENTIMETERS: 10.0,
}

# Conversion factors to percent
_HUMIDITY_TO_PERCENT = {
    HumidityUnit.PERCENT: 1.0,
    HumidityUnit.DECIMAL: 100.0,
}

_TO_CELSIUS: dict[TemperatureUnit, Callable[[float], float]] = {
    TemperatureUnit.CELSIUS: lambda v: v,
    TemperatureUnit.FAHRENHEIT: lambda v: (v - 32.0) * 5.0 / 9.0,
    TemperatureUnit.KELVIN: lambda v: v - 273.15,
    TemperatureUnit.RANKINE: lambda v: (v - 491.67) * 5.0 / 9.0,
    TemperatureUnit.REAUMUR: lambda v: v * 1.25,
    TemperatureUnit.ROMER: lambda v: (v - 7.5) * 40.0 / 21.0,
    TemperatureUnit.NEWTON: lambda v: v * 100.0 / 33.0,
    TemperatureUnit.DELISLE: lambda v: 100.0 - v * 2.0 / 3.0,
}

_FROM_CELSIUS: dict[TemperatureUnit, Callable[[float], float]] = {
    TemperatureUnit.CELSIUS: lambda c: c,
    TemperatureUnit.FAHRENHEIT: lambda c: c * 9.0 / 5.0 + 32.0,
    TemperatureUnit.KELVIN: lambda c: c + 273.15,
    TemperatureUnit.RANKINE: lambda c: (c + 273.15) * 9.0 / 5.0,
    TemperatureUnit.REAUMUR: lambda c: c * 0.8,
    TemperatureUnit.ROMER: lambda c: c * 21.0 / 40.0 + 7.5,
    TemperatureUnit.NEWTON: lambda c: c * 33.0 / 100.0,
    TemperatureUnit.DELISLE: lambda c: (100.0 - c) * 3.0 / 2.0,
}


def _require_number(value: Any) -> float:
    """Return value as float, raising InvalidUnitValue for NaN/inf/non-numeric input."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidUnitValue(f"Expected a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidUnitValue(f"Expected a finite number, got {value!r}")
    return float(value)


def _parse_unit(unit: Any, enum_cls):
    try:
        return enum_cls(unit)
    except ValueError:
        raise InvalidUnitValue(f"Unknown {enum_cls.__name__}: {unit!r}") from None


def convert_temperature(value: Number, from_unit: Any, to_unit: Any) -> Number:
    """Convert a temperature between any two supported scales."""
    v = _require_number(value)
    src = _parse_unit(from_unit, TemperatureUnit)
    dst = _parse_unit(to_unit, TemperatureUnit)
    if src == dst:
        return value
    return _FROM_CELSIUS[dst](_TO_CELSIUS[src](v))


def convert_wind_speed(value: Number, from_unit: Any, to_unit: Any) -> Number:
    """Convert a wind speed between any two supported units."""
    v = _require_number(value)
    src = _parse_unit(from_unit, WindSpeedUnit)
    dst = _parse_unit(to_unit, WindSpeedUnit)
    if src == dst:
        return value
    return v * _WIND_TO_MS[src] / _WIND_TO_MS[dst]


def convert_humidity(value: Number, from_unit: Any, to_unit: Any) -> Number:
    """Convert relative humidity between percent and decimal fraction."""
    v = _require_number(value)
    src = _parse_unit(from_unit, HumidityUnit)
    dst = _parse_unit(to_unit, HumidityUnit)
    if src == dst:
        return value
    return v * _HUMIDITY_TO_PERCENT[src] / _HUMIDITY_TO_PERCENT[dst]


def convert_precipitation(value: Number, from_unit: Any, to_unit: Any) -> Number:
    """Convert a precipitation depth between mm, cm and inches."""
    v = _require_number(value)
    src = _parse_unit(from_unit, PrecipitationUnit)
    dst = _parse_unit(to_unit, PrecipitationUnit)
    if src == dst:
        return value
    return v * _PRECIPITATION_TO_MM[src] / _PRECIPITATION_TO_MM[dst]


_FAMILIES = (
    (TemperatureUnit, convert_temperature),
    (WindSpeedUnit, convert_wind_speed),
    (HumidityUnit, convert_humidity),
    (PrecipitationUnit, convert_precipitation),
)


def unit_family(unit: Any):
    """Return the unit enum class a unit belongs to.

    Raises:
        InvalidUnitValue: If the unit is not part of any family
    """
    for enum_cls, _ in _FAMILIES:
        try:
            enum_cls(unit)
            return enum_cls
        except ValueError:
            continue
    raise InvalidUnitValue(f"Unknown unit: {unit!r}")


def convert(value: Number, from_unit: Any, to_unit: Any) -> Number:
    """Convert value between two units of the same family.

    Args:
        value: Numeric value in from_unit
        from_unit: Source unit (enum member or its string value)
        to_unit: Target unit of the same family

    Returns:
        Converted value (the input itself when from_unit == to_unit)

    Raises:
        InvalidUnitValue: On NaN/non-numeric input, unknown units or mixed families
    """
    family = unit_family(from_unit)
    if unit_family(to_unit) is not family:
        raise InvalidUnitValue(f"Cannot convert {from_unit!r} to {to_unit!r}: different unit families")
    for enum_cls, converter in _FAMILIES:
        if enum_cls is family:
            return converter(value, from_unit, to_unit)
    raise InvalidUnitValue(f"Unknown unit: {from_unit!r}")


# ---- Categorical wind scales (thresholds in m/s) ----

_BEAUFORT_LIMITS = (0.5, 1.5, 3.3, 5.5, 7.9, 10.7, 13.8, 17.1, 20.7, 24.4, 28.4, 32.6)
_FUJITA_LIMITS = (39, 50, 61, 74, 89)
_ENHANCED_FUJITA_LIMITS = (38, 49, 60, 74, 89)
_SAFFIR_SIMPSON_LIMITS = (33, 43, 49, 58, 70)

_SCALE_LIMITS = {
    WindScale.BEAUFORT: _BEAUFORT_LIMITS,
    WindScale.FUJITA: _FUJITA_LIMITS,
    WindScale.ENHANCED_FUJITA: _ENHANCED_FUJITA_LIMITS,
    WindScale.SAFFIR_SIMPSON: _SAFFIR_SIMPSON_LIMITS,
}


def wind_speed_to_scale(value: Number, from_unit: Any, scale: Any) -> int:
    """Map a wind speed onto a categorical scale (Beaufort force, F/EF rating, hurricane category).

    Raises:
        InvalidUnitValue: On invalid input or an unknown scale
    """
    ms = convert_wind_speed(value, from_unit, WindSpeedUnit.METERS_PER_SECOND)
    limits = _SCALE_LIMITS[_parse_unit(scale, WindScale)]
    for category, limit in enumerate(limits):
        if ms < limit:
            return category
    return len(limits)
