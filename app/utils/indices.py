"""Air-quality, UV and wind direction helpers."""
import math
from typing import Optional

US_AQI_SCALE_MAX = 500
EUROPEAN_AQI_SCALE_MAX = 100
UV_GAUGE_MAX = 15.0

_WIND_DIRECTIONS = (
    "North",
    "North-Northeast",
    "Northeast",
    "East-Northeast",
    "East",
    "East-Southeast",
    "Southeast",
    "South-Southeast",
    "South",
    "South-Southwest",
    "Southwest",
    "West-Southwest",
    "West",
    "West-Northwest",
    "Northwest",
    "North-Northwest",
)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def european_to_us_aqi(european_aqi: float) -> int:
    """Approximate a US AQI from a European AQI by linear rescaling of the two ranges."""
    return round(european_aqi / EUROPEAN_AQI_SCALE_MAX * US_AQI_SCALE_MAX)


def air_quality_label(aqi: float, convention: str = "european") -> str:
    """Category label for an AQI value under the European or US convention."""
    if convention == "european":
        bands = ((20, "Very Good"), (40, "Good"), (60, "Moderate"), (80, "Poor"), (100, "Very Poor"))
    elif convention == "us":
        bands = (
            (50, "Good"),
            (100, "Moderate"),
            (150, "Unhealthy for Sensitive Groups"),
            (200, "Unhealthy"),
            (300, "Very Unhealthy"),
        )
    else:
        raise ValueError(f"Unknown AQI convention: {convention!r}")
    for upper, label in bands:
        if aqi <= upper:
            return label
    return "Hazardous"


def uv_index_label(uvi: float) -> str:
    """WHO exposure category for a UV index."""
    if uvi <= 2:
        return "Low"
    if uvi <= 5:
        return "Moderate"
    if uvi <= 7:
        return "High"
    if uvi <= 10:
        return "Very High"
    return "Extreme"


def uv_index_percentage(uvi: Optional[float]) -> float:
    """Position of a UV index on a 0-100 gauge (UV 15 and above is full scale)."""
    if not _is_number(uvi):
        return 0.0
    return min(max(uvi, 0.0) / UV_GAUGE_MAX * 100.0, 100.0)


def wind_direction_name(degrees: Optional[float]) -> Optional[str]:
    """16-point compass name for a direction in degrees, None when unavailable."""
    if not _is_number(degrees):
        return None
    index = math.floor(((degrees + 11.25) % 360) / 22.5)
    return _WIND_DIRECTIONS[index % 16]
