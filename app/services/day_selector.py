"""Pure selection of single days, hourly slices and daily tables from a WeatherRecord.

Nothing here reads the clock directly: every function that needs "today"
takes a ``now`` argument, defaulting to the current UTC time only when the
caller leaves it out. Records are never modified.
"""
import logging
import math
from datetime import date, datetime, timedelta
from typing import Any, Optional, Sequence

import pytz

from app.models import (
    AirQualitySummary,
    DailySeries,
    DailyTableRow,
    DataSource,
    DaySelection,
    HourlyPoint,
    HourlySeries,
    HumidityRange,
    WeatherRecord,
    weather_description,
)

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24
NOW_LABEL = "now"
NOW_EPSILON = 0.01


def _number(value: Any) -> Optional[float]:
    """Return value as a float, or None for missing, NaN or non-numeric values."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def _at(series: Optional[Sequence[Any]], index: Optional[int]) -> Any:
    """Index into an optional series; out of range and missing become None."""
    if series is None or index is None or index < 0 or index >= len(series):
        return None
    return series[index]


def _num_at(series: Optional[Sequence[Any]], index: Optional[int]) -> Optional[float]:
    return _number(_at(series, index))


def _stats(values) -> tuple[Optional[float], Optional[float], Optional[float]]:
    """(max, min, mean) over the numeric values, Nones when there are none."""
    numbers = [v for v in (_number(v) for v in values) if v is not None]
    if not numbers:
        return None, None, None
    return max(numbers), min(numbers), sum(numbers) / len(numbers)


def local_today(record: WeatherRecord, now: Optional[datetime] = None) -> date:
    """Calendar date of ``now`` in the record's timezone.

    Naive ``now`` values are taken as UTC. An unknown zone name falls back to
    the record's fixed UTC offset.
    """
    now = now or datetime.now(pytz.utc)
    if now.tzinfo is None:
        now = pytz.utc.localize(now)
    try:
        tz = pytz.timezone(record.timezone)
    except pytz.UnknownTimeZoneError:
        logger.debug(f"[DaySelector] Unknown timezone {record.timezone!r}, using fixed offset")
        tz = pytz.FixedOffset(record.utc_offset_seconds // 60)
    return now.astimezone(tz).date()


def target_date(record: WeatherRecord, day_offset: int, now: Optional[datetime] = None) -> str:
    """ISO date (YYYY-MM-DD) ``day_offset`` days from today."""
    return (local_today(record, now) + timedelta(days=day_offset)).isoformat()


def find_extremum_time(
    times: Sequence[str],
    values: Sequence[Any],
    extremum: Optional[float],
    current: Optional[float] = None,
    epsilon: float = NOW_EPSILON,
) -> Optional[str]:
    """Time at which a day's max/min occurs.

    If the current reading equals the extremum within ``epsilon``, the answer
    is "now" and the series is not scanned. Otherwise the first hour whose
    value matches within ``epsilon`` is returned, or None.
    """
    extremum = _number(extremum)
    if extremum is None:
        return None
    current = _number(current)
    if current is not None and abs(current - extremum) <= epsilon:
        return NOW_LABEL
    for stamp, value in zip(times, values):
        value = _number(value)
        if value is not None and abs(value - extremum) <= epsilon:
            return stamp
    return None


def _date_index(daily: DailySeries, day: str) -> Optional[int]:
    try:
        return daily.time.index(day)
    except ValueError:
        return None


def _hour_indices_for_date(hourly: HourlySeries, day: str) -> list[int]:
    return [i for i, stamp in enumerate(hourly.time) if stamp[:10] == day]


def _forecast_hour_indices(hourly: HourlySeries, day_offset: int) -> list[int]:
    start = day_offset * HOURS_PER_DAY
    return list(range(start, min(start + HOURS_PER_DAY, len(hourly.time))))


def _air_quality_summary(
    record: WeatherRecord, day: str, include_current: bool
) -> AirQualitySummary:
    hourly = record.hourly.air_quality
    current = None
    if include_current and record.current.air_quality is not None:
        current = _number(record.current.air_quality.european_aqi)
    if hourly is None:
        return AirQualitySummary(current=current)

    indices = [i for i, stamp in enumerate(hourly.time) if stamp[:10] == day]
    aqi_max, aqi_min, aqi_mean = _stats(_at(hourly.european_aqi, i) for i in indices)
    _, _, pm10_mean = _stats(_at(hourly.pm10, i) for i in indices)
    _, _, pm2_5_mean = _stats(_at(hourly.pm2_5, i) for i in indices)
    return AirQualitySummary(
        european_aqi_max=aqi_max,
        european_aqi_min=aqi_min,
        european_aqi_mean=aqi_mean,
        pm10_mean=pm10_mean,
        pm2_5_mean=pm2_5_mean,
        current=current,
    )


def _select_forecast_day(record: WeatherRecord, day_offset: int, day: str) -> DaySelection:
    daily = record.daily
    hourly = record.hourly
    index = day_offset
    if index >= len(daily.time):
        logger.debug(f"[DaySelector] Offset {day_offset} beyond forecast window")
        return DaySelection(day_offset=day_offset, date=day)

    is_today = day_offset == 0
    hours = _forecast_hour_indices(hourly, day_offset)
    hour_times = [hourly.time[i] for i in hours]
    hour_temps = [_at(hourly.temperature_2m, i) for i in hours]
    first_hour = hours[0] if hours else None

    humidity_high, humidity_low, humidity_mean = _stats(
        _at(hourly.relative_humidity_2m, i) for i in hours
    )
    current_temp = _number(record.current.temperature_2m) if is_today else None
    high = _num_at(daily.temperature_2m_max, index)
    low = _num_at(daily.temperature_2m_min, index)
    code = _at(daily.weathercode, index)

    uv_current = None
    if is_today and record.current.uv_index is not None:
        uv_current = _number(record.current.uv_index.now.uvi)

    return DaySelection(
        day_offset=day_offset,
        date=daily.time[index],
        source=DataSource.CURRENT,
        available=True,
        temperature_high=high,
        temperature_low=low,
        temperature_mean=_num_at(daily.temperature_2m_mean, index),
        temperature_current=current_temp,
        temperature_high_time=find_extremum_time(hour_times, hour_temps, high, current_temp),
        temperature_low_time=find_extremum_time(hour_times, hour_temps, low, current_temp),
        apparent_temperature=_number(record.current.apparent_temperature) if is_today else None,
        precipitation_total=_num_at(daily.precipitation_sum, index),
        precipitation_probability=_num_at(daily.precipitation_probability_max, index),
        weather_code=code,
        weather_description=weather_description(code) if code is not None else None,
        wind_speed=_num_at(hourly.wind_speed_10m, first_hour),
        wind_direction=_num_at(hourly.wind_direction_10m, first_hour),
        humidity=HumidityRange(
            high=humidity_high,
            low=humidity_low,
            mean=humidity_mean,
            current=_number(record.current.relative_humidity_2m) if is_today else None,
        ),
        sunrise=_at(daily.sunrise, index),
        sunset=_at(daily.sunset, index),
        uv_index_max=_num_at(daily.uv_index_max, index),
        uv_index_current=uv_current,
        air_quality=_air_quality_summary(record, daily.time[index], include_current=is_today),
    )


def _select_historical_day(record: WeatherRecord, day_offset: int, day: str) -> DaySelection:
    if record.historical is None:
        logger.debug(f"[DaySelector] No historical block for offset {day_offset}")
        return DaySelection(day_offset=day_offset, date=day)

    daily = record.historical.daily
    hourly = record.historical.hourly
    index = _date_index(daily, day)
    if index is None:
        logger.debug(f"[DaySelector] Date {day} not in historical block")
        return DaySelection(day_offset=day_offset, date=day)

    hours = _hour_indices_for_date(hourly, day)
    hour_times = [hourly.time[i] for i in hours]
    hour_temps = [_at(hourly.temperature_2m, i) for i in hours]
    high = _num_at(daily.temperature_2m_max, index)
    low = _num_at(daily.temperature_2m_min, index)
    code = _at(daily.weathercode, index)

    return DaySelection(
        day_offset=day_offset,
        date=day,
        source=DataSource.HISTORICAL,
        available=True,
        temperature_high=high,
        temperature_low=low,
        temperature_mean=_num_at(daily.temperature_2m_mean, index),
        temperature_high_time=find_extremum_time(hour_times, hour_temps, high),
        temperature_low_time=find_extremum_time(hour_times, hour_temps, low),
        precipitation_total=_num_at(daily.precipitation_sum, index),
        # The re-forecast archive never carries a probability
        precipitation_probability=None,
        weather_code=code,
        weather_description=weather_description(code) if code is not None else None,
        wind_speed=_num_at(daily.wind_speed_10m_max, index),
        wind_direction=_num_at(daily.wind_direction_10m_dominant, index),
        humidity=HumidityRange(
            high=_num_at(daily.relative_humidity_2m_max, index),
            low=_num_at(daily.relative_humidity_2m_min, index),
            mean=_num_at(daily.relative_humidity_2m_mean, index),
        ),
        sunrise=_at(daily.sunrise, index),
        sunset=_at(daily.sunset, index),
        uv_index_max=_num_at(daily.uv_index_max, index),
        air_quality=_air_quality_summary(record, day, include_current=False),
    )


def select_day(
    record: WeatherRecord, day_offset: int, now: Optional[datetime] = None
) -> DaySelection:
    """Values for the day ``day_offset`` days from today.

    Offsets >= 0 read only the forecast block. Negative offsets read only the
    historical block, matched by exact date. Missing data never raises: the
    selection comes back with ``available=False`` and None fields.

    Args:
        record: Aggregated weather record
        day_offset: Signed days from today
        now: Reference instant, defaults to the current time

    Returns:
        DaySelection in upstream units
    """
    day = target_date(record, day_offset, now)
    if day_offset >= 0:
        return _select_forecast_day(record, day_offset, day)
    return _select_historical_day(record, day_offset, day)


def _hourly_points(hourly: HourlySeries, indices: list[int]) -> list[HourlyPoint]:
    return [
        HourlyPoint(
            time=hourly.time[i],
            temperature_2m=_num_at(hourly.temperature_2m, i),
            precipitation_probability=_num_at(hourly.precipitation_probability, i),
            weathercode=_at(hourly.weathercode, i),
            wind_speed_10m=_num_at(hourly.wind_speed_10m, i),
            wind_direction_10m=_num_at(hourly.wind_direction_10m, i),
            relative_humidity_2m=_num_at(hourly.relative_humidity_2m, i),
        )
        for i in indices
    ]


def select_hourly(
    record: WeatherRecord, day_offset: int, now: Optional[datetime] = None
) -> list[HourlyPoint]:
    """Hourly points for one day, empty when the day is not covered."""
    if day_offset >= 0:
        return _hourly_points(record.hourly, _forecast_hour_indices(record.hourly, day_offset))
    if record.historical is None:
        return []
    day = target_date(record, day_offset, now)
    hourly = record.historical.hourly
    return _hourly_points(hourly, _hour_indices_for_date(hourly, day))


def _table_rows(daily: DailySeries, source: DataSource) -> dict[str, DailyTableRow]:
    return {
        day: DailyTableRow(
            date=day,
            source=source,
            temperature_max=_num_at(daily.temperature_2m_max, i),
            temperature_min=_num_at(daily.temperature_2m_min, i),
            precipitation_sum=_num_at(daily.precipitation_sum, i),
            weathercode=_at(daily.weathercode, i),
        )
        for i, day in enumerate(daily.time)
    }


def build_daily_table(
    record: WeatherRecord,
    now: Optional[datetime] = None,
    up_to_today: bool = False,
) -> list[DailyTableRow]:
    """Merge historical and forecast daily rows by date, oldest first.

    When both blocks describe the same date the forecast row wins.

    Args:
        record: Aggregated weather record
        now: Reference instant for ``up_to_today``
        up_to_today: Drop rows after today
    """
    rows: dict[str, DailyTableRow] = {}
    if record.historical is not None:
        rows.update(_table_rows(record.historical.daily, DataSource.HISTORICAL))
    rows.update(_table_rows(record.daily, DataSource.CURRENT))

    table = [rows[day] for day in sorted(rows)]
    if up_to_today:
        today = local_today(record, now).isoformat()
        table = [row for row in table if row.date <= today]
    return table
