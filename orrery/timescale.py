"""
Conversions between calendar time, simulation years and Julian Dates.

Simulation time is counted in Julian years past J2000.0, the axis a time
scrubber moves along. The ephemeris itself only ever sees Julian Dates.
"""
import math
from datetime import datetime, timedelta, timezone

from orrery.constants import (
    DAYS_PER_YEAR,
    J2000_JD,
    MAX_SIMULATION_YEAR,
    MIN_SIMULATION_YEAR,
    SECONDS_PER_DAY,
    UNIX_EPOCH_JD,
)

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def year_to_julian_date(years: float) -> float:
    """Julian Date `years` Julian years past J2000.0."""
    return J2000_JD + years * DAYS_PER_YEAR


def julian_date_to_years(julian_date: float) -> float:
    """Julian years past J2000.0 at a Julian Date."""
    return (julian_date - J2000_JD) / DAYS_PER_YEAR


def clamp_simulation_year(years: float) -> float:
    """
    Clamp a requested simulation time into the supported range.

    Non-finite input falls back to the start of the range.
    """
    if years is None or not math.isfinite(years):
        return MIN_SIMULATION_YEAR
    return max(MIN_SIMULATION_YEAR, min(MAX_SIMULATION_YEAR, years))


def datetime_to_julian_date(dt: datetime) -> float:
    """
    Julian Date of a datetime. Naive datetimes are taken to be UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return UNIX_EPOCH_JD + (dt - _UNIX_EPOCH).total_seconds() / SECONDS_PER_DAY


def julian_date_to_datetime(julian_date: float) -> datetime:
    """
    UTC datetime of a Julian Date.

    Raises:
        OverflowError: if the date falls outside the years datetime supports.
    """
    if not math.isfinite(julian_date):
        raise OverflowError(f"Julian Date {julian_date} is not finite")
    return _UNIX_EPOCH + timedelta(days=julian_date - UNIX_EPOCH_JD)


def julian_date_to_string(julian_date: float) -> str:
    """
    Format a Julian Date as YYYY-MM-DD (UTC).

    Dates outside years 1-9999 are rendered as "Year N" with N counted in
    Julian years from 2000.

    Examples:
        >>> julian_date_to_string(2451545.0)
        '2000-01-01'
        >>> julian_date_to_string(2451545.0 + 20000 * 365.25)
        'Year 22000'
    """
    try:
        dt = julian_date_to_datetime(julian_date)
    except (OverflowError, ValueError):
        return _fallback_year_string(julian_date)
    return f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"


def _fallback_year_string(julian_date: float) -> str:
    if not math.isfinite(julian_date):
        return "Year unknown"
    return f"Year {math.floor(2000 + julian_date_to_years(julian_date))}"
