"""
Lenient parsers for exported health data.

Spreadsheet and export rows encode the same quantity in several ways
(ISO dates, US dates, spreadsheet serial numbers, "1h:05m:30s" durations,
minutes vs hours, km vs miles). Each quantity has one ordered list of
parser strategies; the first strategy that returns a value wins and a
``None`` result means the value could not be understood.
"""

import math
import re
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Mapping, Optional, Sequence


# Spreadsheet serial 25569 is 1970-01-01
SPREADSHEET_EPOCH_SERIAL = 25569

# Plain numbers above this are minutes, at or below it hours
HOURS_MAGNITUDE_LIMIT = 25

KM_PER_UNIT = {
    "km": 1.0,
    "kms": 1.0,
    "kilometer": 1.0,
    "kilometers": 1.0,
    "kilometre": 1.0,
    "kilometres": 1.0,
    "m": 0.001,
    "meter": 0.001,
    "meters": 0.001,
    "metre": 0.001,
    "metres": 0.001,
    "mi": 1.609344,
    "mile": 1.609344,
    "miles": 1.609344,
    "yd": 0.0009144,
    "yard": 0.0009144,
    "yards": 0.0009144,
}

_OFFSET_TIMESTAMP_RE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} [+-]\d{4}$")
_SLASH_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2}|\d{4})\b")
_HMS_RE = re.compile(r"(\d+)h:(\d+)m(?::(\d+)s)?")
_CLOCK_RE = re.compile(r"^(\d+):(\d{1,2})(?::(\d{1,2}))?$")
_TIME_OF_DAY_RE = re.compile(r"(\d{1,2}):(\d{2})(?::\d{2})?\s*([AaPp][Mm])?")
_QUANTITY_RE = re.compile(r"^([0-9]*\.?[0-9]+)\s*([A-Za-z]*)$")


def _first_success(value: Any, strategies: Sequence[Callable[[Any], Any]]) -> Any:
    for strategy in strategies:
        result = strategy(value)
        if result is not None:
            return result
    return None


def to_float(value: Any) -> Optional[float]:
    """Parse a number from a cell, or None for blanks and junk."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def magnitude_to_hours(value: float) -> float:
    """Interpret a bare number as hours, unless it is too large to be hours."""
    return value if value <= HOURS_MAGNITUDE_LIMIT else value / 60


# =============================================================================
# Dates
# =============================================================================

def _parse_native_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return None


def _parse_offset_timestamp(value: Any) -> Optional[date]:
    """'2024-03-05 06:12:00 -0500' -> the calendar date as written."""
    if not isinstance(value, str) or not _OFFSET_TIMESTAMP_RE.match(value.strip()):
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d %H:%M:%S %z").date()
    except ValueError:
        return None


def _parse_slash_date(value: Any) -> Optional[date]:
    """'7/11/2025' (month/day/year)."""
    if not isinstance(value, str):
        return None
    match = _SLASH_DATE_RE.match(value.strip())
    if not match:
        return None
    month, day, year = (int(g) for g in match.groups())
    if year < 100:
        year += 2000
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _parse_serial_date(value: Any) -> Optional[date]:
    """Spreadsheet serial day number, e.g. 45292 -> 2024-01-01."""
    serial = to_float(value)
    if serial is None or serial <= 0:
        return None
    ms = (serial - SPREADSHEET_EPOCH_SERIAL) * 86400000
    try:
        return date(1970, 1, 1) + timedelta(milliseconds=ms)
    except OverflowError:
        return None


def _parse_iso_prefix(value: Any) -> Optional[date]:
    """First ten characters as YYYY-MM-DD."""
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        return None


DATE_PARSERS = (
    _parse_native_date,
    _parse_offset_timestamp,
    _parse_slash_date,
    _parse_serial_date,
    _parse_iso_prefix,
)


def parse_date(value: Any) -> Optional[date]:
    """Parse a date cell in any supported encoding.

    Returns:
        The date, or None if no parser understood the value
    """
    if is_blank(value):
        return None
    return _first_success(value, DATE_PARSERS)


# =============================================================================
# Durations
# =============================================================================

def _parse_hms_minutes(value: Any) -> Optional[float]:
    """'1h:05m:30s' or '7h:45m'."""
    if not isinstance(value, str):
        return None
    match = _HMS_RE.search(value)
    if not match:
        return None
    hours, minutes, seconds = match.groups()
    return int(hours) * 60 + int(minutes) + int(seconds or 0) / 60


def _parse_clock_minutes(value: Any) -> Optional[float]:
    """'1:05' (hours:minutes), optionally with ':SS'."""
    if not isinstance(value, str):
        return None
    match = _CLOCK_RE.match(value.strip())
    if not match:
        return None
    hours, minutes, seconds = match.groups()
    return int(hours) * 60 + int(minutes) + int(seconds or 0) / 60


def parse_duration_minutes(value: Any, plain_policy: str = "minutes") -> Optional[float]:
    """Parse a workout duration into minutes.

    Args:
        value: Raw duration cell
        plain_policy: How to read a bare number. 'minutes' takes it as
            minutes; 'magnitude' reads <= 25 as hours and larger values
            as minutes.

    Returns:
        Minutes, or None if the value is not a duration
    """
    minutes = _first_success(value, (_parse_hms_minutes, _parse_clock_minutes))
    if minutes is not None:
        return minutes

    number = to_float(value)
    if number is None or number < 0:
        return None
    if plain_policy == "magnitude":
        return magnitude_to_hours(number) * 60
    return number


def parse_hours(value: Any) -> Optional[float]:
    """Parse a sleep duration into hours.

    Accepts decimal hours, '7h:45m', '7:45' and raw minutes (any bare
    number above 25).
    """
    minutes = _first_success(value, (_parse_hms_minutes, _parse_clock_minutes))
    if minutes is not None:
        return minutes / 60

    number = to_float(value)
    if number is None or number < 0:
        return None
    return magnitude_to_hours(number)


# =============================================================================
# Time of day
# =============================================================================

def parse_bedtime_hours(value: Any) -> Optional[float]:
    """Parse a bedtime into hours relative to midnight.

    Times after noon are shifted back a day so bedtimes cluster around
    zero: 23:30 -> -0.5, 00:45 -> 0.75.
    """
    if isinstance(value, datetime):
        value = value.time()
    if isinstance(value, time):
        hours = value.hour + value.minute / 60
    elif isinstance(value, str):
        match = _TIME_OF_DAY_RE.search(value)
        if not match:
            return None
        hour, minute, meridiem = int(match.group(1)), int(match.group(2)), match.group(3)
        if minute >= 60:
            return None
        if meridiem:
            if hour < 1 or hour > 12:
                return None
            hour = hour % 12 + (12 if meridiem.lower() == "pm" else 0)
        elif hour >= 24:
            return None
        hours = hour + minute / 60
    else:
        return None

    if hours > 12:
        hours -= 24
    return hours


# =============================================================================
# Distances
# =============================================================================

def _convert(quantity: Optional[float], unit: Optional[str], default_unit: str) -> Optional[float]:
    if quantity is None or quantity < 0:
        return None
    factor = KM_PER_UNIT.get((unit or default_unit).strip().lower())
    if factor is None:
        return None
    return quantity * factor


def parse_distance_km(value: Any, default_unit: str = "km") -> Optional[float]:
    """Parse a distance into kilometres.

    Nested values carry their own unit (``{"qty": 3.1, "units": "mi"}``),
    strings may carry a suffix ("5 km", "3.1mi"); anything else is read
    in ``default_unit``. Blank distances are 0.

    Returns:
        Kilometres, or None if the value or its unit is not understood
    """
    if is_blank(value):
        return 0.0

    if isinstance(value, Mapping):
        quantity = None
        for key in ("qty", "value", "quantity"):
            if key in value:
                quantity = to_float(value[key])
                break
        unit = value.get("units") or value.get("unit")
        return _convert(quantity, unit, default_unit)

    if isinstance(value, str):
        match = _QUANTITY_RE.match(value.strip().replace(",", ""))
        if not match:
            return None
        return _convert(to_float(match.group(1)), match.group(2) or None, default_unit)

    return _convert(to_float(value), None, default_unit)
