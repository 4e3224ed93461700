"""
Parsing and formatting of tee times.

Tee times are represented internally as minutes since midnight (0..1439).
Stored slot times come in a few shapes ("07:53", "7:53 AM", "14:45:00",
"2:45 p.m."), so parsing is lenient about notation but strict about values:
anything out of range is an error, never a default.
"""

import re
from typing import Optional

from .exceptions import TimeParseError

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(
    r"""
    ^
    (?P<hour>\d{1,2})
    :(?P<minute>\d{2})
    (?::(?P<second>\d{2}))?
    \s*
    (?P<meridiem>[AaPp]\.?[Mm]\.?)?
    $
    """,
    re.VERBOSE,
)


def parse_time(raw: str) -> int:
    """
    Parse a time-of-day string into minutes since midnight.

    Accepts ``HH:MM``, ``H:MM``, an optional ``:SS`` part and an optional
    meridiem token (``AM``, ``PM``, ``a.m.``, ``P.M.`` ...). With a meridiem
    the hour must be 1-12, without one it must be 0-23.

    Args:
        raw: The time string to parse

    Returns:
        Minutes since midnight

    Raises:
        TimeParseError: If the string is malformed or out of range
    """
    if not isinstance(raw, str):
        raise TimeParseError(raw, "Time must be a string")

    match = _TIME_PATTERN.match(raw.strip())
    if not match:
        raise TimeParseError(raw)

    hour = int(match.group("hour"))
    minute = int(match.group("minute"))
    second = match.group("second")

    if minute > 59:
        raise TimeParseError(raw, "Invalid minutes")
    if second is not None and int(second) > 59:
        raise TimeParseError(raw, "Invalid seconds")

    meridiem = match.group("meridiem")
    if meridiem:
        meridiem = meridiem.replace(".", "").upper()
        if not 1 <= hour <= 12:
            raise TimeParseError(raw, "Invalid 12-hour time")
        if meridiem == "AM":
            hour = 0 if hour == 12 else hour
        elif hour != 12:
            hour += 12
    elif hour > 23:
        raise TimeParseError(raw, "Invalid hour")

    return hour * 60 + minute


def try_parse_time(raw: str) -> Optional[int]:
    """Parse a time string, returning None instead of raising."""
    try:
        return parse_time(raw)
    except TimeParseError:
        return None


def _check_minutes(minutes: int) -> None:
    if not isinstance(minutes, int) or not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"Minutes must be between 0 and {MINUTES_PER_DAY - 1}, got {minutes!r}")


def format_time(minutes: int) -> str:
    """Format minutes since midnight as a canonical 24-hour ``HH:MM`` string."""
    _check_minutes(minutes)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_time_12h(minutes: int) -> str:
    """Format minutes since midnight for display, e.g. ``7:53 AM``."""
    _check_minutes(minutes)
    hour, minute = divmod(minutes, 60)
    meridiem = "AM" if hour < 12 else "PM"
    display_hour = hour % 12 or 12
    return f"{display_hour}:{minute:02d} {meridiem}"
