"""
Canonical time-of-day, date and tick primitives.

Times are ``HH:MM`` strings and dates are ``YYYY-MM-DD`` strings. Both are
fixed-width and zero-padded, so once validated they order correctly under
plain string comparison. Everything entering the engine passes through the
validators here first; malformed input is rejected, never repaired.
"""

import re
from datetime import date as std_date
from typing import Iterator

import pendulum
from pendulum import Date

from .exceptions import InvalidAvailabilityError

TICK_MINUTES = 30
MINUTES_PER_DAY = 24 * 60
# One day of ticks; a range can never legitimately need more.
MAX_TICKS_PER_RANGE = MINUTES_PER_DAY // TICK_MINUTES

END_OF_DAY = "24:00"

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_time(value: str, allow_end_of_day: bool = False) -> str:
    """
    Ensure ``value`` is a zero-padded ``HH:MM`` string.

    Args:
        value: Time string to check
        allow_end_of_day: Accept ``"24:00"`` (only meaningful as a range end)

    Returns:
        The value unchanged

    Raises:
        InvalidAvailabilityError: If the value is not a valid time
    """
    if not isinstance(value, str):
        raise InvalidAvailabilityError(f"Time must be a string in HH:MM format, got {value!r}")
    if allow_end_of_day and value == END_OF_DAY:
        return value
    if not _TIME_PATTERN.match(value):
        raise InvalidAvailabilityError(f"Invalid time '{value}', expected HH:MM")
    return value


def parse_date(value: str) -> Date:
    """Parse a ``YYYY-MM-DD`` string into a pendulum Date."""
    if not isinstance(value, str) or not _DATE_PATTERN.match(value):
        raise InvalidAvailabilityError(f"Invalid date {value!r}, expected YYYY-MM-DD")
    try:
        return pendulum.from_format(value, "YYYY-MM-DD").date()
    except ValueError as exc:
        raise InvalidAvailabilityError(f"Invalid date '{value}': {exc}") from exc


def validate_date(value: str) -> str:
    """Ensure ``value`` is a real calendar date in ``YYYY-MM-DD`` form."""
    parse_date(value)
    return value


def parse_time(value: str) -> int:
    """Convert ``HH:MM`` (or ``24:00``) to minutes from midnight."""
    validate_time(value, allow_end_of_day=True)
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def format_time(minutes: int) -> str:
    """
    Convert minutes from midnight to ``HH:MM``.

    ``1440`` formats as ``"24:00"``; anything outside ``0..1440`` is refused
    because the engine never rolls over into the next date.
    """
    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise InvalidAvailabilityError(
            f"Minute offset {minutes} is outside a single day (0..{MINUTES_PER_DAY})"
        )
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def validate_tick_time(value: str, allow_end_of_day: bool = False) -> str:
    """
    Ensure ``value`` is a valid time that sits on the tick grid.

    Ranges, patterns and window bounds all start and end on a tick
    boundary (``:00`` or ``:30``).

    Raises:
        InvalidAvailabilityError: If the value is malformed or off the grid
    """
    validate_time(value, allow_end_of_day=allow_end_of_day)
    if parse_time(value) % TICK_MINUTES:
        raise InvalidAvailabilityError(
            f"Time '{value}' is not on the {TICK_MINUTES}-minute grid"
        )
    return value


def advance_one_tick(value: str) -> str:
    """
    Return the time one tick after ``value``.

    This is the step the range/tick converter walks with.

    Raises:
        InvalidAvailabilityError: If the result would pass the end of the day
    """
    return format_time(parse_time(value) + TICK_MINUTES)


def weekday_index(value: str) -> int:
    """Day of week for a date key, 0 = Sunday through 6 = Saturday."""
    return parse_date(value).isoweekday() % 7


def date_range(start: str, end: str) -> Iterator[str]:
    """
    Yield every date key from ``start`` to ``end`` inclusive.

    Raises:
        InvalidAvailabilityError: If ``start`` is after ``end``
    """
    current = parse_date(start)
    last = parse_date(end)
    if current > last:
        raise InvalidAvailabilityError(f"Start date {start} is after end date {end}")

    while current <= last:
        yield current.to_date_string()
        current = current.add(days=1)


def date_ordinal(value: str) -> int:
    """Proleptic Gregorian ordinal of a date key."""
    return parse_date(value).toordinal()


def date_from_ordinal(ordinal: int) -> str:
    """Inverse of :func:`date_ordinal`."""
    return std_date.fromordinal(ordinal).isoformat()
