"""
Clock-time helpers for the 30-minute scheduling grid.
"""

import re
from datetime import date, datetime

import pendulum
from pendulum import Date

from .exceptions import InvalidScheduleInputError

SLOT_MINUTES = 30
MINUTES_PER_DAY = 24 * 60
CLOCK_PATTERN = re.compile(r"([0-9]{2}):([0-9]{2})")


def time_to_minutes(clock: str) -> int:
    """
    Convert a zero-padded ``HH:MM`` clock string to minutes after midnight.

    Occupancy compares clock strings verbatim, so only the canonical
    two-digit form is accepted.

    Raises:
        InvalidScheduleInputError: If the string is not a valid clock time
    """
    match = CLOCK_PATTERN.fullmatch(clock) if isinstance(clock, str) else None
    if match is None:
        raise InvalidScheduleInputError(f"Invalid clock time: {clock!r}")

    hours = int(match.group(1))
    minutes = int(match.group(2))

    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise InvalidScheduleInputError(f"Invalid clock time: {clock!r}")

    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    """Convert minutes after midnight to a zero-padded ``HH:MM`` string."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise InvalidScheduleInputError(f"Minute offset out of range: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def to_date(value: date | datetime | str) -> Date:
    """Normalize a date-like value to a pendulum ``Date``."""
    if isinstance(value, str):
        try:
            parsed = pendulum.parse(value, exact=True)
        except ValueError as exc:
            raise InvalidScheduleInputError(f"Invalid date: {value!r}") from exc
        if not isinstance(parsed, date):
            raise InvalidScheduleInputError(f"Invalid date: {value!r}")
        value = parsed
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, Date):
        return value
    return pendulum.date(value.year, value.month, value.day)


def weekday_index(day: date) -> int:
    """Weekday index with 0=Sunday through 6=Saturday."""
    return day.isoweekday() % 7


def is_weekend(day: date) -> bool:
    return weekday_index(day) in (0, 6)
