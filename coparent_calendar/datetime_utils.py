"""Date and time helpers for the calendar core.

All dates handled here are calendar dates (``datetime.date``) and all times
are floating local ``HH:MM`` strings tied to an event's separately stored
IANA time zone. Nothing in this module converts between zones.
"""

import re
from datetime import date, datetime, timedelta
from typing import Iterator, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil.relativedelta import relativedelta

from .exceptions import ExpansionInputError

DateLike = Union[date, str]

TIME_OF_DAY_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def to_date(value: DateLike) -> date:
    """Coerce a ``date`` or ``YYYY-MM-DD`` string into a ``date``.

    Raises:
        ExpansionInputError: If the value is neither
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as e:
            raise ExpansionInputError(f"Malformed date: {value!r}") from e
    raise ExpansionInputError(f"Expected a date, got {type(value).__name__}")


def is_valid_time_of_day(value: str) -> bool:
    """Check a ``HH:MM`` 24-hour time string."""
    return bool(TIME_OF_DAY_RE.match(value))


def is_valid_time_zone(name: str) -> bool:
    """Check that ``name`` is a known IANA time zone."""
    if not name:
        return False
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def date_range(start: date, end: date) -> Iterator[date]:
    """Yield every date from ``start`` to ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def add_months(start: date, months: int) -> date:
    """Add months to a date, clamping to the last day of short months.

    >>> add_months(date(2025, 1, 31), 1)
    datetime.date(2025, 2, 28)
    """
    result: date = start + relativedelta(months=months)
    return result


def add_years(start: date, years: int) -> date:
    """Add years to a date; 29 February clamps to 28 February."""
    result: date = start + relativedelta(years=years)
    return result


def sunday_index_to_dateutil(day_index: int) -> int:
    """Convert a 0=Sunday weekday index to dateutil's 0=Monday numbering."""
    return (day_index + 6) % 7


def dateutil_to_sunday_index(weekday: int) -> int:
    """Convert dateutil's 0=Monday weekday to the 0=Sunday index."""
    return (weekday + 1) % 7


def ical_value_to_iso(value: Union[date, datetime]) -> str:
    """Render a decoded DTSTART/DTEND value as an ISO-like string.

    Dates become ``YYYY-MM-DD`` and date-times ``YYYY-MM-DDTHH:MM:SS``. Any
    time zone (TZID or a UTC ``Z``) is dropped without converting the clock
    time, so the value is read as floating local time.
    """
    if isinstance(value, datetime):
        return value.replace(tzinfo=None).isoformat(timespec="seconds")
    return value.isoformat()


def split_iso(value: str) -> tuple[str, Optional[str]]:
    """Split an ISO-like date/date-time string into (date, HH:MM or None)."""
    if "T" in value:
        date_part, time_part = value.split("T", 1)
        return date_part, time_part[:5]
    return value, None


def floating_datetime(day: date, time_of_day: str) -> datetime:
    """Combine a date and ``HH:MM`` into a naive (floating) datetime."""
    hour, minute = time_of_day.split(":", 1)
    return datetime(day.year, day.month, day.day, int(hour), int(minute))
