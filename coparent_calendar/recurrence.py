"""Recurrence expansion for custody schedules and other calendar events."""

import logging
from collections.abc import Callable, Iterable
from datetime import date, datetime, time, timedelta
from typing import Optional

from dateutil.rrule import DAILY, SU, WEEKLY, rrule

from .datetime_utils import (
    DateLike,
    add_months,
    add_years,
    date_range,
    sunday_index_to_dateutil,
    to_date,
)
from .exceptions import ExpansionInputError
from .models import EventCreate, Recurrence
from .settings import CoparentSettings, get_settings

logger = logging.getLogger(__name__)

_WEEKLY_KINDS = (Recurrence.WEEKLY, Recurrence.BIWEEKLY, Recurrence.CUSTOM)


def check_window(window_start: Optional[DateLike], window_end: Optional[DateLike]) -> tuple[date, date]:
    """Validate and coerce a query window.

    Raises:
        ExpansionInputError: If either bound is missing or malformed, or the
            window is inverted
    """
    if window_start is None or window_end is None:
        raise ExpansionInputError("Expansion requires a bounded window (start and end dates)")
    start = to_date(window_start)
    end = to_date(window_end)
    if end < start:
        raise ExpansionInputError(f"Window end {end} is before window start {start}")
    return start, end


class RecurrenceExpander:
    """Expands event definitions into the calendar days they occupy.

    Daily and weekly rules are generated with python-dateutil's ``rrule``.
    Monthly and yearly rules step with ``relativedelta`` from the original
    start date so that the 31st clamps to the end of short months instead of
    being skipped.
    """

    def __init__(self, settings: Optional[CoparentSettings] = None) -> None:
        """Initialize RecurrenceExpander with settings.

        Args:
            settings: Settings providing ``max_occurrences``; global settings when None
        """
        self.settings = settings if settings is not None else get_settings()
        self.max_occurrences = getattr(self.settings, "max_occurrences", 20000)

    def expand(
        self,
        event: EventCreate,
        window_start: Optional[DateLike],
        window_end: Optional[DateLike],
    ) -> list[date]:
        """Return every date in the window the event occupies, in order.

        Each occurrence covers the same number of days as the original event.
        An occurrence that starts before the window but runs into it
        contributes its in-window days.

        Raises:
            ExpansionInputError: If the window is unbounded, malformed or too long
        """
        start, end = check_window(window_start, window_end)
        span = event.span_days

        days: set[date] = set()
        for occurrence in self.occurrences(event, start - timedelta(days=span), end):
            first = max(occurrence, start)
            last = min(occurrence + timedelta(days=span), end)
            days.update(date_range(first, last))

        return sorted(days)

    def occurrences(
        self,
        event: EventCreate,
        window_start: Optional[DateLike],
        window_end: Optional[DateLike],
    ) -> list[date]:
        """Return occurrence start dates that fall inside the window.

        Raises:
            ExpansionInputError: If the window is unbounded, malformed or too long
        """
        start, end = check_window(window_start, window_end)

        if not event.is_recurring:
            return [event.start_date] if start <= event.start_date <= end else []

        last = end
        if event.recurrence_end is not None:
            last = min(last, event.recurrence_end)
        if last < event.start_date or last < start:
            return []

        if event.recurrence == Recurrence.DAILY or event.recurrence in _WEEKLY_KINDS:
            result = self._rrule_occurrences(event, start, last)
        elif event.recurrence == Recurrence.MONTHLY:
            result = self._stepped_occurrences(event, start, last, add_months, _months_between)
        elif event.recurrence == Recurrence.YEARLY:
            result = self._stepped_occurrences(event, start, last, add_years, _years_between)
        else:
            raise ExpansionInputError(f"Unsupported recurrence: {event.recurrence}")

        logger.debug(
            "Expanded %s recurrence of %r: %d occurrences in %s..%s",
            event.recurrence.value,
            event.title,
            len(result),
            start,
            last,
        )
        return result

    def _rrule_occurrences(self, event: EventCreate, start: date, last: date) -> list[date]:
        """Generate daily/weekly occurrences with dateutil."""
        if event.recurrence == Recurrence.DAILY:
            freq = DAILY
            interval = event.recurrence_interval
        else:
            freq = WEEKLY
            # Unvalidated models may still carry the biweekly tag
            interval = 2 if event.recurrence == Recurrence.BIWEEKLY else event.recurrence_interval

        kwargs = {
            "freq": freq,
            "dtstart": datetime.combine(event.start_date, time()),
            "interval": interval,
            "until": datetime.combine(last, time()),
            "wkst": SU,
        }
        if freq == WEEKLY and event.recurrence_days:
            kwargs["byweekday"] = [sunday_index_to_dateutil(day) for day in event.recurrence_days]

        rule = rrule(**kwargs)
        return self._collect(
            (occ.date() for occ in rule.xafter(datetime.combine(start, time()), inc=True)),
            event,
        )

    def _stepped_occurrences(
        self,
        event: EventCreate,
        start: date,
        last: date,
        step: Callable[[date, int], date],
        units_between: Callable[[date, date], int],
    ) -> list[date]:
        """Generate monthly/yearly occurrences by stepping from the start date."""
        interval = event.recurrence_interval
        # Jump close to the window instead of walking from the first occurrence
        k = max(0, units_between(event.start_date, start) // interval - 1)

        def _candidates() -> Iterable[date]:
            index = k
            while True:
                candidate = step(event.start_date, index * interval)
                if candidate > last:
                    return
                if candidate >= start:
                    yield candidate
                index += 1

        return self._collect(_candidates(), event)

    def _collect(self, candidates: Iterable[date], event: EventCreate) -> list[date]:
        """Materialize candidates, refusing windows past the configured cap.

        Raises:
            ExpansionInputError: If the window holds more than ``max_occurrences``
        """
        result: list[date] = []
        for candidate in candidates:
            if len(result) >= self.max_occurrences:
                logger.warning(
                    "Expansion of %r exceeds %d occurrences", event.title, self.max_occurrences
                )
                raise ExpansionInputError(
                    f"Expansion of {event.title!r} exceeds {self.max_occurrences} occurrences; "
                    "use a narrower window"
                )
            result.append(candidate)
        return result


def _months_between(earlier: date, later: date) -> int:
    return (later.year - earlier.year) * 12 + later.month - earlier.month


def _years_between(earlier: date, later: date) -> int:
    return later.year - earlier.year


def expand(
    event: EventCreate,
    window_start: Optional[DateLike],
    window_end: Optional[DateLike],
    settings: Optional[CoparentSettings] = None,
) -> list[date]:
    """Expand ``event`` over ``[window_start, window_end]``.

    Convenience wrapper around :meth:`RecurrenceExpander.expand`.
    """
    return RecurrenceExpander(settings).expand(event, window_start, window_end)
