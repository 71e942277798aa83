"""Per-day occupancy and display resolution for calendar views.

Several events may occupy the same day. Views that can only colour a day
cell once use :func:`resolve_day` to pick the event to show; every match is
still available through :func:`events_on_day` and :func:`build_occupancy`.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from typing import Optional

from .datetime_utils import DateLike, date_range, to_date
from .models import Event, EventType
from .recurrence import RecurrenceExpander, check_window
from .settings import CoparentSettings

logger = logging.getLogger(__name__)


def display_priority(event: Event) -> tuple[int, int, datetime]:
    """Sort key for picking the displayed event; larger wins.

    Holiday, travel and activity events outrank custody. Ties go to the most
    recently created event (highest id, then latest ``created_at``). Unsaved
    events rank below saved ones.
    """
    exceptional = 0 if event.type == EventType.CUSTODY else 1
    event_id = getattr(event, "id", None)
    if event_id is None:
        event_id = -1
    created_at = getattr(event, "created_at", None) or datetime.min
    if created_at.tzinfo is not None:
        created_at = created_at.replace(tzinfo=None)
    return exceptional, event_id, created_at


def events_on_day(
    day: DateLike,
    events: Iterable[Event],
    expander: Optional[RecurrenceExpander] = None,
) -> list[Event]:
    """Return every event occupying ``day``, highest display priority first."""
    target = to_date(day)
    expander = expander or RecurrenceExpander()
    matches = [event for event in events if expander.expand(event, target, target)]
    return sorted(matches, key=display_priority, reverse=True)


def resolve_day(
    day: DateLike,
    events: Iterable[Event],
    expander: Optional[RecurrenceExpander] = None,
) -> Optional[Event]:
    """Return the single event to display for ``day``, or None if the day is open."""
    matches = events_on_day(day, events, expander)
    if len(matches) > 1:
        logger.debug(
            "%d events occupy %s; displaying %r", len(matches), to_date(day), matches[0].title
        )
    return matches[0] if matches else None


def build_occupancy(
    events: Sequence[Event],
    window_start: DateLike,
    window_end: DateLike,
    settings: Optional[CoparentSettings] = None,
) -> dict[date, list[Event]]:
    """Group the window's ``(date, event)`` occupancy entries by date.

    Each day's list is ordered by display priority. Days with no events are
    omitted.
    """
    start, end = check_window(window_start, window_end)
    expander = RecurrenceExpander(settings)

    occupancy: dict[date, list[Event]] = {}
    for event in events:
        for day in expander.expand(event, start, end):
            occupancy.setdefault(day, []).append(event)

    for day_events in occupancy.values():
        day_events.sort(key=display_priority, reverse=True)
    return dict(sorted(occupancy.items()))


def resolve_range(
    events: Sequence[Event],
    window_start: DateLike,
    window_end: DateLike,
    settings: Optional[CoparentSettings] = None,
) -> dict[date, Optional[Event]]:
    """Map every day in the window to its displayed event (None when unassigned)."""
    start, end = check_window(window_start, window_end)
    occupancy = build_occupancy(events, start, end, settings)
    return {day: occupancy[day][0] if day in occupancy else None for day in date_range(start, end)}
