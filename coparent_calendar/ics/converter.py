"""Conversion of parsed ICS events into event creation payloads."""

import logging
from collections.abc import Iterable
from datetime import date
from typing import Optional, Union

from ..datetime_utils import split_iso
from ..models import EventCreate, EventType, ICalEvent, Parent
from ..settings import CoparentSettings, get_settings

logger = logging.getLogger(__name__)


def _end_date_for(ical_event: ICalEvent, start_date: date) -> date:
    """Work out the inclusive end date for an imported event.

    DTEND is read literally, date-only values included.
    """
    if not ical_event.end:
        return start_date

    end_part = split_iso(ical_event.end)[0]
    end_date = date.fromisoformat(end_part)

    if end_date < start_date:
        logger.debug("DTEND before DTSTART for %r; using start date", ical_event.title)
        return start_date
    return end_date


def ical_event_to_payload(
    ical_event: ICalEvent,
    default_parent: Union[Parent, str] = Parent.A,
    settings: Optional[CoparentSettings] = None,
) -> EventCreate:
    """Lift one parsed ICS event into an :class:`EventCreate` payload.

    Raises:
        pydantic.ValidationError: If the ICS values do not form a valid event
        ValueError: If a date string is not a real calendar date
    """
    settings = settings if settings is not None else get_settings()

    start_part, start_time = split_iso(ical_event.start)
    start_date = date.fromisoformat(start_part)
    end_date = _end_date_for(ical_event, start_date)
    end_time = split_iso(ical_event.end)[1] if ical_event.end else None

    return EventCreate(
        title=ical_event.title,
        start_date=start_date,
        end_date=end_date,
        start_time=start_time or settings.default_start_time,
        end_time=end_time or settings.default_end_time,
        time_zone=settings.import_time_zone,
        parent=Parent(default_parent),
        type=EventType.CUSTODY,
        recurrence=ical_event.recurrence,
        recurrence_interval=1,
        description=ical_event.description or "",
        location=ical_event.location or "",
    )


def ical_events_to_event_payloads(
    ical_events: Iterable[ICalEvent],
    default_parent: Union[Parent, str] = Parent.A,
    settings: Optional[CoparentSettings] = None,
) -> list[EventCreate]:
    """Convert parsed ICS events into event creation payloads.

    Every payload is a custody event for ``default_parent`` with interval 1;
    times default to the configured 09:00-10:00 when the ICS value is
    date-only.
    """
    return [ical_event_to_payload(event, default_parent, settings) for event in ical_events]
