"""Serialization of events to iCalendar text for download."""

import logging
import uuid
from collections.abc import Iterable
from datetime import date, datetime, time, timezone
from typing import Any, Optional

from icalendar import Calendar, Event as ICalendarEvent

from ..datetime_utils import floating_datetime
from ..models import EventCreate, Recurrence
from ..settings import CoparentSettings, get_settings

logger = logging.getLogger(__name__)

# 0=Sunday..6=Saturday
_BYDAY_CODES = ("SU", "MO", "TU", "WE", "TH", "FR", "SA")

_RRULE_FREQ = {
    Recurrence.DAILY: "DAILY",
    Recurrence.WEEKLY: "WEEKLY",
    Recurrence.BIWEEKLY: "WEEKLY",
    Recurrence.CUSTOM: "WEEKLY",
    Recurrence.MONTHLY: "MONTHLY",
    Recurrence.YEARLY: "YEARLY",
}


def build_rrule(event: EventCreate) -> Optional[dict[str, Any]]:
    """Build the RRULE parts for a recurring event, or None if it does not recur."""
    freq = _RRULE_FREQ.get(event.recurrence)
    if freq is None:
        return None

    interval = 2 if event.recurrence == Recurrence.BIWEEKLY else event.recurrence_interval
    rule: dict[str, Any] = {"FREQ": freq}
    if interval > 1:
        rule["INTERVAL"] = interval
    if freq == "WEEKLY" and event.recurrence_days:
        rule["BYDAY"] = [_BYDAY_CODES[day] for day in event.recurrence_days]
    if event.recurrence_end is not None:
        # UNTIL must be a DATE-TIME when DTSTART is one
        rule["UNTIL"] = datetime.combine(event.recurrence_end, time(23, 59, 59))
    return rule


def _event_uid(event: EventCreate) -> str:
    event_id = getattr(event, "id", None)
    if event_id is None:
        return f"{uuid.uuid4()}@coparent-calendar"
    return f"event-{event_id}@coparent-calendar"


def _build_vevent(event: EventCreate) -> ICalendarEvent:
    end_date = event.end_date or event.start_date

    vevent = ICalendarEvent()
    vevent.add("uid", _event_uid(event))
    vevent.add("dtstamp", getattr(event, "created_at", None) or datetime.now(timezone.utc))
    vevent.add("summary", event.title)
    # Floating local times: no TZID and no UTC marker
    vevent.add("dtstart", floating_datetime(event.start_date, event.start_time))
    vevent.add("dtend", floating_datetime(end_date, event.end_time))
    vevent.add("description", event.description or "")
    if event.location:
        vevent.add("location", event.location)

    rule = build_rrule(event)
    if rule is not None:
        vevent.add("rrule", rule)
    return vevent


def export_ics(events: Iterable[EventCreate], settings: Optional[CoparentSettings] = None) -> str:
    """Serialize events into a single VCALENDAR text blob with CRLF line endings.

    Date-times are written as floating local time; the event's ``time_zone``
    is not encoded.
    """
    settings = settings if settings is not None else get_settings()

    calendar = Calendar()
    calendar.add("version", "2.0")
    calendar.add("prodid", settings.export_prodid)
    calendar.add("calscale", "GREGORIAN")
    calendar.add("method", "PUBLISH")

    count = 0
    for event in events:
        calendar.add_component(_build_vevent(event))
        count += 1

    logger.info("Exported %d events to ICS", count)
    return calendar.to_ical().decode("utf-8")


def export_filename(on: Optional[date] = None, settings: Optional[CoparentSettings] = None) -> str:
    """Download file name for an export, e.g. ``coparent-calendar-2025-03-10.ics``."""
    settings = settings if settings is not None else get_settings()
    on = on or date.today()
    return f"{settings.export_filename_prefix}-{on.isoformat()}.ics"
