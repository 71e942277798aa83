"""coparent_calendar - custody schedule expansion and ICS interchange.

Expands recurring custody, holiday, travel and activity events into the
calendar days they occupy, picks the event to display for each day, and
reads and writes iCalendar files.
"""

__version__ = "1.0.0"

from .exceptions import (
    CoparentCalendarError,
    EventNotFoundError,
    EventValidationError,
    ExpansionInputError,
    ICSError,
    ICSParseError,
    ICSValidationError,
)
from .ics import (
    ICSImporter,
    export_filename,
    export_ics,
    ical_events_to_event_payloads,
    parse_ics,
    validate_ics_file,
)
from .models import (
    Event,
    EventCreate,
    EventFilter,
    EventType,
    EventUpdate,
    FileValidationResult,
    ICalEvent,
    ImportResult,
    Parent,
    Recurrence,
)
from .occupancy import build_occupancy, events_on_day, resolve_day, resolve_range
from .recurrence import RecurrenceExpander, expand
from .service import EventService
from .storage import EventStore, InMemoryEventStore

__all__ = [
    "CoparentCalendarError",
    "Event",
    "EventCreate",
    "EventFilter",
    "EventNotFoundError",
    "EventService",
    "EventStore",
    "EventType",
    "EventUpdate",
    "EventValidationError",
    "ExpansionInputError",
    "FileValidationResult",
    "ICSError",
    "ICSImporter",
    "ICSParseError",
    "ICSValidationError",
    "ICalEvent",
    "ImportResult",
    "InMemoryEventStore",
    "Parent",
    "Recurrence",
    "RecurrenceExpander",
    "build_occupancy",
    "events_on_day",
    "expand",
    "export_filename",
    "export_ics",
    "ical_events_to_event_payloads",
    "parse_ics",
    "resolve_day",
    "resolve_range",
    "validate_ics_file",
]
