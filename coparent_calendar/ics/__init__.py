"""ICS calendar import and export."""

from .converter import ical_event_to_payload, ical_events_to_event_payloads
from .exporter import build_rrule, export_filename, export_ics
from .importer import ICSImporter, validate_ics_file
from .parser import ICSEventReader, normalize_rrule, parse_ics

__all__ = [
    "ICSEventReader",
    "ICSImporter",
    "build_rrule",
    "export_filename",
    "export_ics",
    "ical_event_to_payload",
    "ical_events_to_event_payloads",
    "normalize_rrule",
    "parse_ics",
    "validate_ics_file",
]
