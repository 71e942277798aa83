"""Reader for the subset of iCalendar used by calendar imports.

Content lines are tracked by hand so that VALARM blocks and unrelated
properties are dropped before parsing. Each complete VEVENT is then handed
to ``icalendar`` on its own, so one malformed block cannot sink the file.
Only SUMMARY, DTSTART, DTEND, DESCRIPTION, LOCATION and RRULE are read.
"""

import logging
import re
from collections.abc import Iterator
from datetime import date
from typing import Any, Optional, Union

from icalendar import Calendar

from ..datetime_utils import ical_value_to_iso
from ..exceptions import ICSParseError
from ..models import ICalEvent, Recurrence

logger = logging.getLogger(__name__)

_LINE_SPLIT_RE = re.compile(r"\r\n|\n|\r")
_PROPERTY_NAME_RE = re.compile(r"^[^;:]+")

_FREQ_TAGS = (
    ("FREQ=DAILY", Recurrence.DAILY),
    ("FREQ=WEEKLY", Recurrence.WEEKLY),
    ("FREQ=MONTHLY", Recurrence.MONTHLY),
    ("FREQ=YEARLY", Recurrence.YEARLY),
)

_RECOGNIZED_PROPERTIES = frozenset(
    ("SUMMARY", "DESCRIPTION", "LOCATION", "DTSTART", "DTEND", "RRULE")
)


def normalize_rrule(rrule: Optional[str]) -> Recurrence:
    """Map a raw RRULE value to a recurrence tag using its FREQ only.

    INTERVAL, BYDAY, UNTIL and COUNT are not decoded.
    """
    if not rrule:
        return Recurrence.NONE
    upper_rule = rrule.upper()
    for token, tag in _FREQ_TAGS:
        if token in upper_rule:
            return tag
    return Recurrence.NONE


def unfold_lines(content: str) -> Iterator[str]:
    """Yield logical content lines, joining RFC 5545 folded continuations."""
    pending: Optional[str] = None
    for raw_line in _LINE_SPLIT_RE.split(content):
        if raw_line.startswith((" ", "\t")) and pending is not None:
            pending += raw_line[1:]
            continue
        if pending is not None:
            yield pending
        pending = raw_line
    if pending is not None:
        yield pending


def _first(value: Any) -> Any:
    """Return the first instance of a property that may repeat."""
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _text_value(component: Any, name: str) -> Optional[str]:
    value = _first(component.get(name))
    if value is None:
        return None
    return str(value).replace("\\", "")


def _date_value(component: Any, name: str) -> Optional[str]:
    value = getattr(_first(component.get(name)), "dt", None)
    if not isinstance(value, date):
        return None
    return ical_value_to_iso(value)


def _rrule_value(component: Any) -> Optional[str]:
    value = _first(component.get("RRULE"))
    if value is None:
        return None
    rule: str = value.to_ical().decode("utf-8")
    return rule


class ICSEventReader:
    """Collects VEVENT blocks from ICS text into :class:`ICalEvent` records."""

    def __init__(self) -> None:
        self._in_event = False
        self._in_alarm = False
        self._event_lines: list[str] = []
        self.events: list[ICalEvent] = []
        self.skipped = 0

    def feed(self, content: str) -> list[ICalEvent]:
        """Parse ``content`` and return the events read so far."""
        for line in unfold_lines(content):
            self._process_line(line.strip())
        return self.events

    def _process_line(self, line: str) -> None:
        if not line:
            return

        upper_line = line.upper()

        # Event boundaries
        if upper_line.startswith("BEGIN:VEVENT"):
            self._in_event = True
            self._in_alarm = False
            self._event_lines = []
            return
        if upper_line.startswith("END:VEVENT"):
            if self._in_event:
                self._finish_event()
            self._in_event = False
            self._in_alarm = False
            self._event_lines = []
            return

        # Alarms carry no occupancy information
        if upper_line.startswith("BEGIN:VALARM"):
            self._in_alarm = True
            return
        if upper_line.startswith("END:VALARM"):
            self._in_alarm = False
            return

        if not self._in_event or self._in_alarm or ":" not in line:
            return

        name_match = _PROPERTY_NAME_RE.match(line)
        if name_match is None or name_match.group(0).upper() not in _RECOGNIZED_PROPERTIES:
            return
        self._event_lines.append(name_match.group(0).upper() + line[name_match.end() :])

    def _parse_event_block(self) -> Optional[Any]:
        """Parse the buffered lines as a single-event calendar."""
        event_ics = "\r\n".join(
            [
                "BEGIN:VCALENDAR",
                "VERSION:2.0",
                "PRODID:-//Coparent Calendar Import//EN",
                "BEGIN:VEVENT",
                *self._event_lines,
                "END:VEVENT",
                "END:VCALENDAR",
            ]
        )
        try:
            calendar = Calendar.from_ical(event_ics)
        except Exception as e:
            logger.warning("Failed to parse event: %s", e)
            return None

        components = calendar.walk("VEVENT")
        return components[0] if components else None

    def _finish_event(self) -> None:
        """Emit the current block if it has a title and a start date."""
        component = self._parse_event_block()
        if component is None:
            self.skipped += 1
            return

        title = (_text_value(component, "SUMMARY") or "").strip()
        start = _date_value(component, "DTSTART")
        if not title or not start:
            self.skipped += 1
            logger.debug("Skipping VEVENT without title or start date: %s", self._event_lines)
            return

        rrule = _rrule_value(component)
        self.events.append(
            ICalEvent(
                title=title,
                start=start,
                end=_date_value(component, "DTEND"),
                description=_text_value(component, "DESCRIPTION"),
                location=_text_value(component, "LOCATION"),
                rrule=rrule,
                recurrence=normalize_rrule(rrule),
            )
        )


def parse_ics(content: Union[str, bytes]) -> list[ICalEvent]:
    """Parse ICS text into transient :class:`ICalEvent` records.

    Blocks missing a title or a start date, or that ``icalendar`` cannot
    read, are dropped.

    Raises:
        ICSParseError: If ``content`` is bytes that are not UTF-8 text
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ICSParseError("ICS content is not valid UTF-8 text") from e

    reader = ICSEventReader()
    events = reader.feed(content or "")
    logger.info("Parsed %d events from ICS content (%d skipped)", len(events), reader.skipped)
    return events
