"""Storage boundary: the event store protocol and row adapters.

The hosted database uses snake_case columns, keeps ``recurrence_days`` as
JSON text (``"[1,3,5]"``) and writes empty strings for absent optional
dates. :func:`event_to_row` and :func:`event_from_row` are the only places
that know about that layout.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional, Protocol

from .models import Event, EventCreate, EventFilter, Recurrence

logger = logging.getLogger(__name__)


class EventStore(Protocol):
    """Protocol for persisted-event access."""

    def list_events(self, criteria: Optional[EventFilter] = None) -> list[Event]:
        """List events matching ``criteria`` (all events when None)."""
        ...

    def get_event(self, event_id: int) -> Optional[Event]:
        """Fetch one event, or None if it does not exist."""
        ...

    def create_event(self, payload: EventCreate) -> Event:
        """Persist a new event and return it with its assigned id."""
        ...

    def update_event(self, event_id: int, payload: EventCreate) -> Optional[Event]:
        """Replace an event's fields; None if it does not exist."""
        ...

    def delete_event(self, event_id: int) -> bool:
        """Delete an event; False if it did not exist."""
        ...


def _iso_or_none(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def event_to_row(event: EventCreate) -> dict[str, Any]:
    """Map an event to the store's column layout."""
    row: dict[str, Any] = {
        "child_id": event.child_id,
        "title": event.title,
        "start_date": event.start_date.isoformat(),
        "end_date": _iso_or_none(event.end_date or event.start_date),
        "start_time": event.start_time,
        "end_time": event.end_time,
        "time_zone": event.time_zone,
        "parent": event.parent.value,
        "type": event.type.value,
        "recurrence": event.recurrence.value,
        "recurrence_interval": event.recurrence_interval,
        "recurrence_end": _iso_or_none(event.recurrence_end),
        "recurrence_days": json.dumps(event.recurrence_days),
        "description": event.description,
        "location": event.location,
        "address": event.address,
        "city": event.city,
        "postal_code": event.postal_code,
    }
    if isinstance(event, Event):
        row["id"] = event.id
        row["created_at"] = event.created_at.isoformat() if event.created_at else None
    return row


def _parse_recurrence_days(raw: Any) -> list[int]:
    if raw is None or raw == "":
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            # Older rows were written as "1,3,5"
            raw = [part for part in raw.split(",") if part.strip()]
    return [int(day) for day in raw]


def event_from_row(row: dict[str, Any]) -> Event:
    """Map a store row to an :class:`Event`.

    Raises:
        pydantic.ValidationError: If the row does not hold a valid event
    """
    data = {
        key: value
        for key, value in row.items()
        if key not in ("recurrence_days", "recurrence", "recurrence_interval")
    }
    data["recurrence"] = row.get("recurrence") or Recurrence.NONE.value
    data["recurrence_interval"] = row.get("recurrence_interval") or 1
    data["recurrence_days"] = _parse_recurrence_days(row.get("recurrence_days"))
    return Event.model_validate(data)


def may_occupy(event: EventCreate, start: Optional[date], end: Optional[date]) -> bool:
    """Cheap pre-filter: could ``event`` occupy any day of ``[start, end]``?"""
    if end is not None and event.start_date > end:
        return False
    if start is None:
        return True

    last_day = event.end_date or event.start_date
    if event.is_recurring:
        if event.recurrence_end is None:
            return True
        last_day = event.recurrence_end + timedelta(days=event.span_days)
    return last_day >= start


class InMemoryEventStore:
    """Thread-safe in-memory event store keeping rows in the hosted layout."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rows: dict[int, dict[str, Any]] = {}
        self._next_id = 1

    def list_events(self, criteria: Optional[EventFilter] = None) -> list[Event]:
        with self._lock:
            rows = [dict(row) for row in self._rows.values()]

        events = [event_from_row(row) for row in rows]
        if criteria is None:
            return events

        return [
            event
            for event in events
            if (
                criteria.child_id is None
                or event.child_id is None
                or event.child_id == criteria.child_id
            )
            and may_occupy(event, criteria.start_date, criteria.end_date)
        ]

    def get_event(self, event_id: int) -> Optional[Event]:
        with self._lock:
            row = self._rows.get(event_id)
            row = dict(row) if row is not None else None
        return event_from_row(row) if row is not None else None

    def create_event(self, payload: EventCreate) -> Event:
        row = event_to_row(payload)
        with self._lock:
            row["id"] = self._next_id
            row["created_at"] = datetime.now(timezone.utc).isoformat()
            self._rows[self._next_id] = row
            self._next_id += 1
        logger.debug("Created event %d: %r", row["id"], payload.title)
        return event_from_row(row)

    def update_event(self, event_id: int, payload: EventCreate) -> Optional[Event]:
        with self._lock:
            existing = self._rows.get(event_id)
            if existing is None:
                return None
            row = event_to_row(payload)
            row["id"] = event_id
            row["created_at"] = existing.get("created_at")
            self._rows[event_id] = row
        return event_from_row(row)

    def delete_event(self, event_id: int) -> bool:
        with self._lock:
            return self._rows.pop(event_id, None) is not None
