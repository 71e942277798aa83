"""Validated event lifecycle on top of an :class:`EventStore`."""

import logging
from datetime import date
from typing import Any, Optional, Union

from pydantic import ValidationError

from .datetime_utils import DateLike
from .exceptions import EventNotFoundError, EventValidationError
from .models import Event, EventCreate, EventFilter, EventUpdate
from .occupancy import resolve_range
from .recurrence import check_window
from .settings import CoparentSettings, get_settings
from .storage import EventStore

logger = logging.getLogger(__name__)


def _validation_error(action: str, error: ValidationError) -> EventValidationError:
    fields = ", ".join(".".join(str(loc) for loc in err["loc"]) or "event" for err in error.errors())
    return EventValidationError(
        f"Cannot {action} event: invalid {fields}", errors=error.errors(include_url=False)
    )


class EventService:
    """Creates, updates, deletes and lists events.

    Payloads are validated here, before anything reaches the store, so a
    malformed recurrence descriptor is never persisted and expansion can
    assume a valid event.
    """

    def __init__(self, store: EventStore, settings: Optional[CoparentSettings] = None) -> None:
        self.store = store
        self.settings = settings if settings is not None else get_settings()

    def create_event(self, payload: Union[EventCreate, dict[str, Any]]) -> Event:
        """Validate and persist a new event.

        Raises:
            EventValidationError: If the payload is not a valid event
        """
        if isinstance(payload, dict):
            data = {"time_zone": self.settings.default_time_zone, **payload}
            try:
                payload = EventCreate.model_validate(data)
            except ValidationError as e:
                raise _validation_error("create", e) from e

        event = self.store.create_event(payload)
        logger.info("Created event %s (%s)", event.id, event.title)
        return event

    def update_event(self, event_id: int, changes: Union[EventUpdate, dict[str, Any]]) -> Event:
        """Apply a partial update and re-validate the whole event.

        Raises:
            EventNotFoundError: If no event has ``event_id``
            EventValidationError: If the updated event is invalid
        """
        existing = self.store.get_event(event_id)
        if existing is None:
            raise EventNotFoundError(event_id)

        try:
            if isinstance(changes, dict):
                changes = EventUpdate.model_validate(changes)
            merged = {
                **existing.model_dump(exclude={"id", "created_at"}),
                **changes.model_dump(exclude_unset=True),
            }
            # A new recurrence kind starts from interval 1 unless one is given
            fields_set = changes.model_fields_set
            if "recurrence" in fields_set and "recurrence_interval" not in fields_set:
                merged["recurrence_interval"] = 1
            payload = EventCreate.model_validate(merged)
        except ValidationError as e:
            raise _validation_error("update", e) from e

        updated = self.store.update_event(event_id, payload)
        if updated is None:
            raise EventNotFoundError(event_id)
        logger.info("Updated event %s (%s)", event_id, updated.title)
        return updated

    def delete_event(self, event_id: int) -> None:
        """Delete an event and with it all of its occupancy.

        Raises:
            EventNotFoundError: If no event has ``event_id``
        """
        if not self.store.delete_event(event_id):
            raise EventNotFoundError(event_id)
        logger.info("Deleted event %s", event_id)

    def list_events(self, criteria: Optional[EventFilter] = None) -> list[Event]:
        """List stored events matching ``criteria``."""
        return self.store.list_events(criteria)

    def occupancy(
        self,
        window_start: DateLike,
        window_end: DateLike,
        child_id: Optional[int] = None,
    ) -> dict[date, Optional[Event]]:
        """Resolve the displayed event for every day of the window."""
        start, end = check_window(window_start, window_end)
        events = self.list_events(EventFilter(child_id=child_id, start_date=start, end_date=end))
        return resolve_range(events, start, end, self.settings)
