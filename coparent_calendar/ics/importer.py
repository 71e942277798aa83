"""ICS file validation and best-effort batch import."""

import logging
from collections.abc import Callable
from typing import Optional, Union

from pydantic import ValidationError

from ..exceptions import EventValidationError, ICSParseError
from ..models import Event, EventCreate, FileValidationResult, ImportResult, Parent
from ..settings import CoparentSettings, get_settings
from .converter import ical_event_to_payload
from .parser import parse_ics

logger = logging.getLogger(__name__)

CreateEvent = Callable[[EventCreate], Event]


def validate_ics_file(
    filename: str, size: int, settings: Optional[CoparentSettings] = None
) -> FileValidationResult:
    """Check an upload's name and size before reading it.

    Args:
        filename: Original file name
        size: File size in bytes
        settings: Settings providing ``max_ics_file_bytes``
    """
    settings = settings if settings is not None else get_settings()

    if not filename.lower().endswith(".ics"):
        return FileValidationResult(valid=False, error="File must be a .ics file")

    if size > settings.max_ics_file_bytes:
        limit_mb = settings.max_ics_file_bytes // (1024 * 1024)
        return FileValidationResult(valid=False, error=f"File size must be less than {limit_mb}MB")

    return FileValidationResult(valid=True)


class ICSImporter:
    """Imports ICS content into a store one event at a time.

    Each creation is independent: a failure is logged and counted, and the
    rest of the batch continues. No transaction wraps the batch.
    """

    def __init__(self, create_event: CreateEvent, settings: Optional[CoparentSettings] = None) -> None:
        """Initialize ICSImporter.

        Args:
            create_event: Persists a payload and returns the stored event
            settings: Import defaults and limits; global settings when None
        """
        self.create_event = create_event
        self.settings = settings if settings is not None else get_settings()

    def import_file(
        self,
        filename: str,
        content: Union[str, bytes],
        default_parent: Union[Parent, str] = Parent.A,
    ) -> ImportResult:
        """Validate, parse and persist the events of an uploaded ICS file."""
        raw_size = len(content) if isinstance(content, bytes) else len(content.encode("utf-8"))
        validation = validate_ics_file(filename, raw_size, self.settings)
        if not validation.valid:
            logger.warning("Rejected ICS upload %r: %s", filename, validation.error)
            return ImportResult(validation_error=validation.error)

        return self.import_text(content, default_parent)

    def import_text(
        self, content: Union[str, bytes], default_parent: Union[Parent, str] = Parent.A
    ) -> ImportResult:
        """Parse ICS text and persist each event independently."""
        try:
            ical_events = parse_ics(content)
        except ICSParseError as e:
            logger.warning("Unreadable ICS content: %s", e)
            return ImportResult(validation_error=e.message)

        result = ImportResult()
        for ical_event in ical_events:
            try:
                payload = ical_event_to_payload(ical_event, default_parent, self.settings)
                created = self.create_event(payload)
            except (EventValidationError, ValidationError, ValueError) as e:
                logger.warning("Invalid imported event %r: %s", ical_event.title, e)
                result.error_count += 1
                result.errors.append(f"{ical_event.title}: invalid event data")
                continue
            except Exception:
                logger.exception("Failed to create imported event %r", ical_event.title)
                result.error_count += 1
                result.errors.append(f"{ical_event.title}: could not be saved")
                continue

            result.success_count += 1
            result.created.append(created)

        logger.info(result.message)
        return result
