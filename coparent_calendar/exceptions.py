"""Exceptions raised by the co-parenting calendar core."""

from typing import Any, Optional


class CoparentCalendarError(Exception):
    """Base exception for calendar core errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class EventValidationError(CoparentCalendarError):
    """Exception raised when an event payload fails validation."""

    def __init__(self, message: str, errors: Optional[list[dict[str, Any]]] = None) -> None:
        """Initialize EventValidationError.

        Args:
            message: Human-readable summary
            errors: Field-level error details (pydantic ``errors()`` format)
        """
        super().__init__(message)
        self.errors = errors or []


class EventNotFoundError(CoparentCalendarError):
    """Exception raised when an event id does not exist in the store."""

    def __init__(self, event_id: int) -> None:
        super().__init__(f"Event {event_id} not found")
        self.event_id = event_id


class ExpansionInputError(CoparentCalendarError):
    """Exception raised when expansion is called with an unusable window."""


class ICSError(CoparentCalendarError):
    """Base exception for ICS import/export errors."""


class ICSValidationError(ICSError):
    """Exception raised when an uploaded ICS file is rejected."""


class ICSParseError(ICSError):
    """Exception raised when ICS content cannot be read at all."""
