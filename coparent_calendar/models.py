"""Data models for co-parenting calendar events."""

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .datetime_utils import is_valid_time_of_day, is_valid_time_zone
from .settings import DEFAULT_END_TIME, DEFAULT_START_TIME, DEFAULT_TIME_ZONE


class Parent(str, Enum):
    """The two custody parties."""

    A = "A"
    B = "B"


class EventType(str, Enum):
    """Event classification; everything but custody is an exception day."""

    CUSTODY = "custody"
    HOLIDAY = "holiday"
    ACTIVITY = "activity"
    TRAVEL = "travel"


class Recurrence(str, Enum):
    """Supported recurrence frequencies."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"


class EventCreate(BaseModel):
    """Payload for creating an event.

    Field names are snake_case; camelCase aliases (``startDate``,
    ``recurrenceDays``...) are accepted on input.
    """

    title: str = Field(..., min_length=1, description="Event title")
    start_date: date = Field(..., description="First calendar day (inclusive)")
    end_date: Optional[date] = Field(default=None, description="Last calendar day (inclusive)")
    start_time: str = Field(default=DEFAULT_START_TIME, description="Local start time HH:MM")
    end_time: str = Field(default=DEFAULT_END_TIME, description="Local end time HH:MM")
    time_zone: str = Field(default=DEFAULT_TIME_ZONE, description="IANA time zone name")

    parent: Parent = Field(default=Parent.A, description="Custody party")
    type: EventType = Field(default=EventType.CUSTODY, description="Event classification")

    # Recurrence
    recurrence: Recurrence = Field(default=Recurrence.NONE, description="Recurrence frequency")
    recurrence_interval: int = Field(default=1, ge=1, description="Frequency multiplier")
    recurrence_end: Optional[date] = Field(
        default=None, description="Last date an occurrence may start on"
    )
    recurrence_days: list[int] = Field(
        default_factory=list, description="Weekday indices, 0=Sunday..6=Saturday"
    )

    # Descriptive
    description: Optional[str] = None
    location: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    child_id: Optional[int] = Field(default=None, description="Dependent; None applies to all")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        loc_by_alias=False,
    )

    @field_validator("end_date", "recurrence_end", mode="before")
    @classmethod
    def _blank_date_is_absent(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("recurrence", mode="before")
    @classmethod
    def _blank_recurrence_is_none(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return Recurrence.NONE
        return value

    @field_validator("start_time", "end_time")
    @classmethod
    def _check_time_of_day(cls, value: str) -> str:
        if not is_valid_time_of_day(value):
            raise ValueError(f"time must be HH:MM, got {value!r}")
        return value

    @field_validator("time_zone")
    @classmethod
    def _check_time_zone(cls, value: str) -> str:
        if not is_valid_time_zone(value):
            raise ValueError(f"unknown time zone {value!r}")
        return value

    @field_validator("recurrence_days")
    @classmethod
    def _check_recurrence_days(cls, value: list[int]) -> list[int]:
        bad = [day for day in value if not 0 <= day <= 6]
        if bad:
            raise ValueError(f"recurrence_days entries must be 0-6, got {bad}")
        return sorted(set(value))

    @model_validator(mode="after")
    def _check_extent(self) -> "EventCreate":
        if self.end_date is None:
            self.end_date = self.start_date
        elif self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")

        if self.recurrence_end is not None and self.recurrence_end < self.start_date:
            raise ValueError("recurrence_end must not be before start_date")

        # biweekly is stored as weekly every 2 weeks; the supplied interval is ignored
        if self.recurrence == Recurrence.BIWEEKLY:
            self.recurrence = Recurrence.WEEKLY
            self.recurrence_interval = 2
        return self

    @property
    def is_recurring(self) -> bool:
        """True unless the recurrence is ``none``."""
        return self.recurrence != Recurrence.NONE

    @property
    def span_days(self) -> int:
        """Number of days after the start day that each occurrence covers."""
        end_date = self.end_date or self.start_date
        return (end_date - self.start_date).days


class Event(EventCreate):
    """A persisted event."""

    id: Optional[int] = Field(default=None, description="Store-assigned id")
    created_at: Optional[datetime] = Field(default=None, description="Creation time")


class EventUpdate(BaseModel):
    """Partial update; only fields that are set are applied."""

    title: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    time_zone: Optional[str] = None
    parent: Optional[Parent] = None
    type: Optional[EventType] = None
    recurrence: Optional[Recurrence] = None
    recurrence_interval: Optional[int] = None
    recurrence_end: Optional[date] = None
    recurrence_days: Optional[list[int]] = None
    description: Optional[str] = None
    location: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    child_id: Optional[int] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, loc_by_alias=False)

    @field_validator("end_date", "recurrence_end", mode="before")
    @classmethod
    def _blank_date_is_absent(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ICalEvent(BaseModel):
    """A VEVENT read from an ICS file, before it becomes an event payload."""

    title: str
    start: str = Field(..., description="YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS")
    end: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    rrule: Optional[str] = Field(default=None, description="Raw RRULE value")
    recurrence: Recurrence = Recurrence.NONE


class EventFilter(BaseModel):
    """Criteria for listing events from the store."""

    child_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class FileValidationResult(BaseModel):
    """Outcome of the pre-import file check."""

    valid: bool
    error: Optional[str] = None


class ImportResult(BaseModel):
    """Outcome of importing an ICS file into the store."""

    success_count: int = 0
    error_count: int = 0
    created: list[Event] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    validation_error: Optional[str] = None

    @property
    def message(self) -> str:
        """User-facing summary of the import."""
        if self.validation_error:
            return self.validation_error
        noun = "event" if self.success_count == 1 else "events"
        text = f"Successfully imported {self.success_count} {noun}"
        if self.error_count:
            text += f" ({self.error_count} failed)"
        return text
