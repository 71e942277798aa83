"""Shared fixtures for coparent_calendar tests."""

from collections.abc import Callable, Generator
from datetime import date
from pathlib import Path
from typing import Any

import pytest

from coparent_calendar.models import Event, EventType, Parent, Recurrence
from coparent_calendar.settings import CoparentSettings, reset_settings


def pytest_configure(config: Any) -> None:
    """Register test markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "fast: Tests that take well under a second")
    config.addinivalue_line("markers", "critical_path: Core functionality tests")


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, Any, None]:
    """Keep COPARENT_* variables and the global settings from leaking between tests."""
    for name in (
        "COPARENT_DEBUG",
        "COPARENT_LOG_LEVEL",
        "COPARENT_CONFIG_FILE",
        "COPARENT_MAX_OCCURRENCES",
        "COPARENT_IMPORT_TIME_ZONE",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings(tmp_path: Path) -> CoparentSettings:
    """Settings isolated from any config.yaml in the working directory."""
    return CoparentSettings(config_file=tmp_path / "absent.yaml")


@pytest.fixture
def make_event() -> Callable[..., Event]:
    """Factory for events with sensible defaults.

    Accepts any Event field as a keyword; dates may be ISO strings.
    """
    counter = {"next_id": 1}

    def _make(**overrides: Any) -> Event:
        data: dict[str, Any] = {
            "id": counter["next_id"],
            "title": "Custody",
            "start_date": date(2025, 1, 1),
            "start_time": "09:00",
            "end_time": "10:00",
            "time_zone": "Europe/Oslo",
            "parent": Parent.A,
            "type": EventType.CUSTODY,
            "recurrence": Recurrence.NONE,
        }
        data.update(overrides)
        counter["next_id"] += 1
        return Event.model_validate(data)

    return _make


@pytest.fixture
def sample_ics_simple() -> str:
    """
    Return a simple ICS calendar string with a single event.

    Returns:
        ICS string with one event: "Handover at school" on 2025-03-10 15:00-16:00
    """
    return (
        "BEGIN:VCALENDAR\r\n"
        "VERSION:2.0\r\n"
        "PRODID:-//Coparent Test//EN\r\n"
        "BEGIN:VEVENT\r\n"
        "UID:handover-001@coparent.test\r\n"
        "DTSTART:20250310T150000\r\n"
        "DTEND:20250310T160000\r\n"
        "SUMMARY:Handover at school\r\n"
        "LOCATION:Main entrance\r\n"
        "DESCRIPTION:Bring the swim bag\r\n"
        "END:VEVENT\r\n"
        "END:VCALENDAR\r\n"
    )


@pytest.fixture
def sample_ics_three_events() -> str:
    """Return an ICS string with three valid events on consecutive Mondays."""
    blocks = []
    for index, day in enumerate(("20250602", "20250609", "20250616"), start=1):
        blocks.append(
            "BEGIN:VEVENT\n"
            f"SUMMARY:Week {index}\n"
            f"DTSTART;VALUE=DATE:{day}\n"
            "END:VEVENT\n"
        )
    return "BEGIN:VCALENDAR\nVERSION:2.0\n" + "".join(blocks) + "END:VCALENDAR\n"
