"""Tests for the storage boundary adapters and in-memory store."""

from __future__ import annotations

import json
from datetime import date

import pytest

from coparent_calendar.models import EventCreate, EventFilter, Parent, Recurrence
from coparent_calendar.storage import (
    InMemoryEventStore,
    event_from_row,
    event_to_row,
    may_occupy,
)

pytestmark = pytest.mark.unit


def _payload(**overrides) -> EventCreate:
    data = {"title": "Custody", "start_date": date(2025, 1, 1)}
    data.update(overrides)
    return EventCreate.model_validate(data)


class TestRowAdapters:
    """Tests for event_to_row and event_from_row."""

    def test_to_row_uses_snake_case_and_json_days(self):
        row = event_to_row(
            _payload(recurrence=Recurrence.WEEKLY, recurrence_days=[5, 1, 3], child_id=2)
        )

        assert row["start_date"] == "2025-01-01"
        assert row["end_date"] == "2025-01-01"
        assert row["recurrence"] == "weekly"
        assert json.loads(row["recurrence_days"]) == [1, 3, 5]
        assert row["recurrence_end"] is None
        assert row["child_id"] == 2
        assert "id" not in row

    def test_from_row_reads_hosted_layout(self):
        """Test a row as the hosted store returns it."""
        row = {
            "id": 12,
            "child_id": None,
            "title": "Every other weekend",
            "start_date": "2025-01-10",
            "end_date": "2025-01-12",
            "start_time": "17:00",
            "end_time": "18:00",
            "time_zone": "Europe/Oslo",
            "parent": "B",
            "type": "custody",
            "recurrence": "biweekly",
            "recurrence_interval": None,
            "recurrence_end": "",
            "recurrence_days": "[5,6]",
            "description": None,
            "location": None,
            "created_at": "2025-01-01T10:00:00+00:00",
        }

        event = event_from_row(row)

        assert event.id == 12
        assert event.parent == Parent.B
        assert event.recurrence == Recurrence.WEEKLY
        assert event.recurrence_interval == 2
        assert event.recurrence_end is None
        assert event.recurrence_days == [5, 6]
        assert event.created_at is not None

    @pytest.mark.parametrize("raw,expected", [("", []), (None, []), ("1,3", [1, 3]), ([0, 6], [0, 6])])
    def test_from_row_recurrence_days_forms(self, raw, expected):
        row = event_to_row(_payload())
        row["recurrence_days"] = raw
        assert event_from_row(row).recurrence_days == expected

    def test_blank_recurrence_reads_as_none(self):
        row = event_to_row(_payload())
        row["recurrence"] = ""
        assert event_from_row(row).recurrence == Recurrence.NONE


class TestMayOccupy:
    def test_single_event(self):
        event = _payload(start_date=date(2025, 3, 10), end_date=date(2025, 3, 12))

        assert may_occupy(event, date(2025, 3, 12), date(2025, 3, 31))
        assert not may_occupy(event, date(2025, 3, 13), date(2025, 3, 31))
        assert not may_occupy(event, date(2025, 3, 1), date(2025, 3, 9))
        assert may_occupy(event, None, None)

    def test_open_ended_recurrence(self):
        event = _payload(recurrence=Recurrence.DAILY)
        assert may_occupy(event, date(2030, 1, 1), date(2030, 1, 2))

    def test_finished_recurrence(self):
        event = _payload(
            end_date=date(2025, 1, 2),
            recurrence=Recurrence.WEEKLY,
            recurrence_end=date(2025, 2, 1),
        )

        assert may_occupy(event, date(2025, 2, 2), date(2025, 2, 28))
        assert not may_occupy(event, date(2025, 2, 3), date(2025, 2, 28))


class TestInMemoryEventStore:
    """Tests for InMemoryEventStore."""

    def test_create_assigns_ids_and_created_at(self):
        store = InMemoryEventStore()

        first = store.create_event(_payload(title="First"))
        second = store.create_event(_payload(title="Second"))

        assert (first.id, second.id) == (1, 2)
        assert first.created_at is not None
        assert store.get_event(2) == second

    def test_get_missing_returns_none(self):
        assert InMemoryEventStore().get_event(1) is None

    def test_update_replaces_fields_keeps_created_at(self):
        store = InMemoryEventStore()
        created = store.create_event(_payload(title="Old"))

        updated = store.update_event(created.id, _payload(title="New", parent=Parent.B))

        assert updated is not None
        assert updated.id == created.id
        assert updated.title == "New"
        assert updated.parent == Parent.B
        assert updated.created_at == created.created_at

    def test_update_missing_returns_none(self):
        assert InMemoryEventStore().update_event(5, _payload()) is None

    def test_delete(self):
        store = InMemoryEventStore()
        created = store.create_event(_payload())

        assert store.delete_event(created.id) is True
        assert store.delete_event(created.id) is False
        assert store.list_events() == []

    def test_list_filters_by_child_and_window(self):
        store = InMemoryEventStore()
        shared = store.create_event(_payload(title="Shared", start_date=date(2025, 3, 1)))
        mine = store.create_event(_payload(title="Mine", start_date=date(2025, 3, 2), child_id=1))
        store.create_event(_payload(title="Sibling", start_date=date(2025, 3, 3), child_id=2))
        store.create_event(_payload(title="Later", start_date=date(2025, 5, 1), child_id=1))

        result = store.list_events(
            EventFilter(child_id=1, start_date=date(2025, 3, 1), end_date=date(2025, 3, 31))
        )

        assert [e.id for e in result] == [shared.id, mine.id]

    def test_list_without_criteria_returns_all(self):
        store = InMemoryEventStore()
        store.create_event(_payload(child_id=1))
        store.create_event(_payload(child_id=2))

        assert len(store.list_events()) == 2
