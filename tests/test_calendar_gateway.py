"""Tests for taskcal.calendar.gateway."""

from datetime import datetime
from unittest.mock import Mock, patch

import pytest

from taskcal.calendar import CalendarGateway
from taskcal.core.exceptions import FetchError
from tests.fakes import FakeCalendar, FakeEvent, FakeEventStore, authorized_gateway


@pytest.fixture
def work():
    return FakeCalendar("cal-1", "Work")


@pytest.fixture
def home():
    return FakeCalendar("cal-2", "Home")


@pytest.fixture
def event_store(work, home):
    return FakeEventStore(
        events=[
            FakeEvent("evt-1", "Standup", start=datetime(2025, 10, 20, 9, 0),
                      end=datetime(2025, 10, 20, 9, 15), calendar=work),
            FakeEvent("evt-2", "Holiday", start=datetime(2025, 10, 21),
                      end=datetime(2025, 10, 22), all_day=True, calendar=home),
            FakeEvent(None, None, start=datetime(2025, 10, 22, 18, 0), calendar=home),
            FakeEvent("evt-old", "Last month", start=datetime(2025, 9, 1, 10, 0), calendar=work),
        ],
        calendars=[work, home],
    )


@pytest.fixture
def gateway(event_store):
    return authorized_gateway(CalendarGateway(), event_store)


START = datetime(2025, 10, 13)
END = datetime(2025, 11, 3)


class TestGetEvents:

    def test_converts_events_in_range(self, gateway):
        records = gateway.get_events(START, END)

        assert [r.identifier for r in records] == ["evt-1", "evt-2", None]
        standup, holiday, untitled = records
        assert standup.title == "Standup"
        assert standup.start == datetime(2025, 10, 20, 9, 0)
        assert standup.end == datetime(2025, 10, 20, 9, 15)
        assert standup.calendar_name == "Work"
        assert standup.is_all_day is False
        assert holiday.is_all_day is True
        assert untitled.title is None
        assert untitled.end is None

    def test_all_calendars_when_none_configured(self, gateway, event_store):
        gateway.get_events(START, END)
        _, start, end, calendars = event_store.last_event_predicate
        assert (start, end) == (START, END)
        assert calendars is None

    def test_filters_by_calendar(self, gateway, event_store, home):
        gateway.get_events(START, END, ["cal-2"])
        assert event_store.last_event_predicate[3] == [home]

    def test_unknown_calendar_gives_nothing(self, gateway, event_store):
        assert gateway.get_events(START, END, ["missing"]) == []
        assert event_store.last_event_predicate is None

    def test_store_failure_raises(self):
        store = Mock()
        store.calendarsForEntityType_.return_value = []
        store.eventsMatchingPredicate_.side_effect = RuntimeError("calendar daemon")
        gateway = CalendarGateway()
        gateway._NSDate = Mock()

        with patch.object(gateway, "_get_store", return_value=store):
            with pytest.raises(FetchError, match="calendar daemon"):
                gateway.get_events(START, END)
