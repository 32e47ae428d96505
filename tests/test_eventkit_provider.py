"""Tests for the EventKit provider, with PyObjC mocked out."""

import sys
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from ical_cli.exceptions import ProviderUnavailable
from ical_cli.providers.base import AuthorizationStatus, EventPredicate
from ical_cli.providers.eventkit import EventKitProvider


def native_calendar(identifier, title, source, writable):
    cal = MagicMock()
    cal.calendarIdentifier.return_value = identifier
    cal.title.return_value = title
    cal.source.return_value.title.return_value = source
    cal.allowsContentModifications.return_value = writable
    return cal


def nsdate(value):
    date = MagicMock()
    date.timeIntervalSince1970.return_value = value.timestamp()
    return date


@pytest.fixture
def eventkit(monkeypatch):
    """Install mocked EventKit and Foundation modules."""
    module = MagicMock()
    module.EKEntityTypeEvent = 0
    module.EKEventStore.authorizationStatusForEntityType_.return_value = 3
    foundation = MagicMock()
    monkeypatch.setitem(sys.modules, "EventKit", module)
    monkeypatch.setitem(sys.modules, "Foundation", foundation)
    return module


@pytest.fixture
def store(eventkit):
    return eventkit.EKEventStore.alloc.return_value.init.return_value


class TestEventKitProvider:
    """Test the EventKit mapping."""

    def test_unavailable_without_pyobjc(self, monkeypatch):
        """Should raise ProviderUnavailable when EventKit cannot be imported."""
        monkeypatch.setitem(sys.modules, "EventKit", None)
        with pytest.raises(ProviderUnavailable):
            EventKitProvider()

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (0, AuthorizationStatus.NOT_DETERMINED),
            (1, AuthorizationStatus.RESTRICTED),
            (2, AuthorizationStatus.DENIED),
            (3, AuthorizationStatus.FULL_ACCESS),
            (4, AuthorizationStatus.WRITE_ONLY),
        ],
    )
    def test_status_mapping(self, eventkit, raw, expected):
        """Should map EKAuthorizationStatus values."""
        eventkit.EKEventStore.authorizationStatusForEntityType_.return_value = raw
        assert EventKitProvider().authorization_status() is expected

    def test_request_access_waits_for_callback(self, eventkit, store):
        """Should return the answer delivered to the completion handler."""
        store.requestFullAccessToEventsWithCompletion_.side_effect = lambda done: done(True, None)
        assert EventKitProvider().request_full_access(timeout=1) is True

    def test_request_access_denied(self, eventkit, store):
        """Should report a refusal."""
        eventkit.EKEventStore.authorizationStatusForEntityType_.return_value = 2
        store.requestFullAccessToEventsWithCompletion_.side_effect = lambda done: done(False, None)
        assert EventKitProvider().request_full_access(timeout=1) is False

    def test_list_calendars(self, store):
        """Should convert native calendars."""
        store.calendarsForEntityType_.return_value = [
            native_calendar("id-1", "Work", "iCloud", True),
            native_calendar("id-2", "Holidays", "Other", False),
        ]
        calendars = EventKitProvider().list_calendars()

        assert [(c.id, c.title, c.source) for c in calendars] == [
            ("id-1", "Work", "iCloud"),
            ("id-2", "Holidays", "Other"),
        ]
        assert [c.allows_content_modifications for c in calendars] == [True, False]

    def test_query_events_selected_calendars(self, store):
        """Should restrict the native predicate to the selected calendars."""
        work = native_calendar("id-1", "Work", "iCloud", True)
        store.calendarsForEntityType_.return_value = [
            work,
            native_calendar("id-2", "Holidays", "Other", False),
        ]
        event = MagicMock()
        event.title.return_value = "Standup"
        event.startDate.return_value = nsdate(datetime(2026, 10, 22, 9, 0))
        event.endDate.return_value = nsdate(datetime(2026, 10, 22, 9, 15))
        event.isAllDay.return_value = False
        event.location.return_value = None
        event.notes.return_value = "Daily"
        event.calendar.return_value = work
        store.eventsMatchingPredicate_.return_value = [event]

        predicate = EventPredicate(
            datetime(2026, 10, 22), datetime(2026, 10, 22, 23, 59, 59), ("id-1",)
        )
        (result,) = EventKitProvider().query_events(predicate)

        args = store.predicateForEventsWithStartDate_endDate_calendars_.call_args.args
        assert args[2] == [work]
        assert result.title == "Standup"
        assert result.start_date == datetime(2026, 10, 22, 9, 0)
        assert result.end_date == datetime(2026, 10, 22, 9, 15)
        assert result.location is None
        assert result.notes == "Daily"
        assert result.calendar_id == "id-1"

    def test_query_events_all_calendars(self, store):
        """Should pass no calendar list when unfiltered."""
        store.eventsMatchingPredicate_.return_value = []
        predicate = EventPredicate(datetime(2026, 10, 22), datetime(2026, 10, 23))
        EventKitProvider().query_events(predicate)

        args = store.predicateForEventsWithStartDate_endDate_calendars_.call_args.args
        assert args[2] is None

    def test_query_events_vanished_calendars(self, store):
        """Should return nothing when no selected calendar exists anymore."""
        store.calendarsForEntityType_.return_value = []
        predicate = EventPredicate(datetime(2026, 10, 22), datetime(2026, 10, 23), ("gone",))

        assert EventKitProvider().query_events(predicate) == []
        store.eventsMatchingPredicate_.assert_not_called()
