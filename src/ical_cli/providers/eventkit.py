"""macOS Calendar access through EventKit (PyObjC)."""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime
from typing import Any

from ical_cli.exceptions import ProviderUnavailable
from ical_cli.providers.base import (
    AuthorizationStatus,
    Calendar,
    CalendarProvider,
    Event,
    EventPredicate,
)

logger = logging.getLogger(__name__)

# EKAuthorizationStatus values
_STATUS_MAP = {
    0: AuthorizationStatus.NOT_DETERMINED,
    1: AuthorizationStatus.RESTRICTED,
    2: AuthorizationStatus.DENIED,
    3: AuthorizationStatus.FULL_ACCESS,
    4: AuthorizationStatus.WRITE_ONLY,
}

# Some runtimes never deliver the completion callback without a run loop.
_POLL_ATTEMPTS = 10
_POLL_INTERVAL = 0.3


def _to_nsdate(value: datetime, nsdate_cls: Any) -> Any:
    return nsdate_cls.dateWithTimeIntervalSince1970_(value.timestamp())


def _from_nsdate(value: Any) -> datetime:
    return datetime.fromtimestamp(value.timeIntervalSince1970())


class EventKitProvider(CalendarProvider):
    """Read events from the macOS Calendar database.

    Requires the PyObjC EventKit bindings (pyobjc-framework-EventKit).

    Usage:
        provider = EventKitProvider()
        if not provider.authorization_status().is_granted:
            provider.request_full_access()
        calendars = provider.list_calendars()
    """

    provider_name = "eventkit"

    def __init__(self) -> None:
        try:
            import EventKit
            import Foundation
        except ImportError as e:
            raise ProviderUnavailable(
                "EventKit is not available. It requires macOS and pyobjc-framework-EventKit."
            ) from e

        self._eventkit = EventKit
        self._nsdate = Foundation.NSDate
        self._entity_type = EventKit.EKEntityTypeEvent
        self._store = EventKit.EKEventStore.alloc().init()

    def authorization_status(self) -> AuthorizationStatus:
        raw = self._eventkit.EKEventStore.authorizationStatusForEntityType_(self._entity_type)
        status = _STATUS_MAP.get(int(raw), AuthorizationStatus.DENIED)
        logger.debug(f"EventKit authorization status: {raw} -> {status.value}")
        return status

    def request_full_access(self, timeout: float | None = None) -> bool:
        done = threading.Event()
        result = {"granted": False}

        def _completion(granted: bool, error: Any) -> None:
            result["granted"] = bool(granted)
            if error is not None:
                logger.warning(f"EventKit access request failed: {error}")
            done.set()

        if hasattr(self._store, "requestFullAccessToEventsWithCompletion_"):
            self._store.requestFullAccessToEventsWithCompletion_(_completion)
        else:
            self._store.requestAccessToEntityType_completion_(self._entity_type, _completion)

        if not done.wait(timeout=timeout):
            for _ in range(_POLL_ATTEMPTS):
                if self.authorization_status() is not AuthorizationStatus.NOT_DETERMINED:
                    break
                time.sleep(_POLL_INTERVAL)

        granted = result["granted"] or self.authorization_status().is_granted
        if granted:
            # A store created before access was granted sees no calendars
            self._store = self._eventkit.EKEventStore.alloc().init()
        logger.info(f"EventKit access {'granted' if granted else 'not granted'}")
        return granted

    def list_calendars(self) -> list[Calendar]:
        return [self._parse_calendar(cal) for cal in self._native_calendars()]

    def query_events(self, predicate: EventPredicate) -> list[Event]:
        calendars = None
        if predicate.calendar_ids:
            wanted = set(predicate.calendar_ids)
            calendars = [c for c in self._native_calendars() if c.calendarIdentifier() in wanted]
            if not calendars:
                logger.info("None of the selected calendars exist anymore")
                return []

        ns_predicate = self._store.predicateForEventsWithStartDate_endDate_calendars_(
            _to_nsdate(predicate.start, self._nsdate),
            _to_nsdate(predicate.end, self._nsdate),
            calendars,
        )
        events = self._store.eventsMatchingPredicate_(ns_predicate) or []
        return [self._parse_event(event) for event in events]

    def _native_calendars(self) -> list[Any]:
        return list(self._store.calendarsForEntityType_(self._entity_type) or [])

    def _parse_calendar(self, cal: Any) -> Calendar:
        source = cal.source()
        return Calendar(
            id=str(cal.calendarIdentifier()),
            title=str(cal.title() or ""),
            source=str(source.title()) if source is not None else "",
            allows_content_modifications=bool(cal.allowsContentModifications()),
        )

    def _parse_event(self, event: Any) -> Event:
        calendar = event.calendar()
        location = event.location()
        notes = event.notes()
        return Event(
            title=str(event.title() or ""),
            start_date=_from_nsdate(event.startDate()),
            end_date=_from_nsdate(event.endDate()),
            is_all_day=bool(event.isAllDay()),
            location=str(location) if location else None,
            notes=str(notes) if notes else None,
            calendar_id=str(calendar.calendarIdentifier()) if calendar is not None else None,
        )
