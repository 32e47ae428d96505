"""Authorize and run filtered event queries against a calendar provider."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ical_cli.dates import DateRange
from ical_cli.exceptions import AccessDenied
from ical_cli.providers.base import CalendarProvider, Event, EventPredicate

logger = logging.getLogger(__name__)


def ensure_access(provider: CalendarProvider, timeout: float | None = None) -> None:
    """Make sure calendar events can be read, asking the user if needed.

    The status is queried on every call; access can be revoked at any time
    outside ical.

    Args:
        provider: Calendar provider.
        timeout: Seconds to wait for the user's answer. None waits forever.

    Raises:
        AccessDenied: If the user (or the system) refuses access.
    """
    status = provider.authorization_status()
    if status.is_granted:
        return

    logger.info(f"Calendar access is {status.value}, requesting full access")
    if not provider.request_full_access(timeout=timeout):
        raise AccessDenied()


class EventQueryExecutor:
    """Fetch events in a date range from selected calendars.

    Usage:
        executor = EventQueryExecutor(provider)
        events = executor.fetch(resolve("today"), config.target_calendars)
    """

    def __init__(self, provider: CalendarProvider, access_timeout: float | None = None):
        self.provider = provider
        self.access_timeout = access_timeout

    def build_predicate(
        self, interval: DateRange, calendar_ids: Iterable[str] | None = None
    ) -> EventPredicate:
        """Filter on the interval and calendars. No calendars means all of them."""
        ids = tuple(calendar_ids) if calendar_ids else ()
        return EventPredicate(start=interval.start, end=interval.end, calendar_ids=ids or None)

    def fetch(
        self, interval: DateRange, calendar_ids: Iterable[str] | None = None
    ) -> list[Event]:
        """Fetch matching events, unsorted.

        Raises:
            AccessDenied: If calendar access is refused.
        """
        ensure_access(self.provider, timeout=self.access_timeout)

        predicate = self.build_predicate(interval, calendar_ids)
        events = list(self.provider.query_events(predicate))
        logger.debug(
            f"Fetched {len(events)} event(s) for {interval.label} "
            f"from {len(predicate.calendar_ids or ())} selected calendar(s)"
        )
        return events
