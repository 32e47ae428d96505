"""
Abstract base class and data types for calendar providers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class AuthorizationStatus(Enum):
    """Access level the user has granted to calendar events."""

    NOT_DETERMINED = "notDetermined"
    RESTRICTED = "restricted"
    DENIED = "denied"
    AUTHORIZED = "authorized"
    FULL_ACCESS = "fullAccess"
    WRITE_ONLY = "writeOnly"

    @property
    def is_granted(self) -> bool:
        """True if events can be read without asking again."""
        return self in (AuthorizationStatus.AUTHORIZED, AuthorizationStatus.FULL_ACCESS)


@dataclass
class Calendar:
    """A calendar the provider knows about."""

    id: str
    title: str
    source: str
    allows_content_modifications: bool = False

    @property
    def display_name(self) -> str:
        return f"{self.title} ({self.source})"


@dataclass
class Event:
    """A single (already expanded) calendar event."""

    title: str
    start_date: datetime
    end_date: datetime
    is_all_day: bool = False
    location: str | None = None
    notes: str | None = None
    calendar_id: str | None = None


@dataclass(frozen=True)
class EventPredicate:
    """Provider-side filter: a time range and an optional set of calendars.

    calendar_ids of None means every calendar.
    """

    start: datetime
    end: datetime
    calendar_ids: tuple[str, ...] | None = None


class CalendarProvider(ABC):
    """Abstract base class for calendar providers."""

    provider_name: str

    @abstractmethod
    def authorization_status(self) -> AuthorizationStatus:
        """Current access level for calendar events."""

    @abstractmethod
    def request_full_access(self, timeout: float | None = None) -> bool:
        """
        Ask the user for read access to calendar events.

        Blocks until the user answers.

        Args:
            timeout: Seconds to wait for an answer. None waits forever.

        Returns:
            True if access was granted.
        """

    @abstractmethod
    def list_calendars(self) -> list[Calendar]:
        """All event calendars visible to the user."""

    @abstractmethod
    def query_events(self, predicate: EventPredicate) -> list[Event]:
        """
        Fetch events matching a predicate.

        Recurring events are returned as individual occurrences. Order is
        not guaranteed.

        Args:
            predicate: Time range and calendar filter.

        Returns:
            Matching events.
        """
