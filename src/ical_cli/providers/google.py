"""Google Calendar provider implementation."""

from __future__ import annotations

import logging
import webbrowser
from collections.abc import Callable
from datetime import date, datetime, time
from typing import Any

from googleapiclient.errors import HttpError

from ical_cli.google import GoogleOAuth
from ical_cli.providers.base import (
    AuthorizationStatus,
    Calendar,
    CalendarProvider,
    Event,
    EventPredicate,
)

logger = logging.getLogger(__name__)

WRITABLE_ROLES = ("owner", "writer")


class GoogleCalendarProvider(CalendarProvider):
    """Read events from Google Calendar with OAuth authentication.

    Usage:
        provider = GoogleCalendarProvider()
        if not provider.authorization_status().is_granted:
            provider.request_full_access()   # browser consent flow
        events = provider.query_events(predicate)

    Note:
        Requires OAuth client credentials in ~/.ical/google/credentials.json.
    """

    provider_name = "google"

    def __init__(
        self,
        auth: GoogleOAuth | None = None,
        scopes: list[str] | None = None,
        input_func: Callable[[str], str] = input,
        open_browser: bool = True,
    ) -> None:
        """Initialize the provider.

        Args:
            auth: Preconfigured OAuth session. Created on first use if None.
            scopes: OAuth scopes for a session created here.
            input_func: Reads the pasted redirect URL during consent.
            open_browser: Open the consent page automatically.
        """
        self._auth = auth
        self._scopes = scopes
        self._input = input_func
        self._open_browser = open_browser
        self._service: Any = None

    def _get_auth(self) -> GoogleOAuth:
        if self._auth is None:
            self._auth = GoogleOAuth(scopes=self._scopes)
        return self._auth

    def _get_service(self) -> Any:
        """Get or create Calendar API service."""
        if self._service is None:
            self._service = self._get_auth().build_service("calendar", "v3")
        return self._service

    def authorization_status(self) -> AuthorizationStatus:
        if self._get_auth().is_authorized():
            return AuthorizationStatus.AUTHORIZED
        return AuthorizationStatus.NOT_DETERMINED

    def request_full_access(self, timeout: float | None = None) -> bool:
        """Run the browser consent flow.

        The timeout is not applied: the flow waits on terminal input.
        """
        auth = self._get_auth()
        url = auth.get_authorization_url()

        print("Google Calendar needs your permission to read events.")
        print(f"Authorization URL:\n{url}\n")
        if self._open_browser:
            webbrowser.open(url)

        try:
            redirect_url = self._input("Paste redirect URL: ").strip()
        except EOFError:
            redirect_url = ""
        if not redirect_url:
            logger.info("No redirect URL provided")
            return False

        try:
            auth.fetch_token(redirect_url)
        except Exception as e:
            logger.warning(f"Google token exchange failed: {e}")
            return False

        self._service = None  # Force service recreation
        return auth.is_authorized()

    # =========================================================================
    # Calendars
    # =========================================================================

    def list_calendars(self) -> list[Calendar]:
        service = self._get_service()
        items: list[dict] = []
        page_token = None
        while True:
            results = service.calendarList().list(pageToken=page_token).execute()
            items.extend(results.get("items", []))
            page_token = results.get("nextPageToken")
            if not page_token:
                break

        # The primary calendar's id is the account address
        account = next((item["id"] for item in items if item.get("primary")), "Google")
        return [self._parse_calendar(item, account) for item in items]

    def _parse_calendar(self, data: dict, account: str) -> Calendar:
        """Parse calendar from API response."""
        return Calendar(
            id=data["id"],
            title=data.get("summaryOverride") or data.get("summary", ""),
            source=account,
            allows_content_modifications=data.get("accessRole") in WRITABLE_ROLES,
        )

    # =========================================================================
    # Events
    # =========================================================================

    def query_events(self, predicate: EventPredicate) -> list[Event]:
        service = self._get_service()

        if predicate.calendar_ids:
            calendar_ids = list(predicate.calendar_ids)
        else:
            calendar_ids = [cal.id for cal in self.list_calendars()]

        events: list[Event] = []
        for calendar_id in calendar_ids:
            try:
                items = self._list_event_items(service, calendar_id, predicate)
            except HttpError as e:
                logger.warning(f"Skipping calendar {calendar_id}: {e}")
                continue
            for item in items:
                if item.get("status") == "cancelled":
                    continue
                event = self._parse_event(item, calendar_id)
                if event is not None:
                    events.append(event)
        return events

    def _list_event_items(
        self, service: Any, calendar_id: str, predicate: EventPredicate
    ) -> list[dict]:
        kwargs: dict[str, Any] = {
            "calendarId": calendar_id,
            "timeMin": self._format_datetime(predicate.start),
            "timeMax": self._format_datetime(predicate.end),
            "singleEvents": True,
            "orderBy": "startTime",
        }

        items: list[dict] = []
        while True:
            results = service.events().list(**kwargs).execute()
            items.extend(results.get("items", []))
            page_token = results.get("nextPageToken")
            if not page_token:
                return items
            kwargs["pageToken"] = page_token

    def _format_datetime(self, dt: datetime) -> str:
        """Format datetime for API (RFC 3339 with offset)."""
        return dt.astimezone().isoformat()

    def _parse_time(self, data: dict) -> datetime | None:
        if "dateTime" in data:
            return datetime.fromisoformat(data["dateTime"].replace("Z", "+00:00"))
        if "date" in data:
            return datetime.combine(date.fromisoformat(data["date"]), time.min)
        return None

    def _parse_event(self, data: dict, calendar_id: str) -> Event | None:
        """Parse event from API response, or None if it has no start."""
        start_data = data.get("start", {})
        start = self._parse_time(start_data)
        if start is None:
            logger.warning(f"Skipping event {data.get('id', '?')} without a start time")
            return None
        end = self._parse_time(data.get("end", {})) or start

        return Event(
            title=data.get("summary", ""),
            start_date=start,
            end_date=end,
            is_all_day="date" in start_data,
            location=data.get("location"),
            notes=data.get("description"),
            calendar_id=calendar_id,
        )
