"""Shared fakes for ical tests."""

import pytest

from ical_cli.prompts import Prompter
from ical_cli.providers.base import AuthorizationStatus, CalendarProvider
from ical_cli.store import ConfigStore


class FakeProvider(CalendarProvider):
    """In-memory calendar provider that records what it was asked."""

    provider_name = "fake"

    def __init__(
        self, status=AuthorizationStatus.FULL_ACCESS, grant=True, calendars=None, events=None
    ):
        self.status = status
        self.grant = grant
        self.calendars = list(calendars or [])
        self.events = list(events or [])
        self.status_calls = 0
        self.access_requests = 0
        self.predicates = []

    def authorization_status(self):
        self.status_calls += 1
        return self.status

    def request_full_access(self, timeout=None):
        self.access_requests += 1
        if self.grant:
            self.status = AuthorizationStatus.FULL_ACCESS
        return self.grant

    def list_calendars(self):
        return list(self.calendars)

    def query_events(self, predicate):
        self.predicates.append(predicate)
        return list(self.events)


class ScriptedPrompter(Prompter):
    """Prompter that answers from a script and records the questions."""

    def __init__(self, selections=None, lines=None):
        self.selections = list(selections or [])
        self.lines = list(lines or [])
        self.choices_seen = []
        self.messages = []

    def multi_select(self, message, choices):
        self.messages.append(message)
        self.choices_seen.append(list(choices))
        return self.selections.pop(0)

    def read_line(self, message):
        self.messages.append(message)
        return self.lines.pop(0)


@pytest.fixture
def store(tmp_path):
    """Config store backed by a temporary file."""
    return ConfigStore(tmp_path / "ical-config.json")
