"""Tests for the ical command line."""

import io
from datetime import datetime

import pytest
from conftest import FakeProvider

from ical_cli.cli import main
from ical_cli.providers.base import AuthorizationStatus, Calendar, Event
from ical_cli.store import CalendarConfig

CAL_A = Calendar("A", "Work", "iCloud", allows_content_modifications=True)
CAL_B = Calendar("B", "Holidays", "Calendars")

STANDUP = Event(
    title="Standup",
    start_date=datetime(2026, 10, 22, 9, 0),
    end_date=datetime(2026, 10, 22, 9, 15),
    calendar_id="A",
)
HOLIDAY = Event(
    title="Holiday",
    start_date=datetime(2026, 10, 22, 0, 0),
    end_date=datetime(2026, 10, 23, 0, 0),
    is_all_day=True,
    calendar_id="B",
)


@pytest.fixture
def stdin(monkeypatch):
    """Replace stdin (not a TTY) with scripted lines."""

    def _set(text=""):
        monkeypatch.setattr("sys.stdin", io.StringIO(text))

    _set()
    return _set


def run(argv, store, provider):
    return main(argv, store=store, provider_factory=lambda: provider)


def output_lines(capsys):
    return [line for line in capsys.readouterr().out.splitlines() if line]


class TestEvents:
    """Test date options."""

    def test_today_sorted_output(self, store, capsys):
        """Should print events sorted by start, all-day first at midnight."""
        store.save(CalendarConfig(target_calendars=["A", "B"]))
        provider = FakeProvider(events=[STANDUP, HOLIDAY])

        assert run([], store, provider) == 0
        assert output_lines(capsys) == [
            "- Holiday (All Day)",
            "- Standup (09:00 AM - 09:15 AM)",
        ]
        assert provider.predicates[0].calendar_ids == ("A", "B")

    def test_tomorrow_empty(self, store, capsys):
        """Should print the informational line when nothing is scheduled."""
        store.save(CalendarConfig(target_calendars=["A"]))

        run(["tom"], store, FakeProvider())
        assert output_lines(capsys) == ["No events scheduled for tomorrow."]

    def test_week_has_date_tags(self, store, capsys):
        """Should tag lines with dates in the week view."""
        store.save(CalendarConfig(target_calendars=["A"]))

        run(["week"], store, FakeProvider(events=[STANDUP]))
        assert output_lines(capsys) == ["- [Oct 22] Standup (09:00 AM - 09:15 AM)"]

    def test_unknown_option_shows_today(self, store, capsys):
        """Should treat unknown options as today."""
        store.save(CalendarConfig(target_calendars=["A"]))

        run(["someday"], store, FakeProvider())
        assert output_lines(capsys) == ["No events scheduled for today."]

    def test_access_denied(self, store, capsys):
        """Should print a message and still exit 0."""
        store.save(CalendarConfig(target_calendars=["A"]))
        provider = FakeProvider(status=AuthorizationStatus.DENIED, grant=False)

        assert run(["today"], store, provider) == 0
        assert output_lines(capsys) == ["Calendar access denied. Please check system preferences."]

    def test_provider_failure_reported(self, store, capsys):
        """Should report unexpected provider errors generically."""
        store.save(CalendarConfig(target_calendars=["A"]))
        provider = FakeProvider()

        def broken(predicate):
            raise RuntimeError("boom")

        provider.query_events = broken

        assert run([], store, provider) == 0
        assert output_lines(capsys) == ["Error occurred: boom"]

    def test_missing_config_runs_setup_first(self, store, stdin, capsys):
        """Should run setup, then show events from the new selection."""
        stdin("1\n")
        provider = FakeProvider(calendars=[CAL_A, CAL_B], events=[STANDUP])

        assert run(["today"], store, provider) == 0
        out = capsys.readouterr().out
        assert "No calendar configuration found. Running setup..." in out
        assert out.rstrip().endswith("- Standup (09:00 AM - 09:15 AM)")
        # Sorted by source: Calendars/Holidays is entry 1
        assert store.load().target_calendars == ["B"]
        assert provider.predicates[0].calendar_ids == ("B",)

    def test_empty_selection_counts_as_unconfigured(self, store, stdin, capsys):
        """Should run setup when the saved selection is empty."""
        store.save(CalendarConfig(target_calendars=[]))
        stdin("\n")
        provider = FakeProvider(calendars=[CAL_A, CAL_B])

        run([], store, provider)
        assert "Running setup" in capsys.readouterr().out
        assert store.load().target_calendars == ["A"]

    def test_cancelled_setup_stops(self, store, stdin, capsys):
        """Should stop without querying when setup does not finish."""
        stdin("42\n")
        provider = FakeProvider(calendars=[CAL_A, CAL_B])

        run([], store, provider)
        assert output_lines(capsys)[-1] == "Setup cancelled or failed."
        assert provider.predicates == []
        assert store.exists() is False


class TestCommands:
    """Test setup, config, reset and help."""

    def test_setup_with_nothing_selected(self, store, stdin, capsys):
        """Should not write a file, so config reports nothing."""
        stdin("0\n")
        provider = FakeProvider(calendars=[CAL_A, CAL_B])

        run(["setup"], store, provider)
        assert store.exists() is False

        capsys.readouterr()
        run(["config"], store, provider)
        assert output_lines(capsys) == [
            'No configuration found. Run "ical setup" to get started.'
        ]

    def test_setup_saves(self, store, stdin):
        """Should save the line-based selection."""
        stdin("1,2\n")
        run(["setup"], store, FakeProvider(calendars=[CAL_A, CAL_B]))
        assert store.load().target_calendars == ["B", "A"]

    def test_config_lists_calendar_names(self, store, capsys):
        """Should show titles, and a stub for calendars that disappeared."""
        store.save(CalendarConfig(target_calendars=["A", "deadbeef-1234"]))

        run(["config"], store, FakeProvider(calendars=[CAL_A, CAL_B]))
        lines = output_lines(capsys)
        assert lines[0] == "Current configuration:"
        assert lines[1].startswith("Last updated: ")
        assert lines[2] == "Target calendars: 2 selected"
        assert lines[-2:] == ["  - Work", "  - Unknown calendar (deadbeef...)"]

    def test_config_without_access_skips_names(self, store, capsys):
        """Should never prompt for access just to show names."""
        store.save(CalendarConfig(target_calendars=["A"]))
        provider = FakeProvider(status=AuthorizationStatus.NOT_DETERMINED, calendars=[CAL_A])

        run(["config"], store, provider)
        assert provider.access_requests == 0
        assert "Selected calendars:" not in capsys.readouterr().out

    def test_config_ignores_provider_errors(self, store, capsys):
        """Should still show the summary when the provider fails."""
        store.save(CalendarConfig(target_calendars=["A"]))

        def factory():
            raise RuntimeError("no calendar service")

        assert main(["config"], store=store, provider_factory=factory) == 0
        assert "Target calendars: 1 selected" in capsys.readouterr().out

    def test_reset(self, store, capsys):
        """Should truncate the file and confirm."""
        store.save(CalendarConfig(target_calendars=["A"]))

        run(["reset"], store, FakeProvider())
        assert output_lines(capsys) == ['Configuration reset. Run "ical setup" to reconfigure.']
        assert store.exists() is True
        assert store.load() is None

        run(["config"], store, FakeProvider())
        assert "No configuration found." in capsys.readouterr().out

    @pytest.mark.parametrize("argv", [["help"], ["--help"], ["-h"]])
    def test_help(self, argv, store, capsys):
        """Should print usage."""
        provider = FakeProvider()
        assert run(argv, store, provider) == 0
        out = capsys.readouterr().out
        assert "ical [COMMAND | DATE_OPTION]" in out
        assert provider.status_calls == 0

    def test_extra_arguments_ignored(self, store, capsys):
        """Should only look at the first argument."""
        store.save(CalendarConfig(target_calendars=["A"]))
        assert run(["tom", "extra", "--flag"], store, FakeProvider()) == 0
        assert output_lines(capsys) == ["No events scheduled for tomorrow."]
