"""Calendar selection setup.

Discovers the user's calendars, lets them choose which ones ical shows,
and saves the choice with ConfigStore. Writable calendars are preselected
since they usually hold the user's own events.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ical_cli.exceptions import AccessDenied, NoCalendarsFound
from ical_cli.prompts import Choice, ConsolePrompter, Prompter
from ical_cli.providers.base import Calendar, CalendarProvider
from ical_cli.query import ensure_access
from ical_cli.store import CalendarConfig, ConfigStore

logger = logging.getLogger(__name__)

USAGE_HINTS = (
    "  ical        - Show today's events",
    "  ical tom    - Show tomorrow's events",
    "  ical week   - Show this week's events",
)


def sort_calendars(calendars: Sequence[Calendar]) -> list[Calendar]:
    """Order calendars by source, then title."""
    return sorted(calendars, key=lambda cal: (cal.source, cal.title))


def parse_selection(answer: str, calendars: Sequence[Calendar]) -> list[str]:
    """Turn a line like "1, 3" into calendar ids.

    An empty answer selects every writable calendar. Entries that are not
    numbers in 1..len(calendars) are ignored.
    """
    answer = answer.strip()
    if not answer:
        return [cal.id for cal in calendars if cal.allows_content_modifications]

    ids = []
    for part in answer.split(","):
        try:
            index = int(part)
        except ValueError:
            continue
        if 1 <= index <= len(calendars):
            ids.append(calendars[index - 1].id)
    return list(dict.fromkeys(ids))


class SetupWizard:
    """Choose and save the calendars ical displays.

    Usage:
        wizard = SetupWizard(provider, ConfigStore())
        selected = wizard.run()
    """

    def __init__(
        self,
        provider: CalendarProvider,
        store: ConfigStore,
        prompter: Prompter | None = None,
        access_timeout: float | None = None,
    ):
        self.provider = provider
        self.store = store
        self.prompter = prompter or ConsolePrompter()
        self.access_timeout = access_timeout

    def run(self, interactive: bool = True) -> list[str] | None:
        """Run setup.

        Args:
            interactive: Use the checklist. False reads a single line of
                comma-separated numbers instead.

        Returns:
            The saved calendar ids, or None if setup was cancelled or failed.
        """
        print("Setting up your calendar preferences...\n")

        try:
            ensure_access(self.provider, timeout=self.access_timeout)
        except AccessDenied:
            print("Calendar access denied. Please check system preferences.")
            return None

        try:
            calendars = self._discover_calendars()
        except NoCalendarsFound:
            print("No calendars found.")
            return None

        if interactive:
            selected = self._select_interactive(calendars)
            if selected is None:
                return None
        else:
            selected = self._select_from_line(calendars)
            if not selected:
                print("No calendars selected.")
                return None

        return self._save(selected)

    def _discover_calendars(self) -> list[Calendar]:
        calendars = self.provider.list_calendars()
        if not calendars:
            raise NoCalendarsFound("Provider returned no calendars")
        return sort_calendars(calendars)

    def _select_interactive(self, calendars: list[Calendar]) -> list[str] | None:
        choices = [
            Choice(label=cal.display_name, value=cal.id, checked=cal.allows_content_modifications)
            for cal in calendars
        ]
        selected = self.prompter.multi_select(
            "Select which calendars to display events from:", choices
        )

        if not selected:
            print("No calendars selected. Please select at least one calendar.")
            return None

        print("\nSelected calendars:")
        self._print_titles(selected, calendars)

        if not self.prompter.confirm("\nSave this configuration?", default=True):
            logger.info("Setup finished without saving")
            return None
        return selected

    def _select_from_line(self, calendars: list[Calendar]) -> list[str]:
        print("Available calendars:")
        for number, cal in enumerate(calendars, start=1):
            marker = "*" if cal.allows_content_modifications else " "
            print(f"{marker} {number}. {cal.display_name}")

        print("\n* = Recommended (calendars you can modify)")
        answer = self.prompter.read_line(
            "\nEnter calendar numbers to include (e.g., 1,3,15) or press Enter for recommended: "
        )
        selected = parse_selection(answer, calendars)

        if selected:
            heading = "Selected calendars:" if answer.strip() else "Using recommended calendars:"
            print(f"\n{heading}")
            self._print_titles(selected, calendars)
        return selected

    def _save(self, selected: list[str]) -> list[str] | None:
        config = CalendarConfig(target_calendars=selected)
        error = self.store.save(config)
        if error is not None:
            print(f"Failed to save configuration: {error}")
            return None

        print("\nConfiguration saved successfully!\n")
        print("Now you can use:")
        for hint in USAGE_HINTS:
            print(hint)
        return list(config.target_calendars)

    def _print_titles(self, ids: list[str], calendars: list[Calendar]) -> None:
        by_id = {cal.id: cal for cal in calendars}
        for calendar_id in ids:
            if calendar_id in by_id:
                print(f"  - {by_id[calendar_id].title}")
