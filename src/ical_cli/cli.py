"""CLI for ical - show calendar events from the terminal.

Usage:
    ical                # Today's events
    ical tom            # Tomorrow's events
    ical week           # This week's events
    ical setup          # Choose calendars
    ical config         # Show current configuration
    ical reset          # Forget the calendar selection
    ical help           # Show help
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from datetime import datetime

from ical_cli import config as settings
from ical_cli.dates import is_week_option, resolve
from ical_cli.exceptions import AccessDenied
from ical_cli.presenter import render
from ical_cli.providers import CalendarProvider, get_provider
from ical_cli.query import EventQueryExecutor
from ical_cli.store import CalendarConfig, ConfigStore
from ical_cli.wizard import SetupWizard

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[], CalendarProvider]

HELP_TEXT = """
ical - Calendar Events CLI

USAGE:
  ical [COMMAND | DATE_OPTION]

DATE OPTIONS:
  (none)     Show today's events (default)
  today      Show today's events
  tom        Show tomorrow's events
  tomorrow   Show tomorrow's events
  w          Show this week's events
  week       Show this week's events

COMMANDS:
  setup      Set up which calendars to display
  config     Show current configuration
  reset      Reset configuration
  help       Show this help message

EXAMPLES:
  ical              # Today's events
  ical tom          # Tomorrow's events
  ical setup        # Choose calendars
  ical config       # View settings
"""

HELP_COMMANDS = ("help",)


def _run_setup(store: ConfigStore, provider_factory: ProviderFactory) -> list[str] | None:
    """Run the setup wizard, with the checklist only when attached to a terminal."""
    wizard = SetupWizard(
        provider_factory(),
        store,
        access_timeout=settings.get_access_timeout(),
    )
    return wizard.run(interactive=sys.stdin.isatty())


def cmd_setup(store: ConfigStore, provider_factory: ProviderFactory) -> int:
    """Choose which calendars to display."""
    _run_setup(store, provider_factory)
    return 0


def _format_last_updated(value: str) -> str:
    try:
        updated = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return updated.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def show_config(config: CalendarConfig | None, provider_factory: ProviderFactory) -> None:
    """Print the saved calendar selection."""
    if config is None:
        print('No configuration found. Run "ical setup" to get started.')
        return

    print("Current configuration:")
    print(f"Last updated: {_format_last_updated(config.last_updated)}")
    print(f"Target calendars: {len(config.target_calendars)} selected")

    # Names are a bonus; never prompt for access just to show them
    try:
        provider = provider_factory()
        if not provider.authorization_status().is_granted:
            return
        calendars = {cal.id: cal for cal in provider.list_calendars()}
    except Exception as e:
        logger.debug(f"Could not list calendars for config display: {e}")
        return

    print("\nSelected calendars:")
    for calendar_id in config.target_calendars:
        cal = calendars.get(calendar_id)
        if cal:
            print(f"  - {cal.title}")
        else:
            print(f"  - Unknown calendar ({calendar_id[:8]}...)")


def cmd_config(store: ConfigStore, provider_factory: ProviderFactory) -> int:
    """Show current configuration."""
    show_config(store.load(), provider_factory)
    return 0


def cmd_reset(store: ConfigStore) -> int:
    """Forget the calendar selection."""
    error = store.reset()
    if error is not None:
        print(f"Failed to reset configuration: {error}")
        return 0

    print('Configuration reset. Run "ical setup" to reconfigure.')
    return 0


def cmd_help() -> int:
    print(HELP_TEXT)
    return 0


def cmd_events(option: str, store: ConfigStore, provider_factory: ProviderFactory) -> int:
    """Show events for a date option, running setup first if needed."""
    config = store.load()

    if config is None or not config.is_configured:
        print("No calendar configuration found. Running setup...\n")
        selected = _run_setup(store, provider_factory)
        if not selected:
            print("Setup cancelled or failed.")
            return 0

        config = store.load()
        if config is None:
            print("Failed to load configuration.")
            return 0

    interval = resolve(option)
    executor = EventQueryExecutor(provider_factory(), access_timeout=settings.get_access_timeout())
    events = executor.fetch(interval, config.target_calendars)

    for line in render(events, interval, multi_day=is_week_option(option)):
        print(line)
    return 0


def _configure_logging() -> None:
    logging.basicConfig(
        level=settings.get_log_level(),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(
    argv: list[str] | None = None,
    store: ConfigStore | None = None,
    provider_factory: ProviderFactory | None = None,
) -> int:
    """Main CLI entry point.

    Always returns 0; problems are reported as messages.
    """
    parser = argparse.ArgumentParser(
        prog="ical",
        description="Show calendar events from selected calendars",
        add_help=False,
    )
    parser.add_argument("command", nargs="?", default="today", help="Command or date option")
    parser.add_argument("-h", "--help", action="store_true", help="Show help")

    args, _extra = parser.parse_known_args(sys.argv[1:] if argv is None else argv)

    _configure_logging()
    store = store or ConfigStore()
    provider_factory = provider_factory or get_provider
    command = args.command

    try:
        if args.help or command in HELP_COMMANDS:
            return cmd_help()

        if command == "setup":
            return cmd_setup(store, provider_factory)

        if command == "config":
            return cmd_config(store, provider_factory)

        if command == "reset":
            return cmd_reset(store)

        return cmd_events(command, store, provider_factory)

    except AccessDenied:
        print("Calendar access denied. Please check system preferences.")
    except Exception as e:
        logger.debug("Unhandled error", exc_info=True)
        print(f"Error occurred: {e}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
