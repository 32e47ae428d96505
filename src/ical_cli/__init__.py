"""Show upcoming events from selected calendars in the terminal.

Usage:
    from ical_cli.dates import resolve
    from ical_cli.presenter import render
    from ical_cli.providers import get_provider
    from ical_cli.query import EventQueryExecutor
    from ical_cli.store import ConfigStore

    config = ConfigStore().load()
    interval = resolve("week")
    events = EventQueryExecutor(get_provider()).fetch(interval, config.target_calendars)
    for line in render(events, interval, multi_day=True):
        print(line)

Setup:
    Run `ical setup` once to choose calendars.
"""

__version__ = "1.0.0"
