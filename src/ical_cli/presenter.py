"""Format calendar events as display lines."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from ical_cli.dates import DateRange
from ical_cli.providers.base import Event

ALL_DAY_LABEL = "All Day"
TIME_FORMAT = "%I:%M %p"


def _local(dt: datetime) -> datetime:
    """Naive local time; aware values are converted to the host timezone first."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone().replace(tzinfo=None)


def _date_tag(dt: datetime) -> str:
    dt = _local(dt)
    return f"{dt:%b} {dt.day}"


def sort_events(events: Iterable[Event]) -> list[Event]:
    """Sort by start time. Events starting together keep their input order."""
    return sorted(events, key=lambda event: _local(event.start_date))


def format_time_range(event: Event) -> str:
    if event.is_all_day:
        return ALL_DAY_LABEL
    start = _local(event.start_date).strftime(TIME_FORMAT)
    end = _local(event.end_date).strftime(TIME_FORMAT)
    return f"{start} - {end}"


def format_event(event: Event, multi_day: bool = False) -> str:
    """Render one event.

    Args:
        event: Event to render.
        multi_day: Prefix the line with the event's date (week view).

    Returns:
        Line such as "- Standup (09:00 AM - 09:15 AM) @ Room 4".
    """
    time_label = format_time_range(event)
    if multi_day:
        line = f"- [{_date_tag(event.start_date)}] {event.title} ({time_label})"
    else:
        line = f"- {event.title} ({time_label})"

    if event.location:
        first_line = event.location.split("\n")[0].strip()
        if first_line:
            line += f" @ {first_line}"

    if event.notes:
        line += f" - {event.notes}"

    return line


def render(events: Iterable[Event], interval: DateRange, multi_day: bool = False) -> list[str]:
    """Render events for display, sorted by start time.

    Returns a single informational line when there are no events.
    """
    ordered = sort_events(events)
    if not ordered:
        return [f"No events scheduled for {interval.label}."]
    return [format_event(event, multi_day) for event in ordered]
