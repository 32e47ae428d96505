"""Resolve date options (today, tomorrow, week) to local time ranges."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

TODAY_OPTIONS = ("today",)
TOMORROW_OPTIONS = ("tom", "tomorrow")
WEEK_OPTIONS = ("w", "week")
DATE_OPTIONS = TODAY_OPTIONS + TOMORROW_OPTIONS + WEEK_OPTIONS

END_OF_DAY = time(23, 59, 59)
END_OF_WEEK = time(23, 59, 59, 999000)


@dataclass(frozen=True)
class DateRange:
    """Time range shown by one invocation, with its display label."""

    start: datetime
    end: datetime
    label: str

    @property
    def multi_day(self) -> bool:
        return self.start.date() != self.end.date()


def is_week_option(option: str) -> bool:
    return option in WEEK_OPTIONS


def _at(day: date, clock: time, now: datetime) -> datetime:
    return datetime.combine(day, clock, tzinfo=now.tzinfo)


def _day_range(day: date, label: str, now: datetime) -> DateRange:
    return DateRange(start=_at(day, time.min, now), end=_at(day, END_OF_DAY, now), label=label)


def resolve(option: str = "today", now: datetime | None = None) -> DateRange:
    """Map a date option to its time range.

    Unrecognized options fall back to today.

    Args:
        option: "today", "tom"/"tomorrow" or "w"/"week".
        now: Reference time. Defaults to the current local time; an aware
            value keeps its tzinfo on the result.

    Returns:
        DateRange covering the requested days.
    """
    if now is None:
        now = datetime.now()
    today = now.date()

    if option in TOMORROW_OPTIONS:
        return _day_range(today + timedelta(days=1), "tomorrow", now)

    if option in WEEK_OPTIONS:
        # weekday() is Monday=0; weeks here start on Sunday
        sunday = today - timedelta(days=(today.weekday() + 1) % 7)
        saturday = sunday + timedelta(days=6)
        return DateRange(
            start=_at(sunday, time.min, now),
            end=_at(saturday, END_OF_WEEK, now),
            label="this week",
        )

    return _day_range(today, "today", now)
