"""Persistent calendar selection.

The selection lives in one JSON document (default ~/.ical-config.json):

    {
      "targetCalendars": ["<calendar id>", ...],
      "lastUpdated": "2026-01-25T10:00:00.000Z",
      "version": "1.0"
    }

A record is either absent or well-formed. Missing, empty and malformed
files all load as absent. reset() truncates the file instead of deleting
it, so after a reset exists() is still True while load() returns None.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ical_cli.config import get_config_path
from ical_cli.exceptions import ConfigUnreadable, ConfigWriteFailed

logger = logging.getLogger(__name__)

CONFIG_VERSION = "1.0"


def _utc_timestamp() -> str:
    """Current time as ISO-8601 UTC, millisecond precision, 'Z' suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class CalendarConfig:
    """The user's calendar selection."""

    target_calendars: list[str] = field(default_factory=list)
    last_updated: str = ""
    version: str = CONFIG_VERSION

    def __post_init__(self) -> None:
        # Unique ids, first occurrence wins
        self.target_calendars = list(dict.fromkeys(self.target_calendars))

    @property
    def is_configured(self) -> bool:
        return bool(self.target_calendars)

    def to_dict(self) -> dict[str, Any]:
        return {
            "targetCalendars": list(self.target_calendars),
            "lastUpdated": self.last_updated,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Any) -> CalendarConfig:
        """Build a record from parsed JSON.

        Raises:
            ValueError: If the data does not have the record's shape.
        """
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")

        calendars = data.get("targetCalendars")
        if not isinstance(calendars, list) or not all(isinstance(c, str) for c in calendars):
            raise ValueError("targetCalendars must be a list of strings")

        for key in ("lastUpdated", "version"):
            if not isinstance(data.get(key), str):
                raise ValueError(f"{key} must be a string")

        return cls(
            target_calendars=calendars,
            last_updated=data["lastUpdated"],
            version=data["version"],
        )


@dataclass
class LoadResult:
    """Outcome of reading the configuration file.

    Neither field is set when the file does not exist.
    """

    config: CalendarConfig | None = None
    error: ConfigUnreadable | None = None


class ConfigStore:
    """Loads, saves and resets the calendar selection file.

    Usage:
        store = ConfigStore()
        config = store.load()
        if config is None:
            store.save(CalendarConfig(target_calendars=["cal-1"]))
    """

    def __init__(self, path: str | Path | None = None) -> None:
        """Initialize the store.

        Args:
            path: Configuration file. Defaults to ICAL_CONFIG_PATH or ~/.ical-config.json.
        """
        self.path = Path(path) if path else get_config_path()

    def exists(self) -> bool:
        """True if the file is present, even when empty."""
        return self.path.exists()

    def read(self) -> LoadResult:
        """Read the file, reporting problems as a value instead of raising."""
        if not self.exists():
            return LoadResult()

        try:
            content = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return LoadResult(error=ConfigUnreadable(self.path, f"cannot read file: {e}"))

        if not content.strip():
            return LoadResult(error=ConfigUnreadable(self.path, "file is empty"))

        try:
            return LoadResult(config=CalendarConfig.from_dict(json.loads(content)))
        except (ValueError, RecursionError) as e:
            return LoadResult(error=ConfigUnreadable(self.path, f"invalid configuration: {e}"))

    def load(self) -> CalendarConfig | None:
        """Load the record, or None if it is absent or unreadable."""
        result = self.read()
        if result.error is not None:
            logger.warning(f"Error loading config: {result.error}")
        return result.config

    def save(self, config: CalendarConfig) -> ConfigWriteFailed | None:
        """Stamp and write the record, replacing the whole file.

        Returns:
            None on success, otherwise the failure (also logged).
        """
        config.last_updated = _utc_timestamp()
        config.version = CONFIG_VERSION

        try:
            self.path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")
        except OSError as e:
            error = ConfigWriteFailed(self.path, f"cannot write file: {e}")
            logger.error(f"Error saving config: {error}")
            return error

        logger.info(f"Saved {len(config.target_calendars)} calendar(s) to {self.path}")
        return None

    def reset(self) -> ConfigWriteFailed | None:
        """Truncate the file to empty if it exists.

        Returns:
            None on success, otherwise the failure (also logged).
        """
        if not self.exists():
            return None

        try:
            self.path.write_text("", encoding="utf-8")
        except OSError as e:
            error = ConfigWriteFailed(self.path, f"cannot reset file: {e}")
            logger.error(f"Error resetting config: {error}")
            return error

        logger.info(f"Reset config at {self.path}")
        return None
