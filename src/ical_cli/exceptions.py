"""ical exceptions."""

from __future__ import annotations

from pathlib import Path


class IcalError(Exception):
    """Base exception for ical errors."""


class ConfigError(IcalError):
    """Base exception for configuration file errors."""

    def __init__(self, path: str | Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{reason} ({self.path})")


class ConfigUnreadable(ConfigError):
    """Configuration file exists but could not be read or parsed."""


class ConfigWriteFailed(ConfigError):
    """Configuration file could not be written."""


class AccessDenied(IcalError):
    """Calendar access was refused by the user or the system."""

    def __init__(self, message: str = "Calendar access denied"):
        super().__init__(message)


class NoCalendarsFound(IcalError):
    """Provider reported no calendars."""


class ProviderError(IcalError):
    """Base exception for calendar provider failures."""


class ProviderUnavailable(ProviderError):
    """Calendar provider cannot be used on this system."""
