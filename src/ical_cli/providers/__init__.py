"""
Calendar provider implementations.
"""

from ical_cli.providers.base import (
    AuthorizationStatus,
    Calendar,
    CalendarProvider,
    Event,
    EventPredicate,
)
from ical_cli.providers.eventkit import EventKitProvider
from ical_cli.providers.google import GoogleCalendarProvider

# Provider registry
PROVIDERS: dict[str, type[CalendarProvider]] = {
    "eventkit": EventKitProvider,
    "google": GoogleCalendarProvider,
}


def get_provider(name: str | None = None) -> CalendarProvider:
    """
    Create the calendar provider to use.

    Args:
        name: "eventkit" or "google". Defaults to ical_cli.config.get_provider_name().

    Raises:
        ValueError: If the provider name is not supported.
        ProviderUnavailable: If the provider cannot run on this system.
    """
    from ical_cli.config import get_provider_name

    name = name or get_provider_name()
    if name not in PROVIDERS:
        raise ValueError(f"Unknown provider: {name}. Supported providers: {list(PROVIDERS.keys())}")
    return PROVIDERS[name]()


__all__ = [
    "AuthorizationStatus",
    "Calendar",
    "CalendarProvider",
    "Event",
    "EventPredicate",
    "EventKitProvider",
    "GoogleCalendarProvider",
    "PROVIDERS",
    "get_provider",
]
