"""Google OAuth for the Google Calendar provider."""

from ical_cli.google.exceptions import (
    CredentialsNotFoundError,
    GoogleAuthError,
    ScopeMismatchError,
    TokenError,
)
from ical_cli.google.oauth import GoogleOAuth

__all__ = [
    "GoogleOAuth",
    "GoogleAuthError",
    "CredentialsNotFoundError",
    "TokenError",
    "ScopeMismatchError",
]
