"""Google authentication exceptions."""

from ical_cli.exceptions import ProviderError


class GoogleAuthError(ProviderError):
    """Base exception for Google authentication errors."""

    pass


class CredentialsNotFoundError(GoogleAuthError):
    """Raised when the OAuth client credentials file is missing."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"Credentials file not found at {path}. "
            "Download OAuth client credentials from Google Cloud Console and save them there."
        )


class TokenError(GoogleAuthError):
    """Raised when the stored token cannot be used or refreshed."""

    pass


class ScopeMismatchError(GoogleAuthError):
    """Raised when a token lacks the calendar scopes ical needs."""

    def __init__(self, missing_scopes: set[str]):
        self.missing_scopes = missing_scopes
        super().__init__(f"Token missing required scopes: {missing_scopes}")
