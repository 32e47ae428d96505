"""Google Calendar consent and token storage.

ical reads Google calendars with a user token obtained once through the
browser consent page. Two files under ~/.ical/google/ back this:
    credentials.json - the OAuth client downloaded from Google Cloud Console
    token.json       - the user token, kept in google-auth's authorized-user
                       layout so other Google tooling can read it too

Authlib drives the consent and refresh exchanges; google-auth wraps the
token for the Calendar API client.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from authlib.integrations.requests_client import OAuth2Session
from authlib.oauth2 import OAuth2Error
from google.oauth2.credentials import Credentials as GoogleCredentials
from googleapiclient.discovery import build

from ical_cli import config
from ical_cli.google.exceptions import (
    CredentialsNotFoundError,
    ScopeMismatchError,
    TokenError,
)

logger = logging.getLogger(__name__)


SCOPES = {
    "calendar": "https://www.googleapis.com/auth/calendar",
    "calendar_readonly": "https://www.googleapis.com/auth/calendar.readonly",
    "calendar_events_readonly": "https://www.googleapis.com/auth/calendar.events.readonly",
}

# Listing calendars needs more than events.readonly
DEFAULT_SCOPES = ["calendar_readonly"]


def _scope_url(scope: str) -> str:
    if scope.startswith("https://"):
        return scope
    if scope in SCOPES:
        return SCOPES[scope]
    raise ValueError(f"Unknown scope: {scope}. Use full URL or one of: {list(SCOPES.keys())}")


def _expiry_timestamp(expiry: Any) -> float | None:
    """Stored expiry (ISO string or epoch seconds) as epoch seconds."""
    if isinstance(expiry, str) and expiry:
        return datetime.fromisoformat(expiry.replace("Z", "+00:00")).timestamp()
    return expiry or None


def _session_token(stored: dict[str, Any]) -> dict[str, Any]:
    """Convert a token.json document into the dict Authlib sessions hold."""
    return {
        "access_token": stored.get("token"),
        "refresh_token": stored.get("refresh_token"),
        "token_type": stored.get("type", "Bearer"),
        "expires_at": _expiry_timestamp(stored.get("expiry")),
        "scope": " ".join(sorted(stored.get("scopes", []))),
    }


class GoogleOAuth:
    """User consent for reading Google calendars.

    Example:
        >>> auth = GoogleOAuth()
        >>> if not auth.is_authorized():
        ...     print(auth.get_authorization_url())
        ...     auth.fetch_token(input("Paste redirect URL: "))
        >>> calendar = auth.build_service()
    """

    AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    # Desktop clients accept any localhost redirect; the user pastes it back
    REDIRECT_URI = "http://localhost"

    def __init__(
        self,
        scopes: list[str] | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
        token_path: str | Path | None = None,
        credentials_path: str | Path | None = None,
    ):
        """Set up the session from the stored client and token.

        Args:
            scopes: Names from SCOPES or full scope URLs. Defaults to
                read-only calendar access.
            client_id: OAuth client id. Read from credentials_path when omitted.
            client_secret: OAuth client secret. Read from credentials_path when omitted.
            token_path: User token file. Defaults to ~/.ical/google/token.json.
            credentials_path: OAuth client file. Defaults to ~/.ical/google/credentials.json.

        Raises:
            ValueError: A scope name is unknown or the client file is malformed.
            CredentialsNotFoundError: No client id/secret given and no client file.
        """
        self.token_path = Path(token_path) if token_path else config.GOOGLE_TOKEN
        self.credentials_path = (
            Path(credentials_path) if credentials_path else config.GOOGLE_CREDENTIALS
        )
        self.required_scopes = [_scope_url(scope) for scope in scopes or DEFAULT_SCOPES]

        if not client_id or not client_secret:
            client_id, client_secret = self._load_client_credentials()
        self.client_id = client_id
        self.client_secret = client_secret

        self.session = OAuth2Session(
            client_id=self.client_id,
            client_secret=self.client_secret,
            scope=" ".join(self.required_scopes),
            redirect_uri=self.REDIRECT_URI,
            token=self._load_token(),
            update_token=self._save_token,
            token_endpoint=self.TOKEN_URL,
            grant_type="refresh_token",
            token_endpoint_auth_method="client_secret_post",
        )

    def _load_client_credentials(self) -> tuple[str, str]:
        if not self.credentials_path.exists():
            raise CredentialsNotFoundError(str(self.credentials_path))

        client_file = json.loads(self.credentials_path.read_text())
        client = client_file.get("installed") or client_file.get("web")
        if not client:
            raise ValueError("Invalid credentials.json format. Expected 'installed' or 'web' key.")
        return client["client_id"], client["client_secret"]

    def _missing_scopes(self, granted: str | list[str]) -> set[str]:
        """Required scopes absent from a space-separated string or list."""
        if isinstance(granted, str):
            granted = granted.split()
        return set(self.required_scopes) - set(granted)

    def _load_token(self) -> dict[str, Any] | None:
        """Stored token for the session, or None if absent, corrupt or under-scoped."""
        if not self.token_path.exists():
            logger.info(f"No Google token at {self.token_path}")
            return None

        try:
            stored = json.loads(self.token_path.read_text())
            missing = self._missing_scopes(stored.get("scopes", []))
            token = _session_token(stored)
        except (OSError, ValueError, AttributeError) as e:
            logger.error(f"Ignoring unreadable Google token {self.token_path}: {e}")
            return None

        if missing:
            logger.warning(f"Google token lacks calendar scopes {missing}, consent needed")
            return None
        return token

    def _save_token(
        self,
        token: dict[str, Any],
        refresh_token: str | None = None,
        access_token: str | None = None,
    ):
        """Write token.json; also Authlib's update_token hook after a refresh."""
        if access_token:
            token["access_token"] = access_token
        if refresh_token:
            token["refresh_token"] = refresh_token

        granted = token.get("scope", "")
        missing = self._missing_scopes(granted)
        if missing:
            raise ScopeMismatchError(missing)

        stored = {
            "token": token["access_token"],
            "refresh_token": token.get("refresh_token"),
            "token_uri": self.TOKEN_URL,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "scopes": sorted(set(granted.split())),
            "type": token.get("token_type", "Bearer"),
            "expiry": token.get("expires_at"),
        }
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        self.token_path.write_text(json.dumps(stored, indent=2))
        logger.info(f"Saved Google token to {self.token_path}")

    def is_authorized(self) -> bool:
        """True if a token with every required scope is loaded."""
        token = self.session.token
        return bool(token) and not self._missing_scopes(token.get("scope", ""))

    def get_authorization_url(self) -> str:
        """URL of the consent page, asking for a refresh token."""
        url, _state = self.session.create_authorization_url(
            self.AUTHORIZE_URL,
            access_type="offline",
            prompt="consent",
        )
        return url

    def fetch_token(self, authorization_response: str) -> dict[str, Any]:
        """Trade the redirect URL pasted after consent for a token and store it."""
        token = self.session.fetch_token(
            self.TOKEN_URL,
            authorization_response=authorization_response,
            client_secret=self.client_secret,
        )
        self._save_token(token)
        return token

    def _refresh_if_expired(self) -> None:
        expires_at = self.session.token.get("expires_at")
        if not expires_at or expires_at >= datetime.now().timestamp():
            return

        logger.info("Google token expired, refreshing")
        try:
            self.session.refresh_token(
                self.TOKEN_URL,
                refresh_token=self.session.token.get("refresh_token"),
            )
        except OAuth2Error as e:
            raise TokenError(f"Failed to refresh token: {e}") from e

    def get_credentials(self) -> GoogleCredentials:
        """google-auth credentials for the API client.

        Raises:
            TokenError: No usable token, or the refresh was rejected.
        """
        if not self.is_authorized():
            raise TokenError("Not authorized or missing required scopes")

        self._refresh_if_expired()
        token = self.session.token
        return GoogleCredentials(
            token=token["access_token"],
            refresh_token=token.get("refresh_token"),
            token_uri=self.TOKEN_URL,
            client_id=self.client_id,
            client_secret=self.client_secret,
            scopes=self.required_scopes,
        )

    def build_service(self, service_name: str = "calendar", version: str = "v3"):
        """Calendar API client (or another Google API) using the stored token."""
        return build(
            service_name, version, credentials=self.get_credentials(), cache_discovery=False
        )
