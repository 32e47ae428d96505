"""Centralized settings for ical.

Files used by ical:
    ~/.ical-config.json           - selected calendars (see ical_cli.store)
    ~/.ical/.env                  - optional settings (ICAL_PROVIDER, etc.)
    ~/.ical/google/credentials.json - Google OAuth client credentials
    ~/.ical/google/token.json       - Google OAuth tokens

Environment variables:
    ICAL_HOME            - settings directory (default ~/.ical)
    ICAL_CONFIG_PATH     - calendar selection file (default ~/.ical-config.json)
    ICAL_PROVIDER        - "eventkit" or "google"
    ICAL_ACCESS_TIMEOUT  - seconds to wait for a permission prompt
    ICAL_LOG_LEVEL       - logging level (default WARNING)

This module auto-loads the .env file on import. Variables already present
in the environment take precedence over the file.
"""

import logging
import os
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

ICAL_HOME = Path(os.environ.get("ICAL_HOME", Path.home() / ".ical")).expanduser()
ENV_FILE = ICAL_HOME / ".env"

GOOGLE_DIR = ICAL_HOME / "google"
GOOGLE_CREDENTIALS = GOOGLE_DIR / "credentials.json"
GOOGLE_TOKEN = GOOGLE_DIR / "token.json"

PROVIDER_NAMES = ("eventkit", "google")
DEFAULT_LOG_LEVEL = "WARNING"


def _load_env_file(env_path: Path) -> dict[str, str]:
    """Load environment variables from a file.

    Args:
        env_path: Path to .env file.

    Returns:
        Dictionary of loaded variables.
    """
    loaded = {}
    if not env_path.exists():
        return loaded

    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip()

            if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
                value = value[1:-1]

            if key and key not in os.environ:
                os.environ[key] = value
                loaded[key] = value

    return loaded


def get_config_path() -> Path:
    """Path of the calendar selection file."""
    override = os.environ.get("ICAL_CONFIG_PATH")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".ical-config.json"


def ensure_google_dir() -> Path:
    """Create Google credentials directory if it doesn't exist.

    Returns:
        Path to google directory.
    """
    GOOGLE_DIR.mkdir(parents=True, exist_ok=True)
    return GOOGLE_DIR


def get_provider_name() -> str:
    """Name of the calendar provider to use.

    ICAL_PROVIDER wins when set; otherwise EventKit on macOS and
    Google Calendar everywhere else.
    """
    name = os.environ.get("ICAL_PROVIDER", "").strip().lower()
    if name:
        return name
    return "eventkit" if sys.platform == "darwin" else "google"


def get_access_timeout() -> float | None:
    """Seconds to wait for a permission prompt, or None to wait forever."""
    raw = os.environ.get("ICAL_ACCESS_TIMEOUT", "").strip()
    if not raw:
        return None
    try:
        timeout = float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid ICAL_ACCESS_TIMEOUT: {raw!r}")
        return None
    return timeout if timeout > 0 else None


def get_log_level() -> str:
    """Logging level name from ICAL_LOG_LEVEL."""
    level = os.environ.get("ICAL_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        return DEFAULT_LOG_LEVEL
    return level


# Auto-load .env from ICAL_HOME on import
_loaded = _load_env_file(ENV_FILE)
