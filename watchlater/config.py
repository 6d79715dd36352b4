import logging
import os
import sys
from typing import Optional
from dotenv import load_dotenv

from .models import ListingStrategy, OAuthCredentials

load_dotenv()


class ConfigError(ValueError):
    """Raised when required environment configuration is missing or invalid."""


class Settings:
    PORT = 3399
    REDIRECT_URI = f"http://localhost:{PORT}/oauth2callback"
    # Read-only, full non-partner, partner and full access to the account
    SCOPES = [
        "https://www.googleapis.com/auth/youtube.readonly",
        "https://www.googleapis.com/auth/youtube.force-ssl",
        "https://www.googleapis.com/auth/youtubepartner",
        "https://www.googleapis.com/auth/youtube"
    ]
    TOKEN_URI = "https://oauth2.googleapis.com/token"
    AUTH_URI = "https://accounts.google.com/o/oauth2/auth"

    # Seconds between answering the callback and stopping the listener
    EXIT_DELAY = 1.0

    SERVER_NAME = "youtube-watchlater"
    SERVER_VERSION = "0.1.0"
    TOOL_NAME = "get_watch_later_urls"

    DEFAULT_DAYS_BACK = 1
    FIXED_DAYS_BACK = 7
    PAGE_SIZE = 50

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

settings = Settings()


def load_credentials(require_refresh_token: bool = True) -> OAuthCredentials:
    """Reads the OAuth client (and optionally the refresh token) from the environment."""
    client_id = os.getenv("OAUTH_CLIENT_ID")
    client_secret = os.getenv("OAUTH_CLIENT_SECRET")
    refresh_token = os.getenv("OAUTH_REFRESH_TOKEN")

    if not client_id or not client_secret:
        raise ConfigError("Please set OAUTH_CLIENT_ID and OAUTH_CLIENT_SECRET environment variables")
    if require_refresh_token and not refresh_token:
        raise ConfigError("Required environment variables missing: OAUTH_REFRESH_TOKEN")

    return OAuthCredentials(
        client_id=client_id,
        client_secret=client_secret,
        refresh_token=refresh_token or None
    )


def load_listing_strategy() -> ListingStrategy:
    """Selects the playlist listing strategy from PLAYLIST_MODE (discover or fixed)."""
    mode = os.getenv("PLAYLIST_MODE", "discover").strip().lower()
    if mode == "discover":
        return ListingStrategy.discover()
    if mode == "fixed":
        playlist_id = os.getenv("PLAYLIST_ID")
        if not playlist_id:
            raise ConfigError("Required environment variables missing: PLAYLIST_ID")
        return ListingStrategy.fixed_playlist(playlist_id, days_back=settings.FIXED_DAYS_BACK)
    raise ConfigError(f"Unknown PLAYLIST_MODE '{mode}', expected 'discover' or 'fixed'")


def configure_logging(level: Optional[str] = None):
    # stdout belongs to the MCP transport, so log records go to stderr
    logging.basicConfig(
        stream=sys.stderr,
        level=level or settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
