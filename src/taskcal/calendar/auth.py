"""Credential supply for the Google Calendar provider.

Loads an OAuth 2.0 user token that was issued elsewhere (the interactive
consent flow is not part of taskcal), refreshes it when it has expired, and
reports anything unusable as
:class:`~taskcal.calendar.exceptions.CalendarAuthError`.

Usage::

    from taskcal.calendar.auth import load_credentials

    creds = load_credentials(Path("token.json"))
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from taskcal.calendar.exceptions import CalendarAuthError

logger = logging.getLogger(__name__)

SCOPES: list[str] = ["https://www.googleapis.com/auth/calendar"]
"""OAuth 2.0 scopes required for Calendar create/update/delete/list."""


def load_credentials(token_path: Path | str) -> Credentials:
    """Return valid Google Calendar credentials from a cached token file.

    1. **Cached token** -- load ``token_path`` and return it if still valid.
    2. **Refresh** -- if expired but it has a refresh token, refresh it,
       write the new token back to ``token_path`` and return it.

    Args:
        token_path: Path to an authorized-user ``token.json``.

    Returns:
        A valid :class:`google.oauth2.credentials.Credentials` instance.

    Raises:
        CalendarAuthError: If the token file is missing or unreadable, or
            the token is expired and cannot be refreshed.
    """
    token_path = Path(token_path)

    creds = _load_cached_token(token_path)
    if creds is None:
        raise CalendarAuthError(f"No usable calendar token at {token_path}")

    if creds.valid:
        logger.debug("Loaded valid cached token from %s", token_path)
        return creds

    if creds.expired and creds.refresh_token:
        logger.info("Cached token expired, attempting refresh")
        refreshed = _refresh_token(creds)
        _save_token(refreshed, token_path)
        return refreshed

    raise CalendarAuthError(
        f"Calendar token at {token_path} is expired and has no refresh token"
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_cached_token(token_path: Path) -> Credentials | None:
    """Load credentials from *token_path*, or ``None`` if absent/corrupt."""
    if not token_path.exists():
        logger.warning("No cached token found at %s", token_path)
        return None

    try:
        return Credentials.from_authorized_user_file(str(token_path), SCOPES)
    except (json.JSONDecodeError, ValueError, KeyError) as exc:
        logger.warning("Failed to parse cached token at %s: %s", token_path, exc)
        return None


def _refresh_token(creds: Credentials) -> Credentials:
    """Refresh expired credentials in place.

    Raises:
        CalendarAuthError: If the token endpoint rejects the refresh.
    """
    try:
        creds.refresh(Request())
    except RefreshError as exc:
        logger.error("Token refresh failed: %s", exc)
        raise CalendarAuthError(f"Token refresh failed: {exc}") from exc
    logger.info("Token refresh succeeded")
    return creds


def _save_token(creds: Credentials, token_path: Path) -> None:
    """Persist refreshed credentials back to *token_path*."""
    token_path.parent.mkdir(parents=True, exist_ok=True)
    token_path.write_text(creds.to_json())
    logger.info("Token saved to %s", token_path)
