"""Blocking Google Calendar client for the operations reconciliation needs.

Provides :class:`GoogleCalendarClient`, a thin wrapper around the Google
Calendar API service resource:

- **List** -- events within a time range, with pagination.
- **Create** -- insert an event from title, description, start, duration.
- **Update** -- overwrite an existing event by id.
- **Delete** -- remove an event by id.

Every API method is wrapped with
:func:`~taskcal.calendar.exceptions.with_retry`, so callers only ever see
:class:`~taskcal.calendar.exceptions.CalendarError` subclasses.  The async
reconciler reaches this client through
:class:`~taskcal.calendar.provider.GoogleCalendarProvider`.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from taskcal.calendar.event_mapper import build_event_body, parse_remote_event
from taskcal.calendar.exceptions import CalendarProviderError, with_retry
from taskcal.models.task import RemoteEvent

logger = logging.getLogger(__name__)

# Google Calendar API calendar identifier for the primary calendar.
_PRIMARY_CALENDAR = "primary"

# Largest page size the events.list endpoint accepts without a warning.
_PAGE_SIZE = 250


class GoogleCalendarClient:
    """Client for create/update/delete/list on one Google calendar.

    Args:
        credentials: Valid Google OAuth 2.0 credentials.
        timezone: IANA timezone string used as the display timezone of
            created and updated events.
        calendar_id: Calendar to operate on.  Defaults to ``"primary"``.
        service: Optional pre-built ``googleapiclient`` service resource.
            If ``None``, one is built from *credentials*.  Pass a mock here
            in tests.
        max_retries: Retry budget for rate-limit and network errors.
        base_delay: Initial backoff delay in seconds.
    """

    def __init__(
        self,
        credentials: Credentials,
        timezone: str,
        calendar_id: str = _PRIMARY_CALENDAR,
        service: Any | None = None,
        max_retries: int = 3,
        base_delay: float = 1.0,
    ) -> None:
        self._credentials = credentials
        self._timezone = timezone
        self._calendar_id = calendar_id
        self._service = service or build(
            "calendar", "v3", credentials=credentials, cache_discovery=False
        )
        self._max_retries = max_retries
        self._base_delay = base_delay

    # ------------------------------------------------------------------
    # Credential refresh hook (used by @with_retry on 401)
    # ------------------------------------------------------------------

    def _refresh_credentials(self) -> None:
        """Refresh the OAuth 2.0 credentials and rebuild the service."""
        from google.auth.transport.requests import Request

        self._credentials.refresh(Request())
        self._service = build(
            "calendar", "v3", credentials=self._credentials, cache_discovery=False
        )
        logger.info("Credentials refreshed and service rebuilt")

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @with_retry()
    def list_events(self, time_min: datetime, time_max: datetime) -> list[RemoteEvent]:
        """List events within a time range.

        Fetches every page of results.  Resources that cannot be parsed
        (no id, malformed times) are dropped.

        Args:
            time_min: Start of the range (inclusive).
            time_max: End of the range (exclusive).

        Returns:
            The events, ordered by start time.
        """
        events: list[RemoteEvent] = []
        page_token: str | None = None

        while True:
            response = (
                self._service.events()
                .list(
                    calendarId=self._calendar_id,
                    timeMin=_rfc3339(time_min),
                    timeMax=_rfc3339(time_max),
                    showDeleted=False,
                    singleEvents=True,
                    orderBy="startTime",
                    maxResults=_PAGE_SIZE,
                    pageToken=page_token,
                )
                .execute()
            )

            for item in response.get("items", []):
                event = parse_remote_event(item)
                if event is not None:
                    events.append(event)

            page_token = response.get("nextPageToken")
            if page_token is None:
                break

        logger.info(
            "Listed %d event(s) between %s and %s",
            len(events),
            time_min.isoformat(),
            time_max.isoformat(),
        )
        return events

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @with_retry()
    def create_event(
        self,
        title: str,
        description: str,
        start: datetime,
        duration_minutes: int,
    ) -> RemoteEvent:
        """Insert a new event.

        Returns:
            The created event as reported by the API.

        Raises:
            CalendarProviderError: If the API rejects the request or returns
                a resource without an id.
        """
        body = build_event_body(title, description, start, duration_minutes, self._timezone)
        response = (
            self._service.events()
            .insert(calendarId=self._calendar_id, body=body)
            .execute()
        )
        event = _require_event(response, "create")
        logger.info("Created event '%s' (id=%s)", title, event.id)
        return event

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    @with_retry()
    def update_event(
        self,
        event_id: str,
        title: str,
        description: str,
        start: datetime,
        duration_minutes: int,
    ) -> RemoteEvent:
        """Overwrite an existing event by its id.

        Raises:
            CalendarNotFoundError: If the event id does not exist.
        """
        body = build_event_body(title, description, start, duration_minutes, self._timezone)
        response = (
            self._service.events()
            .update(calendarId=self._calendar_id, eventId=event_id, body=body)
            .execute()
        )
        event = _require_event(response, "update")
        logger.info("Updated event '%s' (id=%s)", title, event_id)
        return event

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    @with_retry()
    def delete_event(self, event_id: str) -> None:
        """Delete an event by its id.

        Raises:
            CalendarNotFoundError: If the event id does not exist.
            CalendarProviderError: If the event is protected (for example
                a birthday or holiday entry).
        """
        self._service.events().delete(
            calendarId=self._calendar_id, eventId=event_id
        ).execute()
        logger.info("Deleted event (id=%s)", event_id)


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def _rfc3339(dt: datetime) -> str:
    """Format *dt* for ``timeMin``/``timeMax``; naive values are taken as UTC."""
    if dt.tzinfo is None:
        return dt.isoformat() + "Z"
    return dt.isoformat()


def _require_event(response: dict, operation: str) -> RemoteEvent:
    event = parse_remote_event(response or {})
    if event is None:
        raise CalendarProviderError(f"Calendar API returned an unusable event on {operation}")
    return event
