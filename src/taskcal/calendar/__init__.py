"""Google Calendar integration for taskcal."""

from __future__ import annotations

from taskcal.calendar.auth import load_credentials
from taskcal.calendar.client import GoogleCalendarClient
from taskcal.calendar.event_mapper import build_event_body, parse_remote_event
from taskcal.calendar.exceptions import (
    CalendarAuthError,
    CalendarError,
    CalendarNotFoundError,
    CalendarProviderError,
    CalendarRateLimitError,
)
from taskcal.calendar.provider import CalendarProvider, GoogleCalendarProvider

__all__ = [
    "CalendarAuthError",
    "CalendarError",
    "CalendarNotFoundError",
    "CalendarProvider",
    "CalendarProviderError",
    "CalendarRateLimitError",
    "GoogleCalendarClient",
    "GoogleCalendarProvider",
    "build_event_body",
    "load_credentials",
    "parse_remote_event",
]
