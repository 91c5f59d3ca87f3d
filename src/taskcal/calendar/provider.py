"""Async calendar provider interface used by the reconciler.

:class:`CalendarProvider` is the only calendar dependency of
:mod:`taskcal.sync`.  :class:`GoogleCalendarProvider` satisfies it by running
the blocking :class:`~taskcal.calendar.client.GoogleCalendarClient` calls in
worker threads, so a reconciliation pass can overlap the remote fetch with
the Task Store read.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Protocol, runtime_checkable

from taskcal.calendar.client import GoogleCalendarClient
from taskcal.models.task import RemoteEvent


@runtime_checkable
class CalendarProvider(Protocol):
    """Remote calendar operations, bounded to what reconciliation needs.

    Implementations raise
    :class:`~taskcal.calendar.exceptions.CalendarAuthError` for a missing or
    expired credential and
    :class:`~taskcal.calendar.exceptions.CalendarProviderError` when the
    remote side rejects a request.
    """

    async def list_events(self, start: datetime, end: datetime) -> list[RemoteEvent]: ...

    async def create_event(
        self,
        title: str,
        description: str,
        start: datetime,
        duration_minutes: int,
    ) -> RemoteEvent: ...

    async def update_event(
        self,
        event_id: str,
        title: str,
        description: str,
        start: datetime,
        duration_minutes: int,
    ) -> RemoteEvent: ...

    async def delete_event(self, event_id: str) -> None: ...


class GoogleCalendarProvider:
    """:class:`CalendarProvider` backed by :class:`GoogleCalendarClient`."""

    def __init__(self, client: GoogleCalendarClient) -> None:
        self._client = client

    async def list_events(self, start: datetime, end: datetime) -> list[RemoteEvent]:
        return await asyncio.to_thread(self._client.list_events, start, end)

    async def create_event(
        self,
        title: str,
        description: str,
        start: datetime,
        duration_minutes: int,
    ) -> RemoteEvent:
        return await asyncio.to_thread(
            self._client.create_event, title, description, start, duration_minutes
        )

    async def update_event(
        self,
        event_id: str,
        title: str,
        description: str,
        start: datetime,
        duration_minutes: int,
    ) -> RemoteEvent:
        return await asyncio.to_thread(
            self._client.update_event, event_id, title, description, start, duration_minutes
        )

    async def delete_event(self, event_id: str) -> None:
        await asyncio.to_thread(self._client.delete_event, event_id)
