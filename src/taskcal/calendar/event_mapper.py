"""Translate between Google Calendar event resources and taskcal models.

- :func:`build_event_body` turns a title, description, start time and
  duration into the ``dict`` body accepted by ``events().insert()`` and
  ``events().update()``.
- :func:`parse_remote_event` turns an event resource returned by the API
  into a :class:`~taskcal.models.task.RemoteEvent`.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone

from taskcal.models.task import RemoteEvent

logger = logging.getLogger(__name__)


def build_event_body(
    title: str,
    description: str,
    start: datetime,
    duration_minutes: int,
    tz_name: str,
) -> dict:
    """Build a Google Calendar API event body.

    Args:
        title: Event summary.
        description: Event body text.
        start: Event start.  Naive datetimes are interpreted by Google in
            *tz_name*; aware datetimes keep their offset.
        duration_minutes: Event length; ``end = start + duration``.
        tz_name: IANA timezone used as the event's display timezone.

    Returns:
        A ``dict`` conforming to the Google Calendar Event resource schema.

    Raises:
        ValueError: If *duration_minutes* is not positive.
    """
    if duration_minutes <= 0:
        raise ValueError(f"duration_minutes must be positive, got {duration_minutes}")

    end = start + timedelta(minutes=duration_minutes)

    return {
        "summary": title,
        "description": description,
        "start": _format_datetime(start, tz_name),
        "end": _format_datetime(end, tz_name),
    }


def parse_remote_event(item: dict) -> RemoteEvent | None:
    """Convert a Google Calendar event resource into a :class:`RemoteEvent`.

    All-day events (``date`` instead of ``dateTime``) are mapped to UTC
    midnight boundaries so they still take part in reconciliation.

    Args:
        item: A Google Calendar event resource dict.

    Returns:
        The parsed event, or ``None`` if the resource has no id or its
        start/end cannot be parsed.
    """
    event_id = item.get("id")
    start_obj = item.get("start") or {}
    end_obj = item.get("end") or {}

    start = _parse_boundary(start_obj)
    end = _parse_boundary(end_obj)

    if not event_id or start is None or end is None:
        logger.debug("Ignoring unparseable event resource (id=%s)", event_id)
        return None

    return RemoteEvent(
        id=event_id,
        title=item.get("summary", ""),
        description=item.get("description", ""),
        start=start,
        end=end,
        timezone=start_obj.get("timeZone"),
        all_day="dateTime" not in start_obj,
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _format_datetime(dt: datetime, tz_name: str) -> dict:
    """Format a datetime as a Google ``EventDateTime`` dict."""
    return {
        "dateTime": dt.isoformat(),
        "timeZone": tz_name,
    }


def _parse_boundary(obj: dict) -> datetime | None:
    """Parse a Google ``EventDateTime`` dict (``dateTime`` or ``date``)."""
    raw = obj.get("dateTime")
    if raw:
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return None

    raw = obj.get("date")
    if raw:
        try:
            day = date.fromisoformat(raw)
        except ValueError:
            return None
        return datetime.combine(day, time.min, tzinfo=timezone.utc)

    return None
