"""Pydantic models for local tasks and remote calendar events.

- :class:`Task` -- a record owned by the Task Store.
- :class:`TaskDraft` -- the insert payload for a new task (no id yet).
- :class:`RemoteEvent` -- the calendar provider's view of an occurrence.
- :class:`SyncWindow` -- the time range a reconciliation pass covers.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Duration applied to any calendar-facing computation when a task has none.
DEFAULT_DURATION_MINUTES = 60

_DEFAULT_PAST_DAYS = 180
_DEFAULT_FUTURE_DAYS = 365


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Task
# ---------------------------------------------------------------------------


class TaskDraft(BaseModel):
    """A task that has not been inserted yet.

    Attributes:
        description: Display text (becomes the event title and body).
        due_at: When the task is scheduled, or ``None`` for an untimed task.
        duration: Length in minutes, or ``None`` to use the default.
        remote_event_id: Set only when the draft mirrors an existing
            remote event (calendar import).
    """

    description: str
    due_at: datetime | None = None
    duration: int | None = Field(default=None, gt=0)
    remote_event_id: str | None = None


class Task(BaseModel):
    """A local scheduled task as stored by the Task Store.

    The reconciliation engine only reads tasks; any change it wants made
    (such as a new ``remote_event_id``) is handed back to the caller.

    Attributes:
        id: Stable local identifier, never reused.
        description: Display text, used as event title and description.
        due_at: Scheduled time, or ``None`` for an untimed task.
        duration: Positive length in minutes, or ``None``.
        is_completed: Completion flag (ignored by reconciliation).
        remote_event_id: Identifier of the linked remote event, if any.
        created_at: When the store inserted the task.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    description: str
    due_at: datetime | None = None
    duration: int | None = Field(default=None, gt=0)
    is_completed: bool = False
    remote_event_id: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_timed(self) -> bool:
        """Whether the task has a ``due_at`` and so takes part in sync."""
        return self.due_at is not None

    @property
    def effective_duration(self) -> int:
        """Duration in minutes, falling back to :data:`DEFAULT_DURATION_MINUTES`."""
        return self.duration or DEFAULT_DURATION_MINUTES


# ---------------------------------------------------------------------------
# RemoteEvent
# ---------------------------------------------------------------------------


class RemoteEvent(BaseModel):
    """A calendar event as reported by the provider.

    Attributes:
        id: Provider-assigned opaque identifier.
        title: Event summary.
        description: Event body text.
        start: Start time.
        end: End time.  ``end - start`` is the authoritative duration.
        timezone: IANA display timezone reported by the provider, if any.
        all_day: Whether the provider reported whole dates, not times.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    description: str = ""
    start: datetime
    end: datetime
    timezone: str | None = None
    all_day: bool = False

    @property
    def duration_minutes(self) -> int:
        """Whole minutes between ``start`` and ``end``."""
        return int((self.end - self.start).total_seconds() // 60)


# ---------------------------------------------------------------------------
# SyncWindow
# ---------------------------------------------------------------------------


class SyncWindow(BaseModel):
    """Closed time range ``[start, end]`` queried from the provider."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @model_validator(mode="after")
    def _check_order(self) -> SyncWindow:
        if self.end <= self.start:
            raise ValueError(
                f"window end ({self.end.isoformat()}) must be after "
                f"start ({self.start.isoformat()})"
            )
        return self


def default_window(
    now: datetime | None = None,
    past_days: int = _DEFAULT_PAST_DAYS,
    future_days: int = _DEFAULT_FUTURE_DAYS,
) -> SyncWindow:
    """Build the reconciliation window around *now*.

    The defaults (about six months back, twelve months ahead) bound the
    provider query while still catching realistic drift.

    Args:
        now: Reference time.  Defaults to the current UTC time.
        past_days: Days before *now* to include.
        future_days: Days after *now* to include.

    Returns:
        A :class:`SyncWindow`.
    """
    now = now or _utcnow()
    return SyncWindow(
        start=now - timedelta(days=past_days),
        end=now + timedelta(days=future_days),
    )
