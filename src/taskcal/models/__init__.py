"""Data models for taskcal."""

from __future__ import annotations

from taskcal.models.results import (
    BatchResult,
    ImportResult,
    ItemOutcome,
    PendingLink,
    SyncResult,
)
from taskcal.models.task import (
    DEFAULT_DURATION_MINUTES,
    RemoteEvent,
    SyncWindow,
    Task,
    TaskDraft,
    default_window,
)

__all__ = [
    "DEFAULT_DURATION_MINUTES",
    "BatchResult",
    "ImportResult",
    "ItemOutcome",
    "PendingLink",
    "RemoteEvent",
    "SyncResult",
    "SyncWindow",
    "Task",
    "TaskDraft",
    "default_window",
]
