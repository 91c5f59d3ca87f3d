"""taskcal: reconcile scheduled tasks with a remote calendar.

Keeps a local Task Store and a Google Calendar consistent with a pull-based
three-way diff, and reports the new task-to-event links for the caller to
persist.
"""

from __future__ import annotations

from taskcal.calendar.exceptions import (
    CalendarAuthError,
    CalendarError,
    CalendarNotFoundError,
    CalendarProviderError,
    CalendarRateLimitError,
)
from taskcal.calendar.provider import CalendarProvider
from taskcal.exceptions import InvalidStateError, StoreError
from taskcal.models.results import (
    BatchResult,
    ImportResult,
    ItemOutcome,
    PendingLink,
    SyncResult,
)
from taskcal.models.task import RemoteEvent, SyncWindow, Task, TaskDraft, default_window
from taskcal.store.base import TaskStore
from taskcal.sync.batch import batch_mutate
from taskcal.sync.links import persist_links
from taskcal.sync.reconciler import Reconciler, UpdatePolicy
from taskcal.sync.resolver import LinkState, OrphanPolicy, classify

__version__ = "0.1.0"

__all__ = [
    "BatchResult",
    "CalendarAuthError",
    "CalendarError",
    "CalendarNotFoundError",
    "CalendarProvider",
    "CalendarProviderError",
    "CalendarRateLimitError",
    "ImportResult",
    "InvalidStateError",
    "ItemOutcome",
    "LinkState",
    "OrphanPolicy",
    "PendingLink",
    "Reconciler",
    "RemoteEvent",
    "StoreError",
    "SyncResult",
    "SyncWindow",
    "Task",
    "TaskDraft",
    "TaskStore",
    "UpdatePolicy",
    "batch_mutate",
    "classify",
    "default_window",
    "persist_links",
]
