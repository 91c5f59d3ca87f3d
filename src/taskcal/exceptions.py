"""Custom exceptions for the local side of task/calendar reconciliation.

Provider-side failures live in :mod:`taskcal.calendar.exceptions`; the
errors here cover the Task Store and caller precondition violations.
"""

from __future__ import annotations


class StoreError(Exception):
    """Raised when the Task Store cannot complete a read or write.

    Always fatal to the operation in progress and never retried
    automatically.  Batch mutation catches it per leg; everything else
    lets it propagate.

    Attributes:
        message: Human-readable description of the store failure.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidStateError(Exception):
    """Raised when an operation's precondition on a task is violated.

    For example, linking a task that has no ``due_at`` or that already
    carries a ``remote_event_id``.  Always raised before any network call.
    """
