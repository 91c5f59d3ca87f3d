"""Result types produced by reconciliation, import and batch mutation.

- :class:`PendingLink` -- a new ``task_id -> remote_event_id`` mapping the
  caller must persist.
- :class:`ItemOutcome` -- what happened to one task or remote event during
  a pass.
- :class:`SyncResult` -- aggregated outcome of a full reconciliation pass.
- :class:`ImportResult` -- outcome of pulling remote events into the store.
- :class:`BatchResult` -- outcome of a combined bulk delete / bulk insert.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from taskcal.models.task import Task

Action = Literal["create", "update", "delete", "skip"]


@dataclass(frozen=True)
class PendingLink:
    """A remote event created for a task, not yet recorded in the store."""

    task_id: int
    remote_event_id: str


@dataclass(frozen=True)
class ItemOutcome:
    """Outcome of a single provider operation within a pass.

    Attributes:
        action: The operation attempted (``"skip"`` when an unchanged linked
            pair needed no update).
        task_id: Local task involved, or ``None`` for a remote-only delete.
        remote_event_id: Remote event involved, when known.
        ok: Whether the operation succeeded.
        error: Error message when ``ok`` is ``False``.
    """

    action: Action
    task_id: int | None
    remote_event_id: str | None = None
    ok: bool = True
    error: str | None = None


@dataclass
class SyncResult:
    """Aggregated result of one reconciliation pass.

    Attributes:
        created: Remote events created for unlinked (or recreated orphaned)
            tasks.
        updated: Linked remote events overwritten with local state.
        deleted: Remote events deleted because no task references them.
            Counts successful deletes only.
        synced: Linked pairs that are converged at the end of the pass
            (updated or already identical).
        pending_links: New mappings the caller must persist.
        orphaned: Ids of tasks whose remote event vanished and were left
            alone under the ``report`` orphan policy.
        failures: One dict per failed operation with ``"action"``,
            ``"task_id"``, ``"remote_event_id"`` and ``"error"`` keys.
        outcomes: Every operation attempted, in order of completion.
        cancelled: Whether the pass stopped early on a cancellation request.
    """

    created: int = 0
    updated: int = 0
    deleted: int = 0
    synced: int = 0
    pending_links: list[PendingLink] = field(default_factory=list)
    orphaned: list[int] = field(default_factory=list)
    failures: list[dict] = field(default_factory=list)
    outcomes: list[ItemOutcome] = field(default_factory=list)
    cancelled: bool = False

    @property
    def total_changes(self) -> int:
        """Number of remote writes that succeeded."""
        return self.created + self.updated + self.deleted

    @property
    def has_failures(self) -> bool:
        """Whether any operation failed."""
        return len(self.failures) > 0

    @property
    def write_failures(self) -> list[dict]:
        """Failed creates and updates.

        Failed deletes are excluded: protected provider entries refuse
        deletion on every pass.
        """
        return [f for f in self.failures if f["action"] != "delete"]


@dataclass
class ImportResult:
    """Result of importing remote events as local tasks.

    Attributes:
        imported: Tasks inserted into the store.
        skipped: Remote events ignored (already linked or untitled).
    """

    imported: list[Task] = field(default_factory=list)
    skipped: int = 0


@dataclass
class BatchResult:
    """Independently reported outcome of a batch delete + insert.

    Attributes:
        delete_ok: Whether the delete leg succeeded.
        delete_error: Store error message from the delete leg, if any.
        deleted_count: Rows the store actually removed.
        add_ok: Whether the add leg succeeded.
        add_error: Store error message from the add leg, if any.
        added: Newly inserted tasks, with their assigned ids.
    """

    delete_ok: bool = True
    delete_error: str | None = None
    deleted_count: int = 0
    add_ok: bool = True
    add_error: str | None = None
    added: list[Task] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """``False`` if either leg failed."""
        return self.delete_ok and self.add_ok
