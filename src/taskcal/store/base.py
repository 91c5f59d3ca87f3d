"""Task Store interface consumed by the reconciliation engine."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from taskcal.models.task import Task, TaskDraft

# Fields a caller may change through ``update_task``.
UPDATABLE_FIELDS: frozenset[str] = frozenset(
    {"description", "due_at", "duration", "is_completed", "remote_event_id"}
)


@runtime_checkable
class TaskStore(Protocol):
    """Persistent collection of local tasks.

    Every method raises :class:`~taskcal.exceptions.StoreError` on a
    persistence failure.
    """

    async def list_tasks(self) -> list[Task]:
        """Return every task, timed or not."""
        ...

    async def list_timed_tasks(self) -> list[Task]:
        """Return tasks that have a ``due_at``."""
        ...

    async def get_task(self, task_id: int) -> Task:
        """Return one task; ``StoreError`` if it does not exist."""
        ...

    async def insert_tasks(self, drafts: Iterable[TaskDraft]) -> list[Task]:
        """Insert all *drafts* (all or nothing) and return the stored tasks."""
        ...

    async def update_task(self, task_id: int, **fields: Any) -> Task:
        """Change *fields* on one task and return the updated record."""
        ...

    async def delete_tasks(self, ids: Iterable[int]) -> int:
        """Delete every task whose id is in *ids*; return how many existed."""
        ...
