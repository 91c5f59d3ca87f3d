"""In-process Task Store.

Used by tests and as the table logic behind
:class:`~taskcal.store.json_file.JsonTaskStore`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from taskcal.exceptions import StoreError
from taskcal.models.task import Task, TaskDraft
from taskcal.store.base import UPDATABLE_FIELDS

logger = logging.getLogger(__name__)


class InMemoryTaskStore:
    """Task Store holding tasks in a dict keyed by id.

    Ids are assigned sequentially from 1 and never reused, even after
    deletion.

    Args:
        tasks: Optional initial tasks.  The id counter starts after the
            highest id given.
    """

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        self._tasks: dict[int, Task] = {}
        self._next_id = 1
        for task in tasks:
            self._tasks[task.id] = task
            self._next_id = max(self._next_id, task.id + 1)

    # ------------------------------------------------------------------
    # TaskStore API
    # ------------------------------------------------------------------

    async def list_tasks(self) -> list[Task]:
        return self._list(timed_only=False)

    async def list_timed_tasks(self) -> list[Task]:
        return self._list(timed_only=True)

    async def get_task(self, task_id: int) -> Task:
        return self._get(task_id)

    async def insert_tasks(self, drafts: Iterable[TaskDraft]) -> list[Task]:
        return self._insert(drafts)

    async def update_task(self, task_id: int, **fields: Any) -> Task:
        return self._update(task_id, fields)

    async def delete_tasks(self, ids: Iterable[int]) -> int:
        return self._delete(ids)

    # ------------------------------------------------------------------
    # Table operations
    # ------------------------------------------------------------------

    def _list(self, *, timed_only: bool) -> list[Task]:
        tasks = sorted(self._tasks.values(), key=lambda t: t.id)
        if timed_only:
            tasks = [t for t in tasks if t.is_timed]
        return tasks

    def _get(self, task_id: int) -> Task:
        try:
            return self._tasks[task_id]
        except KeyError:
            raise StoreError(f"Task {task_id} not found") from None

    def _insert(self, drafts: Iterable[TaskDraft]) -> list[Task]:
        created: list[Task] = []
        next_id = self._next_id
        for draft in drafts:
            created.append(
                Task(
                    id=next_id,
                    description=draft.description,
                    due_at=draft.due_at,
                    duration=draft.duration,
                    remote_event_id=draft.remote_event_id,
                )
            )
            next_id += 1

        # Commit only after every draft converted.
        for task in created:
            self._tasks[task.id] = task
        self._next_id = next_id

        logger.debug("Inserted %d task(s)", len(created))
        return created

    def _update(self, task_id: int, fields: dict[str, Any]) -> Task:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise StoreError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        current = self._get(task_id)
        try:
            updated = Task.model_validate({**current.model_dump(), **fields})
        except ValidationError as exc:
            raise StoreError(f"Invalid update for task {task_id}: {exc}") from exc

        self._tasks[task_id] = updated
        logger.debug("Updated task %d: %s", task_id, ", ".join(sorted(fields)))
        return updated

    def _delete(self, ids: Iterable[int]) -> int:
        removed = 0
        for task_id in set(ids):
            if self._tasks.pop(task_id, None) is not None:
                removed += 1
        logger.debug("Deleted %d task(s)", removed)
        return removed
