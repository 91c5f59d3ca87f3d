"""Task Store persisted as a single JSON document.

File layout::

    {
      "next_id": 4,
      "tasks": [{"id": 1, "description": "...", "due_at": "...", ...}, ...]
    }

Each operation reloads the file, applies the change in memory and writes
the whole document back through a temporary file, so an interrupted write
never leaves a truncated store behind.  The file is created on first write.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from taskcal.exceptions import StoreError
from taskcal.models.task import Task, TaskDraft
from taskcal.store.memory import InMemoryTaskStore

logger = logging.getLogger(__name__)


class JsonTaskStore(InMemoryTaskStore):
    """File-backed Task Store.

    Args:
        path: Location of the JSON document.
    """

    def __init__(self, path: Path | str) -> None:
        super().__init__()
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    async def list_tasks(self) -> list[Task]:
        await self._reload()
        return self._list(timed_only=False)

    async def list_timed_tasks(self) -> list[Task]:
        await self._reload()
        return self._list(timed_only=True)

    async def get_task(self, task_id: int) -> Task:
        await self._reload()
        return self._get(task_id)

    async def insert_tasks(self, drafts: Iterable[TaskDraft]) -> list[Task]:
        await self._reload()
        created = self._insert(drafts)
        await self._flush()
        return created

    async def update_task(self, task_id: int, **fields: Any) -> Task:
        await self._reload()
        updated = self._update(task_id, fields)
        await self._flush()
        return updated

    async def delete_tasks(self, ids: Iterable[int]) -> int:
        await self._reload()
        removed = self._delete(ids)
        if removed:
            await self._flush()
        return removed

    # ------------------------------------------------------------------
    # File I/O
    # ------------------------------------------------------------------

    async def _reload(self) -> None:
        self._tasks, self._next_id = await asyncio.to_thread(self._read)

    async def _flush(self) -> None:
        await asyncio.to_thread(self._write)

    def _read(self) -> tuple[dict[int, Task], int]:
        if not self._path.exists():
            return {}, 1

        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
            tasks = [Task.model_validate(raw) for raw in document.get("tasks", [])]
            next_id = int(document.get("next_id", 1))
        except OSError as exc:
            raise StoreError(f"Cannot read task store {self._path}: {exc}") from exc
        except (json.JSONDecodeError, ValidationError, TypeError, ValueError) as exc:
            raise StoreError(f"Corrupt task store {self._path}: {exc}") from exc

        table = {task.id: task for task in tasks}
        next_id = max([next_id, *(task.id + 1 for task in tasks)])
        return table, next_id

    def _write(self) -> None:
        document = {
            "next_id": self._next_id,
            "tasks": [t.model_dump(mode="json") for t in self._list(timed_only=False)],
        }
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(document, indent=2), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise StoreError(f"Cannot write task store {self._path}: {exc}") from exc
        logger.debug("Wrote %d task(s) to %s", len(document["tasks"]), self._path)
