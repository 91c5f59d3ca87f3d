"""Combined bulk delete and bulk insert against the Task Store.

:func:`batch_mutate` runs both legs even when one of them fails and reports
each leg's outcome separately in a :class:`~taskcal.models.results.BatchResult`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from taskcal.exceptions import StoreError
from taskcal.models.results import BatchResult
from taskcal.models.task import TaskDraft
from taskcal.store.base import TaskStore

logger = logging.getLogger(__name__)


async def batch_mutate(
    store: TaskStore,
    ids_to_delete: Iterable[int] = (),
    tasks_to_add: Iterable[TaskDraft | dict[str, Any]] = (),
) -> BatchResult:
    """Delete *ids_to_delete* and insert *tasks_to_add* as independent legs.

    The delete leg is one set-membership delete; its count is whatever the
    store reports, which may be lower than requested when some ids no
    longer exist.  The add leg inserts every draft in one call.  A failure
    in either leg is recorded on the result and does not stop the other.
    Empty legs are skipped and reported as successful.

    Args:
        store: The Task Store to mutate.
        ids_to_delete: Ids of tasks to remove.
        tasks_to_add: Drafts (or plain dicts with the draft fields) to
            insert.  New tasks are never completed.

    Returns:
        A :class:`BatchResult`; ``result.success`` is ``False`` if either
        leg failed.
    """
    result = BatchResult()
    delete_ids = set(ids_to_delete)
    drafts = list(tasks_to_add)

    if delete_ids:
        try:
            result.deleted_count = await store.delete_tasks(delete_ids)
        except StoreError as exc:
            result.delete_ok = False
            result.delete_error = exc.message
            logger.error("Batch delete of %d task(s) failed: %s", len(delete_ids), exc)

    if drafts:
        try:
            validated = [
                d if isinstance(d, TaskDraft) else TaskDraft.model_validate(d) for d in drafts
            ]
            result.added = await store.insert_tasks(validated)
        except ValidationError as exc:
            result.add_ok = False
            result.add_error = f"Invalid task data: {exc}"
            logger.error("Batch add rejected invalid task data: %s", exc)
        except StoreError as exc:
            result.add_ok = False
            result.add_error = exc.message
            logger.error("Batch add of %d task(s) failed: %s", len(drafts), exc)

    logger.info(
        "Batch complete: %d deleted, %d added (delete_ok=%s, add_ok=%s)",
        result.deleted_count,
        len(result.added),
        result.delete_ok,
        result.add_ok,
    )
    return result
