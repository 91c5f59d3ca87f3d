"""Write reconciliation results back into the Task Store."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from taskcal.exceptions import StoreError
from taskcal.models.results import PendingLink
from taskcal.store.base import TaskStore

logger = logging.getLogger(__name__)


async def persist_links(store: TaskStore, links: Iterable[PendingLink]) -> list[PendingLink]:
    """Record each pending link as the task's ``remote_event_id``.

    Links are written one at a time so a failure on one task does not hide
    the others.  A link that is not persisted means the next pass creates
    another remote event for that task.

    Args:
        store: The Task Store.
        links: Links returned in ``SyncResult.pending_links``.

    Returns:
        The links that could not be written.
    """
    failed: list[PendingLink] = []
    for link in links:
        try:
            await store.update_task(link.task_id, remote_event_id=link.remote_event_id)
        except StoreError as exc:
            logger.error(
                "Could not link task %d to event %s: %s",
                link.task_id,
                link.remote_event_id,
                exc,
            )
            failed.append(link)
    return failed
