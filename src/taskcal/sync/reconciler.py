"""Reconcile local tasks with a remote calendar.

:class:`Reconciler` runs a point-in-time, pull-based pass:

1. Fetch remote events for the window and timed local tasks (concurrently).
2. Classify each task with :func:`~taskcal.sync.resolver.classify`.
3. Push local state onto every linked remote event.
4. Create remote events for unlinked tasks (and orphaned ones under
   :attr:`OrphanPolicy.RECREATE`), recording a pending link for each.
5. Delete every fetched remote event that no task referenced before the
   pass started.

Create/update failures are recorded per item and the pass continues,
unless ``fail_fast`` is set.  Delete failures are always swallowed, since
provider-managed entries (birthdays, holidays) refuse deletion.  Auth
failures always abort the pass; the aborting error carries the partial
result so links for events already created are not lost.

The reconciler never writes to the Task Store: new links are returned in
:attr:`SyncResult.pending_links` for the caller to persist (see
:func:`~taskcal.sync.links.persist_links`).
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum

from taskcal.calendar.exceptions import CalendarError, CalendarProviderError
from taskcal.calendar.provider import CalendarProvider
from taskcal.exceptions import InvalidStateError
from taskcal.models.results import Action, ImportResult, ItemOutcome, PendingLink, SyncResult
from taskcal.models.task import RemoteEvent, SyncWindow, Task, TaskDraft, default_window
from taskcal.store.base import TaskStore
from taskcal.sync.resolver import LinkState, OrphanPolicy, classify, should_create

logger = logging.getLogger(__name__)

_DEFAULT_IMPORT_DAYS = 30

Job = Callable[[], Awaitable[None]]


class UpdatePolicy(str, Enum):
    """When a linked remote event is overwritten with local state."""

    ALWAYS = "always"
    """Every pass re-pushes every linked task."""

    CHANGED = "changed"
    """Skip the write when title, description, start and duration match."""


@dataclass
class ReconciliationContext:
    """State owned by a single reconciliation call.

    Attributes:
        window: The time range fetched from the provider.
        tasks: Timed local tasks, as read at the start of the pass.
        remote_events: Fetched remote events keyed by id.
        referenced_ids: Remote ids carried by ``tasks`` before the pass.
        cancel: Optional event that stops further provider calls once set.
        result: The accumulating result.
    """

    window: SyncWindow
    tasks: list[Task]
    remote_events: dict[str, RemoteEvent]
    referenced_ids: frozenset[str]
    cancel: asyncio.Event | None = None
    result: SyncResult = field(default_factory=SyncResult)

    def should_stop(self) -> bool:
        """Check for cancellation, marking the result the first time."""
        if self.cancel is not None and self.cancel.is_set():
            if not self.result.cancelled:
                logger.warning("Reconciliation cancelled, skipping remaining operations")
            self.result.cancelled = True
        return self.result.cancelled

    def record(self, outcome: ItemOutcome) -> None:
        self.result.outcomes.append(outcome)
        if not outcome.ok:
            self.result.failures.append(
                {
                    "action": outcome.action,
                    "task_id": outcome.task_id,
                    "remote_event_id": outcome.remote_event_id,
                    "error": outcome.error,
                }
            )


class Reconciler:
    """Keeps a Task Store and a calendar provider consistent.

    Args:
        store: Source of local tasks.  Only read, except by
            :meth:`import_remote_events`.
        provider: Remote calendar operations.
        orphan_policy: Handling of tasks whose remote event vanished.
        update_policy: Whether linked events are always re-pushed.
        fail_fast: Re-raise the first create/update provider error instead
            of recording it and continuing.
        max_concurrency: Upper bound on in-flight create/update calls.
            ``1`` runs them strictly in task order.
        past_days: Default window start, in days before now.
        future_days: Default window end, in days after now.
        import_days: Default import window length, in days after now.
    """

    def __init__(
        self,
        store: TaskStore,
        provider: CalendarProvider,
        *,
        orphan_policy: OrphanPolicy = OrphanPolicy.RECREATE,
        update_policy: UpdatePolicy = UpdatePolicy.ALWAYS,
        fail_fast: bool = False,
        max_concurrency: int = 1,
        past_days: int = 180,
        future_days: int = 365,
        import_days: int = _DEFAULT_IMPORT_DAYS,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self._store = store
        self._provider = provider
        self._orphan_policy = orphan_policy
        self._update_policy = update_policy
        self._fail_fast = fail_fast
        self._max_concurrency = max_concurrency
        self._past_days = past_days
        self._future_days = future_days
        self._import_days = import_days

    # ------------------------------------------------------------------
    # Full-window reconciliation
    # ------------------------------------------------------------------

    async def reconcile(
        self,
        window: SyncWindow | None = None,
        *,
        cancel: asyncio.Event | None = None,
    ) -> SyncResult:
        """Run one reconciliation pass over *window*.

        Args:
            window: Range to reconcile.  Defaults to ``past_days`` before
                now through ``future_days`` after now.
            cancel: Once set, no further provider calls are made and the
                partial result is returned with ``cancelled=True``.

        Returns:
            The aggregated :class:`SyncResult`.

        Raises:
            CalendarAuthError: If the provider has no valid credential.
            CalendarProviderError: If listing fails, or a create/update
                fails while ``fail_fast`` is set.
            StoreError: If local tasks cannot be read.

        A calendar error raised after the fetch carries the writes applied
        so far in its ``partial_result``.
        """
        window = window or default_window(
            past_days=self._past_days, future_days=self._future_days
        )
        logger.info(
            "Reconciling %s -> %s", window.start.isoformat(), window.end.isoformat()
        )

        remote_events, tasks = await asyncio.gather(
            self._provider.list_events(window.start, window.end),
            self._store.list_timed_tasks(),
        )
        timed = [t for t in tasks if t.is_timed]

        ctx = ReconciliationContext(
            window=window,
            tasks=timed,
            remote_events={e.id: e for e in remote_events},
            referenced_ids=frozenset(t.remote_event_id for t in timed if t.remote_event_id),
            cancel=cancel,
        )
        logger.info(
            "Fetched %d remote event(s) and %d timed task(s)",
            len(ctx.remote_events),
            len(ctx.tasks),
        )

        jobs: list[Job] = []
        for task in ctx.tasks:
            start = task.due_at
            if start is None:
                continue
            state = classify(task, ctx.remote_events)
            if state is LinkState.LINKED and task.remote_event_id is not None:
                remote = ctx.remote_events[task.remote_event_id]
                jobs.append(functools.partial(self._push_update, ctx, task, start, remote))
            elif should_create(state, self._orphan_policy):
                if state is LinkState.ORPHANED:
                    logger.info(
                        "Task %d lost remote event %s, recreating",
                        task.id,
                        task.remote_event_id,
                    )
                jobs.append(functools.partial(self._push_create, ctx, task, start))
            else:
                logger.warning(
                    "Task %d is linked to missing remote event %s", task.id, task.remote_event_id
                )
                ctx.result.orphaned.append(task.id)

        try:
            await self._run_jobs(ctx, jobs)
            await self._delete_unreferenced(ctx)
        except CalendarError as exc:
            exc.partial_result = ctx.result
            logger.error(
                "Reconcile aborted after %d create(s), %d update(s), %d delete(s): %s",
                ctx.result.created,
                ctx.result.updated,
                ctx.result.deleted,
                exc,
            )
            raise

        result = ctx.result
        logger.info(
            "Reconcile complete: %d created, %d updated, %d deleted, %d synced, "
            "%d orphaned, %d failure(s)%s",
            result.created,
            result.updated,
            result.deleted,
            result.synced,
            len(result.orphaned),
            len(result.failures),
            " (cancelled)" if result.cancelled else "",
        )
        return result

    async def _run_jobs(self, ctx: ReconciliationContext, jobs: list[Job]) -> None:
        """Run create/update jobs, sequentially or with bounded concurrency."""
        if self._max_concurrency == 1:
            for job in jobs:
                if ctx.should_stop():
                    return
                await job()
            return

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def bounded(job: Job) -> None:
            async with semaphore:
                if ctx.should_stop():
                    return
                await job()

        running = [asyncio.ensure_future(bounded(job)) for job in jobs]
        try:
            await asyncio.gather(*running)
        except BaseException:
            for pending in running:
                pending.cancel()
            await asyncio.gather(*running, return_exceptions=True)
            raise

    async def _push_update(
        self,
        ctx: ReconciliationContext,
        task: Task,
        start: datetime,
        remote: RemoteEvent,
    ) -> None:
        event_id = remote.id
        if self._update_policy is UpdatePolicy.CHANGED and _matches(task, remote):
            logger.debug("Task %d already matches event %s", task.id, event_id)
            ctx.result.synced += 1
            ctx.record(ItemOutcome("skip", task.id, event_id))
            return

        try:
            await self._provider.update_event(
                event_id,
                task.description,
                task.description,
                start,
                task.effective_duration,
            )
        except CalendarProviderError as exc:
            if self._fail_fast:
                raise
            self._record_failure(ctx, "update", task.id, event_id, exc)
            return

        ctx.result.updated += 1
        ctx.result.synced += 1
        ctx.record(ItemOutcome("update", task.id, event_id))
        logger.info("Updated event %s from task %d '%s'", event_id, task.id, task.description)

    async def _push_create(
        self, ctx: ReconciliationContext, task: Task, start: datetime
    ) -> None:
        try:
            event = await self._provider.create_event(
                task.description,
                task.description,
                start,
                task.effective_duration,
            )
        except CalendarProviderError as exc:
            if self._fail_fast:
                raise
            self._record_failure(ctx, "create", task.id, None, exc)
            return

        ctx.result.created += 1
        ctx.result.pending_links.append(PendingLink(task.id, event.id))
        ctx.record(ItemOutcome("create", task.id, event.id))
        logger.info("Created event %s for task %d '%s'", event.id, task.id, task.description)

    async def _delete_unreferenced(self, ctx: ReconciliationContext) -> None:
        """Delete fetched remote events no task referenced before the pass."""
        for event in ctx.remote_events.values():
            if event.id in ctx.referenced_ids:
                continue
            if ctx.should_stop():
                return

            try:
                await self._provider.delete_event(event.id)
            except CalendarProviderError as exc:
                # Protected entries (birthdays, holidays) refuse deletion.
                logger.warning("Could not delete event %s '%s': %s", event.id, event.title, exc)
                ctx.record(ItemOutcome("delete", None, event.id, ok=False, error=str(exc)))
                continue

            ctx.result.deleted += 1
            ctx.record(ItemOutcome("delete", None, event.id))
            logger.info("Deleted unreferenced event %s '%s'", event.id, event.title)

    @staticmethod
    def _record_failure(
        ctx: ReconciliationContext,
        action: Action,
        task_id: int,
        event_id: str | None,
        exc: Exception,
    ) -> None:
        logger.error("Failed to %s event for task %d: %s", action, task_id, exc)
        ctx.record(ItemOutcome(action, task_id, event_id, ok=False, error=str(exc)))

    # ------------------------------------------------------------------
    # Single-task link
    # ------------------------------------------------------------------

    async def link_task_to_calendar(self, task: Task) -> str:
        """Create one remote event for *task* and return its id.

        The caller persists the returned id as the task's
        ``remote_event_id``.  No update or delete happens.

        Raises:
            InvalidStateError: If the task is untimed or already linked.
                Raised before any provider call.
            CalendarAuthError: If the provider has no valid credential.
            CalendarProviderError: If the provider rejects the create.
        """
        if task.due_at is None:
            raise InvalidStateError(f"Task {task.id} has no due_at and cannot be linked")
        if task.remote_event_id is not None:
            raise InvalidStateError(
                f"Task {task.id} is already linked to event {task.remote_event_id}"
            )

        event = await self._provider.create_event(
            task.description,
            task.description,
            task.due_at,
            task.effective_duration,
        )
        logger.info("Linked task %d to new event %s", task.id, event.id)
        return event.id

    # ------------------------------------------------------------------
    # Pull from calendar
    # ------------------------------------------------------------------

    async def import_remote_events(self, window: SyncWindow | None = None) -> ImportResult:
        """Insert a task for every remote event no local task links to.

        Untitled and all-day events are skipped.  Imported tasks carry the
        event id, so the next reconciliation pass treats them as linked.

        Args:
            window: Range to import.  Defaults to now through
                ``import_days`` ahead.

        Raises:
            CalendarAuthError: If the provider has no valid credential.
            CalendarProviderError: If listing fails.
            StoreError: If tasks cannot be read or inserted.
        """
        if window is None:
            now = datetime.now(timezone.utc)
            window = SyncWindow(start=now, end=now + timedelta(days=self._import_days))

        remote_events, tasks = await asyncio.gather(
            self._provider.list_events(window.start, window.end),
            self._store.list_tasks(),
        )
        known = {t.remote_event_id for t in tasks if t.remote_event_id}

        result = ImportResult()
        drafts: list[TaskDraft] = []
        for event in remote_events:
            if event.id in known or event.all_day or not event.title.strip():
                result.skipped += 1
                continue
            minutes = event.duration_minutes
            drafts.append(
                TaskDraft(
                    description=event.title,
                    due_at=event.start,
                    duration=minutes if minutes > 0 else None,
                    remote_event_id=event.id,
                )
            )

        if drafts:
            result.imported = await self._store.insert_tasks(drafts)

        logger.info(
            "Imported %d event(s) as tasks, skipped %d", len(result.imported), result.skipped
        )
        return result


def _matches(task: Task, event: RemoteEvent) -> bool:
    """Whether *event* already reflects *task*'s calendar-facing fields."""
    return (
        event.title == task.description
        and event.description == task.description
        and task.due_at is not None
        and _as_utc(event.start) == _as_utc(task.due_at)
        and event.duration_minutes == task.effective_duration
    )


def _as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken as UTC, as in the provider's range queries."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
