"""Tests for :class:`~taskcal.sync.reconciler.Reconciler`.

Runs against :class:`InMemoryTaskStore` and the in-memory
:class:`~tests.fakes.FakeCalendarProvider`.

Test matrix:

Full pass (8):
| test_creates_event_for_unlinked_task | Unlinked timed task | created=1, pending link, store untouched |
| test_end_to_end_single_task | 2024-01-10T10:00Z/30 | One event 10:00-10:30Z |
| test_updates_linked_event | Linked, remote stale | update pushed, synced=1 |
| test_deletes_unreferenced_event | Stray remote event | deleted=1 |
| test_idempotent_after_persisting_links | Two passes | created=0, deleted=0 on 2nd |
| test_two_passes_without_persisting | Links dropped | Two creates, two ids |
| test_untimed_tasks_excluded | due_at None | Never synced, link not referenced |
| test_default_window | No window | 180 days back, 365 ahead |

Policies (7):
| test_orphan_recreated_by_default | Remote event gone | New event, new link |
| test_orphan_report_makes_no_calls | REPORT | orphaned=[id], no create |
| test_changed_policy_skips_identical | CHANGED, identical | No update call, synced=1 |
| test_changed_policy_updates_different | CHANGED, moved | Update pushed |
| test_always_policy_updates_identical | ALWAYS, identical | Update pushed |
| test_changed_policy_naive_due_matches_utc_start | CHANGED, naive due | Naive taken as UTC, no update |
| test_changed_policy_compares_instants_across_offsets | CHANGED, +01:00 start | Same instant, no update |

Failures (14):
| test_delete_failure_isolated | Protected event first | Later delete still happens |
| test_update_failure_isolated | One update fails | Other task updated |
| test_create_failure_isolated | One create fails | No link for it |
| test_fail_fast_propagates | fail_fast + failure | Raises, later tasks untouched |
| test_auth_error_on_update_propagates | CalendarAuthError | Raises without fail_fast |
| test_auth_error_on_delete_propagates | CalendarAuthError | Raises |
| test_list_failure_propagates | list_events fails | Raises |
| test_store_failure_propagates | Store read fails | StoreError |
| test_invalid_concurrency | max_concurrency=0 | ValueError |
| test_auth_error_mid_pass_carries_partial_result | Auth fails on 2nd create | partial_result holds 1st link |
| test_partial_links_prevent_duplicates_on_next_pass | Persist partial, rerun | Only task 2 created |
| test_fail_fast_error_carries_partial_result | fail_fast after a create | partial_result holds link |
| test_fetch_error_has_no_partial_result | list_events fails | partial_result is None |
| test_invalid_stored_duration_fails_before_any_write | duration -5 on disk | StoreError, no writes |

Cancellation and concurrency (4), link (4), import (4).
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from taskcal.calendar.exceptions import CalendarAuthError, CalendarProviderError
from taskcal.exceptions import InvalidStateError, StoreError
from taskcal.models.results import PendingLink
from taskcal.models.task import RemoteEvent, SyncWindow, Task
from taskcal.store.json_file import JsonTaskStore
from taskcal.store.memory import InMemoryTaskStore
from taskcal.sync.links import persist_links
from taskcal.sync.reconciler import Reconciler, UpdatePolicy
from taskcal.sync.resolver import OrphanPolicy
from tests.fakes import ExpiringCalendarProvider, FakeCalendarProvider

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

T0 = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)


def _task(
    task_id: int,
    description: str = "Gym",
    *,
    due_at: datetime | None = T0,
    duration: int | None = None,
    remote_event_id: str | None = None,
) -> Task:
    return Task(
        id=task_id,
        description=description,
        due_at=due_at,
        duration=duration,
        remote_event_id=remote_event_id,
    )


def _event(
    event_id: str,
    title: str = "Old title",
    *,
    start: datetime = T0,
    minutes: int = 60,
    all_day: bool = False,
) -> RemoteEvent:
    return RemoteEvent(
        id=event_id,
        title=title,
        description=title,
        start=start,
        end=start + timedelta(minutes=minutes),
        all_day=all_day,
    )


def _reconciler(
    store: InMemoryTaskStore, provider: FakeCalendarProvider, **kwargs: object
) -> Reconciler:
    return Reconciler(store, provider, **kwargs)  # type: ignore[arg-type]


class _FailingStore(InMemoryTaskStore):
    async def list_timed_tasks(self) -> list[Task]:
        raise StoreError("database is locked")


# ---------------------------------------------------------------------------
# Full pass
# ---------------------------------------------------------------------------


class TestFullPass:
    async def test_creates_event_for_unlinked_task(self, window: SyncWindow) -> None:
        store = InMemoryTaskStore([_task(1, "Dentist", duration=45)])
        provider = FakeCalendarProvider()

        result = await _reconciler(store, provider).reconcile(window)

        assert result.created == 1
        assert result.pending_links == [PendingLink(1, "evt-1")]
        assert provider.calls_to("create_event") == [("create_event", "Dentist", "Dentist", T0, 45)]
        # The reconciler never writes to the store.
        assert (await store.get_task(1)).remote_event_id is None

    async def test_end_to_end_single_task(self) -> None:
        due = datetime(2024, 1, 10, 10, 0, tzinfo=timezone.utc)
        store = InMemoryTaskStore([_task(1, due_at=due, duration=30)])
        provider = FakeCalendarProvider()
        window = SyncWindow(start=due - timedelta(days=30), end=due + timedelta(days=30))

        result = await _reconciler(store, provider).reconcile(window)

        assert result.created == 1
        assert [link.task_id for link in result.pending_links] == [1]
        events = await provider.list_events(window.start, window.end)
        assert len(events) == 1
        assert events[0].id == result.pending_links[0].remote_event_id
        assert events[0].start == due
        assert events[0].end == datetime(2024, 1, 10, 10, 30, tzinfo=timezone.utc)

    async def test_updates_linked_event(self, window: SyncWindow) -> None:
        moved = T0 + timedelta(hours=3)
        store = InMemoryTaskStore([_task(1, "New title", due_at=moved, remote_event_id="g1")])
        provider = FakeCalendarProvider([_event("g1")])

        result = await _reconciler(store, provider).reconcile(window)

        assert (result.updated, result.synced, result.created, result.deleted) == (1, 1, 0, 0)
        assert provider.calls_to("update_event") == [
            ("update_event", "g1", "New title", "New title", moved, 60)
        ]
        assert provider.events["g1"].title == "New title"
        assert result.pending_links == []

    async def test_deletes_unreferenced_event(self, window: SyncWindow) -> None:
        store = InMemoryTaskStore()
        provider = FakeCalendarProvider([_event("stray")])

        result = await _reconciler(store, provider).reconcile(window)

        assert result.deleted == 1
        assert "stray" not in provider.events
        assert [(o.action, o.task_id, o.remote_event_id) for o in result.outcomes] == [
            ("delete", None, "stray")
        ]

    async def test_idempotent_after_persisting_links(self, window: SyncWindow) -> None:
        store = InMemoryTaskStore([_task(1, "A"), _task(2, "B", due_at=T0 + timedelta(days=1))])
        provider = FakeCalendarProvider([_event("stray")])
        reconciler = _reconciler(store, provider)

        first = await reconciler.reconcile(window)
        assert await persist_links(store, first.pending_links) == []
        second = await reconciler.reconcile(window)

        assert (first.created, first.deleted) == (2, 1)
        assert (second.created, second.deleted, second.updated) == (0, 0, 2)
        # Every timed task is linked to an existing event.
        for task in await store.list_timed_tasks():
            assert task.remote_event_id in provider.events

    async def test_two_passes_without_persisting(self, window: SyncWindow) -> None:
        store = InMemoryTaskStore([_task(1)])
        provider = FakeCalendarProvider()
        reconciler = _reconciler(store, provider)

        first = await reconciler.reconcile(window)
        second = await reconciler.reconcile(window)

        assert len(provider.calls_to("create_event")) == 2
        assert first.pending_links[0].remote_event_id != second.pending_links[0].remote_event_id
        # The first event is unreferenced on the second pass.
        assert second.deleted == 1
        assert provider.calls_to("delete_event") == [("delete_event", "evt-1")]

    async def test_untimed_tasks_excluded(self, window: SyncWindow) -> None:
        store = InMemoryTaskStore(
            [
                _task(1, "Someday", due_at=None),
                _task(2, "Someday linked", due_at=None, remote_event_id="u1"),
            ]
        )
        provider = FakeCalendarProvider([_event("u1")])

        result = await _reconciler(store, provider).reconcile(window)

        assert provider.calls_to("create_event") == []
        assert provider.calls_to("update_event") == []
        assert all(o.task_id is None for o in result.outcomes)
        # An event linked only from an untimed task is not referenced.
        assert result.deleted == 1
        assert "u1" not in provider.events

    async def test_default_window(self) -> None:
        provider = FakeCalendarProvider()

        await _reconciler(InMemoryTaskStore(), provider).reconcile()

        (_, start, end) = provider.calls_to("list_events")[0]
        assert end - start == timedelta(days=180 + 365)
        assert start < datetime.now(timezone.utc) < end


# ---------------------------------------------------------------------------
# Orphan and update policies
# ---------------------------------------------------------------------------


class TestPolicies:
    async def test_orphan_recreated_by_default(self, window: SyncWindow) -> None:
        store = InMemoryTaskStore([_task(1, remote_event_id="gone")])
        provider = FakeCalendarProvider()

        result = await _reconciler(store, provider).reconcile(window)

        assert result.created == 1
        assert result.pending_links == [PendingLink(1, "evt-1")]
        assert result.orphaned == []

    async def test_orphan_report_makes_no_calls(self, window: SyncWindow) -> None:
        store = InMemoryTaskStore([_task(1, remote_event_id="gone")])
        provider = FakeCalendarProvider()

        result = await _reconciler(
            store, provider, orphan_policy=OrphanPolicy.REPORT
        ).reconcile(window)

        assert result.orphaned == [1]
        assert result.created == 0
        assert [c[0] for c in provider.calls] == ["list_events"]

    async def test_changed_policy_skips_identical(self, window: SyncWindow) -> None:
        store = InMemoryTaskStore([_task(1, "Gym", remote_event_id="g1")])
        provider = FakeCalendarProvider([_event("g1", "Gym")])

        result = await _reconciler(
            store, provider, update_policy=UpdatePolicy.CHANGED
        ).reconcile(window)

        assert provider.calls_to("update_event") == []
        assert (result.updated, result.synced) == (0, 1)
        assert [o.action for o in result.outcomes] == ["skip"]
        assert result.total_changes == 0

    async def test_changed_policy_updates_different(self, window: SyncWindow) -> None:
        store = InMemoryTaskStore([_task(1, "Gym", duration=90, remote_event_id="g1")])
        provider = FakeCalendarProvider([_event("g1", "Gym")])

        result = await _reconciler(
            store, provider, update_policy=UpdatePolicy.CHANGED
        ).reconcile(window)

        assert result.updated == 1
        assert provider.events["g1"].duration_minutes == 90

    async def test_always_policy_updates_identical(self, window: SyncWindow) -> None:
        store = InMemoryTaskStore([_task(1, "Gym", remote_event_id="g1")])
        provider = FakeCalendarProvider([_event("g1", "Gym")])

        result = await _reconciler(store, provider).reconcile(window)

        assert result.updated == 1
        assert len(provider.calls_to("update_event")) == 1

    async def test_changed_policy_naive_due_matches_utc_start(self, window: SyncWindow) -> None:
        store = InMemoryTaskStore(
            [_task(1, "Gym", due_at=T0.replace(tzinfo=None), remote_event_id="g1")]
        )
        provider = FakeCalendarProvider([_event("g1", "Gym")])

        result = await _reconciler(
            store, provider, update_policy=UpdatePolicy.CHANGED
        ).reconcile(window)

        assert (result.updated, result.synced) == (0, 1)
        assert provider.calls_to("update_event") == []

    async def test_changed_policy_compares_instants_across_offsets(
        self, window: SyncWindow
    ) -> None:
        paris = timezone(timedelta(hours=1))
        store = InMemoryTaskStore([_task(1, "Gym", remote_event_id="g1")])
        provider = FakeCalendarProvider([_event("g1", "Gym", start=T0.astimezone(paris))])

        result = await _reconciler(
            store, provider, update_policy=UpdatePolicy.CHANGED
        ).reconcile(window)

        assert result.updated == 0
        assert provider.calls_to("update_event") == []


# ---------------------------------------------------------------------------
# Failure handling
# ---------------------------------------------------------------------------


class TestFailures:
    async def test_delete_failure_isolated(self, window: SyncWindow) -> None:
        provider = FakeCalendarProvider([_event("holiday"), _event("stray")])
        provider.protected.add("holiday")

        result = await _reconciler(InMemoryTaskStore(), provider).reconcile(window)

        assert result.deleted == 1
        assert "holiday" in provider.events
        assert "stray" not in provider.events
        assert result.failures == [
            {
                "action": "delete",
                "task_id": None,
                "remote_event_id": "holiday",
                "error": "event holiday is read-only",
            }
        ]
        assert result.write_failures == []

    async def test_update_failure_isolated(self, window: SyncWindow) -> None:
        store = InMemoryTaskStore(
            [_task(1, "A", remote_event_id="g1"), _task(2, "B", remote_event_id="g2")]
        )
        provider = FakeCalendarProvider([_event("g1"), _event("g2")])
        provider.fail_update.add("g1")

        result = await _reconciler(store, provider).reconcile(window)

        assert (result.updated, result.synced) == (1, 1)
        assert [(f["action"], f["task_id"]) for f in result.failures] == [("update", 1)]
        assert provider.events["g2"].title == "B"

    async def test_create_failure_isolated(self, window: SyncWindow) -> None:
        store = InMemoryTaskStore([_task(1, "Rejected"), _task(2, "Accepted")])
        provider = FakeCalendarProvider()
        provider.fail_create_titles.add("Rejected")

        result = await _reconciler(store, provider).reconcile(window)

        assert result.created == 1
        assert result.pending_links == [PendingLink(2, "evt-1")]
        (failure,) = result.write_failures
        assert failure["action"] == "create"
        assert failure["task_id"] == 1
        assert failure["remote_event_id"] is None

    async def test_fail_fast_propagates(self, window: SyncWindow) -> None:
        store = InMemoryTaskStore([_task(1, "Rejected"), _task(2, "Accepted")])
        provider = FakeCalendarProvider([_event("stray")])
        provider.fail_create_titles.add("Rejected")

        with pytest.raises(CalendarProviderError):
            await _reconciler(store, provider, fail_fast=True).reconcile(window)

        assert len(provider.calls_to("create_event")) == 1
        assert provider.calls_to("delete_event") == []

    async def test_auth_error_on_update_propagates(self, window: SyncWindow) -> None:
        store = InMemoryTaskStore([_task(1, remote_event_id="g1")])
        provider = FakeCalendarProvider([_event("g1")])
        provider.raise_on["update_event"] = CalendarAuthError("token expired")

        with pytest.raises(CalendarAuthError):
            await _reconciler(store, provider).reconcile(window)

    async def test_auth_error_on_delete_propagates(self, window: SyncWindow) -> None:
        provider = FakeCalendarProvider([_event("stray")])
        provider.raise_on["delete_event"] = CalendarAuthError("token expired")

        with pytest.raises(CalendarAuthError):
            await _reconciler(InMemoryTaskStore(), provider).reconcile(window)

    async def test_list_failure_propagates(self, window: SyncWindow) -> None:
        provider = FakeCalendarProvider()
        provider.raise_on["list_events"] = CalendarProviderError("backend error", 500)

        with pytest.raises(CalendarProviderError):
            await _reconciler(InMemoryTaskStore([_task(1)]), provider).reconcile(window)

        assert provider.calls_to("create_event") == []

    async def test_store_failure_propagates(self, window: SyncWindow) -> None:
        provider = FakeCalendarProvider()

        with pytest.raises(StoreError, match="locked"):
            await _reconciler(_FailingStore(), provider).reconcile(window)

    def test_invalid_concurrency(self) -> None:
        with pytest.raises(ValueError, match="max_concurrency"):
            Reconciler(InMemoryTaskStore(), FakeCalendarProvider(), max_concurrency=0)

    async def test_auth_error_mid_pass_carries_partial_result(self, window: SyncWindow) -> None:
        store = InMemoryTaskStore([_task(1, "A"), _task(2, "B")])
        provider = ExpiringCalendarProvider(creates_allowed=1)

        with pytest.raises(CalendarAuthError) as exc_info:
            await _reconciler(store, provider).reconcile(window)

        partial = exc_info.value.partial_result
        assert partial is not None
        assert partial.created == 1
        assert partial.pending_links == [PendingLink(1, "evt-1")]
        assert list(provider.events) == ["evt-1"]

    async def test_partial_links_prevent_duplicates_on_next_pass(
        self, window: SyncWindow
    ) -> None:
        store = InMemoryTaskStore([_task(1, "A"), _task(2, "B")])
        provider = ExpiringCalendarProvider(creates_allowed=1)
        with pytest.raises(CalendarAuthError) as exc_info:
            await _reconciler(store, provider).reconcile(window)
        await persist_links(store, exc_info.value.partial_result.pending_links)

        # Credential restored.
        provider.creates_allowed = 10
        result = await _reconciler(store, provider).reconcile(window)

        assert result.created == 1
        assert result.updated == 1
        assert result.pending_links == [PendingLink(2, "evt-2")]
        assert sorted(provider.events) == ["evt-1", "evt-2"]

    async def test_fail_fast_error_carries_partial_result(self, window: SyncWindow) -> None:
        store = InMemoryTaskStore([_task(1, "Accepted"), _task(2, "Rejected")])
        provider = FakeCalendarProvider()
        provider.fail_create_titles.add("Rejected")

        with pytest.raises(CalendarProviderError) as exc_info:
            await _reconciler(store, provider, fail_fast=True).reconcile(window)

        partial = exc_info.value.partial_result
        assert partial is not None
        assert partial.pending_links == [PendingLink(1, "evt-1")]

    async def test_fetch_error_has_no_partial_result(self, window: SyncWindow) -> None:
        provider = FakeCalendarProvider()
        provider.raise_on["list_events"] = CalendarAuthError("token expired")

        with pytest.raises(CalendarAuthError) as exc_info:
            await _reconciler(InMemoryTaskStore([_task(1)]), provider).reconcile(window)

        assert exc_info.value.partial_result is None

    async def test_invalid_stored_duration_fails_before_any_write(
        self, tmp_path: Path, window: SyncWindow
    ) -> None:
        path = tmp_path / "tasks.json"
        path.write_text(
            json.dumps(
                {
                    "next_id": 2,
                    "tasks": [
                        {"id": 1, "description": "Gym", "due_at": T0.isoformat(), "duration": -5}
                    ],
                }
            )
        )
        provider = FakeCalendarProvider([_event("stray")])

        with pytest.raises(StoreError, match="Corrupt"):
            await _reconciler(JsonTaskStore(path), provider).reconcile(window)

        assert provider.calls_to("create_event") == []
        assert provider.calls_to("delete_event") == []


# ---------------------------------------------------------------------------
# Cancellation and concurrency
# ---------------------------------------------------------------------------


class _CancellingProvider(FakeCalendarProvider):
    """Sets *cancel* after the first successful create."""

    def __init__(self, cancel: asyncio.Event) -> None:
        super().__init__([_event("stray")])
        self._cancel = cancel

    async def create_event(self, *args: object, **kwargs: object) -> RemoteEvent:
        event = await super().create_event(*args, **kwargs)  # type: ignore[arg-type]
        self._cancel.set()
        return event


class _TrackingProvider(FakeCalendarProvider):
    """Records the peak number of in-flight create calls."""

    def __init__(self) -> None:
        super().__init__()
        self.in_flight = 0
        self.peak = 0

    async def create_event(self, *args: object, **kwargs: object) -> RemoteEvent:
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        await asyncio.sleep(0.01)
        try:
            return await super().create_event(*args, **kwargs)  # type: ignore[arg-type]
        finally:
            self.in_flight -= 1


class TestCancellationAndConcurrency:
    async def test_cancel_before_start(self, window: SyncWindow) -> None:
        cancel = asyncio.Event()
        cancel.set()
        provider = FakeCalendarProvider([_event("stray")])

        result = await _reconciler(InMemoryTaskStore([_task(1)]), provider).reconcile(
            window, cancel=cancel
        )

        assert result.cancelled is True
        assert [c[0] for c in provider.calls] == ["list_events"]

    async def test_cancel_mid_pass_keeps_partial_result(self, window: SyncWindow) -> None:
        cancel = asyncio.Event()
        provider = _CancellingProvider(cancel)
        store = InMemoryTaskStore([_task(1, "A"), _task(2, "B")])

        result = await _reconciler(store, provider).reconcile(window, cancel=cancel)

        assert result.cancelled is True
        assert result.created == 1
        assert result.pending_links == [PendingLink(1, "evt-1")]
        assert provider.calls_to("delete_event") == []

    async def test_bounded_concurrency(self, window: SyncWindow) -> None:
        provider = _TrackingProvider()
        store = InMemoryTaskStore([_task(i, f"Task {i}") for i in range(1, 7)])

        result = await _reconciler(store, provider, max_concurrency=3).reconcile(window)

        assert result.created == 6
        assert 1 < provider.peak <= 3
        assert sorted(link.task_id for link in result.pending_links) == [1, 2, 3, 4, 5, 6]

    async def test_sequential_by_default(self, window: SyncWindow) -> None:
        provider = _TrackingProvider()
        store = InMemoryTaskStore([_task(i, f"Task {i}") for i in range(1, 4)])

        result = await _reconciler(store, provider).reconcile(window)

        assert provider.peak == 1
        assert [link.task_id for link in result.pending_links] == [1, 2, 3]

    async def test_concurrent_fail_fast_propagates(self, window: SyncWindow) -> None:
        provider = _TrackingProvider()
        provider.fail_create_titles.add("Task 2")
        store = InMemoryTaskStore([_task(i, f"Task {i}") for i in range(1, 5)])

        with pytest.raises(CalendarProviderError):
            await _reconciler(
                store, provider, max_concurrency=2, fail_fast=True
            ).reconcile(window)


# ---------------------------------------------------------------------------
# Single-task link
# ---------------------------------------------------------------------------


class TestLinkTaskToCalendar:
    async def test_creates_one_event(self) -> None:
        provider = FakeCalendarProvider()
        reconciler = _reconciler(InMemoryTaskStore(), provider)

        event_id = await reconciler.link_task_to_calendar(_task(1, "Dentist"))

        assert event_id == "evt-1"
        assert provider.calls == [("create_event", "Dentist", "Dentist", T0, 60)]

    async def test_rejects_untimed_task(self) -> None:
        provider = FakeCalendarProvider()

        with pytest.raises(InvalidStateError, match="no due_at"):
            await _reconciler(InMemoryTaskStore(), provider).link_task_to_calendar(
                _task(1, due_at=None)
            )

        assert provider.calls == []

    async def test_rejects_linked_task(self) -> None:
        provider = FakeCalendarProvider()

        with pytest.raises(InvalidStateError, match="already linked"):
            await _reconciler(InMemoryTaskStore(), provider).link_task_to_calendar(
                _task(1, remote_event_id="g1")
            )

        assert provider.calls == []

    async def test_provider_error_propagates(self) -> None:
        provider = FakeCalendarProvider()
        provider.fail_create_titles.add("Dentist")

        with pytest.raises(CalendarProviderError):
            await _reconciler(InMemoryTaskStore(), provider).link_task_to_calendar(
                _task(1, "Dentist")
            )


# ---------------------------------------------------------------------------
# Import from calendar
# ---------------------------------------------------------------------------


class TestImportRemoteEvents:
    async def test_imports_new_titled_events(self, window: SyncWindow) -> None:
        store = InMemoryTaskStore([_task(1, "Known", remote_event_id="known")])
        provider = FakeCalendarProvider(
            [
                _event("known", "Known"),
                _event("new", "Haircut", minutes=30),
                _event("blank", "   "),
                _event("bday", "Birthday", all_day=True, minutes=24 * 60),
            ]
        )

        result = await _reconciler(store, provider).import_remote_events(window)

        assert result.skipped == 3
        (task,) = result.imported
        assert task.id == 2
        assert task.description == "Haircut"
        assert task.due_at == T0
        assert task.duration == 30
        assert task.remote_event_id == "new"
        assert len(await store.list_tasks()) == 2

    async def test_imported_tasks_are_linked_on_next_pass(self, window: SyncWindow) -> None:
        store = InMemoryTaskStore()
        provider = FakeCalendarProvider([_event("new", "Haircut")])
        reconciler = _reconciler(store, provider)

        await reconciler.import_remote_events(window)
        result = await reconciler.reconcile(window)

        assert (result.created, result.deleted, result.updated) == (0, 0, 1)

    async def test_nothing_to_import(self, window: SyncWindow) -> None:
        store = InMemoryTaskStore()

        result = await _reconciler(store, FakeCalendarProvider()).import_remote_events(window)

        assert result.imported == []
        assert result.skipped == 0
        assert await store.list_tasks() == []

    async def test_default_import_window(self) -> None:
        provider = FakeCalendarProvider()

        await _reconciler(
            InMemoryTaskStore(), provider, import_days=7
        ).import_remote_events()

        (_, start, end) = provider.calls_to("list_events")[0]
        assert end - start == timedelta(days=7)
