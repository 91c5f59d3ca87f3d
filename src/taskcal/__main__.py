"""Entry point for ``python -m taskcal`` and the ``taskcal`` script.

Uses stdlib :mod:`argparse` for argument parsing.

Subcommands:
    reconcile -- Full pass between the task store and Google Calendar.
    link      -- Create a calendar event for one task and link it.
    import    -- Pull upcoming calendar events into the task store.
    batch     -- Delete and/or add tasks in one call (store only).

Exit codes:
    0 -- Command completed successfully.
    1 -- An error occurred (config, auth, store, invalid task state), a
         create/update failed, links could not be saved, or the pass was
         cut short by SYNC_TIMEOUT.
    2 -- Argument parsing error (handled by argparse).
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import datetime, timedelta, timezone

from taskcal.calendar.auth import load_credentials
from taskcal.calendar.client import GoogleCalendarClient
from taskcal.calendar.exceptions import CalendarError
from taskcal.calendar.provider import GoogleCalendarProvider
from taskcal.config import ConfigError, Settings, load_settings
from taskcal.exceptions import InvalidStateError, StoreError
from taskcal.log import setup_logging
from taskcal.models.task import SyncWindow, TaskDraft, default_window
from taskcal.report import (
    format_batch_result,
    format_import_result,
    format_sync_result,
    print_report,
)
from taskcal.store.json_file import JsonTaskStore
from taskcal.sync.batch import batch_mutate
from taskcal.sync.links import persist_links
from taskcal.sync.reconciler import Reconciler, UpdatePolicy
from taskcal.sync.resolver import OrphanPolicy


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="taskcal",
        description="Reconcile scheduled tasks with Google Calendar.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    verbose = argparse.ArgumentParser(add_help=False)
    verbose.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug-level logging.",
    )

    # --- "reconcile" --------------------------------------------------
    rec_parser = subparsers.add_parser(
        "reconcile",
        parents=[verbose],
        help="Run a full reconciliation pass.",
    )
    rec_parser.add_argument(
        "--past-days",
        type=int,
        default=None,
        help="Days before now to include (default: SYNC_PAST_DAYS or 180).",
    )
    rec_parser.add_argument(
        "--future-days",
        type=int,
        default=None,
        help="Days after now to include (default: SYNC_FUTURE_DAYS or 365).",
    )
    rec_parser.add_argument(
        "--fail-fast",
        action="store_true",
        default=False,
        help="Stop at the first failed create or update.",
    )
    rec_parser.add_argument(
        "--report-orphans",
        action="store_true",
        default=False,
        help="List tasks whose event vanished instead of recreating it.",
    )
    rec_parser.add_argument(
        "--only-changed",
        action="store_true",
        default=False,
        help="Skip updates for events that already match their task.",
    )

    # --- "link" -------------------------------------------------------
    link_parser = subparsers.add_parser(
        "link",
        parents=[verbose],
        help="Create a calendar event for one task.",
    )
    link_parser.add_argument("task_id", type=int, help="Id of the task to link.")

    # --- "import" -----------------------------------------------------
    import_parser = subparsers.add_parser(
        "import",
        parents=[verbose],
        help="Import upcoming calendar events as tasks.",
    )
    import_parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="Days ahead to import (default: IMPORT_DAYS or 30).",
    )

    # --- "batch" ------------------------------------------------------
    batch_parser = subparsers.add_parser(
        "batch",
        parents=[verbose],
        help="Delete and add tasks in one call.",
    )
    batch_parser.add_argument(
        "--delete",
        type=int,
        action="append",
        default=[],
        metavar="ID",
        help="Task id to delete (repeatable).",
    )
    batch_parser.add_argument(
        "--add",
        type=parse_draft,
        action="append",
        default=[],
        metavar="DESCRIPTION[@DUE[/MINUTES]]",
        help="Task to add, e.g. 'Dentist@2026-03-10T09:00/45' (repeatable).",
    )

    return parser


def parse_draft(value: str) -> TaskDraft:
    """Parse ``DESCRIPTION[@DUE[/MINUTES]]`` into a :class:`TaskDraft`.

    The text after the last ``@`` is only treated as a due date if it parses
    as an ISO 8601 datetime; otherwise the whole string is the description.

    Raises:
        argparse.ArgumentTypeError: If the description is empty or the
            minutes are not a positive integer.
    """
    description, sep, tail = value.rpartition("@")
    due_at: datetime | None = None
    duration: int | None = None

    if sep:
        due_text, slash, minutes_text = tail.partition("/")
        try:
            due_at = datetime.fromisoformat(due_text.replace("Z", "+00:00"))
        except ValueError:
            description, due_at = value, None
        else:
            if slash:
                try:
                    duration = int(minutes_text)
                except ValueError:
                    raise argparse.ArgumentTypeError(
                        f"invalid minutes {minutes_text!r} in {value!r}"
                    ) from None
                if duration <= 0:
                    raise argparse.ArgumentTypeError(f"minutes must be positive in {value!r}")
    else:
        description = value

    if not description.strip():
        raise argparse.ArgumentTypeError(f"empty description in {value!r}")

    return TaskDraft(description=description.strip(), due_at=due_at, duration=duration)


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def _build_reconciler(
    settings: Settings, store: JsonTaskStore, args: argparse.Namespace
) -> Reconciler:
    """Wire the Google provider and the reconciler from *settings*."""
    credentials = load_credentials(settings.token_path)
    client = GoogleCalendarClient(
        credentials=credentials,
        timezone=settings.timezone,
        calendar_id=settings.calendar_id,
    )

    orphan_policy = settings.orphan_policy
    if getattr(args, "report_orphans", False):
        orphan_policy = OrphanPolicy.REPORT
    update_policy = settings.update_policy
    if getattr(args, "only_changed", False):
        update_policy = UpdatePolicy.CHANGED

    return Reconciler(
        store,
        GoogleCalendarProvider(client),
        orphan_policy=orphan_policy,
        update_policy=update_policy,
        fail_fast=settings.fail_fast or getattr(args, "fail_fast", False),
        max_concurrency=settings.max_concurrency,
        past_days=settings.past_days,
        future_days=settings.future_days,
        import_days=settings.import_days,
    )


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_reconcile(args: argparse.Namespace, settings: Settings) -> int:
    store = JsonTaskStore(settings.store_path)
    reconciler = _build_reconciler(settings, store, args)

    past = args.past_days if args.past_days is not None else settings.past_days
    future = args.future_days if args.future_days is not None else settings.future_days
    if past < 0 or future < 0 or past + future == 0:
        print("Error: the reconciliation window must not be empty", file=sys.stderr)
        return 1
    window = default_window(past_days=past, future_days=future)

    cancel = asyncio.Event()
    timer = None
    if settings.sync_timeout is not None:
        timer = asyncio.get_running_loop().call_later(settings.sync_timeout, cancel.set)
    try:
        result = await reconciler.reconcile(window, cancel=cancel)
    except CalendarError as exc:
        if exc.partial_result is not None and exc.partial_result.pending_links:
            unsaved = await persist_links(store, exc.partial_result.pending_links)
            saved = len(exc.partial_result.pending_links) - len(unsaved)
            print(
                f"Saved {saved} calendar link(s) created before the pass stopped",
                file=sys.stderr,
            )
        raise
    finally:
        if timer is not None:
            timer.cancel()

    unsaved = await persist_links(store, result.pending_links)
    print_report(format_sync_result(result))

    if unsaved:
        ids = ", ".join(str(link.task_id) for link in unsaved)
        print(f"Error: could not save calendar links for task(s): {ids}", file=sys.stderr)
        return 1
    if result.write_failures or result.cancelled:
        return 1
    return 0


async def _handle_link(args: argparse.Namespace, settings: Settings) -> int:
    store = JsonTaskStore(settings.store_path)
    task = await store.get_task(args.task_id)
    reconciler = _build_reconciler(settings, store, args)

    event_id = await reconciler.link_task_to_calendar(task)
    await store.update_task(task.id, remote_event_id=event_id)
    print(f"Linked task {task.id} to calendar event {event_id}")
    return 0


async def _handle_import(args: argparse.Namespace, settings: Settings) -> int:
    store = JsonTaskStore(settings.store_path)
    reconciler = _build_reconciler(settings, store, args)

    days = args.days if args.days is not None else settings.import_days
    if days < 1:
        print("Error: --days must be at least 1", file=sys.stderr)
        return 1
    now = datetime.now(timezone.utc)
    window = SyncWindow(start=now, end=now + timedelta(days=days))

    result = await reconciler.import_remote_events(window)
    print_report(format_import_result(result))
    return 0


async def _handle_batch(args: argparse.Namespace, settings: Settings) -> int:
    store = JsonTaskStore(settings.store_path)
    result = await batch_mutate(store, args.delete, args.add)
    print_report(format_batch_result(result))
    return 0 if result.success else 1


_HANDLERS = {
    "reconcile": _handle_reconcile,
    "link": _handle_link,
    "import": _handle_import,
    "batch": _handle_batch,
}


def main(argv: list[str] | None = None) -> int:
    """Run the taskcal CLI.

    Args:
        argv: Command-line arguments.  Defaults to ``sys.argv[1:]``.

    Returns:
        Exit code: ``0`` on success, ``1`` on error.
    """
    parser = build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    # --- Configure logging --------------------------------------------
    setup_logging("DEBUG" if args.verbose else "INFO")

    try:
        settings = load_settings()
        if not args.verbose:
            setup_logging(settings.log_level)
    except (ConfigError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    # --- Dispatch to subcommand handler -------------------------------
    handler = _HANDLERS[args.command]
    try:
        return asyncio.run(handler(args, settings))
    except (CalendarError, StoreError, InvalidStateError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
