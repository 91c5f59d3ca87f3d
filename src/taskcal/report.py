"""Console rendering of reconciliation, import and batch results.

Each ``format_*`` function returns a multi-line string; :func:`print_report`
writes one to stdout.
"""

from __future__ import annotations

import sys

from taskcal.models.results import BatchResult, ImportResult, SyncResult

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_BANNER_WIDTH = 60
_SEPARATOR = "=" * _BANNER_WIDTH

_ACTION_MARKERS = {
    "create": "[+]",
    "update": "[~]",
    "delete": "[-]",
    "skip": "[=]",
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def format_sync_result(result: SyncResult) -> str:
    """Render a :class:`SyncResult`.

    Sections: calendar operations (one line per outcome), orphaned tasks
    (if any), failures (if any), then a summary of counts.
    """
    lines: list[str] = []
    _append_banner(lines, "CALENDAR RECONCILIATION")

    lines.append("")
    lines.append("--- Operations ---")
    if not result.outcomes:
        lines.append("  Nothing to do.")
    for outcome in result.outcomes:
        marker = _ACTION_MARKERS.get(outcome.action, "[?]")
        task = f"task {outcome.task_id}" if outcome.task_id is not None else "remote only"
        event = outcome.remote_event_id or "-"
        status = "ok" if outcome.ok else f"FAILED: {outcome.error}"
        lines.append(f"  {marker} {outcome.action:<6} {task:<14} event {event}  {status}")

    if result.orphaned:
        lines.append("")
        lines.append("--- Orphaned Tasks ---")
        lines.append("  Linked to events that no longer exist in the window:")
        lines.append(f"  {', '.join(str(task_id) for task_id in result.orphaned)}")

    if result.failures:
        lines.append("")
        lines.append("--- Failures ---")
        for failure in result.failures:
            lines.append(
                f"  {failure['action']} (task={failure['task_id']}, "
                f"event={failure['remote_event_id']}): {failure['error']}"
            )

    lines.append("")
    lines.append("--- Summary ---")
    lines.append(f"  Created: {result.created}")
    lines.append(f"  Updated: {result.updated}")
    lines.append(f"  Deleted: {result.deleted}")
    lines.append(f"  Synced:  {result.synced}")
    lines.append(f"  New links: {len(result.pending_links)}")
    if result.cancelled:
        lines.append("  Pass was cancelled before completion.")
    if result.total_changes == 0 and not result.has_failures and not result.cancelled:
        lines.append("  Calendar already in sync.")
    lines.append(_SEPARATOR)

    return "\n".join(lines)


def format_import_result(result: ImportResult) -> str:
    """Render an :class:`ImportResult`."""
    lines: list[str] = []
    _append_banner(lines, "CALENDAR IMPORT")

    lines.append("")
    if not result.imported:
        lines.append("  No new events to import.")
    for task in result.imported:
        when = task.due_at.isoformat() if task.due_at else "-"
        lines.append(f"  [+] task {task.id}: {task.description} @ {when}")

    lines.append("")
    lines.append(f"  Imported: {len(result.imported)}")
    lines.append(f"  Skipped:  {result.skipped}")
    lines.append(_SEPARATOR)
    return "\n".join(lines)


def format_batch_result(result: BatchResult) -> str:
    """Render a :class:`BatchResult` with each leg reported separately."""
    lines: list[str] = []
    _append_banner(lines, "BATCH UPDATE")

    lines.append("")
    lines.append("--- Delete ---")
    if result.delete_ok:
        lines.append(f"  Deleted {result.deleted_count} task(s)")
    else:
        lines.append(f"  FAILED: {result.delete_error}")

    lines.append("")
    lines.append("--- Add ---")
    if result.add_ok:
        lines.append(f"  Added {len(result.added)} task(s)")
        for task in result.added:
            lines.append(f"  [+] task {task.id}: {task.description}")
    else:
        lines.append(f"  FAILED: {result.add_error}")

    lines.append("")
    lines.append(f"  Success: {'yes' if result.success else 'no'}")
    lines.append(_SEPARATOR)
    return "\n".join(lines)


def print_report(text: str) -> None:
    """Write a formatted report to stdout."""
    sys.stdout.write(text + "\n")


# ---------------------------------------------------------------------------
# Internal formatters
# ---------------------------------------------------------------------------


def _append_banner(lines: list[str], title: str) -> None:
    lines.append(_SEPARATOR)
    lines.append(f"  {title}")
    lines.append(_SEPARATOR)
