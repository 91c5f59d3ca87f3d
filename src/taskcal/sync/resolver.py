"""Classify a task's link to the remote calendar.

:func:`classify` is pure: it looks only at the task's ``remote_event_id``
and the set of event ids fetched for the current window.
"""

from __future__ import annotations

from collections.abc import Container
from enum import Enum

from taskcal.models.task import Task


class LinkState(str, Enum):
    """Link status of one task relative to the fetched remote events."""

    LINKED = "linked"
    """The task's ``remote_event_id`` is among the fetched remote ids."""

    UNLINKED = "unlinked"
    """The task has no ``remote_event_id``."""

    ORPHANED = "orphaned"
    """The task has a ``remote_event_id`` that was not fetched."""


class OrphanPolicy(str, Enum):
    """What a reconciliation pass does with an orphaned task."""

    RECREATE = "recreate"
    """Create a new remote event, exactly as for an unlinked task."""

    REPORT = "report"
    """Leave it alone and list it in ``SyncResult.orphaned``."""


def classify(task: Task, remote_ids: Container[str]) -> LinkState:
    """Decide whether *task* is linked, unlinked, or orphaned.

    An orphaned task either lost its remote event (deleted on the provider
    side) or is linked to an event outside the fetched window; the two
    cases are indistinguishable from one listing.

    Args:
        task: The local task.
        remote_ids: Ids of the remote events visible in the window.

    Returns:
        The task's :class:`LinkState`.
    """
    if task.remote_event_id is None:
        return LinkState.UNLINKED
    if task.remote_event_id in remote_ids:
        return LinkState.LINKED
    return LinkState.ORPHANED


def should_create(state: LinkState, policy: OrphanPolicy) -> bool:
    """Whether a task in *state* gets a new remote event under *policy*."""
    if state is LinkState.UNLINKED:
        return True
    return state is LinkState.ORPHANED and policy is OrphanPolicy.RECREATE
