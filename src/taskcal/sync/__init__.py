"""Reconciliation between the Task Store and the calendar provider."""

from __future__ import annotations

from taskcal.sync.batch import batch_mutate
from taskcal.sync.links import persist_links
from taskcal.sync.reconciler import ReconciliationContext, Reconciler, UpdatePolicy
from taskcal.sync.resolver import LinkState, OrphanPolicy, classify

__all__ = [
    "LinkState",
    "OrphanPolicy",
    "ReconciliationContext",
    "Reconciler",
    "UpdatePolicy",
    "batch_mutate",
    "classify",
    "persist_links",
]
