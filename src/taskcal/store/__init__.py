"""Task Store interface and back-ends."""

from __future__ import annotations

from taskcal.store.base import UPDATABLE_FIELDS, TaskStore
from taskcal.store.json_file import JsonTaskStore
from taskcal.store.memory import InMemoryTaskStore

__all__ = [
    "UPDATABLE_FIELDS",
    "InMemoryTaskStore",
    "JsonTaskStore",
    "TaskStore",
]
