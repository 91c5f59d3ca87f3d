"""Shared fixtures for taskcal tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from datetime import datetime, timezone
from pathlib import Path

import pytest

from taskcal.models.task import SyncWindow

_ENV_KEYS = (
    "GOOGLE_TOKEN_PATH",
    "TASKCAL_STORE_PATH",
    "CALENDAR_ID",
    "TIMEZONE",
    "LOG_LEVEL",
    "SYNC_PAST_DAYS",
    "SYNC_FUTURE_DAYS",
    "IMPORT_DAYS",
    "SYNC_FAIL_FAST",
    "SYNC_ORPHAN_POLICY",
    "SYNC_UPDATE_POLICY",
    "SYNC_MAX_CONCURRENCY",
    "SYNC_TIMEOUT",
)


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove all taskcal-related environment variables.

    Patches ``load_dotenv`` so a real ``.env`` file cannot re-inject values
    that the test explicitly removed.
    """
    monkeypatch.setattr("taskcal.config.load_dotenv", lambda *_a, **_kw: None)
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def monkeypatch_env(
    clean_env: None, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> dict[str, str]:
    """Set the required environment variables to paths under ``tmp_path``.

    Returns the dict of variables so tests can inspect or override values.
    """
    env_vars = {
        "GOOGLE_TOKEN_PATH": str(tmp_path / "token.json"),
        "TASKCAL_STORE_PATH": str(tmp_path / "tasks.json"),
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture()
def window() -> SyncWindow:
    """A fixed reconciliation window covering March 2026."""
    return SyncWindow(
        start=datetime(2026, 3, 1, tzinfo=timezone.utc),
        end=datetime(2026, 4, 1, tzinfo=timezone.utc),
    )


@pytest.fixture(autouse=True)
def _reset_root_logger() -> Generator[None, None, None]:
    """Reset the root logger after each test to prevent handler leaks."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
