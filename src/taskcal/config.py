"""Configuration loading for taskcal.

Reads settings from environment variables (with .env support via python-dotenv)
and validates that all required values are present and well-formed.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TypeVar

from dotenv import load_dotenv

from taskcal.sync.reconciler import UpdatePolicy
from taskcal.sync.resolver import OrphanPolicy

E = TypeVar("E", bound=Enum)


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables.

    Attributes:
        token_path: Authorized-user OAuth token file for Google Calendar.
        store_path: JSON file backing the Task Store.
        calendar_id: Google calendar to reconcile against.
        timezone: IANA display timezone for created/updated events.
        log_level: Logging level.
        past_days: Reconciliation window start, in days before now.
        future_days: Reconciliation window end, in days after now.
        import_days: Import window length, in days after now.
        fail_fast: Abort a pass on the first create/update error.
        orphan_policy: Handling of tasks whose remote event vanished.
        update_policy: Whether linked events are always re-pushed.
        max_concurrency: Upper bound on in-flight create/update calls.
        sync_timeout: Deadline in seconds for a whole pass, or ``None``.
    """

    token_path: Path
    store_path: Path
    calendar_id: str = "primary"
    timezone: str = "UTC"
    log_level: str = "INFO"
    past_days: int = 180
    future_days: int = 365
    import_days: int = 30
    fail_fast: bool = False
    orphan_policy: OrphanPolicy = OrphanPolicy.RECREATE
    update_policy: UpdatePolicy = UpdatePolicy.ALWAYS
    max_concurrency: int = 1
    sync_timeout: float | None = None


_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def load_settings() -> Settings:
    """Load and validate settings from environment variables.

    Calls :func:`dotenv.load_dotenv` so a ``.env`` file in the working
    directory is picked up automatically.

    Returns:
        A validated :class:`Settings` instance.

    Raises:
        ConfigError: If any required variable is missing, empty or
            whitespace-only (the message names **all** of them), or if an
            optional variable has an invalid value.
    """
    load_dotenv()

    required = {
        "GOOGLE_TOKEN_PATH": "token_path",
        "TASKCAL_STORE_PATH": "store_path",
    }

    values: dict[str, object] = {}
    missing: list[str] = []

    for env_var, field_name in required.items():
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            missing.append(env_var)
        else:
            values[field_name] = Path(raw.strip()).expanduser()

    if missing:
        names = ", ".join(missing)
        raise ConfigError(f"Missing required environment variables: {names}")

    # Optional settings; defaults come from the dataclass.
    for env_var, field_name in (
        ("CALENDAR_ID", "calendar_id"),
        ("TIMEZONE", "timezone"),
        ("LOG_LEVEL", "log_level"),
    ):
        raw = _optional(env_var)
        if raw is not None:
            values[field_name] = raw

    for env_var, field_name, minimum in (
        ("SYNC_PAST_DAYS", "past_days", 0),
        ("SYNC_FUTURE_DAYS", "future_days", 0),
        ("IMPORT_DAYS", "import_days", 1),
        ("SYNC_MAX_CONCURRENCY", "max_concurrency", 1),
    ):
        raw = _optional(env_var)
        if raw is not None:
            values[field_name] = _parse_int(env_var, raw, minimum)

    raw = _optional("SYNC_FAIL_FAST")
    if raw is not None:
        values["fail_fast"] = _parse_bool("SYNC_FAIL_FAST", raw)

    raw = _optional("SYNC_ORPHAN_POLICY")
    if raw is not None:
        values["orphan_policy"] = _parse_choice("SYNC_ORPHAN_POLICY", raw, OrphanPolicy)

    raw = _optional("SYNC_UPDATE_POLICY")
    if raw is not None:
        values["update_policy"] = _parse_choice("SYNC_UPDATE_POLICY", raw, UpdatePolicy)

    raw = _optional("SYNC_TIMEOUT")
    if raw is not None:
        try:
            timeout = float(raw)
        except ValueError:
            raise ConfigError(f"SYNC_TIMEOUT must be a number, got {raw!r}") from None
        if timeout <= 0:
            raise ConfigError(f"SYNC_TIMEOUT must be positive, got {raw!r}")
        values["sync_timeout"] = timeout

    return Settings(**values)  # type: ignore[arg-type]


def _optional(env_var: str) -> str | None:
    raw = os.environ.get(env_var, "").strip()
    return raw or None


def _parse_int(env_var: str, raw: str, minimum: int) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{env_var} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ConfigError(f"{env_var} must be >= {minimum}, got {value}")
    return value


def _parse_bool(env_var: str, raw: str) -> bool:
    lowered = raw.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigError(f"{env_var} must be a boolean, got {raw!r}")


def _parse_choice(env_var: str, raw: str, enum_cls: type[E]) -> E:
    try:
        return enum_cls(raw.lower())
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise ConfigError(f"{env_var} must be one of: {choices}; got {raw!r}") from None
