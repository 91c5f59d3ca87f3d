"""Logging setup for taskcal.

One pipe-separated line per record with an ISO 8601 timestamp, written to
stderr so command output on stdout stays clean.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Marks handlers installed by setup_logging so repeated calls reuse them.
_HANDLER_ATTR = "_taskcal_log_handler"

# googleapiclient logs a warning about its discovery cache on every build().
_QUIET_LOGGERS = ("googleapiclient.discovery_cache",)


def setup_logging(level: str = "INFO", stream: TextIO | None = None) -> None:
    """Configure the root logger with the taskcal formatter.

    Safe to call more than once: the existing taskcal handler is reused and
    only its level changes.

    Args:
        level: A standard logging level name (e.g. ``"DEBUG"``).
        stream: Destination for log lines.  Defaults to ``sys.stderr``.

    Raises:
        ValueError: If *level* is not a recognised logging level string.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level!r}")

    root = logging.getLogger()
    root.setLevel(numeric_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.ERROR)

    for handler in root.handlers:
        if getattr(handler, _HANDLER_ATTR, False):
            handler.setLevel(numeric_level)
            return

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))

    setattr(handler, _HANDLER_ATTR, True)
    root.addHandler(handler)

