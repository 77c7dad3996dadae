"""Configuration: defaults, render modes, environment overrides."""

from __future__ import annotations

import logging
import os

DEFAULT_REPORT_NAME = "FolderPermissions.html"
DEFAULT_MAX_DEPTH = 2**31 - 1  # effectively unbounded

RENDER_NESTED = "NestedTable"
RENDER_FLAT = "FlatTable"
RENDER_MODES = (RENDER_NESTED, RENDER_FLAT)
DEFAULT_RENDER_MODE = RENDER_NESTED

LOG_LEVEL_ENV = "ACLAUDIT_LOG_LEVEL"


def get_log_level(override: str | None = None) -> int:
    """Return the log level from override, then ACLAUDIT_LOG_LEVEL, then INFO.

    Fail closed on names the logging module does not know.
    """
    name = (override or os.environ.get(LOG_LEVEL_ENV, "") or "INFO").strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise RuntimeError(
            f"Unknown log level {name!r}. "
            "Use one of DEBUG, INFO, WARNING, ERROR, CRITICAL."
        )
    return level
