# src/pocket_copy/runtime.py
"""Process-wide runtime state shared across modules (log level, color)."""

import os
from typing import TypedDict

from .constants import (
    DEFAULT_ENV_LOG_LEVEL,
    DEFAULT_LOG_LEVEL,
    ENV_LOG_LEVEL,
    LEVEL_ORDER,
)
from .utils import safe_log, should_use_color


class Runtime(TypedDict):
    log_level: str
    use_color: bool


def env_log_level() -> str | None:
    """Return the log level forced through the environment, if any.

    POCKET_COPY_LOG_LEVEL wins over the generic LOG_LEVEL. Unknown level
    names are reported and skipped.
    """
    for key in (ENV_LOG_LEVEL, DEFAULT_ENV_LOG_LEVEL):
        raw = os.getenv(key)
        if not raw:
            continue
        level = raw.strip().lower()
        if level in LEVEL_ORDER:
            return level
        safe_log(f"[{key}] ignoring unknown log level {raw!r}")
    return None


current_runtime: Runtime = {
    "log_level": env_log_level() or DEFAULT_LOG_LEVEL,
    "use_color": should_use_color(),
}
