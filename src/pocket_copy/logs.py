# src/pocket_copy/logs.py
"""Package logger.

Progress (info and below) goes to stdout, problems to stderr. The level
always follows `current_runtime["log_level"]`; a copy run switches it for
its duration with `temporary_log_level()`. Records emitted from copy workers
carry the worker's thread name at debug and trace level, since their output
interleaves.
"""

import logging
import sys
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any, TextIO, cast

from .constants import LEVEL_ORDER
from .meta import PROGRAM_PACKAGE, PROGRAM_SCRIPT
from .runtime import current_runtime
from .utils import safe_log

# --- ANSI Colors -------------------------------------------------------------


RESET = "\033[0m"
CYAN = "\033[36m"
GREEN = "\033[92m"
GRAY = "\033[90m"


# --- Levels ------------------------------------------------------------------


TRACE_LEVEL = logging.DEBUG - 5
SILENT_LEVEL = logging.CRITICAL + 1
logging.addLevelName(TRACE_LEVEL, "TRACE")

_LEVEL_NUMBERS = {
    "trace": TRACE_LEVEL,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "silent": SILENT_LEVEL,
}

TAG_STYLES = {
    "TRACE": (GRAY, "[TRACE]"),
    "DEBUG": (CYAN, "[DEBUG]"),
    "WARNING": ("", "⚠️ "),
    "ERROR": ("", "❌ "),
    "CRITICAL": ("", "💥 "),
}

# ThreadPoolExecutor names its threads "<prefix>_<n>"
_WORKER_PREFIX = f"{PROGRAM_SCRIPT}_"


def level_number(name: str) -> int:
    """Map a level name to its `logging` number (unknown → WARNING)."""
    return _LEVEL_NUMBERS.get(str(name).lower(), logging.WARNING)


class LoggerWithTrace(logging.Logger):
    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(TRACE_LEVEL, msg, args, **kwargs)


class TagFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        thread = record.threadName or ""
        if record.levelno <= logging.DEBUG and thread.startswith(_WORKER_PREFIX):
            msg = f"({thread}) {msg}"

        tag_color, tag_text = TAG_STYLES.get(record.levelname, ("", ""))
        if not tag_text:
            return msg
        if tag_color and current_runtime.get("use_color", True):
            tag_text = f"{tag_color}{tag_text}{RESET}"
        return f"{tag_text} {msg}"


class DualStreamHandler(logging.StreamHandler[TextIO]):
    """Send info/debug/trace to stdout, everything else to stderr."""

    def __init__(self) -> None:
        super().__init__(stream=sys.stdout)

    def emit(self, record: logging.LogRecord) -> None:
        # resolved per record (and under the handler lock) so replaced
        # sys.stdout/sys.stderr are honored
        self.stream = sys.stderr if record.levelno >= logging.WARNING else sys.stdout
        super().emit(record)


# --- Logger initialization ---------------------------------------------------


def _make_logger() -> LoggerWithTrace:
    # setLoggerClass is process-wide; restore it so we don't leak into the host
    previous = logging.getLoggerClass()
    logging.setLoggerClass(LoggerWithTrace)
    try:
        logger = logging.getLogger(PROGRAM_PACKAGE)
    finally:
        logging.setLoggerClass(previous)

    if not any(isinstance(h, DualStreamHandler) for h in logger.handlers):
        handler = DualStreamHandler()
        handler.setFormatter(TagFormatter("[%(name)s] %(message)s"))
        logger.addHandler(handler)
    logger.propagate = False  # don't double-log through the host's root logger
    return cast("LoggerWithTrace", logger)


_logger = _make_logger()


def get_log_level() -> str:
    """Return the current log level, or 'error' if undefined or invalid."""
    level = cast("str | None", current_runtime.get("log_level"))  # type: ignore[redundant-cast]
    if level is None:
        safe_log("[LOGGER ERROR] ❌ Runtime does not specify log_level")
        return "error"
    if level not in LEVEL_ORDER:
        safe_log(f"[LOGGER ERROR] ❌ Unknown log level: {level!r}")
        return "error"
    return level


def get_logger() -> LoggerWithTrace:
    """Return the pocket_copy logger, synced to the runtime log level."""
    _logger.setLevel(level_number(get_log_level()))
    return _logger


def set_log_level(level: str) -> None:
    current_runtime["log_level"] = level
    get_logger()


@contextmanager
def temporary_log_level(level: str) -> Generator[None, None, None]:
    """Switch the runtime log level for the duration of a block."""
    prev = current_runtime["log_level"]
    current_runtime["log_level"] = level
    get_logger()
    try:
        yield
    finally:
        current_runtime["log_level"] = prev
        get_logger()


def colorize(text: str, color: str, *, use_color: bool | None = None) -> str:
    if use_color is None:
        use_color = current_runtime["use_color"]
    return f"{color}{text}{RESET}" if use_color else text
