# src/pocket_copy/constants.py
"""
Central constants used across the project.
"""

from .meta import PROGRAM_ENV

# --- env keys ---
DEFAULT_ENV_LOG_LEVEL: str = "LOG_LEVEL"
ENV_LOG_LEVEL: str = f"{PROGRAM_ENV}_LOG_LEVEL"
ENV_CONCURRENCY: str = f"{PROGRAM_ENV}_CONCURRENCY"
ENV_CACHE_DIR: str = f"{PROGRAM_ENV}_CACHE_DIR"

# --- option defaults ---
DEFAULT_DEBUG_LEVEL: str = "warning"
DEFAULT_LOG_LEVEL: str = "warning"
DEFAULT_CONCURRENCY: int = 100
DEFAULT_COPY_UNMODIFIED: bool = False

# every level the logger understands, quietest last
LEVEL_ORDER: tuple[str, ...] = (
    "trace",
    "debug",
    "info",
    "warning",
    "error",
    "critical",
    "silent",  # disables all logging
)

# debug option values understood by the engine (True maps to "info")
DEBUG_LEVELS: tuple[str, ...] = ("warning", "info", "debug")

# --- cache ---
CACHE_FILE_NAME: str = "data.json"
CACHE_FORMAT_VERSION: int = 1

# --- templates ---
DEFAULT_HASH_LENGTH: int = 20
