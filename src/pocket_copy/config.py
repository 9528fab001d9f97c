# src/pocket_copy/config.py


import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, cast

from .constants import (
    CACHE_FILE_NAME,
    DEBUG_LEVELS,
    DEFAULT_CONCURRENCY,
    DEFAULT_COPY_UNMODIFIED,
    DEFAULT_DEBUG_LEVEL,
    ENV_CACHE_DIR,
    ENV_CONCURRENCY,
    LEVEL_ORDER,
)
from .logs import get_logger
from .runtime import env_log_level
from .types import CopyOptions, CopyOptionsInput, PatternLike
from .utils import load_jsonc, plural

# camelCase spellings accepted for hosts that pass options through verbatim
OPTION_ALIASES = {
    "copyUnmodified": "copy_unmodified",
    "cachePath": "cache_path",
    "debugLevel": "debug",
}
KNOWN_OPTIONS = {"debug", "ignore", "copy_unmodified", "concurrency", "cache_path"}


# --------------------------------------------------------------------------- #
# helpers
# --------------------------------------------------------------------------- #


def determine_log_level(debug: Any = None) -> str:
    """Resolve log level from env → `debug` option → default.

    `debug=True` means "info"; False/None mean the default ("warning").
    """
    forced = env_log_level()
    if forced:
        return forced

    if debug is True:
        return "info"
    if debug is None or debug is False:
        return DEFAULT_DEBUG_LEVEL
    if not isinstance(debug, str):
        xmsg = f"Option 'debug' must be a string or bool, not {type(debug).__name__}"
        raise TypeError(xmsg)

    level = debug.lower()
    if level not in LEVEL_ORDER:
        xmsg = (
            f"Unknown debug level {debug!r}"
            f" (expected one of {', '.join(DEBUG_LEVELS)})"
        )
        raise ValueError(xmsg)
    return level


def _determine_concurrency(raw: Any) -> int:
    logger = get_logger()
    env_value = os.getenv(ENV_CONCURRENCY)
    if env_value is not None:
        try:
            value = int(env_value)
        except ValueError:
            logger.warning(
                "Invalid %s=%r, using configured value.", ENV_CONCURRENCY, env_value
            )
        else:
            if value > 0:
                return value
            logger.warning(
                "Invalid %s=%r, using configured value.", ENV_CONCURRENCY, env_value
            )

    if raw is None:
        return DEFAULT_CONCURRENCY
    # bool is an int subclass; reject it explicitly
    if isinstance(raw, bool) or not isinstance(raw, int):
        xmsg = f"Option 'concurrency' must be an integer, not {type(raw).__name__}"
        raise TypeError(xmsg)
    if raw < 1:
        xmsg = f"Option 'concurrency' must be at least 1, got {raw}"
        raise ValueError(xmsg)
    return raw


def _normalize_keys(raw: Mapping[str, Any]) -> dict[str, Any]:
    logger = get_logger()
    normalized: dict[str, Any] = {}
    for key, value in raw.items():
        canonical = OPTION_ALIASES.get(key, key)
        if canonical not in KNOWN_OPTIONS:
            logger.warning("Ignoring unknown option %r", key)
            continue
        normalized[canonical] = value
    return normalized


# --------------------------------------------------------------------------- #
# main resolver
# --------------------------------------------------------------------------- #


def resolve_options(
    raw: CopyOptionsInput | Mapping[str, Any] | None = None,
) -> CopyOptions:
    """Apply defaults, env overrides and validation to host-supplied options.

    Without an explicit `cache_path`, the cache blob goes to
    `$POCKET_COPY_CACHE_DIR/data.json` when that variable is set; otherwise
    nothing is persisted and the cache lives only in memory.
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        xmsg = f"Options must be a mapping, not {type(raw).__name__}"
        raise TypeError(xmsg)

    opts = _normalize_keys(raw)

    ignore = opts.get("ignore", [])
    if not isinstance(ignore, list) or not all(isinstance(i, str) for i in ignore):
        xmsg = "Option 'ignore' must be a list of strings"
        raise TypeError(xmsg)

    copy_unmodified = opts.get("copy_unmodified", DEFAULT_COPY_UNMODIFIED)
    if not isinstance(copy_unmodified, bool):
        xmsg = (
            "Option 'copy_unmodified' must be a bool,"
            f" not {type(copy_unmodified).__name__}"
        )
        raise TypeError(xmsg)

    cache_path = opts.get("cache_path")
    if cache_path is not None and not isinstance(cache_path, (str, Path)):
        xmsg = f"Option 'cache_path' must be a path, not {type(cache_path).__name__}"
        raise TypeError(xmsg)
    if cache_path is None and os.getenv(ENV_CACHE_DIR):
        cache_path = Path(os.environ[ENV_CACHE_DIR]) / CACHE_FILE_NAME

    resolved: CopyOptions = {
        "log_level": determine_log_level(opts.get("debug")),
        "ignore": list(ignore),
        "copy_unmodified": copy_unmodified,
        "concurrency": _determine_concurrency(opts.get("concurrency")),
        "cache_path": Path(cache_path) if cache_path is not None else None,
    }
    return resolved


# --------------------------------------------------------------------------- #
# config files
# --------------------------------------------------------------------------- #


def load_config(
    config_path: Path,
) -> tuple[list[PatternLike], dict[str, Any]]:
    """Load patterns and options from a JSON/JSONC file.

    Accepted shapes:
      - a list of patterns
      - {"patterns": [...], "options": {...}}

    Returns (patterns, raw options); feed the options to resolve_options().
    """
    logger = get_logger()
    try:
        data = load_jsonc(config_path)
    except ValueError as e:
        xmsg = f"Error while loading configuration file '{config_path.name}': {e}"
        raise ValueError(xmsg) from e

    if data is None:
        logger.warning("Configuration file %s is empty", config_path.name)
        return [], {}

    if isinstance(data, list):
        patterns: Any = data
        options: Any = {}
    else:
        unknown = sorted(set(data) - {"patterns", "options"})
        if unknown:
            logger.warning(
                "Ignoring unknown top-level key%s %s in %s",
                plural(unknown),
                ", ".join(unknown),
                config_path.name,
            )
        patterns = data.get("patterns", [])
        options = data.get("options", {})

    if not isinstance(patterns, list):
        xmsg = f"`patterns` in {config_path.name} must be a list"
        raise TypeError(xmsg)
    if not isinstance(options, dict):
        xmsg = f"`options` in {config_path.name} must be an object"
        raise TypeError(xmsg)

    logger.trace(
        "[CONFIG] %s: %d pattern%s", config_path, len(patterns), plural(patterns)
    )
    return cast("list[PatternLike]", patterns), cast("dict[str, Any]", options)
