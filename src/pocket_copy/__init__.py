# src/pocket_copy/__init__.py

"""Pocket Copy: pattern-driven incremental file copying for build pipelines.

Full developer API
==================
This package re-exports all non-private symbols from its submodules,
for hosts that embed the copy step in their own build loop.
Anything prefixed with "_" is considered internal and may change.

Highlights:
    - CopyOrchestrator    → Long-lived engine; call .run() once per build
    - run_copy()          → One-shot run that raises on failure
    - merge_dependencies()→ Feed a run's dependencies into host watch lists
    - resolve_options()   → Defaults, env overrides and validation for options
"""

from .build import (
    CopyOrchestrator,
    CopyOutcome,
    CopyResult,
    copy_file,
    run_copy,
)
from .cache import (
    CacheStore,
    ChangeCache,
    JsonCacheStore,
    fingerprint_bytes,
)
from .config import (
    determine_log_level,
    load_config,
    resolve_options,
)
from .constants import (
    DEFAULT_CONCURRENCY,
    DEFAULT_COPY_UNMODIFIED,
    DEFAULT_DEBUG_LEVEL,
    DEFAULT_LOG_LEVEL,
    ENV_CACHE_DIR,
    ENV_CONCURRENCY,
    ENV_LOG_LEVEL,
    LEVEL_ORDER,
)
from .deps import (
    DependencySnapshot,
    DependencyTracker,
    merge_dependencies,
)
from .errors import (
    CacheError,
    CopyError,
    CopyRunError,
    InvalidPatternError,
    MissingSourceError,
    PatternError,
    PocketCopyError,
    ReadFailedError,
    SourceNotFoundError,
    WriteFailedError,
)
from .logs import (
    get_logger,
    set_log_level,
    temporary_log_level,
)
from .match import (
    CopyTask,
    SourceStat,
    interpolate_template,
    match_pattern,
)
from .meta import (
    PROGRAM_DISPLAY,
    PROGRAM_ENV,
    PROGRAM_PACKAGE,
    PROGRAM_SCRIPT,
)
from .resolve import (
    ResolvedPattern,
    infer_to_type,
    normalize_pattern,
    resolve_pattern,
    resolve_patterns,
)
from .runtime import Runtime, current_runtime
from .types import (
    CopyOptions,
    CopyOptionsInput,
    PatternInput,
    PatternLike,
)
from .utils_glob import (
    GlobMatcher,
    IgnoreRules,
    expand_braces,
    get_glob_root,
    has_glob_chars,
)


__all__ = [  # noqa: RUF022
    # --- Engine ---
    "CopyOrchestrator",
    "CopyOutcome",
    "CopyResult",
    "copy_file",
    "run_copy",
    #
    # --- Pipeline stages ---
    "ResolvedPattern",
    "infer_to_type",
    "normalize_pattern",
    "resolve_pattern",
    "resolve_patterns",
    "CopyTask",
    "SourceStat",
    "interpolate_template",
    "match_pattern",
    "CacheStore",
    "ChangeCache",
    "JsonCacheStore",
    "fingerprint_bytes",
    "DependencySnapshot",
    "DependencyTracker",
    "merge_dependencies",
    #
    # --- Config Handling ---
    "determine_log_level",
    "load_config",
    "resolve_options",
    #
    # --- Errors ---
    "CacheError",
    "CopyError",
    "CopyRunError",
    "InvalidPatternError",
    "MissingSourceError",
    "PatternError",
    "PocketCopyError",
    "ReadFailedError",
    "SourceNotFoundError",
    "WriteFailedError",
    #
    # --- Constants / Metadata / Runtime ---
    "DEFAULT_CONCURRENCY",
    "DEFAULT_COPY_UNMODIFIED",
    "DEFAULT_DEBUG_LEVEL",
    "DEFAULT_LOG_LEVEL",
    "ENV_CACHE_DIR",
    "ENV_CONCURRENCY",
    "ENV_LOG_LEVEL",
    "PROGRAM_DISPLAY",
    "PROGRAM_ENV",
    "PROGRAM_PACKAGE",
    "PROGRAM_SCRIPT",
    "Runtime",
    "current_runtime",
    #
    # --- utils ---
    "LEVEL_ORDER",
    "GlobMatcher",
    "IgnoreRules",
    "expand_braces",
    "get_glob_root",
    "get_logger",
    "has_glob_chars",
    "set_log_level",
    "temporary_log_level",
    #
    # --- Types ---
    "CopyOptions",
    "CopyOptionsInput",
    "PatternInput",
    "PatternLike",
]
