# src/pocket_copy/resolve.py
"""Turn raw copy patterns into fully specified ResolvedPattern objects.

Resolution touches the disk (it stats `from`), so it must run before any
matching. It never writes anything.
"""

import os
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast

from .errors import (
    InvalidPatternError,
    MissingSourceError,
    PatternError,
    SourceNotFoundError,
)
from .logs import get_logger
from .types import FromType, PatternInput, PatternLike, ToType, TransformFunc
from .utils_glob import get_glob_root, has_glob_chars, normalize_path_string

TO_TYPES: tuple[str, ...] = ("file", "dir", "template")

TEMPLATE_TOKEN = re.compile(
    r"\[(?:ext|name|path|folder|(?:content)?hash(?::\d+)?)\]",
)

_KNOWN_KEYS = {"from", "to", "context", "toType", "ignore", "flatten", "transform"}


@dataclass(frozen=True)
class ResolvedPattern:
    absolute_from: Path
    from_type: FromType
    absolute_to: Path
    to_type: ToType
    context: Path
    ignore: tuple[str, ...] = ()
    # for globs: absolute_from is the static root and `glob` the rest
    glob: str | None = None
    flatten: bool = False
    transform: TransformFunc | None = field(default=None, compare=False)
    raw: Any = field(default=None, compare=False, repr=False)

    @property
    def label(self) -> str:
        """Short human-readable form of the original pattern for messages."""
        raw = self.raw
        if isinstance(raw, Mapping):
            raw = raw.get("from")
        return repr(raw)


# --------------------------------------------------------------------------- #
# helpers
# --------------------------------------------------------------------------- #


def normalize_pattern(pattern: PatternLike | Any) -> PatternInput:
    """Accept the string shorthand and validate field types."""
    if isinstance(pattern, str):
        return cast("PatternInput", {"from": pattern})

    if not isinstance(pattern, Mapping):
        xmsg = (
            "Pattern must be a string or a mapping with a 'from' key,"
            f" not {type(pattern).__name__}"
        )
        raise InvalidPatternError(xmsg, pattern)

    data = dict(pattern)
    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        get_logger().warning(
            "Ignoring unknown pattern key(s) %s in %r", ", ".join(unknown), pattern
        )

    if not data.get("from"):
        xmsg = f"Pattern is missing required 'from': {pattern!r}"
        raise MissingSourceError(xmsg, pattern)

    for key in ("from", "to", "context"):
        if key in data and not isinstance(data[key], str):
            xmsg = (
                f"Pattern '{key}' must be a string,"
                f" not {type(data[key]).__name__}: {pattern!r}"
            )
            raise InvalidPatternError(xmsg, pattern)

    ignore = data.get("ignore", [])
    if not isinstance(ignore, list) or not all(isinstance(i, str) for i in ignore):
        xmsg = f"Pattern 'ignore' must be a list of strings: {pattern!r}"
        raise InvalidPatternError(xmsg, pattern)

    to_type = data.get("toType")
    if to_type is not None and to_type not in TO_TYPES:
        xmsg = (
            f"Unknown toType {to_type!r} (expected one of {', '.join(TO_TYPES)}):"
            f" {pattern!r}"
        )
        raise InvalidPatternError(xmsg, pattern)

    transform = data.get("transform")
    if transform is not None and not callable(transform):
        xmsg = f"Pattern 'transform' must be callable: {pattern!r}"
        raise InvalidPatternError(xmsg, pattern)

    return cast("PatternInput", data)


def is_template(to: str) -> bool:
    return bool(TEMPLATE_TOKEN.search(to))


def infer_to_type(to: str, from_type: FromType) -> ToType:
    """Guess the destination kind when the pattern does not say.

    Rules:
      - template tokens in `to` → template
      - directory or glob source → dir
      - empty `to`, trailing separator, or no extension → dir
      - otherwise → file
    """
    if is_template(to):
        return "template"
    if from_type in ("dir", "glob"):
        return "dir"
    if not to or to.endswith(("/", os.sep)) or not Path(to).suffix:
        return "dir"
    return "file"


def _resolve_context(raw_context: str | None, context_root: Path) -> Path:
    if not raw_context:
        return context_root
    ctx = Path(normalize_path_string(raw_context))
    return ctx if ctx.is_absolute() else (context_root / ctx)


# --------------------------------------------------------------------------- #
# main resolver
# --------------------------------------------------------------------------- #


def resolve_pattern(
    pattern: PatternLike | Any,
    context_root: Path | str,
    output_root: Path | str,
) -> ResolvedPattern:
    """Resolve one pattern against the context and output roots.

    Raises MissingSourceError, SourceNotFoundError or InvalidPatternError.
    """
    logger = get_logger()
    data = normalize_pattern(pattern)
    context_root = Path(context_root)
    output_root = Path(output_root)

    context = _resolve_context(data.get("context"), context_root)

    raw_from = normalize_path_string(data["from"])
    from_path = Path(raw_from)
    absolute_from = from_path if from_path.is_absolute() else (context / from_path)

    glob: str | None = None
    from_type: FromType
    if absolute_from.is_file():
        from_type = "file"
    elif absolute_from.is_dir():
        from_type = "dir"
    elif has_glob_chars(raw_from):
        from_type = "glob"
        glob_root = get_glob_root(str(absolute_from))
        glob = Path(absolute_from).relative_to(glob_root).as_posix()
        if not glob_root.is_dir():
            xmsg = f"Glob root for {data['from']!r} does not exist: {glob_root}"
            raise SourceNotFoundError(xmsg, pattern, glob_root)
        absolute_from = glob_root
    else:
        xmsg = f"Unable to locate {data['from']!r} at {absolute_from}"
        raise SourceNotFoundError(xmsg, pattern, absolute_from)

    raw_to = normalize_path_string(data.get("to", ""))
    to_path = Path(raw_to) if raw_to else Path()
    absolute_to = to_path if to_path.is_absolute() else (output_root / to_path)

    to_type: ToType = data.get("toType") or infer_to_type(raw_to, from_type)
    if to_type == "file" and from_type == "dir":
        logger.warning(
            "toType 'file' does not apply to directory %s; copying into it as a dir",
            absolute_from,
        )
        to_type = "dir"

    resolved = ResolvedPattern(
        absolute_from=absolute_from,
        from_type=from_type,
        absolute_to=absolute_to,
        to_type=to_type,
        context=context,
        ignore=tuple(data.get("ignore", [])),
        glob=glob,
        flatten=bool(data.get("flatten", False)),
        transform=data.get("transform"),
        raw=pattern,
    )
    logger.trace(
        "[RESOLVE] %r → from=%s (%s), to=%s (%s)",
        data["from"],
        absolute_from,
        from_type,
        absolute_to,
        to_type,
    )
    return resolved


def resolve_patterns(
    patterns: Iterable[PatternLike | Any],
    context_root: Path | str,
    output_root: Path | str,
) -> tuple[list[ResolvedPattern], list[PatternError]]:
    """Resolve every pattern up front.

    A failing pattern is dropped and its error collected; the others still
    resolve.
    """
    logger = get_logger()
    resolved: list[ResolvedPattern] = []
    errors: list[PatternError] = []
    for pattern in patterns:
        try:
            resolved.append(resolve_pattern(pattern, context_root, output_root))
        except PatternError as e:
            logger.error("%s", e)
            errors.append(e)
    return resolved, errors
