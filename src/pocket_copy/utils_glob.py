# src/pocket_copy/utils_glob.py
"""Glob helpers shared by the resolver and the matcher.

Matching uses gitignore-style wildmatch semantics from `pathspec`
(`*` stays within one path segment, `**` spans directories, `?` and
`[...]` classes work as usual). Brace groups like `*.{js,css}` are not
part of wildmatch, so they are expanded into separate patterns first.
"""

import os
import re
from collections.abc import Iterable
from pathlib import Path, PurePath

from pathspec import GitIgnoreSpec

from .logs import get_logger

_GLOB_CHARS = "*?[]{}"
_BRACE_GROUP = re.compile(r"\{([^{}]*)\}")


def has_glob_chars(s: str) -> bool:
    return any(c in s for c in _GLOB_CHARS)


def normalize_path_string(raw: str) -> str:
    r"""Normalize a user-supplied path string for cross-platform use.

      - Treat both '/' and '\\' as valid separators and normalize all to '/'.
      - Replace escaped spaces ('\\ ') with real spaces.
      - Collapse redundant slashes (preserve protocol prefixes like 'file://').
      - Never resolve '.' or '..' or touch the filesystem.

    Purely lexical: it normalizes syntax, not filesystem state.
    """
    if not raw:
        return ""

    logger = get_logger()
    path = raw.strip()

    # Handle escaped spaces (common shell copy-paste)
    if "\\ " in path:
        fixed = path.replace("\\ ", " ")
        logger.warning("Normalizing escaped spaces in path: %r → %s", path, fixed)
        path = fixed

    path = path.replace("\\", "/")

    # Collapse redundant slashes (keep protocol //)
    collapsed_slashes = re.sub(r"(?<!:)//+", "/", path)
    if collapsed_slashes != path:
        logger.trace(
            "Collapsed redundant slashes: %r → %r", path, collapsed_slashes
        )
        path = collapsed_slashes

    return path


def get_glob_root(pattern: str) -> Path:
    """Return the non-glob portion of a path like 'src/**/*.txt'."""
    if not pattern:
        return Path()

    normalized = normalize_path_string(pattern)

    parts: list[str] = []
    for part in Path(normalized).parts:
        if has_glob_chars(part):
            break
        parts.append(part)
    return Path(*parts) if parts else Path()


def expand_braces(pattern: str) -> list[str]:
    """Expand `{a,b}` groups (nested groups included) into plain patterns.

    Groups without a comma are kept literally.
    """
    for match in _BRACE_GROUP.finditer(pattern):
        body = match.group(1)
        if "," not in body:
            continue
        head, tail = pattern[: match.start()], pattern[match.end() :]
        expanded: list[str] = []
        for option in body.split(","):
            expanded.extend(expand_braces(f"{head}{option}{tail}"))
        return expanded
    return [pattern]


def _as_posix(path: Path | str) -> str:
    return str(path).replace("\\", "/")


def _strip_anchor(path: Path) -> str:
    """Turn an absolute path into the rooted-relative form wildmatch expects."""
    return _as_posix(path.relative_to(path.anchor)) if path.anchor else _as_posix(path)


class GlobMatcher:
    """Match POSIX paths, relative to a glob's static root, against the
    remainder of that glob.

    Unlike ignore rules, a glob is always anchored: 'a/*.txt' never matches
    'x/a/b.txt'. `max_depth` is the most path segments a match can have, or
    None when a '**' lets it reach any depth.
    """

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        expanded = [p.strip("/") for p in expand_braces(_as_posix(pattern))]
        self._spec = GitIgnoreSpec.from_lines(["/" + p for p in expanded])
        if any("**" in p for p in expanded):
            self.max_depth: int | None = None
        else:
            self.max_depth = max(len(p.split("/")) for p in expanded)

    def matches(self, rel_path: str) -> bool:
        # wildmatch would also accept files below a matching directory
        if self.max_depth is not None and rel_path.count("/") >= self.max_depth:
            return False
        return self._spec.match_file(rel_path)

    def __repr__(self) -> str:
        return f"GlobMatcher({self.pattern!r})"


class IgnoreRules:
    """Exclusion rules built from pattern-level and global `ignore` lists.

    Relative patterns match the path below the matching root, so directories
    above that root never count. Unanchored ones such as '*.tmp' match at any
    depth under it. Absolute patterns match the whole absolute path. A
    trailing '/' restricts a pattern to directories.
    """

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        self.patterns: list[str] = [p for p in patterns if p and p.strip()]
        relative: list[str] = []
        absolute: list[str] = []
        for raw in self.patterns:
            for line in expand_braces(_as_posix(raw.strip())):
                anchor = PurePath(line).anchor
                if anchor and os.path.isabs(line):
                    # anchored at the filesystem root, like the candidate
                    absolute.append("/" + line[len(anchor) :].lstrip("/"))
                else:
                    relative.append(line)
        self._relative = GitIgnoreSpec.from_lines(relative) if relative else None
        self._absolute = GitIgnoreSpec.from_lines(absolute) if absolute else None

    def __bool__(self) -> bool:
        return self._relative is not None or self._absolute is not None

    def extend(self, patterns: Iterable[str]) -> "IgnoreRules":
        """Return new rules with `patterns` appended."""
        return IgnoreRules([*self.patterns, *patterns])

    def is_ignored(self, path: Path, root: Path, *, is_dir: bool = False) -> bool:
        suffix = "/" if is_dir else ""
        if self._relative is not None:
            try:
                rel = _as_posix(path.relative_to(root))
            except ValueError:
                rel = None
            if rel and rel != "." and self._relative.match_file(rel + suffix):
                return True
        if self._absolute is not None and path.is_absolute():
            return self._absolute.match_file(_strip_anchor(path) + suffix)
        return False
