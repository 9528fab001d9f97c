# src/pocket_copy/match.py
"""Expand resolved patterns into concrete copy tasks."""

import os
import re
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from .constants import DEFAULT_HASH_LENGTH
from .deps import DependencyTracker
from .logs import get_logger
from .resolve import ResolvedPattern
from .utils_glob import GlobMatcher, IgnoreRules


@dataclass(frozen=True)
class SourceStat:
    size: int
    mtime: float


@dataclass(frozen=True)
class CopyTask:
    absolute_source_path: Path
    # POSIX path relative to the output root; a template when is_template
    relative_output_path: str
    source_stat: SourceStat | None
    # POSIX path relative to the directory being matched (drives [path]/[name])
    relative_source_path: str
    is_template: bool = False


# --------------------------------------------------------------------------- #
# destination helpers
# --------------------------------------------------------------------------- #


def _compute_dest(rel_source: str, resolved: ResolvedPattern) -> Path:
    """Compute the absolute destination for a matched source file.

    Rules:
      - template → the `to` template itself (interpolated at copy time)
      - file     → `to` as given
      - dir      → `to` / relative source path (just the name when flattened)
    """
    if resolved.to_type in ("template", "file"):
        return resolved.absolute_to

    rel = PurePosixPath(rel_source)
    if resolved.flatten:
        return resolved.absolute_to / rel.name
    return resolved.absolute_to / rel


def _relative_output(dest: Path, output_root: Path) -> str:
    return Path(os.path.relpath(dest, output_root)).as_posix()


def _stat(path: Path) -> SourceStat | None:
    try:
        st = path.stat()
    except OSError:
        return None
    return SourceStat(size=st.st_size, mtime=st.st_mtime)


_HASH_TOKEN = re.compile(r"\[(?:content)?hash(?::(\d+))?\]")


def interpolate_template(template: str, rel_source: str, fingerprint: str) -> str:
    """Fill `[name]`, `[ext]`, `[path]`, `[folder]` and `[hash]` tokens.

    `[hash]`/`[contenthash]` take the first 20 hex digits of the content
    fingerprint; `[hash:N]` takes N.
    """
    rel = PurePosixPath(rel_source)
    parent = rel.parent.as_posix()
    path_token = "" if parent == "." else f"{parent}/"
    folder = "" if parent == "." else rel.parent.name

    def _hash(match: re.Match[str]) -> str:
        length = int(match.group(1)) if match.group(1) else DEFAULT_HASH_LENGTH
        return fingerprint[:length]

    result = _HASH_TOKEN.sub(_hash, template)
    return (
        result.replace("[name]", rel.stem)
        .replace("[ext]", rel.suffix.lstrip("."))
        .replace("[path]", path_token)
        .replace("[folder]", folder)
    )


# --------------------------------------------------------------------------- #
# walking
# --------------------------------------------------------------------------- #


def _walk_files(
    root: Path,
    ignore_root: Path,
    ignore_rules: IgnoreRules,
    tracker: DependencyTracker,
    *,
    output_root: Path | None = None,
    max_depth: int | None = None,
) -> Iterator[Path]:
    """Yield non-ignored files under `root` in lexicographic order.

    Every directory listed, ignored ones included, is recorded as a context
    dependency so new files show up on the next run. The output root is never
    descended into, and with `max_depth` set, neither is any directory whose
    files would sit deeper than that many segments below `root`.
    """
    logger = get_logger()
    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        tracker.add_context(current)

        depth = len(current.relative_to(root).parts)
        if max_depth is not None and depth + 1 >= max_depth:
            dirnames[:] = []

        dirnames.sort()
        kept_dirs: list[str] = []
        for name in dirnames:
            sub = current / name
            if output_root is not None and sub == output_root:
                logger.trace("[WALK] not descending into output dir %s", sub)
                continue
            if ignore_rules.is_ignored(sub, ignore_root, is_dir=True):
                logger.debug("🚫  Skipped (ignored dir): %s", sub)
                tracker.add_context(sub)
                continue
            kept_dirs.append(name)
        dirnames[:] = kept_dirs

        for name in sorted(filenames):
            path = current / name
            if ignore_rules.is_ignored(path, ignore_root):
                logger.debug("🚫  Skipped (ignored): %s", path)
                continue
            yield path


def match_pattern(
    resolved: ResolvedPattern,
    output_root: Path | str,
    tracker: DependencyTracker,
    global_ignore: IgnoreRules | None = None,
) -> Iterator[CopyTask]:
    """Lazily expand a resolved pattern into CopyTasks.

    Ignored files are never yielded. Directories walked are recorded on
    `tracker`; file dependencies are recorded by whoever consumes the tasks.
    """
    logger = get_logger()
    output_root = Path(output_root)
    rules = (global_ignore or IgnoreRules()).extend(resolved.ignore)

    def _task(path: Path, rel_source: str) -> CopyTask:
        dest = _compute_dest(rel_source, resolved)
        if resolved.to_type == "template" and resolved.from_type != "dir":
            # templates see globbed and single files relative to their context
            try:
                rel_source = path.relative_to(resolved.context).as_posix()
            except ValueError:
                rel_source = path.name
        rel_out = _relative_output(dest, output_root)
        logger.trace("[MATCH] %s → %s", path, rel_out)
        return CopyTask(
            absolute_source_path=path,
            relative_output_path=rel_out,
            source_stat=_stat(path),
            relative_source_path=rel_source,
            is_template=resolved.to_type == "template",
        )

    if resolved.from_type == "file":
        path = resolved.absolute_from
        if rules.is_ignored(path, resolved.context):
            logger.debug("🚫  Skipped (ignored): %s", path)
            return
        yield _task(path, path.name)
        return

    root = resolved.absolute_from

    if resolved.from_type == "dir":
        for path in _walk_files(
            root, root, rules, tracker, output_root=output_root
        ):
            yield _task(path, path.relative_to(root).as_posix())
        return

    # glob
    matcher = GlobMatcher(resolved.glob or "**")
    ignore_root = resolved.context if root.is_relative_to(resolved.context) else root
    count = 0
    for path in _walk_files(
        root,
        ignore_root,
        rules,
        tracker,
        output_root=output_root,
        max_depth=matcher.max_depth,
    ):
        rel = path.relative_to(root).as_posix()
        if not matcher.matches(rel):
            continue
        count += 1
        yield _task(path, rel)
    if not count:
        logger.debug("⚠️ No matches for %s in %s", resolved.glob, root)
