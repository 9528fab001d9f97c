# src/pocket_copy/build.py

import os
from collections import Counter
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from .cache import ChangeCache, JsonCacheStore, fingerprint_bytes
from .config import resolve_options
from .deps import DependencySnapshot, DependencyTracker
from .errors import (
    CopyError,
    CopyRunError,
    PocketCopyError,
    ReadFailedError,
    SourceNotFoundError,
    WriteFailedError,
)
from .logs import GREEN, colorize, get_logger, temporary_log_level
from .match import CopyTask, interpolate_template, match_pattern
from .meta import PROGRAM_SCRIPT
from .resolve import ResolvedPattern, resolve_patterns
from .types import CopyOptions, CopyOptionsInput, PatternLike, TransformFunc
from .utils import plural, write_bytes_atomic
from .utils_glob import IgnoreRules

CopyStatus = Literal["copied", "skipped", "failed"]


@dataclass(frozen=True)
class CopyOutcome:
    task: CopyTask
    status: CopyStatus
    relative_output_path: str
    destination: Path | None = None
    bytes_written: int = 0
    error: CopyError | None = None


@dataclass
class CopyResult:
    """What one run did, plus the dependencies the host should watch."""

    copied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    bytes_written: int = 0
    errors: list[PocketCopyError] = field(default_factory=list)
    dependencies: DependencySnapshot = field(default_factory=DependencySnapshot)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def error(self) -> CopyRunError | None:
        return CopyRunError(self.errors) if self.errors else None

    def raise_for_error(self) -> None:
        error = self.error
        if error is not None:
            raise error


# --------------------------------------------------------------------------- #
# single-file copy
# --------------------------------------------------------------------------- #


def _read_source(path: Path) -> bytes:
    return path.read_bytes()


def copy_file(
    task: CopyTask,
    *,
    output_root: Path,
    cache: ChangeCache,
    force: bool,
    transform: TransformFunc | None = None,
) -> CopyOutcome:
    """Copy one matched file unless the cache says its output is current.

    Raises ReadFailedError (read or transform failed) or WriteFailedError.
    The cache is only updated after the destination was fully written.
    """
    logger = get_logger()
    src = task.absolute_source_path

    try:
        content = _read_source(src)
    except OSError as e:
        xmsg = f"Unable to read {src}: {e}"
        raise ReadFailedError(xmsg, src) from e

    if transform is not None:
        try:
            content = transform(content, src)
        except Exception as e:  # noqa: BLE001
            xmsg = f"Transform failed for {src}: {e}"
            raise ReadFailedError(xmsg, src) from e
        if not isinstance(content, bytes):
            xmsg = (
                f"Transform for {src} returned {type(content).__name__}, expected bytes"
            )
            raise ReadFailedError(xmsg, src)

    fingerprint = fingerprint_bytes(content)
    rel_out = task.relative_output_path
    if task.is_template:
        rel_out = interpolate_template(rel_out, task.relative_source_path, fingerprint)
    dest = Path(os.path.normpath(output_root / rel_out))

    if not cache.should_copy(rel_out, fingerprint, destination=dest, force=force):
        logger.debug("⏭️  Unchanged, skipping %s", rel_out)
        return CopyOutcome(task, "skipped", rel_out, dest)

    try:
        write_bytes_atomic(dest, content)
    except OSError as e:
        xmsg = f"Unable to write {dest}: {e}"
        raise WriteFailedError(xmsg, src, dest) from e

    cache.record(rel_out, fingerprint)
    logger.info("📄 %s → %s", src, colorize(rel_out, GREEN))
    return CopyOutcome(task, "copied", rel_out, dest, bytes_written=len(content))


# --------------------------------------------------------------------------- #
# orchestration
# --------------------------------------------------------------------------- #


class CopyOrchestrator:
    """Runs a list of copy patterns into an output directory, once per build.

    Keep one instance for the lifetime of the host process: its ChangeCache
    is what lets later runs skip unchanged files. Patterns run in order (a
    later pattern overwrites an earlier one's output); the files of a single
    pattern are copied concurrently, at most `concurrency` at a time.
    """

    def __init__(
        self,
        patterns: Iterable[PatternLike],
        options: CopyOptionsInput | Mapping[str, Any] | None = None,
        *,
        context_root: Path | str,
        output_root: Path | str,
        cache: ChangeCache | None = None,
    ) -> None:
        self.patterns: list[PatternLike] = list(patterns)
        self.options: CopyOptions = resolve_options(options)
        self.context_root = Path(context_root)
        self.output_root = Path(output_root)
        if cache is None:
            cache_path = self.options["cache_path"]
            store = JsonCacheStore(cache_path) if cache_path is not None else None
            cache = ChangeCache(store)
        self.cache = cache
        self.ignore_rules = IgnoreRules(self.options["ignore"])

    def run(self) -> CopyResult:
        """Copy everything once. Errors are collected into the result."""
        with temporary_log_level(self.options["log_level"]):
            return self._run()

    def persist_cache(self) -> None:
        """Save the cache now, even if a run already saved it."""
        with temporary_log_level(self.options["log_level"]):
            self.cache.persist(force=True)

    def _run(self) -> CopyResult:
        logger = get_logger()
        logger.debug("starting copy run")

        tracker = DependencyTracker()
        result = CopyResult()
        force = self.cache.begin_run(copy_unmodified=self.options["copy_unmodified"])
        if force:
            logger.debug("copying every matched file (cold cache or copy_unmodified)")

        resolved, pattern_errors = resolve_patterns(
            self.patterns, self.context_root, self.output_root
        )
        result.errors.extend(pattern_errors)
        for err in pattern_errors:
            # watch the would-be parent so the source appearing triggers a rebuild
            if isinstance(err, SourceNotFoundError) and err.path is not None:
                if err.path.parent.is_dir():
                    tracker.add_context(err.path.parent)

        for index, pattern in enumerate(resolved, 1):
            logger.debug(
                "▶️  Pattern %d/%d: %s", index, len(resolved), pattern.label
            )
            outcomes = self._process_pattern(pattern, tracker, force=force)
            failures = [o.error for o in outcomes if o.error is not None]

            for outcome in outcomes:
                if outcome.status == "copied":
                    result.copied.append(outcome.relative_output_path)
                    result.bytes_written += outcome.bytes_written
                elif outcome.status == "skipped":
                    result.skipped.append(outcome.relative_output_path)

            if failures:
                result.errors.extend(failures)
                remaining = len(resolved) - index
                logger.error(
                    "%d file%s failed in pattern %s; skipping %d remaining pattern%s",
                    len(failures),
                    plural(failures),
                    pattern.label,
                    remaining,
                    plural(remaining),
                )
                break

        # first run only; later saves are up to the host (persist_cache)
        self.cache.persist()
        result.dependencies = tracker.snapshot()

        logger.info(
            "✅ Copied %d file%s (%d unchanged) → %s",
            len(result.copied),
            plural(result.copied),
            len(result.skipped),
            self.output_root,
        )
        logger.debug("finishing copy run")
        return result

    def _process_pattern(
        self,
        pattern: ResolvedPattern,
        tracker: DependencyTracker,
        *,
        force: bool,
    ) -> list[CopyOutcome]:
        """Copy every file of one pattern through a bounded thread pool.

        All tasks of the pattern run to completion even if some fail.
        """
        tasks = match_pattern(pattern, self.output_root, tracker, self.ignore_rules)

        def _copy_one(task: CopyTask) -> CopyOutcome:
            try:
                return copy_file(
                    task,
                    output_root=self.output_root,
                    cache=self.cache,
                    force=force,
                    transform=pattern.transform,
                )
            except CopyError as e:
                get_logger().error("%s", e)
                return CopyOutcome(
                    task, "failed", task.relative_output_path, error=e
                )
            finally:
                tracker.add_file(task.absolute_source_path)

        with ThreadPoolExecutor(
            max_workers=self.options["concurrency"],
            thread_name_prefix=PROGRAM_SCRIPT,
        ) as pool:
            futures = [pool.submit(_copy_one, task) for task in tasks]
            outcomes = [future.result() for future in futures]

        written = Counter(
            o.relative_output_path for o in outcomes if o.status != "failed"
        )
        for rel_out, count in sorted(written.items()):
            if count > 1:
                get_logger().warning(
                    "%d files from %s map to the same output %s; last write wins",
                    count,
                    pattern.label,
                    rel_out,
                )
        return outcomes


def run_copy(
    patterns: Iterable[PatternLike],
    options: CopyOptionsInput | Mapping[str, Any] | None = None,
    *,
    context_root: Path | str,
    output_root: Path | str,
    cache: ChangeCache | None = None,
) -> CopyResult:
    """One-shot helper: run the patterns and raise CopyRunError on failure."""
    result = CopyOrchestrator(
        patterns,
        options,
        context_root=context_root,
        output_root=output_root,
        cache=cache,
    ).run()
    result.raise_for_error()
    return result
