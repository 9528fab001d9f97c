# src/pocket_copy/deps.py
"""Track which source files and directories a run looked at."""

import threading
from dataclasses import dataclass, field
from pathlib import Path

from .logs import get_logger


@dataclass(frozen=True)
class DependencySnapshot:
    """Files read and directories listed during one run."""

    files: frozenset[Path] = field(default_factory=frozenset)
    contexts: frozenset[Path] = field(default_factory=frozenset)

    def sorted_files(self) -> list[Path]:
        return sorted(self.files)

    def sorted_contexts(self) -> list[Path]:
        return sorted(self.contexts)


class DependencyTracker:
    """Accumulates file and context (directory) dependencies.

    Adding the same path twice is a no-op. Safe to call from copy workers.
    """

    def __init__(self) -> None:
        self._files: set[Path] = set()
        self._contexts: set[Path] = set()
        self._lock = threading.Lock()

    def add_file(self, path: Path | str) -> None:
        with self._lock:
            self._files.add(Path(path))

    def add_context(self, directory: Path | str) -> None:
        with self._lock:
            self._contexts.add(Path(directory))

    def snapshot(self) -> DependencySnapshot:
        with self._lock:
            return DependencySnapshot(
                files=frozenset(self._files),
                contexts=frozenset(self._contexts),
            )


def merge_dependencies(
    snapshot: DependencySnapshot,
    file_dependencies: list[Path],
    context_dependencies: list[Path],
) -> int:
    """Append untracked paths from `snapshot` to the host's dependency lists.

    Returns the number of paths added.
    """
    logger = get_logger()
    added = 0

    tracked_files = set(file_dependencies)
    for file in snapshot.sorted_files():
        if file in tracked_files:
            logger.debug(
                "not adding %s to change tracking, because it's already tracked", file
            )
            continue
        logger.debug("adding %s to change tracking", file)
        file_dependencies.append(file)
        added += 1

    tracked_contexts = set(context_dependencies)
    for context in snapshot.sorted_contexts():
        if context in tracked_contexts:
            logger.debug(
                "not adding %s to change tracking, because it's already tracked",
                context,
            )
            continue
        logger.debug("adding %s to change tracking", context)
        context_dependencies.append(context)
        added += 1

    return added
