# tests/40-engine-tests/test_deps.py
"""Tests for DependencyTracker and merge_dependencies()."""

import threading
from pathlib import Path

import pytest

from pocket_copy.deps import DependencySnapshot, DependencyTracker, merge_dependencies
from pocket_copy.logs import temporary_log_level


def test_tracker_is_idempotent(tmp_path: Path) -> None:
    # --- setup ---
    tracker = DependencyTracker()

    # --- execute ---
    tracker.add_file(tmp_path / "a.txt")
    tracker.add_file(str(tmp_path / "a.txt"))
    tracker.add_context(tmp_path)
    tracker.add_context(tmp_path)

    # --- verify ---
    snap = tracker.snapshot()
    assert snap.files == {tmp_path / "a.txt"}
    assert snap.contexts == {tmp_path}


def test_tracker_from_many_threads(tmp_path: Path) -> None:
    # --- setup ---
    tracker = DependencyTracker()

    def _worker(n: int) -> None:
        for i in range(50):
            tracker.add_file(tmp_path / f"{n}-{i}.txt")

    threads = [threading.Thread(target=_worker, args=(n,)) for n in range(8)]

    # --- execute ---
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    # --- verify ---
    assert len(tracker.snapshot().files) == 8 * 50


def test_snapshot_is_detached(tmp_path: Path) -> None:
    # --- setup ---
    tracker = DependencyTracker()
    tracker.add_file(tmp_path / "a.txt")
    snap = tracker.snapshot()

    # --- execute ---
    tracker.add_file(tmp_path / "b.txt")

    # --- verify ---
    assert snap.sorted_files() == [tmp_path / "a.txt"]


def test_merge_dependencies(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    # --- setup ---
    snap = DependencySnapshot(
        files=frozenset({tmp_path / "a.txt", tmp_path / "b.txt"}),
        contexts=frozenset({tmp_path}),
    )
    files = [tmp_path / "a.txt"]
    contexts: list[Path] = []

    # --- execute ---
    with temporary_log_level("debug"):
        added = merge_dependencies(snap, files, contexts)

    # --- verify ---
    out = capsys.readouterr().out
    assert added == 2
    assert files == [tmp_path / "a.txt", tmp_path / "b.txt"]
    assert contexts == [tmp_path]
    assert f"adding {tmp_path / 'b.txt'} to change tracking" in out
    assert "because it's already tracked" in out
