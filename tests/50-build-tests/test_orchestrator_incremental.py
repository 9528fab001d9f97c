# tests/50-build-tests/test_orchestrator_incremental.py
"""
Incremental behavior of CopyOrchestrator across repeated runs.

Checklist:
- first_run — every matched file lands in the output.
- idempotent — a second run over unchanged sources writes nothing.
- changed_source — only the edited file is copied again.
- deleted_output — a removed output file is restored.
- cold_start — a fresh cache copies even over identical outputs.
- copy_unmodified — forces writes on every run.
- override — the later pattern wins on a shared destination.
- persistent_cache — the cache blob is written when a path is configured.
- persist_once — later runs do not rewrite the blob; persist_cache() does.
"""

import json
import os
from pathlib import Path

import pytest

from pocket_copy.build import CopyOrchestrator
from pocket_copy.constants import ENV_CACHE_DIR
from tests.utils import list_tree, make_tree, read_tree


def test_first_run_copies_everything(project: tuple[Path, Path]) -> None:
    # --- setup ---
    ctx, out = project
    make_tree(ctx, {"static/a.txt": "a", "static/img/b.png": b"\x89PNG"})
    engine = CopyOrchestrator(["static"], context_root=ctx, output_root=out)

    # --- execute ---
    result = engine.run()

    # --- verify ---
    assert result.ok
    assert result.error is None
    assert result.copied == ["a.txt", "img/b.png"]
    assert result.bytes_written == 1 + 4
    assert list_tree(out) == ["a.txt", "img/b.png"]


def test_second_run_is_idempotent(project: tuple[Path, Path]) -> None:
    """Unchanged sources produce zero writes on the next run."""
    # --- setup ---
    ctx, out = project
    make_tree(ctx, {"static/a.txt": "a", "static/b.txt": "b"})
    engine = CopyOrchestrator(["static"], context_root=ctx, output_root=out)
    engine.run()
    mtimes = {p: (out / p).stat().st_mtime_ns for p in list_tree(out)}

    # --- execute ---
    result = engine.run()

    # --- verify ---
    assert result.copied == []
    assert result.skipped == ["a.txt", "b.txt"]
    assert result.bytes_written == 0
    assert {p: (out / p).stat().st_mtime_ns for p in list_tree(out)} == mtimes


def test_changed_source_is_recopied(project: tuple[Path, Path]) -> None:
    # --- setup ---
    ctx, out = project
    make_tree(ctx, {"static/a.txt": "a", "static/b.txt": "b"})
    engine = CopyOrchestrator(["static"], context_root=ctx, output_root=out)
    engine.run()
    (ctx / "static" / "b.txt").write_text("b2", encoding="utf-8")

    # --- execute ---
    result = engine.run()

    # --- verify ---
    assert result.copied == ["b.txt"]
    assert result.skipped == ["a.txt"]
    assert read_tree(out) == {"a.txt": "a", "b.txt": "b2"}


def test_deleted_output_is_restored(project: tuple[Path, Path]) -> None:
    # --- setup ---
    ctx, out = project
    make_tree(ctx, {"static/a.txt": "a"})
    engine = CopyOrchestrator(["static"], context_root=ctx, output_root=out)
    engine.run()
    (out / "a.txt").unlink()

    # --- execute ---
    result = engine.run()

    # --- verify ---
    assert result.copied == ["a.txt"]
    assert read_tree(out) == {"a.txt": "a"}


def test_cold_start_forces_copy(project: tuple[Path, Path]) -> None:
    """A new engine does not trust outputs left by an earlier process."""
    # --- setup ---
    ctx, out = project
    make_tree(ctx, {"static/a.txt": "a"})
    CopyOrchestrator(["static"], context_root=ctx, output_root=out).run()

    # --- execute ---
    result = CopyOrchestrator(["static"], context_root=ctx, output_root=out).run()

    # --- verify ---
    assert result.copied == ["a.txt"]
    assert result.bytes_written == 1


def test_copy_unmodified_always_writes(project: tuple[Path, Path]) -> None:
    # --- setup ---
    ctx, out = project
    make_tree(ctx, {"static/a.txt": "a"})
    engine = CopyOrchestrator(
        ["static"], {"copyUnmodified": True}, context_root=ctx, output_root=out
    )
    engine.run()

    # --- execute ---
    result = engine.run()

    # --- verify ---
    assert result.copied == ["a.txt"]


def test_later_pattern_wins(project: tuple[Path, Path]) -> None:
    # --- setup ---
    ctx, out = project
    make_tree(ctx, {"a/x.txt": "from a", "b/x.txt": "from b"})
    engine = CopyOrchestrator(
        [{"from": "a/x.txt"}, {"from": "b/x.txt"}],
        context_root=ctx,
        output_root=out,
    )

    # --- execute ---
    first = engine.run()
    second = engine.run()

    # --- verify ---
    assert first.copied == ["x.txt", "x.txt"]
    assert second.ok
    assert read_tree(out) == {"x.txt": "from b"}


def test_persistent_cache_path(project: tuple[Path, Path], tmp_path: Path) -> None:
    # --- setup ---
    ctx, out = project
    make_tree(ctx, {"static/a.txt": "a"})
    blob = tmp_path / "cache" / "data.json"
    engine = CopyOrchestrator(
        ["static"], {"cache_path": blob}, context_root=ctx, output_root=out
    )

    # --- execute ---
    engine.run()

    # --- verify ---
    data = json.loads(blob.read_text(encoding="utf-8"))
    assert list(data["entries"]) == ["a.txt"]


def test_cache_blob_written_once_per_process(
    project: tuple[Path, Path], tmp_path: Path
) -> None:
    """Later runs keep the first blob; the host saves again explicitly."""
    # --- setup ---
    ctx, out = project
    make_tree(ctx, {"static/a.txt": "a"})
    blob = tmp_path / "cache" / "data.json"
    engine = CopyOrchestrator(
        ["static"], {"cache_path": blob}, context_root=ctx, output_root=out
    )
    engine.run()
    first_blob = blob.read_bytes()

    # --- execute ---
    make_tree(ctx, {"static/b.txt": "b"})
    second = engine.run()

    # --- verify ---
    assert second.copied == ["b.txt"]
    assert blob.read_bytes() == first_blob

    # --- execute ---
    engine.persist_cache()

    # --- verify ---
    data = json.loads(blob.read_text(encoding="utf-8"))
    assert sorted(data["entries"]) == ["a.txt", "b.txt"]


def test_cache_dir_from_env(
    project: tuple[Path, Path],
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    # --- setup ---
    ctx, out = project
    make_tree(ctx, {"static/a.txt": "a"})
    cache_dir = tmp_path / "env-cache"
    monkeypatch.setenv(ENV_CACHE_DIR, os.fspath(cache_dir))

    # --- execute ---
    CopyOrchestrator(["static"], context_root=ctx, output_root=out).run()

    # --- verify ---
    assert (cache_dir / "data.json").is_file()


def test_no_cache_file_without_configuration(project: tuple[Path, Path]) -> None:
    # --- setup ---
    ctx, out = project
    make_tree(ctx, {"a.txt": "a"})

    # --- execute ---
    CopyOrchestrator(["a.txt"], context_root=ctx, output_root=out).run()

    # --- verify ---
    assert list_tree(ctx) == ["a.txt"]
    assert list_tree(out) == ["a.txt"]
