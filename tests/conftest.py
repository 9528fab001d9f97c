# tests/conftest.py
"""
Shared test setup for project.

Every test starts from a clean environment: log-level, concurrency and cache
variables are removed so a developer's shell cannot change results, and the
runtime log level is reset afterwards.
"""

from collections.abc import Iterator
from pathlib import Path

import pytest
from pytest import Config, Item as PytestItem

import pocket_copy.runtime as mod_runtime
from pocket_copy.constants import (
    DEFAULT_ENV_LOG_LEVEL,
    ENV_CACHE_DIR,
    ENV_CONCURRENCY,
    ENV_LOG_LEVEL,
)
from tests.utils import make_trace

TRACE = make_trace("⚡️")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for key in (DEFAULT_ENV_LOG_LEVEL, ENV_LOG_LEVEL, ENV_CONCURRENCY, ENV_CACHE_DIR):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setitem(mod_runtime.current_runtime, "use_color", False)
    monkeypatch.setitem(mod_runtime.current_runtime, "log_level", "warning")
    yield


@pytest.fixture
def project(tmp_path: Path) -> tuple[Path, Path]:
    """Return (context_root, output_root) as sibling directories."""
    context_root = tmp_path / "project"
    output_root = tmp_path / "dist"
    context_root.mkdir()
    TRACE("project", context_root, output_root)
    return context_root, output_root


def pytest_collection_modifyitems(
    config: Config,
    items: list[PytestItem],
) -> None:
    """Automatically skips debug tests unless asked for."""
    keywords = config.getoption("-k") or ""
    if "debug" in keywords.lower():
        return  # user explicitly requested them, don't skip

    for item in items:
        if item.get_closest_marker("debug") is not None:
            item.add_marker(
                pytest.mark.skip(reason="Skipped debug test (use -k debug to run)")
            )
