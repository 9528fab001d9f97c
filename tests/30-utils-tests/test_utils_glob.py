# tests/30-utils-tests/test_utils_glob.py
"""Tests for glob helpers: prefix extraction, brace expansion, GlobMatcher."""

from pathlib import Path

import pytest

import pocket_copy.utils_glob as mod_glob


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("src/app.js", False),
        ("src/*.js", True),
        ("src/?.js", True),
        ("src/[ab].js", True),
        ("src/{a,b}.js", True),
    ],
)
def test_has_glob_chars(value: str, expected: bool) -> None:
    # --- execute + verify ---
    assert mod_glob.has_glob_chars(value) is expected


@pytest.mark.parametrize(
    ("pattern", "expected"),
    [
        ("src/**/*.txt", Path("src")),
        ("a/b/c*.txt", Path("a/b")),
        ("*.txt", Path()),
        ("{a,b}/x.txt", Path()),
        ("src\\lib\\*.py", Path("src/lib")),
        ("", Path()),
    ],
)
def test_get_glob_root(pattern: str, expected: Path) -> None:
    # --- execute + verify ---
    assert mod_glob.get_glob_root(pattern) == expected


def test_normalize_path_string_collapses_slashes() -> None:
    # --- execute + verify ---
    assert mod_glob.normalize_path_string("a//b\\c") == "a/b/c"
    assert mod_glob.normalize_path_string("file://x") == "file://x"
    assert mod_glob.normalize_path_string("my\\ dir/x") == "my dir/x"


@pytest.mark.parametrize(
    ("pattern", "expected"),
    [
        ("*.js", ["*.js"]),
        ("*.{js,css}", ["*.js", "*.css"]),
        ("{a,b}/{x,y}", ["a/x", "a/y", "b/x", "b/y"]),
        ("a{b,c{d,e}}", ["ab", "acd", "ace"]),
        ("{single}/{x,y}", ["{single}/x", "{single}/y"]),
    ],
)
def test_expand_braces(pattern: str, expected: list[str]) -> None:
    # --- execute + verify ---
    assert sorted(set(mod_glob.expand_braces(pattern))) == sorted(expected)


def test_glob_matcher_is_anchored() -> None:
    """A glob only matches from its own root, '*' stays in one segment."""
    # --- setup ---
    matcher = mod_glob.GlobMatcher("*.txt")

    # --- execute + verify ---
    assert matcher.matches("a.txt")
    assert not matcher.matches("sub/a.txt")
    assert not matcher.matches("a.md")


def test_glob_matcher_double_star_and_braces() -> None:
    # --- setup ---
    matcher = mod_glob.GlobMatcher("**/*.{js,css}")

    # --- execute + verify ---
    assert matcher.matches("app.js")
    assert matcher.matches("deep/er/site.css")
    assert not matcher.matches("deep/readme.md")


def test_glob_matcher_max_depth() -> None:
    # --- execute + verify ---
    assert mod_glob.GlobMatcher("*.txt").max_depth == 1
    assert mod_glob.GlobMatcher("{a,b/c}/*.txt").max_depth == 3
    assert mod_glob.GlobMatcher("a/**/*.txt").max_depth is None


def test_glob_matcher_rejects_files_below_a_matching_dir() -> None:
    """'s*' names entries in the root, not everything inside 'src/'."""
    # --- setup ---
    matcher = mod_glob.GlobMatcher("s*")

    # --- execute + verify ---
    assert matcher.matches("setup.cfg")
    assert not matcher.matches("src/a.txt")
