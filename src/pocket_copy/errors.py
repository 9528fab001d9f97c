# src/pocket_copy/errors.py
"""Exception taxonomy.

Pattern errors abort a single pattern, copy errors are collected per file,
cache errors are always recovered from locally. Everything a run collects is
reported back to the host as one CopyRunError.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from .utils import plural


class PocketCopyError(Exception):
    """Base class for all errors raised by pocket_copy."""


# --- pattern resolution ------------------------------------------------------


class PatternError(PocketCopyError):
    def __init__(self, message: str, pattern: Any = None) -> None:
        super().__init__(message)
        self.pattern = pattern


class MissingSourceError(PatternError):
    """The pattern has no `from`."""


class SourceNotFoundError(PatternError):
    """The resolved `from` does not exist on disk."""

    def __init__(
        self, message: str, pattern: Any = None, path: Path | None = None
    ) -> None:
        super().__init__(message, pattern)
        self.path = path


class InvalidPatternError(PatternError):
    """The pattern is structurally wrong (bad field types, unknown toType)."""


# --- copying -----------------------------------------------------------------


class CopyError(PocketCopyError):
    def __init__(
        self,
        message: str,
        source: Path,
        destination: Path | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.destination = destination


class ReadFailedError(CopyError):
    pass


class WriteFailedError(CopyError):
    pass


# --- cache -------------------------------------------------------------------


class CacheError(PocketCopyError):
    """The cache blob is unreadable or corrupt."""


# --- aggregate ---------------------------------------------------------------


class CopyRunError(PocketCopyError):
    """All errors collected during one run, surfaced as a single failure."""

    def __init__(self, errors: Sequence[PocketCopyError]) -> None:
        if not errors:
            xmsg = "CopyRunError requires at least one error"
            raise ValueError(xmsg)
        self.errors: list[PocketCopyError] = list(errors)
        count = len(self.errors)
        message = f"{count} error{plural(count)} while copying: {self.errors[0]}"
        if count > 1:
            message += f" (and {count - 1} more)"
        super().__init__(message)

    @property
    def first(self) -> PocketCopyError:
        return self.errors[0]
