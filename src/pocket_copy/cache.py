# src/pocket_copy/cache.py
"""Change-detection cache.

Maps an output path (relative to the output root) to the SHA-256 fingerprint
of the bytes last written there. The cache is advisory: when unsure it says
"copy", never "skip".
"""

import hashlib
import json
import threading
from pathlib import Path
from typing import Any, Protocol

from .constants import CACHE_FORMAT_VERSION
from .errors import CacheError
from .logs import get_logger
from .utils import write_bytes_atomic


def fingerprint_bytes(content: bytes) -> str:
    """Return the SHA-256 hex digest used as a content fingerprint."""
    return hashlib.sha256(content).hexdigest()


# --------------------------------------------------------------------------- #
# persistence
# --------------------------------------------------------------------------- #


class CacheStore(Protocol):
    def load(self) -> dict[str, str]: ...

    def save(self, entries: dict[str, str]) -> None: ...


class JsonCacheStore:
    """Reads and writes the cache blob as a JSON document at `path`."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> dict[str, str]:
        """Return the stored entries; {} when the blob does not exist yet.

        Raises CacheError if the blob is unreadable or malformed.
        """
        if not self.path.exists():
            return {}

        try:
            data: Any = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            xmsg = f"Unable to read cache {self.path}: {e}"
            raise CacheError(xmsg) from e

        if not isinstance(data, dict) or data.get("version") != CACHE_FORMAT_VERSION:
            xmsg = f"Unrecognized cache format in {self.path}"
            raise CacheError(xmsg)

        entries = data.get("entries")
        if not isinstance(entries, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in entries.items()
        ):
            xmsg = f"Malformed cache entries in {self.path}"
            raise CacheError(xmsg)

        return dict(entries)

    def save(self, entries: dict[str, str]) -> None:
        payload = {"version": CACHE_FORMAT_VERSION, "entries": entries}
        blob = json.dumps(payload, indent=2, sort_keys=True).encode("utf-8")
        try:
            write_bytes_atomic(self.path, blob)
        except OSError as e:
            xmsg = f"Unable to write cache {self.path}: {e}"
            raise CacheError(xmsg) from e


# --------------------------------------------------------------------------- #
# cache
# --------------------------------------------------------------------------- #


class ChangeCache:
    """In-memory fingerprint map with an optional persistent store.

    One instance is meant to live as long as the host process and be handed
    to every run. The store is only read when the in-memory map is empty and
    only written once; hosts wanting a later save call `persist(force=True)`.
    """

    def __init__(self, store: CacheStore | None = None) -> None:
        self.store = store
        self._entries: dict[str, str] = {}
        self._lock = threading.Lock()
        self._persisted = False

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._entries.get(key)

    def begin_run(self, *, copy_unmodified: bool) -> bool:
        """Prepare for a run and return True if every copy must be forced.

        Copies are forced when `copy_unmodified` is set, and on a cold start
        (nothing recorded in memory yet). A cold start also loads the store.
        """
        if copy_unmodified:
            return True

        with self._lock:
            if self._entries:
                return False

        self._load()
        return True

    def _load(self) -> None:
        if self.store is None:
            return

        logger = get_logger()
        try:
            entries = self.store.load()
        except CacheError as e:
            logger.warning("%s; starting with an empty cache", e)
            entries = {}

        with self._lock:
            # entries recorded meanwhile win over stale disk contents
            self._entries = {**entries, **self._entries}
        logger.debug("Loaded %d cache entries", len(entries))

    def should_copy(
        self,
        key: str,
        fingerprint: str,
        *,
        destination: Path | None = None,
        force: bool = False,
    ) -> bool:
        """Return False only when `key` was last written with `fingerprint`
        and the destination is still there."""
        if force:
            return True

        with self._lock:
            prior = self._entries.get(key)

        if prior is None or prior != fingerprint:
            return True

        return destination is not None and not destination.is_file()

    def record(self, key: str, fingerprint: str) -> None:
        with self._lock:
            self._entries[key] = fingerprint

    def snapshot(self) -> dict[str, str]:
        with self._lock:
            return dict(self._entries)

    def persist(self, *, force: bool = False) -> None:
        """Write entries to the store, if any. Failures are only logged.

        The blob is written at most once per cache; later calls are no-ops
        unless `force` is set, which is how a host saves again on shutdown.
        """
        if self.store is None:
            return
        if self._persisted and not force:
            get_logger().trace("[CACHE] already persisted; not rewriting")
            return
        try:
            self.store.save(self.snapshot())
        except CacheError as e:
            get_logger().warning("%s", e)
            return
        self._persisted = True
