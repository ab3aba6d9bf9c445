"""
Read-through cache keyed by content version.

Loaders that parse files on every request (schedule.json, media-index.json)
own one of these instead of module-level state. The caller supplies the
version token (usually the file's ``st_mtime_ns``); a lookup with a different
version is a miss.
"""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import Generic, Hashable, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class _Entry(Generic[T]):
    version: Hashable
    value: T


class VersionedCache(Generic[T]):
    """Thread-safe ``get/set/invalidate`` cache with per-key version tokens."""

    def __init__(self) -> None:
        self._entries: dict[Hashable, _Entry[T]] = {}
        self._lock = Lock()

    def get(self, key: Hashable, version: Hashable) -> T | None:
        """Return the cached value for ``key`` if it was stored at ``version``."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is None or entry.version != version:
            return None
        return entry.value

    def set(self, key: Hashable, version: Hashable, value: T) -> None:
        with self._lock:
            self._entries[key] = _Entry(version=version, value=value)

    def invalidate(self, key: Hashable | None = None) -> None:
        """Drop one key, or everything when ``key`` is None."""
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
