"""In-memory session store."""

from __future__ import annotations

from typing import Protocol

from packsmith.cache.stats import CacheEntry
from packsmith.errors.exceptions import CacheFullError

_DEFAULT_MAX_SIZE_MB = 5


class CacheStore(Protocol):
    """Key/value backend used by ResponseCache."""

    def get(self, key: str) -> CacheEntry | None: ...

    def set(self, key: str, entry: CacheEntry) -> None: ...

    def clear(self) -> None: ...

    def __len__(self) -> int: ...

    @property
    def size_mb(self) -> float: ...


class MemoryStore:
    """Process-lifetime store with a fixed byte quota.

    Entries are never evicted. A write that does not fit raises
    CacheFullError, the same way a full browser session storage refuses it.
    """

    def __init__(self, max_size_mb: float = _DEFAULT_MAX_SIZE_MB) -> None:
        self._store: dict[str, CacheEntry] = {}
        self._max_size_bytes = int(max_size_mb * 1024 * 1024)
        self._current_size_bytes = 0

    def get(self, key: str) -> CacheEntry | None:
        return self._store.get(key)

    def set(self, key: str, entry: CacheEntry) -> None:
        previous = self._store.get(key)
        released = previous.size_bytes if previous else 0
        needed = self._current_size_bytes - released + entry.size_bytes
        if needed > self._max_size_bytes:
            raise CacheFullError(
                f"Memory store quota exceeded ({needed} > {self._max_size_bytes} bytes)",
                needed_bytes=entry.size_bytes,
            )
        self._store[key] = entry
        self._current_size_bytes = needed

    def clear(self) -> None:
        self._store.clear()
        self._current_size_bytes = 0

    @property
    def size_mb(self) -> float:
        return self._current_size_bytes / (1024 * 1024)

    def __len__(self) -> int:
        return len(self._store)
