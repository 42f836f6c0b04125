"""Response cache — serializes generation results into a session store."""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import BaseModel

from packsmith.cache.memory import CacheStore, MemoryStore
from packsmith.cache.stats import CacheEntry, CacheStats

logger = logging.getLogger(__name__)


class ResponseCache:
    """Maps derived keys to previously computed results.

    Caching is an optimization only: unreadable entries, store errors and
    quota exhaustion all degrade to a miss or a skipped write.
    """

    def __init__(self, store: CacheStore | None = None, enabled: bool = True) -> None:
        self._store: CacheStore = store if store is not None else MemoryStore()
        self._enabled = enabled
        self._stats = CacheStats()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def store(self) -> CacheStore:
        return self._store

    def get(self, key: str) -> Any | None:
        """Return the decoded value stored under key, or None."""
        if not self._enabled:
            self._stats.misses += 1
            return None

        try:
            entry = self._store.get(key)
        except Exception as e:
            logger.warning("Cache store unavailable for key %s: %s", key, e)
            entry = None

        if entry is None:
            self._stats.misses += 1
            return None

        try:
            value = json.loads(entry.value)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning("Failed to parse cached value for key %s: %s", key, e)
            self._stats.misses += 1
            return None

        self._stats.hits += 1
        return value

    def set(self, key: str, value: Any) -> bool:
        """Serialize and store value. Returns False if the write was dropped."""
        if not self._enabled:
            return False
        try:
            if isinstance(value, BaseModel):
                value = value.model_dump(mode="json", by_alias=True)
            serialized = json.dumps(value)
            self._store.set(key, CacheEntry(key=key, value=serialized))
        except Exception as e:
            logger.warning("Failed to set cache for key %s: %s", key, e)
            self._stats.write_failures += 1
            return False
        return True

    def clear(self) -> None:
        self._store.clear()
        self._stats = CacheStats()

    def stats(self) -> CacheStats:
        """Return aggregate cache statistics."""
        return CacheStats(
            entries=len(self._store),
            size_mb=self._store.size_mb,
            hits=self._stats.hits,
            misses=self._stats.misses,
            write_failures=self._stats.write_failures,
        )

    def close(self, discard: bool = False) -> None:
        close = getattr(self._store, "close", None)
        if close is not None:
            close(discard=discard)
