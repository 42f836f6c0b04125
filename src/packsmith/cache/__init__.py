"""Cache subsystem — session-scoped response cache with content-addressed keys."""

from packsmith.cache.disk import SessionDiskStore
from packsmith.cache.keys import derive_key, fingerprint_inputs, generation_cache_key
from packsmith.cache.manager import ResponseCache
from packsmith.cache.memory import CacheStore, MemoryStore
from packsmith.cache.stats import CacheEntry, CacheStats

__all__ = [
    "ResponseCache",
    "CacheStore",
    "MemoryStore",
    "SessionDiskStore",
    "CacheEntry",
    "CacheStats",
    "derive_key",
    "fingerprint_inputs",
    "generation_cache_key",
]
