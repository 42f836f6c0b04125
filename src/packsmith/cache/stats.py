"""Cache entry and statistics models."""

from __future__ import annotations

import time

from pydantic import BaseModel, Field


class CacheEntry(BaseModel):
    """A serialized generation result stored under a derived key."""

    key: str
    value: str
    created_at: float = Field(default_factory=time.time)

    @property
    def size_bytes(self) -> int:
        return len(self.value.encode("utf-8"))


class CacheStats(BaseModel):
    """Aggregate cache statistics."""

    entries: int = 0
    size_mb: float = 0.0
    hits: int = 0
    misses: int = 0
    write_failures: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0
