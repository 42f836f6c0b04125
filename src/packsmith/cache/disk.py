"""Session store backed by SQLite, for sessions spanning several processes."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from packsmith.cache.stats import CacheEntry
from packsmith.errors.exceptions import CacheFullError

logger = logging.getLogger(__name__)

_DEFAULT_MAX_SIZE_MB = 50


class SessionDiskStore:
    """SQLite-backed store with a byte quota and no eviction.

    The database belongs to one user session; ``close(discard=True)`` deletes
    it when the session ends.
    """

    def __init__(self, db_path: Path, max_size_mb: float = _DEFAULT_MAX_SIZE_MB) -> None:
        self._db_path = Path(db_path)
        self._max_size_bytes = int(max_size_mb * 1024 * 1024)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.row_factory = sqlite3.Row
        self._create_table()

    @property
    def path(self) -> Path:
        return self._db_path

    def get(self, key: str) -> CacheEntry | None:
        row = self._conn.execute(
            "SELECT key, value, created_at FROM cache WHERE key = ?", (key,)
        ).fetchone()
        if row is None:
            return None
        return CacheEntry(key=row["key"], value=row["value"], created_at=row["created_at"])

    def set(self, key: str, entry: CacheEntry) -> None:
        row = self._conn.execute(
            "SELECT COALESCE(SUM(size_bytes), 0) FROM cache WHERE key != ?", (key,)
        ).fetchone()
        needed = row[0] + entry.size_bytes
        if needed > self._max_size_bytes:
            raise CacheFullError(
                f"Session store quota exceeded ({needed} > {self._max_size_bytes} bytes)",
                needed_bytes=entry.size_bytes,
            )
        self._conn.execute(
            """INSERT OR REPLACE INTO cache (key, value, created_at, size_bytes)
               VALUES (?, ?, ?, ?)""",
            (key, entry.value, entry.created_at, entry.size_bytes),
        )
        self._conn.commit()

    def clear(self) -> None:
        self._conn.execute("DELETE FROM cache")
        self._conn.commit()

    @property
    def size_mb(self) -> float:
        row = self._conn.execute("SELECT COALESCE(SUM(size_bytes), 0) FROM cache").fetchone()
        return row[0] / (1024 * 1024)

    def __len__(self) -> int:
        row = self._conn.execute("SELECT COUNT(*) FROM cache").fetchone()
        return row[0]

    def close(self, discard: bool = False) -> None:
        self._conn.close()
        if discard:
            self._db_path.unlink(missing_ok=True)
            logger.debug("Discarded session store %s", self._db_path)

    def _create_table(self) -> None:
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS cache (
                key TEXT PRIMARY KEY,
                value TEXT,
                created_at REAL,
                size_bytes INTEGER
            )
        """)
        self._conn.commit()
