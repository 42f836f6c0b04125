"""Tests for ResponseCache serialization and failure handling."""

from unittest.mock import MagicMock

from packsmith.cache.disk import SessionDiskStore
from packsmith.cache.manager import ResponseCache
from packsmith.cache.memory import MemoryStore
from packsmith.cache.stats import CacheEntry
from packsmith.errors.exceptions import CacheFullError
from packsmith.types import GeneratedFile, GenerationResult, RelocationInstruction


def _result() -> GenerationResult:
    return GenerationResult(
        files=[GeneratedFile(path="BP/manifest.json", content='{"a": 1}')],
        asset_mappings=[
            RelocationInstruction(original_path="ruby.png", new_path="RP/textures/ruby.png")
        ],
        summary_report="## Done",
    )


class TestResponseCache:
    def test_round_trip_nested_value(self):
        cache = ResponseCache()
        value = {"files": [{"path": "a", "content": "b"}], "meta": {"n": [1, 2, None]}}
        assert cache.set("k1", value) is True
        assert cache.get("k1") == value

    def test_round_trip_special_characters(self):
        cache = ResponseCache()
        value = {
            "files": [
                {"path": "RP/texts/en_US.lang", "content": 'name="Rubí ⚔"\n\ttab\\slash'},
                {"path": "BP/scripts/main.js", "content": "console.log(`${a}`);\u0000"},
            ]
        }
        cache.set("k1", value)
        assert cache.get("k1") == value

    def test_model_stored_by_alias(self):
        cache = ResponseCache()
        cache.set("k1", _result())
        cached = cache.get("k1")
        assert cached["assetMappings"][0]["originalPath"] == "ruby.png"
        assert cached["summaryReport"] == "## Done"
        assert GenerationResult.model_validate(cached) == _result()

    def test_text_value(self):
        cache = ResponseCache()
        cache.set("k1", "# Summary")
        assert cache.get("k1") == "# Summary"

    def test_miss_returns_none(self):
        assert ResponseCache().get("nonexistent") is None

    def test_corrupt_entry_is_miss(self):
        store = MemoryStore()
        store.set("k1", CacheEntry(key="k1", value="{not json"))
        cache = ResponseCache(store)
        assert cache.get("k1") is None
        assert cache.stats().misses == 1

    def test_unserializable_value_dropped(self):
        cache = ResponseCache()
        assert cache.set("k1", {"bad": object()}) is False
        assert cache.get("k1") is None
        assert cache.stats().write_failures == 1

    def test_quota_exceeded_dropped(self):
        cache = ResponseCache(MemoryStore(max_size_mb=0.0001))
        assert cache.set("k1", "x" * 1000) is False
        assert cache.get("k1") is None

    def test_store_read_failure_is_miss(self):
        store = MagicMock()
        store.get.side_effect = RuntimeError("storage unavailable")
        cache = ResponseCache(store)
        assert cache.get("k1") is None

    def test_store_write_failure_dropped(self):
        store = MagicMock()
        store.set.side_effect = CacheFullError("full")
        cache = ResponseCache(store)
        assert cache.set("k1", "v") is False

    def test_disabled_cache(self):
        cache = ResponseCache(enabled=False)
        assert cache.set("k1", "v") is False
        assert cache.get("k1") is None
        assert len(cache.store) == 0

    def test_overwrite_last_write_wins(self):
        cache = ResponseCache()
        cache.set("k1", "first")
        cache.set("k1", "second")
        assert cache.get("k1") == "second"

    def test_stats_tracks_hits_and_misses(self):
        cache = ResponseCache()
        cache.set("k1", "v")
        cache.get("k1")  # hit
        cache.get("k1")  # hit
        cache.get("k2")  # miss
        stats = cache.stats()
        assert stats.hits == 2
        assert stats.misses == 1
        assert stats.entries == 1
        assert stats.size_mb > 0

    def test_clear(self):
        cache = ResponseCache()
        cache.set("k1", "v")
        cache.clear()
        assert cache.get("k1") is None
        assert cache.stats().entries == 0

    def test_close_without_store_close(self):
        ResponseCache(MemoryStore()).close(discard=True)


class TestResponseCacheOnDisk:
    def test_round_trip(self, tmp_path):
        cache = ResponseCache(SessionDiskStore(tmp_path / "session.db"))
        try:
            cache.set("k1", _result())
            assert GenerationResult.model_validate(cache.get("k1")) == _result()
        finally:
            cache.close()

    def test_corrupt_row_is_miss(self, tmp_path):
        store = SessionDiskStore(tmp_path / "session.db")
        store.set("k1", CacheEntry(key="k1", value="]]"))
        cache = ResponseCache(store)
        try:
            assert cache.get("k1") is None
        finally:
            cache.close()

    def test_close_discard(self, tmp_path):
        path = tmp_path / "session.db"
        cache = ResponseCache(SessionDiskStore(path))
        cache.set("k1", "v")
        cache.close(discard=True)
        assert not path.exists()
