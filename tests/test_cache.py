"""Unit tests for the TTL caches."""

from hackem_news.cache import CacheSet, TTLCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class TestTTLCache:

    def test_get_set_has(self):
        cache = TTLCache("test", ttl_seconds=60, clock=FakeClock())
        cache.set("a", [1, 2])

        assert cache.has("a")
        assert cache.get("a") == [1, 2]
        assert cache.get("missing") is None
        assert cache.get("missing", "default") == "default"

    def test_empty_values_are_cache_hits(self):
        cache = TTLCache("test", ttl_seconds=60, clock=FakeClock())
        cache.set("empty", [])

        assert cache.get("empty") == []

    def test_entries_expire_after_ttl(self):
        clock = FakeClock()
        cache = TTLCache("test", ttl_seconds=60, clock=clock)
        cache.set("a", "value")

        clock.advance(59)
        assert cache.get("a") == "value"

        clock.advance(1)
        assert cache.get("a") is None
        assert not cache.has("a")

    def test_per_entry_ttl_override(self):
        clock = FakeClock()
        cache = TTLCache("test", ttl_seconds=60, clock=clock)
        cache.set("short", 1, ttl=5)
        cache.set("long", 2)

        clock.advance(10)

        assert cache.keys() == ["long"]

    def test_flush_counts_live_keys_only(self):
        clock = FakeClock()
        cache = TTLCache("test", ttl_seconds=60, clock=clock)
        cache.set("old", 1, ttl=1)
        cache.set("a", 2)
        cache.set("b", 3)
        clock.advance(2)

        assert cache.flush() == 2
        assert len(cache) == 0

    def test_delete(self):
        cache = TTLCache("test", ttl_seconds=60)
        cache.set("a", 1)

        assert cache.delete("a") is True
        assert cache.delete("a") is False


class TestCacheSet:

    def test_content_cache_lives_twice_as_long(self):
        caches = CacheSet(ttl_seconds=100)

        assert caches.pipeline.ttl_seconds == 100
        assert caches.content.ttl_seconds == 200

    def test_flush_all_reports_by_name(self):
        caches = CacheSet(ttl_seconds=100, clock=FakeClock())
        caches.pipeline.set("top_articles:hackernews", [])
        caches.sources.set("hackernews:item:1", {})
        caches.sources.set("hackernews:item:2", {})
        caches.content.set("content:https://a", object())

        stats = caches.flush_all()

        assert stats == {"pipeline": 1, "sources": 2, "summaries": 0, "content": 1}
        assert all(len(cache) == 0 for cache in caches.all())
