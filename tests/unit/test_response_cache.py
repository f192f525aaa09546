"""Tests for the LRU store and the fire-and-forget response cache."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest

from concierge.services.response_cache import ResponseCache, normalize_query
from concierge.utils.cache_service import LRUCache

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def cache():
    response_cache = ResponseCache(ttl_seconds=60, max_size=10)
    yield response_cache
    response_cache.close()


class TestLRUCache:
    def test_get_set_and_stats(self):
        store = LRUCache(max_size=2, ttl_seconds=60)
        store.set("a", 1)
        assert store.get("a") == 1
        assert store.get("b") is None
        assert store.stats() == {"size": 1, "max_size": 2, "ttl_seconds": 60, "hits": 1, "misses": 1}

    def test_evicts_least_recently_used(self):
        store = LRUCache(max_size=2, ttl_seconds=60)
        store.set("a", 1)
        store.set("b", 2)
        store.get("a")
        store.set("c", 3)
        assert store.get("b") is None
        assert store.get("a") == 1
        assert store.get("c") == 3

    def test_entry_expires_at_ttl(self):
        store = LRUCache(max_size=2, ttl_seconds=60)
        with patch("concierge.utils.cache_service._utcnow", return_value=T0):
            store.set("a", 1)
        with patch("concierge.utils.cache_service._utcnow", return_value=T0 + timedelta(seconds=59)):
            assert store.get_entry("a") == (1, T0)
        with patch("concierge.utils.cache_service._utcnow", return_value=T0 + timedelta(seconds=60)):
            assert store.get_entry("a") is None
        assert store.stats()["size"] == 0

    def test_delete_and_clear(self):
        store = LRUCache()
        store.set("a", 1)
        assert store.delete("a") is True
        assert store.delete("a") is False
        store.set("b", 2)
        store.clear()
        assert store.get("b") is None


class TestResponseCache:
    @pytest.mark.parametrize(
        "raw, expected",
        [("What time is CHECKOUT?", "what time is checkout?"), ("  Pool hours \n", "pool hours"), ("", "")],
    )
    def test_normalize_query(self, raw, expected):
        assert normalize_query(raw) == expected

    def test_write_then_read_matches_normalized_text(self, cache):
        cache.set("What time is checkout?", "Checkout is at 11am.", "inquiry.checkout")
        cache.flush(timeout=5)

        hit = cache.get("  what time is CHECKOUT?  ")
        assert hit is not None
        assert hit.response == "Checkout is at 11am."
        assert hit.intent == "inquiry.checkout"
        assert hit.created_at.tzinfo is not None

    def test_miss_for_different_text(self, cache):
        cache.set("What time is checkout?", "Checkout is at 11am.")
        cache.flush(timeout=5)
        assert cache.get("When is checkout?") is None

    def test_blank_query_never_cached(self, cache):
        assert cache.set("   ", "anything").result(timeout=5) is False
        assert cache.get("   ") is None

    def test_expired_entry_is_a_miss(self):
        response_cache = ResponseCache(ttl_seconds=0, max_size=10)
        try:
            response_cache.set("pool hours?", "7am to 10pm")
            response_cache.flush(timeout=5)
            assert response_cache.get("pool hours?") is None
        finally:
            response_cache.close()

    def test_failed_write_is_swallowed(self):
        store = MagicMock()
        store.set.side_effect = RuntimeError("cache backend down")
        response_cache = ResponseCache(store=store)
        try:
            future = response_cache.set("pool hours?", "7am to 10pm")
            assert future.result(timeout=5) is False
            response_cache.flush(timeout=5)
        finally:
            response_cache.close()

    def test_invalidate_and_clear(self, cache):
        cache.set("pool hours?", "7am to 10pm")
        cache.set("breakfast?", "6:30am")
        cache.flush(timeout=5)

        assert cache.invalidate("POOL HOURS?") is True
        assert cache.get("pool hours?") is None
        cache.clear()
        assert cache.get("breakfast?") is None
        assert cache.stats()["size"] == 0
