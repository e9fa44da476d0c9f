import pytest

from goldcast.utils.cache_manager import TTLCache
from tests.mocks.fakes import ManualClock


def test_set_and_get_roundtrip():
    cache = TTLCache("t")
    cache.set("a", 1)
    assert cache.get("a") == 1
    assert "a" in cache
    assert len(cache) == 1


def test_get_missing_returns_none():
    assert TTLCache("t").get("nope") is None


def test_ttl_expiry_hides_value_from_get_but_not_peek():
    clock = ManualClock()
    cache = TTLCache("t", ttl=300, clock=clock)
    cache.set("sentiment", "value")

    clock.advance(299)
    assert cache.get("sentiment") == "value"

    clock.advance(1)
    assert cache.get("sentiment") is None
    assert cache.peek("sentiment") == "value"


def test_per_entry_ttl_overrides_default():
    clock = ManualClock()
    cache = TTLCache("t", ttl=None, clock=clock)
    cache.set("short", 1, ttl=10)
    cache.set("forever", 2)
    clock.advance(1_000_000)
    assert cache.get("short") is None
    assert cache.get("forever") == 2


def test_set_replaces_entry_whole():
    cache = TTLCache("t")
    cache.set("k", [1, 2, 3])
    cache.set("k", [4])
    assert cache.get("k") == [4]


def test_lru_eviction_keeps_recently_used():
    cache = TTLCache("t", max_items=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.get("a")  # "b" becomes least recently used
    cache.set("c", 3)
    assert "b" not in cache
    assert "a" in cache and "c" in cache


def test_invalidate_one_key_or_all():
    cache = TTLCache("t")
    cache.set("a", 1)
    cache.set("b", 2)

    cache.invalidate("a")
    assert "a" not in cache
    assert "b" in cache
    cache.invalidate()
    assert len(cache) == 0


def test_invalid_max_items():
    with pytest.raises(ValueError):
        TTLCache("t", max_items=0)


def test_backend_info_mentions_name():
    cache = TTLCache("last_good", ttl=5)
    assert "last_good" in cache.backend_info()
