"""Unit tests for the bounded caches."""

import pytest

from repolingo.core.exceptions import CacheError
from repolingo.core.models import CacheKey, TranslationOutcome, TranslationStatus
from repolingo.utils.cache import (
    BoundedCache, DetectionCache, TranslationCache, prefix_fingerprint
)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_get_set():
    cache = BoundedCache(max_entries=4)
    cache.set("a", 1)

    assert cache.get("a") == 1
    assert cache.get("b") is None
    assert "a" in cache
    assert len(cache) == 1


def test_lru_eviction():
    cache = BoundedCache(max_entries=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.get("a")  # a is now most recently used
    cache.set("c", 3)

    assert cache.get("b") is None
    assert cache.get("a") == 1
    assert cache.get("c") == 3
    assert cache.get_stats()["evictions"] == 1


def test_ttl_expiry():
    clock = FakeClock()
    cache = BoundedCache(max_entries=4, ttl=10, clock=clock)
    cache.set("a", 1)

    clock.now += 9
    assert cache.get("a") == 1
    clock.now += 2
    assert cache.get("a") is None
    assert len(cache) == 0


def test_overwrite_same_key():
    cache = BoundedCache(max_entries=2)
    cache.set("a", 1)
    cache.set("a", 2)

    assert cache.get("a") == 2
    assert len(cache) == 1


def test_stats_and_clear():
    cache = BoundedCache(max_entries=2, name="demo")
    cache.set("a", 1)
    cache.get("a")
    cache.get("missing")

    stats = cache.get_stats()
    assert stats["name"] == "demo"
    assert stats["hits"] == 1
    assert stats["misses"] == 1

    cache.clear()
    assert len(cache) == 0


@pytest.mark.parametrize("kwargs", [{"max_entries": 0}, {"ttl": 0}, {"ttl": -5}])
def test_invalid_bounds(kwargs):
    with pytest.raises(CacheError):
        BoundedCache(**kwargs)


def test_translation_cache_lookup():
    cache = TranslationCache(max_entries=8)
    outcome = TranslationOutcome("hola", TranslationStatus.OK, "en", "es")
    cache.set(CacheKey.for_text("hello", "en", "es"), outcome)

    assert cache.lookup("hello", "en", "es") is outcome
    assert cache.lookup("hello", "en", "fr") is None


def test_prefix_fingerprint_window():
    a = "x" * 500 + "tail one"
    b = "x" * 500 + "tail two"

    assert prefix_fingerprint(a, 500) == prefix_fingerprint(b, 500)
    assert prefix_fingerprint(a, 506) != prefix_fingerprint(b, 506)


def test_detection_cache_defaults():
    cache = DetectionCache()

    assert cache.ttl is None
    assert cache.name == "detections"
