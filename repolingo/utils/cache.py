"""In-memory caching utilities for translations and language detection."""

from collections import OrderedDict
import hashlib
import logging
import time
from typing import Any, Callable, Dict, Generic, Hashable, Optional, TypeVar

from repolingo.core.exceptions import CacheError
from repolingo.core.models import CacheKey, TranslationOutcome

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class BoundedCache(Generic[K, V]):
    """LRU cache with an entry limit and optional time-to-live."""

    def __init__(
        self,
        max_entries: int = 1024,
        ttl: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        name: str = "cache"
    ):
        """
        Initialize cache.

        Args:
            max_entries: Entries kept before the least recently used is evicted
            ttl: Seconds an entry stays valid. None disables expiration.
            clock: Time source, replaceable in tests
            name: Label used in logs and statistics
        """
        if max_entries < 1:
            raise CacheError(
                f"max_entries must be at least 1, got {max_entries}",
                cache_type="memory",
                operation="init"
            )
        if ttl is not None and ttl <= 0:
            raise CacheError(
                f"ttl must be positive or None, got {ttl}",
                cache_type="memory",
                operation="init"
            )
        self.max_entries = max_entries
        self.ttl = ttl
        self.name = name
        self._clock = clock
        self._entries: "OrderedDict[K, tuple]" = OrderedDict()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, key: K) -> Optional[V]:
        """Return the cached value, or None when absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None

        value, stored_at = entry
        if self.ttl is not None and self._clock() - stored_at > self.ttl:
            del self._entries[key]
            self.misses += 1
            return None

        self._entries.move_to_end(key)
        self.hits += 1
        return value

    def set(self, key: K, value: V) -> None:
        """Store a value, evicting the least recently used entry when full."""
        if key in self._entries:
            self._entries.move_to_end(key)
        self._entries[key] = (value, self._clock())

        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            self.evictions += 1
            logger.debug(f"{self.name}: evicted {evicted!r}")

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        """Clear all entries."""
        self._entries.clear()

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        return {
            "name": self.name,
            "size": len(self._entries),
            "max_entries": self.max_entries,
            "ttl": self.ttl,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
        }


class TranslationCache(BoundedCache[CacheKey, TranslationOutcome]):
    """Finished pipeline results keyed by (source, target, content hash)."""

    def __init__(self, max_entries: int = 1024, ttl: Optional[float] = 86400, **kwargs):
        super().__init__(max_entries=max_entries, ttl=ttl, name="translations", **kwargs)

    def lookup(self, text: str, source_lang: str, target_lang: str) -> Optional[TranslationOutcome]:
        return self.get(CacheKey.for_text(text, source_lang, target_lang))


def prefix_fingerprint(text: str, prefix_chars: int) -> str:
    """Fingerprint of the first ``prefix_chars`` characters of ``text``."""
    return hashlib.sha256(text[:prefix_chars].encode("utf-8")).hexdigest()


class DetectionCache(BoundedCache[str, str]):
    """Detected language codes keyed by a text-prefix fingerprint."""

    def __init__(self, max_entries: int = 4096, ttl: Optional[float] = None, **kwargs):
        super().__init__(max_entries=max_entries, ttl=ttl, name="detections", **kwargs)
