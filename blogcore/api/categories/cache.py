# blogcore/api/categories/cache.py
"""
Time-boxed read-through cache for category lookups.

An entry is served iff ``now - entry.timestamp < ttl``. Expired entries are not
evicted on a miss: they stay in place until a successful reload overwrites
them, so a failed reload never leaves the cache half-written and a caller may
still ``peek(..., allow_stale=True)`` at the last good value.

Any category write calls ``invalidate()``, which drops everything. Category
writes are rare and a full refetch is cheap.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from blogcore.errors import store_errors

logger = logging.getLogger(__name__)

T = TypeVar("T")

ALL_CATEGORIES_KEY = "categories:all"


def slug_key(slug: str) -> str:
    return f"category:{slug}"


@dataclass
class CacheEntry:
    data: Any
    timestamp: float


class CategoryCache:
    def __init__(self, ttl_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self.hits = 0
        self.misses = 0

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.timestamp < self.ttl_seconds

    def peek(self, key: str, *, allow_stale: bool = False) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if allow_stale or self._is_fresh(entry):
            return entry
        return None

    async def get_or_load(
        self,
        key: str,
        loader: Callable[[], Awaitable[T]],
        *,
        cache_none: bool = False,
    ) -> T:
        entry = self._entries.get(key)
        if entry is not None and self._is_fresh(entry):
            self.hits += 1
            return entry.data

        self.misses += 1
        with store_errors(f"category load ({key})"):
            data = await loader()

        if data is not None or cache_none:
            self._entries[key] = CacheEntry(data=data, timestamp=self._clock())
        return data

    def invalidate(self) -> None:
        if self._entries:
            logger.info("category cache invalidated (%d entries)", len(self._entries))
        self._entries.clear()

    def stats(self) -> Dict[str, Any]:
        total = self.hits + self.misses
        return {
            "hits": self.hits,
            "misses": self.misses,
            "entries": len(self._entries),
            "hit_rate": round(self.hits / total * 100, 2) if total else 0.0,
        }
