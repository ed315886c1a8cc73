"""
In-process TTL cache for upstream lyric responses.
"""

import asyncio
from time import monotonic
from typing import Any, Dict, NamedTuple, Optional

from cachetools import TLRUCache

from shared.logging import get_logger


DEFAULT_TTL = 3600
DEFAULT_MAX_ENTRIES = 1000
DEFAULT_CLEANUP_INTERVAL = 600


class _Entry(NamedTuple):
    value: Any
    ttl: float


def _clock() -> float:
    return monotonic()


def _time_to_use(key: str, entry: _Entry, now: float) -> float:
    return now + entry.ttl


class _EntryStore(TLRUCache):
    """TLRUCache that counts capacity evictions."""

    def __init__(self, maxsize: int):
        super().__init__(maxsize=maxsize, ttu=_time_to_use, timer=_clock)
        self.evictions = 0

    def popitem(self):
        key, entry = super().popitem()
        self.evictions += 1
        return key, entry

    def clear(self):
        evictions = self.evictions
        super().clear()
        self.evictions = evictions


class LyricCache:
    """LRU-bounded TTL cache keyed by upstream URL."""

    def __init__(self, ttl: int = DEFAULT_TTL, max_entries: int = DEFAULT_MAX_ENTRIES):
        self.ttl = ttl
        self.max_entries = max(1, max_entries)
        self.logger = get_logger("lyrics.cache")

        self._entries = _EntryStore(self.max_entries)
        self._hits = 0
        self._misses = 0

    def configure(self, ttl: int, max_entries: int) -> None:
        """Apply settings loaded after the cache was created.

        Capacity is fixed per store, so cached entries are dropped.
        """
        self.ttl = ttl
        self.max_entries = max(1, max_entries)
        self._entries = _EntryStore(self.max_entries)

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        self._hits += 1
        return entry.value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Store a value, evicting the least recently used entries past capacity."""
        self._entries[key] = _Entry(value, self.ttl if ttl is None else ttl)

    def purge_expired(self) -> int:
        """Drop expired entries and return how many were removed."""
        return len(self._entries.expire())

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> Dict[str, int]:
        return {
            "entries": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "evictions": self._entries.evictions,
        }

    def __len__(self) -> int:
        return len(self._entries)


# Process-wide cache shared by every provider instance
lyric_cache = LyricCache()

_cleanup_task: Optional["asyncio.Task[None]"] = None


async def _cleanup_loop(cache: LyricCache, interval: float) -> None:
    logger = get_logger("lyrics.cache")
    while True:
        await asyncio.sleep(interval)
        removed = cache.purge_expired()
        if removed:
            logger.info("Purged expired cache entries", removed=removed, remaining=len(cache))


def setup_cache_cleanup(interval: float = DEFAULT_CLEANUP_INTERVAL,
                        cache: Optional[LyricCache] = None) -> "asyncio.Task[None]":
    """Start the periodic cleanup task once per process.

    Must be called from a running event loop. Repeated calls return the
    task that is already running.
    """
    global _cleanup_task

    if _cleanup_task is not None and not _cleanup_task.done():
        return _cleanup_task

    target = cache if cache is not None else lyric_cache
    _cleanup_task = asyncio.get_running_loop().create_task(_cleanup_loop(target, interval))
    get_logger("lyrics.cache").info("Cache cleanup scheduled", interval_seconds=interval)
    return _cleanup_task


async def stop_cache_cleanup() -> None:
    """Cancel the cleanup task started by setup_cache_cleanup."""
    global _cleanup_task

    task = _cleanup_task
    _cleanup_task = None
    if task is None or task.done():
        return

    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
