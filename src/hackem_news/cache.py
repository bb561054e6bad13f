"""In-memory TTL caches shared by the pipeline components."""

import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple


class TTLCache:
    """
    Process-lifetime key/value cache with per-entry expiry.

    Every component receives its cache at construction time, so tests can
    inject a fresh cache (or a fake clock) per case. Entries are never
    mutated after being stored.
    """

    def __init__(self, name: str, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.name = name
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, Tuple[Any, float]] = {}

    def get(self, key: str, default: Any = None) -> Any:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            value, expires_at = entry
            if now >= expires_at:
                del self._entries[key]
                return default
            return value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        expires_at = self._clock() + (self.ttl_seconds if ttl is None else ttl)
        with self._lock:
            self._entries[key] = (value, expires_at)

    def has(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and now < entry[1]

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def keys(self) -> List[str]:
        """Return keys of live (unexpired) entries."""
        now = self._clock()
        with self._lock:
            self._evict_expired(now)
            return list(self._entries.keys())

    def flush(self) -> int:
        """Drop every entry; returns how many live keys were evicted."""
        now = self._clock()
        with self._lock:
            self._evict_expired(now)
            count = len(self._entries)
            self._entries.clear()
            return count

    def __len__(self) -> int:
        return len(self.keys())

    def _evict_expired(self, now: float) -> None:
        expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]


class CacheSet:
    """Named caches used by one orchestrator instance."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.pipeline = TTLCache("pipeline", ttl_seconds, clock)
        self.sources = TTLCache("sources", ttl_seconds, clock)
        self.summaries = TTLCache("summaries", ttl_seconds, clock)
        # Page content lives twice as long as everything else
        self.content = TTLCache("content", ttl_seconds * 2, clock)

    def all(self) -> List[TTLCache]:
        return [self.pipeline, self.sources, self.summaries, self.content]

    def flush_all(self) -> Dict[str, int]:
        """Flush every cache and report evicted key counts by cache name."""
        return {cache.name: cache.flush() for cache in self.all()}
