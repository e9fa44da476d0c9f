# goldcast/utils/cache_manager.py
"""
In-process cache objects with LRU (Least Recently Used) bound + TTL.

Caches are explicitly owned and injected: the orchestrator's last-good series
map and the sentiment result are each one ``TTLCache`` instance, shared by
whoever is handed it. Entries are immutable pairs swapped under a lock, so a
reader sees either the old entry or the new one, never a half-written one.
"""
from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Generic, NamedTuple, Optional, TypeVar

from goldcast.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class CacheEntry(NamedTuple):
    value: Any
    stored_at: float
    expires_at: Optional[float]


class TTLCache(Generic[T]):
    """
    Thread-safe key/value cache.

    ``get`` honours the TTL; ``peek`` returns the entry regardless of expiry,
    which is what fallback paths use to serve stale-but-known-good data.
    """

    def __init__(
        self,
        name: str,
        ttl: Optional[float] = None,
        max_items: int = 128,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            name (str): Label used in log lines.
            ttl (Optional[float]): Default time-to-live in seconds. None = never expires.
            max_items (int): Max entries kept before the least recently used is evicted.
            clock (Callable[[], float]): Monotonic time source, injectable for tests.
        """
        if max_items < 1:
            raise ValueError("max_items must be >= 1")
        self.name = name
        self.ttl = ttl
        self.max_items = max_items
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        logger.debug(f"TTLCache '{name}' initialized (ttl={ttl}, max_items={max_items})")

    # ---------------------
    # Core Cache Operations
    # ---------------------
    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        """Store ``value`` under ``key``, replacing any previous entry whole."""
        now = self._clock()
        effective_ttl = self.ttl if ttl is None else ttl
        entry = CacheEntry(
            value=value,
            stored_at=now,
            expires_at=now + effective_ttl if effective_ttl is not None else None,
        )
        with self._lock:
            self._entries[key] = entry
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_items:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"[{self.name}] evicted LRU entry: {evicted}")

    def get(self, key: str) -> Optional[T]:
        """Return the value if present and fresh, else None."""
        entry = self.get_entry(key)
        if entry is None or self._is_expired(entry):
            return None
        return entry.value

    def peek(self, key: str) -> Optional[T]:
        """Return the value if present, fresh or not."""
        entry = self.get_entry(key)
        return entry.value if entry is not None else None

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._entries.move_to_end(key)
            return entry

    def invalidate(self, key: Optional[str] = None) -> None:
        """Drop one key, or everything when ``key`` is None."""
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)
        logger.debug(f"[{self.name}] invalidated {key or 'all entries'}")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def _is_expired(self, entry: CacheEntry) -> bool:
        return entry.expires_at is not None and self._clock() >= entry.expires_at

    def backend_info(self) -> str:
        """Return backend cache summary."""
        return f"{self.name}: {len(self)} items, ttl={self.ttl}, max_items={self.max_items}"
