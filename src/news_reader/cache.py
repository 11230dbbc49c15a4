from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

logger = logging.getLogger("news_reader")

CacheKey = Tuple[str, int]


@dataclass
class CacheEntry:
    key: CacheKey
    payload: Any
    stored_at: float


class ResponseCache:
    """In-memory response cache keyed by (normalized query, page).

    With ``max_entries=1`` only the most recent key is retained. Larger sizes
    evict the least recently used key. Entries are never expired actively;
    a stale entry is only served through :meth:`fallback`.
    """

    def __init__(
        self,
        ttl: float,
        max_entries: int = 1,
        clock: Callable[[], float] = time.time,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[CacheKey, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: CacheKey) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            if self._clock() - entry.stored_at > self.ttl:
                logger.debug("Cache expired for key: %s", key)
                return None

            self._entries.move_to_end(key)
            logger.debug("Cache hit for key: %s", key)
            return entry.payload

    def set(self, key: CacheKey, payload: Any) -> None:
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = CacheEntry(key=key, payload=payload, stored_at=self._clock())
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Cache evicted key: %s", evicted)
            logger.debug("Cache set for key: %s", key)

    def fallback(self, key: CacheKey) -> Optional[CacheEntry]:
        """Return any entry regardless of age, preferring ``key``."""
        with self._lock:
            if key in self._entries:
                return self._entries[key]
            if not self._entries:
                return None
            return max(self._entries.values(), key=lambda e: e.stored_at)

    def clear(self) -> None:
        """Clear all items from the cache."""
        with self._lock:
            self._entries.clear()
        logger.info("Cache cleared.")

    def __len__(self) -> int:
        return len(self._entries)
