"""
In-memory report cache with LRU eviction and per-entry TTL.

Reports are recomputed from scratch after expiry; nothing is persisted.
"""

import time
from collections import OrderedDict
from collections.abc import Hashable
from typing import Any

from stockledger.config import get_logger
from stockledger.core.interfaces import IReportCache

logger = get_logger(__name__)


class ReportCache(IReportCache):
    """Bounded LRU cache keyed by a request's filter tuple."""

    def __init__(self, max_size: int = 256, ttl_seconds: int = 300):
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._entries: OrderedDict[Hashable, tuple[float, Any]] = OrderedDict()
        self._hits = 0
        self._misses = 0

    def get(self, key: Hashable) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        expires_at, value = entry
        if time.monotonic() >= expires_at:
            del self._entries[key]
            self._misses += 1
            return None

        self._entries.move_to_end(key)
        self._hits += 1
        return value

    def set(self, key: Hashable, value: Any, ttl: int | None = None) -> None:
        ttl = self.ttl_seconds if ttl is None else ttl
        if ttl <= 0 or self.max_size <= 0:
            return
        self._entries[key] = (time.monotonic() + ttl, value)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("report_cache_evicted", key=evicted)

    def invalidate(self) -> None:
        count = len(self._entries)
        self._entries.clear()
        logger.info("report_cache_invalidated", entries=count)

    def stats(self) -> dict[str, Any]:
        total = self._hits + self._misses
        return {
            "size": len(self._entries),
            "max_size": self.max_size,
            "ttl_seconds": self.ttl_seconds,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": self._hits / total if total else 0.0,
        }
