"""In-process cache store (default backend).

LRU eviction bounded by max_entries plus optional TTL. Safe for use within a
single event loop; each process has its own copy, so invalidation never
reaches other processes.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from find_cache.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass
class _Entry:
    value: Any
    expires_at: float | None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class MemoryCacheStore:
    """Process-local LRU store satisfying CacheStoreProtocol.

    Args:
        max_entries: Least recently used entries are evicted beyond this size.
        default_ttl: TTL in seconds applied when set() gets none; None = no expiry.
        clock: Monotonic time source (injectable for tests).
    """

    def __init__(
        self,
        max_entries: int = 10_000,
        default_ttl: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._max_entries = max_entries
        self._default_ttl = default_ttl
        self._clock = clock
        self._stats = {"hits": 0, "misses": 0, "sets": 0, "deletes": 0, "evictions": 0}

    async def get(self, key: str) -> Any | None:
        """Return cached value or None if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            self._stats["misses"] += 1
            logger.debug("Cache MISS: %s", key)
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            self._stats["misses"] += 1
            logger.debug("Cache EXPIRED: %s", key)
            return None
        self._entries.move_to_end(key)
        self._stats["hits"] += 1
        logger.debug("Cache HIT: %s", key)
        return entry.value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store value; ttl falls back to the store's default_ttl."""
        ttl = ttl if ttl is not None else self._default_ttl
        expires_at = self._clock() + ttl if ttl is not None else None
        self._entries.pop(key, None)
        self._entries[key] = _Entry(value=value, expires_at=expires_at)
        self._stats["sets"] += 1
        logger.debug("Cache SET: %s (TTL: %ss)", key, ttl)
        while len(self._entries) > self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            self._stats["evictions"] += 1
            logger.debug("Cache EVICT: %s", evicted)

    async def delete(self, key: str) -> bool:
        """Remove key. Returns True if it was present."""
        existed = self._entries.pop(key, None) is not None
        if existed:
            self._stats["deletes"] += 1
            logger.debug("Cache DELETE: %s", key)
        return existed

    async def fetch(self, key: str, compute: Callable[[], Awaitable[Any]]) -> Any:
        """Read-through: cached value, or compute() stored when not None.

        No lock is held while compute() runs; concurrent misses on the same
        key may each compute.
        """
        value = await self.get(key)
        if value is not None:
            return value
        value = await compute()
        if value is not None:
            await self.set(key, value)
        return value

    async def clear(self) -> None:
        """Drop all entries."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[arg-type]
        return entry is not None and not entry.is_expired(self._clock())

    def get_stats(self) -> dict[str, int]:
        """Counters for hits, misses, sets, deletes, evictions and current size."""
        return {**self._stats, "size": len(self._entries)}
