"""Cache store protocol (DIP). Implementations: MemoryCacheStore, RedisCacheStore."""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CacheStoreProtocol(Protocol):
    """Key-value store backing the find-by cache.

    Eviction and expiry are the store's own policy. Errors raised by the
    backend must propagate; callers of the find-by cache do not catch them.
    """

    async def get(self, key: str) -> Any:
        """Return cached value or None."""
        ...

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store value with optional TTL in seconds."""
        ...

    async def delete(self, key: str) -> bool:
        """Remove key. Returns True if it existed; missing keys are not an error."""
        ...

    async def fetch(self, key: str, compute: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value, or await compute(), store a non-None result and return it."""
        ...
