"""Redis-backed cache store for the find-by cache.

Async Redis (redis.asyncio) with JSON-serialized values and optional TTL.
Unlike a best-effort cache, errors from Redis are NOT swallowed: a failing
backend turns cached lookups and invalidations into hard failures, so a
stale record is never served because an eviction silently failed.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from typing import Any

import redis.asyncio as redis

from find_cache.core.config import Settings, get_settings
from find_cache.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class RedisCacheStore:
    """Async Redis store satisfying CacheStoreProtocol.

    The client is created lazily on first use; connect() is optional and
    only verifies connectivity (e.g. at app startup). Call disconnect() at
    shutdown.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        settings: Settings | None = None,
        default_ttl: int | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            redis_client: Optional Redis client for testing or DI.
            settings: Settings used to build the client; defaults to get_settings().
            default_ttl: TTL in seconds applied when set() gets none; falls back
                to settings.cache_ttl.
        """
        self.settings = settings or get_settings()
        self.redis = redis_client
        self.default_ttl = default_ttl if default_ttl is not None else self.settings.cache_ttl

    def _client(self) -> redis.Redis:
        if self.redis is None:
            self.redis = redis.Redis(
                host=self.settings.redis_host,
                port=self.settings.redis_port,
                db=self.settings.redis_db,
                password=self.settings.redis_password.get_secret_value()
                if self.settings.redis_password
                else None,
                decode_responses=True,
                socket_connect_timeout=self.settings.redis_socket_timeout,
                socket_timeout=self.settings.redis_socket_timeout,
                socket_keepalive=True,
            )
        return self.redis

    async def connect(self) -> None:
        """Create the client and ping Redis. Raises redis.RedisError when unreachable."""
        await self._client().ping()
        logger.info(
            "Redis find cache connected: %s:%s",
            self.settings.redis_host,
            self.settings.redis_port,
        )

    async def disconnect(self) -> None:
        """Close the Redis connection."""
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
            logger.info("Redis find cache disconnected")

    async def get(self, key: str) -> Any | None:
        """Return cached value (JSON-deserialized) or None if missing."""
        value = await self._client().get(key)
        if value is None:
            logger.debug("Cache MISS: %s", key)
            return None
        logger.debug("Cache HIT: %s", key)
        return json.loads(value)

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store JSON-serializable value; without a TTL the key never expires."""
        ttl = ttl if ttl is not None else self.default_ttl
        serialized = json.dumps(value)
        if ttl is None:
            await self._client().set(key, serialized)
        else:
            await self._client().setex(key, ttl, serialized)
        logger.debug("Cache SET: %s (TTL: %ss)", key, ttl)

    async def delete(self, key: str) -> bool:
        """Remove key. Returns True if it existed."""
        deleted = await self._client().delete(key)
        logger.debug("Cache DELETE: %s (%s removed)", key, deleted)
        return bool(deleted)

    async def fetch(self, key: str, compute: Callable[[], Awaitable[Any]]) -> Any:
        """Read-through: cached value, or compute() stored when not None.

        No distributed lock is taken; concurrent misses may each compute.
        """
        value = await self.get(key)
        if value is not None:
            return value
        value = await compute()
        if value is not None:
            await self.set(key, value)
        return value
