"""find_cache: read-through caching of single-record lookups by declared attribute sets.

Typical use::

    from find_cache import BaseRepository, get_cache_registry, setup_logging

    setup_logging()  # optional; FIND_CACHE_CACHE_LOG_LEVEL=DEBUG traces HIT/MISS
    get_cache_registry().declare(User, "email")
    user = await BaseRepository(session, User).find_by(email="a@example.com")
"""

from find_cache.domain import (
    CacheKeyValueException,
    FindCacheException,
    InvalidDeclarationException,
    LookupDescriptor,
)
from find_cache.infrastructure.cache import (
    CacheRegistry,
    CacheStoreProtocol,
    MemoryCacheStore,
    RedisCacheStore,
    cache_key_for,
    fetch_one_with_cache,
    get_cache_registry,
)
from find_cache.infrastructure.persistence import BaseRepository, descriptor_from_select
from find_cache.shared.telemetry import setup_logging

__all__ = [
    "BaseRepository",
    "CacheKeyValueException",
    "CacheRegistry",
    "CacheStoreProtocol",
    "FindCacheException",
    "InvalidDeclarationException",
    "LookupDescriptor",
    "MemoryCacheStore",
    "RedisCacheStore",
    "cache_key_for",
    "descriptor_from_select",
    "fetch_one_with_cache",
    "get_cache_registry",
    "setup_logging",
]
