"""Cache: stores, key builder, registry, invalidation and the read-through entry point.

Key format is in keys.py (DRY). Stores satisfy CacheStoreProtocol; the
registry picks one per entity type.
"""

from find_cache.infrastructure.cache.cache_protocol import CacheStoreProtocol
from find_cache.infrastructure.cache.cached_lookup import fetch_one_with_cache
from find_cache.infrastructure.cache.invalidator import FindCacheInvalidator
from find_cache.infrastructure.cache.keys import cache_key_for, storage_identifier
from find_cache.infrastructure.cache.memory_cache import MemoryCacheStore
from find_cache.infrastructure.cache.redis_cache import RedisCacheStore
from find_cache.infrastructure.cache.registry import (
    CacheRegistry,
    default_store_from_settings,
    get_cache_registry,
)

__all__ = [
    "CacheRegistry",
    "CacheStoreProtocol",
    "FindCacheInvalidator",
    "MemoryCacheStore",
    "RedisCacheStore",
    "cache_key_for",
    "default_store_from_settings",
    "fetch_one_with_cache",
    "get_cache_registry",
    "storage_identifier",
]
