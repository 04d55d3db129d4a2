"""Core constants: cache key structure and logger namespace.

Single source of truth for the find-by cache key format. Used by
infrastructure.cache.keys.
"""

# First segment of every find-by cache key
CACHE_PREFIX_FIND_BY = "cache_find_by"

# Delimiter between key segments (never appears unescaped inside a segment)
CACHE_KEY_SEP = "/"

# Root of the package's logger tree; every module logs under it
LOGGER_NAMESPACE = "find_cache"
