"""Explicit single-record read-through for the host data-access layer.

The host calls fetch_one_with_cache() deliberately around its "fetch first
record" execution; nothing in the host's query API is patched.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from find_cache.application.services.cacheability import (
    ineligibility_reason,
    resolve_constraint_pairs,
)
from find_cache.domain.lookup import LookupDescriptor
from find_cache.infrastructure.cache.registry import CacheRegistry, get_cache_registry
from find_cache.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def fetch_one_with_cache(
    descriptor: LookupDescriptor,
    execute: Callable[[], Awaitable[T]],
    *,
    registry: CacheRegistry | None = None,
    can_cache: bool = True,
) -> T:
    """Return one record, hitting the cache when the lookup is cacheable.

    Args:
        descriptor: The lookup being executed.
        execute: Runs the lookup against the database; returns the record or None.
        registry: Registry to consult; defaults to the process-wide one.
        can_cache: False bypasses the cache (e.g. the caller asked for N rows).

    Returns:
        The cached value, or execute()'s result (stored when not None).
    """
    registry = registry or get_cache_registry()
    entity_type = descriptor.entity_type
    if not can_cache:
        return await execute()
    reason = ineligibility_reason(descriptor, registry.cacheable_sets(entity_type))
    if reason is not None:
        logger.debug("Find cache bypassed for %s: %s", entity_type.__name__, reason)
        return await execute()
    pairs: list[tuple[str, Any]] = resolve_constraint_pairs(descriptor) or []
    key = registry.cache_key_for(entity_type, pairs)
    return await registry.lookup_or_compute(entity_type, key, execute)
