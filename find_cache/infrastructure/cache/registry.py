"""Per-entity-type registry of cacheable attribute sets, stores and hooks.

Process-wide state, written while models are being configured (before
traffic) and read on every lookup afterwards. Declarations, stores and hooks
are inherited along the entity type's MRO through explicit lookups; nothing
is attached to the entity classes themselves. No locking: declaring during
live traffic is unsupported.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from functools import lru_cache
from typing import Any

from sqlalchemy.orm import QueryableAttribute

from find_cache.application.interfaces.lifecycle import LifecycleHook, RecordState
from find_cache.core.config import Settings, get_settings
from find_cache.domain.exceptions import InvalidDeclarationException
from find_cache.infrastructure.cache.cache_protocol import CacheStoreProtocol
from find_cache.infrastructure.cache.invalidator import FindCacheInvalidator
from find_cache.infrastructure.cache.keys import cache_key_for, storage_identifier
from find_cache.infrastructure.cache.memory_cache import MemoryCacheStore
from find_cache.infrastructure.cache.redis_cache import RedisCacheStore
from find_cache.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

AttributeSet = tuple[str, ...]


def default_store_from_settings(settings: Settings | None = None) -> CacheStoreProtocol:
    """Build the shared default store for cache_backend ("memory" or "redis")."""
    settings = settings or get_settings()
    if settings.cache_backend == "redis":
        return RedisCacheStore(settings=settings)
    return MemoryCacheStore(
        max_entries=settings.memory_cache_max_entries,
        default_ttl=settings.cache_ttl,
    )


def _field_name(entity_type: type, name: Any) -> str:
    if isinstance(name, QueryableAttribute):
        name = name.key
    if not isinstance(name, str) or not name.isidentifier():
        raise InvalidDeclarationException(entity_type.__name__, name)
    return name


class CacheRegistry:
    """Declared cacheable attribute sets, stores and lifecycle hooks per entity type.

    Example:
        ```python
        registry = get_cache_registry()
        registry.declare(User, "email")
        registry.declare(User, User.tenant_id, User.username)
        ```
    """

    def __init__(
        self,
        default_store_factory: Callable[[], CacheStoreProtocol] | None = None,
    ) -> None:
        """Initialize an empty registry.

        Args:
            default_store_factory: Builds the shared store used by types with no
                store configured along their MRO. Called at most once.
        """
        self._default_store_factory = default_store_factory or default_store_from_settings
        self._default_store: CacheStoreProtocol | None = None
        self._sets: dict[type, frozenset[AttributeSet]] = {}
        self._stores: dict[type, CacheStoreProtocol] = {}
        self._hooks: dict[type, list[LifecycleHook]] = {}
        self.invalidator = FindCacheInvalidator(self)

    # ---- Declarations ----

    def declare(self, entity_type: type, *field_names: Any) -> AttributeSet:
        """Mark lookups by exactly these fields (all of them) as cacheable.

        Only for attribute sets that identify a single record; caching a set
        whose values may match several rows serves an arbitrary one of them.
        The first declaration along entity_type's hierarchy registers the
        invalidator as its lifecycle hook.

        Args:
            entity_type: Mapped class whose lookups are cached.
            *field_names: Field names as str or instrumented attributes.

        Returns:
            The normalized (sorted, deduplicated) attribute set.

        Raises:
            InvalidDeclarationException: If no field is given or a field is not
                a simple identifier.
        """
        if not field_names:
            raise InvalidDeclarationException(
                entity_type.__name__, reason="at least one field name is required"
            )
        find_by = tuple(sorted({_field_name(entity_type, name) for name in field_names}))
        inherited = self._nearest(self._sets, entity_type)
        if inherited is None:
            self.register_hook(entity_type, self.invalidator)
            inherited = frozenset()
        self._sets[entity_type] = inherited | {find_by}
        logger.info("Declared cache_find_by %s on %s", find_by, entity_type.__name__)
        return find_by

    def cacheable_sets(self, entity_type: type) -> frozenset[AttributeSet]:
        """Declared attribute sets for entity_type (nearest declaration on its MRO)."""
        declared = self._nearest(self._sets, entity_type)
        return declared if declared is not None else frozenset()

    # ---- Stores ----

    def store(self, entity_type: type) -> CacheStoreProtocol:
        """Return the store for entity_type.

        Resolution: the nearest store set along the MRO; otherwise the shared
        default, which is then pinned on entity_type so that later
        configuration of an ancestor does not move it.
        """
        configured = self._nearest(self._stores, entity_type)
        if configured is not None:
            return configured
        if self._default_store is None:
            self._default_store = self._default_store_factory()
            logger.info(
                "Find cache default store: %s", type(self._default_store).__name__
            )
        self._stores[entity_type] = self._default_store
        return self._default_store

    def set_store(self, entity_type: type, store: CacheStoreProtocol) -> None:
        """Use store for entity_type and subtypes that have not resolved their own."""
        self._stores[entity_type] = store
        logger.debug(
            "Find cache store for %s set to %s", entity_type.__name__, type(store).__name__
        )

    async def lookup_or_compute(
        self,
        entity_type: type,
        key: str,
        compute: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Read-through on entity_type's store; compute is awaited at most once per miss."""
        return await self.store(entity_type).fetch(key, compute)

    def cache_key_for(self, entity_type: type, pairs: Iterable[tuple[str, Any]]) -> str:
        """Cache key for a lookup of entity_type by the given (field, value) pairs."""
        return cache_key_for(storage_identifier(entity_type), pairs)

    # ---- Lifecycle hooks ----

    def register_hook(self, entity_type: type, hook: LifecycleHook) -> None:
        """Run hook after updates and before deletes of entity_type (and subtypes)."""
        hooks = self._hooks.setdefault(entity_type, [])
        if hook not in hooks:
            hooks.append(hook)

    def lifecycle_hooks(self, entity_type: type) -> list[LifecycleHook]:
        """Hooks for entity_type, base classes first."""
        result: list[LifecycleHook] = []
        for klass in reversed(entity_type.__mro__):
            for hook in self._hooks.get(klass, ()):
                if hook not in result:
                    result.append(hook)
        return result

    async def run_after_update(self, record: RecordState) -> None:
        """Invoke on_after_update of every hook for the record's type."""
        for hook in self.lifecycle_hooks(record.entity_type):
            await hook.on_after_update(record)

    async def run_before_delete(self, record: RecordState) -> None:
        """Invoke on_before_delete of every hook for the record's type."""
        for hook in self.lifecycle_hooks(record.entity_type):
            await hook.on_before_delete(record)

    # ---- Maintenance ----

    def reset(self) -> None:
        """Forget all declarations, stores and hooks (tests and re-configuration)."""
        self._sets.clear()
        self._stores.clear()
        self._hooks.clear()
        self._default_store = None

    @staticmethod
    def _nearest(mapping: dict[type, Any], entity_type: type) -> Any:
        for klass in entity_type.__mro__:
            if klass in mapping:
                return mapping[klass]
        return None


@lru_cache
def get_cache_registry() -> CacheRegistry:
    """Return the process-wide registry (created on first call)."""
    return CacheRegistry()
