"""Find-by cache invalidation on update and delete.

Registered as the lifecycle hook of every entity type that declares a
cacheable attribute set. Keys are rebuilt from the record's pre-mutation
values: that is where a record may currently be cached, so an update that
changes a cached field evicts the old key.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from find_cache.application.interfaces.lifecycle import RecordState
from find_cache.domain.lookup import is_scalar_value
from find_cache.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from find_cache.infrastructure.cache.registry import CacheRegistry

logger = get_logger(__name__)


class FindCacheInvalidator:
    """LifecycleHook that deletes a record's find-by keys from its type's store."""

    def __init__(self, registry: CacheRegistry) -> None:
        self._registry = registry

    async def on_after_update(self, record: RecordState) -> None:
        await self.invalidate(record)

    async def on_before_delete(self, record: RecordState) -> None:
        await self.invalidate(record)

    async def invalidate(self, record: RecordState) -> None:
        """Delete every key the record may be cached under.

        One key per declared attribute set, built from attribute_was values.
        Sets whose previous values are not str/number are skipped, since no
        lookup with such values is ever cached. Deleting a missing key is a
        no-op; store errors propagate.
        """
        entity_type = record.entity_type
        attribute_sets = self._registry.cacheable_sets(entity_type)
        if not attribute_sets:
            return
        store = self._registry.store(entity_type)
        for attribute_names in sorted(attribute_sets):
            pairs = [(name, record.attribute_was(name)) for name in attribute_names]
            if not all(is_scalar_value(value) for _, value in pairs):
                logger.debug(
                    "Skipping find cache flush for %s%s: previous value not cacheable",
                    entity_type.__name__,
                    attribute_names,
                )
                continue
            key = self._registry.cache_key_for(entity_type, pairs)
            await store.delete(key)
            logger.debug("Find cache flushed: %s", key)
