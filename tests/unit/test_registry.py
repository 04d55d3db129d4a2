"""Tests for CacheRegistry: declarations, store resolution, read-through and hooks."""

from unittest.mock import AsyncMock

import pytest

from find_cache.core.config import Settings
from find_cache.domain.exceptions import InvalidDeclarationException
from find_cache.infrastructure.cache.memory_cache import MemoryCacheStore
from find_cache.infrastructure.cache.redis_cache import RedisCacheStore
from find_cache.infrastructure.cache.registry import (
    CacheRegistry,
    default_store_from_settings,
    get_cache_registry,
)
from tests.models import User


class Animal:
    __tablename__ = "animals"


class Dog(Animal):
    pass


class Cat(Animal):
    pass


# ---- Declarations ----


def test_declare_normalizes_field_names(registry: CacheRegistry) -> None:
    assert registry.declare(Animal, "name", "owner_id", "name") == ("name", "owner_id")
    assert registry.cacheable_sets(Animal) == frozenset({("name", "owner_id")})


def test_declare_accumulates_sets(registry: CacheRegistry) -> None:
    registry.declare(Animal, "id")
    registry.declare(Animal, "owner_id", "name")
    assert registry.cacheable_sets(Animal) == frozenset({("id",), ("name", "owner_id")})


def test_declare_accepts_instrumented_attributes(registry: CacheRegistry) -> None:
    assert registry.declare(User, User.username, User.tenant_id) == ("tenant_id", "username")


@pytest.mark.parametrize("bad", [1, None, "", "two words", "email;drop", b"email"])
def test_declare_rejects_non_identifier(registry: CacheRegistry, bad) -> None:
    with pytest.raises(InvalidDeclarationException) as exc_info:
        registry.declare(Animal, "id", bad)
    assert exc_info.value.error_code == "INVALID_DECLARATION"
    assert exc_info.value.details["entity_type"] == "Animal"
    assert registry.cacheable_sets(Animal) == frozenset()


def test_declare_without_fields_raises(registry: CacheRegistry) -> None:
    with pytest.raises(InvalidDeclarationException):
        registry.declare(Animal)


def test_subtype_inherits_and_extends_sets(registry: CacheRegistry) -> None:
    registry.declare(Animal, "id")
    registry.declare(Dog, "license")
    assert registry.cacheable_sets(Dog) == frozenset({("id",), ("license",)})
    assert registry.cacheable_sets(Cat) == frozenset({("id",)})
    assert registry.cacheable_sets(Animal) == frozenset({("id",)})


def test_undeclared_type_has_no_sets(registry: CacheRegistry) -> None:
    assert registry.cacheable_sets(Animal) == frozenset()


# ---- Stores ----


def test_default_store_is_shared_and_pinned(registry: CacheRegistry) -> None:
    dog_store = registry.store(Dog)
    assert isinstance(dog_store, MemoryCacheStore)
    assert registry.store(Cat) is dog_store

    custom = MemoryCacheStore()
    registry.set_store(Animal, custom)
    assert registry.store(Animal) is custom
    # Dog and Cat resolved their store before the ancestor was configured.
    assert registry.store(Dog) is dog_store


def test_explicit_store_inherited_by_unresolved_subtypes(registry: CacheRegistry) -> None:
    custom = MemoryCacheStore()
    registry.set_store(Animal, custom)
    assert registry.store(Dog) is custom
    assert registry.store(Cat) is custom


def test_explicit_store_on_subtype_wins(registry: CacheRegistry) -> None:
    registry.set_store(Animal, MemoryCacheStore())
    dog_store = MemoryCacheStore()
    registry.set_store(Dog, dog_store)
    assert registry.store(Dog) is dog_store
    assert registry.store(Cat) is not dog_store


def test_default_store_factory_called_once() -> None:
    calls = []

    def counting_factory() -> MemoryCacheStore:
        calls.append(1)
        return MemoryCacheStore()

    registry = CacheRegistry(default_store_factory=counting_factory)
    registry.store(Dog)
    registry.store(Cat)
    registry.store(Animal)
    assert len(calls) == 1


def test_default_store_from_settings_memory() -> None:
    store = default_store_from_settings(Settings(memory_cache_max_entries=5, cache_ttl=30))
    assert isinstance(store, MemoryCacheStore)


def test_default_store_from_settings_redis() -> None:
    store = default_store_from_settings(Settings(cache_backend="redis", cache_ttl=60))
    assert isinstance(store, RedisCacheStore)
    assert store.default_ttl == 60


# ---- Read-through ----


async def test_lookup_or_compute_round_trip(registry: CacheRegistry) -> None:
    """A cached value is returned again without invoking compute."""
    key = registry.cache_key_for(User, [("email", "a@example.com")])
    compute = AsyncMock(return_value={"id": 1, "email": "a@example.com"})
    first = await registry.lookup_or_compute(User, key, compute)

    exploding = AsyncMock(side_effect=AssertionError("compute must not run on a hit"))
    second = await registry.lookup_or_compute(User, key, exploding)

    assert first == second == {"id": 1, "email": "a@example.com"}
    compute.assert_awaited_once()
    exploding.assert_not_awaited()


async def test_lookup_or_compute_calls_compute_once_per_miss(registry: CacheRegistry) -> None:
    compute = AsyncMock(return_value="row")
    await registry.lookup_or_compute(User, "k", compute)
    assert compute.await_count == 1


def test_cache_key_for_uses_table_name(registry: CacheRegistry) -> None:
    assert (
        registry.cache_key_for(User, [("email", "a@example.com")])
        == "cache_find_by/users/email/a%40example.com"
    )


# ---- Lifecycle hooks ----


def test_first_declaration_registers_invalidator(registry: CacheRegistry) -> None:
    registry.declare(Animal, "id")
    registry.declare(Animal, "name")
    registry.declare(Dog, "license")
    assert registry.lifecycle_hooks(Dog) == [registry.invalidator]
    assert registry.lifecycle_hooks(Animal) == [registry.invalidator]


def test_undeclared_type_has_no_hooks(registry: CacheRegistry) -> None:
    assert registry.lifecycle_hooks(Animal) == []


async def test_hooks_run_base_first(registry: CacheRegistry) -> None:
    calls: list[str] = []

    class Recorder:
        def __init__(self, name: str) -> None:
            self.name = name

        async def on_after_update(self, record) -> None:
            calls.append(f"{self.name}:update")

        async def on_before_delete(self, record) -> None:
            calls.append(f"{self.name}:delete")

    registry.register_hook(Dog, Recorder("dog"))
    registry.register_hook(Animal, Recorder("animal"))

    class Record:
        entity_type = Dog

    await registry.run_after_update(Record())
    await registry.run_before_delete(Record())
    assert calls == ["animal:update", "dog:update", "animal:delete", "dog:delete"]


def test_reset_clears_everything(registry: CacheRegistry) -> None:
    registry.declare(Animal, "id")
    store = registry.store(Animal)
    registry.reset()
    assert registry.cacheable_sets(Animal) == frozenset()
    assert registry.lifecycle_hooks(Animal) == []
    assert registry.store(Animal) is not store


def test_get_cache_registry_is_process_wide() -> None:
    assert get_cache_registry() is get_cache_registry()
