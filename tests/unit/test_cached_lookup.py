"""Tests for fetch_one_with_cache: cacheable lookups read through, others execute directly."""

import logging
from unittest.mock import AsyncMock

from find_cache.domain.lookup import ComparisonOperator, Constraint, LookupDescriptor
from find_cache.infrastructure.cache.cached_lookup import fetch_one_with_cache
from find_cache.infrastructure.cache.registry import CacheRegistry, get_cache_registry
from tests.models import User

ROW = {"id": 1, "email": "a@example.com"}


async def test_cacheable_lookup_executes_once(registry: CacheRegistry) -> None:
    registry.declare(User, "email")
    lookup = LookupDescriptor.where(User, email="a@example.com")
    execute = AsyncMock(return_value=ROW)

    assert await fetch_one_with_cache(lookup, execute, registry=registry) == ROW
    assert await fetch_one_with_cache(lookup, execute, registry=registry) == ROW

    execute.assert_awaited_once()
    assert "cache_find_by/users/email/a%40example.com" in registry.store(User)


async def test_ineligible_lookup_bypasses_cache(registry: CacheRegistry, caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="find_cache.infrastructure.cache.cached_lookup")
    registry.declare(User, "email")
    lookup = LookupDescriptor(
        entity_type=User,
        constraints=(Constraint("email", ComparisonOperator.EQ, "a@example.com"),),
        order_by=True,
    )
    execute = AsyncMock(return_value=ROW)

    await fetch_one_with_cache(lookup, execute, registry=registry)
    await fetch_one_with_cache(lookup, execute, registry=registry)

    assert execute.await_count == 2
    assert len(registry.store(User)) == 0
    assert "query modifiers present: order_by" in caplog.text


async def test_can_cache_false_always_executes(registry: CacheRegistry) -> None:
    registry.declare(User, "email")
    lookup = LookupDescriptor.where(User, email="a@example.com")
    execute = AsyncMock(return_value=ROW)

    await fetch_one_with_cache(lookup, execute, registry=registry, can_cache=False)
    await fetch_one_with_cache(lookup, execute, registry=registry, can_cache=False)

    assert execute.await_count == 2
    assert len(registry.store(User)) == 0


async def test_not_found_is_not_cached(registry: CacheRegistry) -> None:
    registry.declare(User, "email")
    lookup = LookupDescriptor.where(User, email="nobody@example.com")
    execute = AsyncMock(return_value=None)

    assert await fetch_one_with_cache(lookup, execute, registry=registry) is None
    assert await fetch_one_with_cache(lookup, execute, registry=registry) is None
    assert execute.await_count == 2


async def test_undeclared_type_never_touches_a_store() -> None:
    factory = AsyncMock()
    registry = CacheRegistry(default_store_factory=factory)
    execute = AsyncMock(return_value=ROW)

    await fetch_one_with_cache(
        LookupDescriptor.where(User, email="a@example.com"), execute, registry=registry
    )

    execute.assert_awaited_once()
    factory.assert_not_called()


async def test_defaults_to_process_wide_registry() -> None:
    registry = get_cache_registry()
    registry.declare(User, "id")
    execute = AsyncMock(return_value=ROW)

    await fetch_one_with_cache(LookupDescriptor.where(User, id=1), execute)
    await fetch_one_with_cache(LookupDescriptor.where(User, id=1), execute)

    execute.assert_awaited_once()
