"""Base repository: generic CRUD, cached single-record lookups and lifecycle hooks."""

from __future__ import annotations

import base64
import uuid
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, and_, select
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import make_transient_to_detached, object_session
from sqlalchemy.types import TypeEngine

from find_cache.domain.exceptions import ResourceNotFoundException
from find_cache.infrastructure.cache.cached_lookup import fetch_one_with_cache
from find_cache.infrastructure.cache.registry import CacheRegistry, get_cache_registry
from find_cache.infrastructure.persistence.database import Base
from find_cache.infrastructure.persistence.lookup_adapter import descriptor_from_select
from find_cache.infrastructure.persistence.record_state import RecordSnapshot


def _to_cache_value(value: Any) -> Any:
    """JSON-safe form of a column value."""
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (Decimal, uuid.UUID)):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    return value


def _from_cache_value(column_type: TypeEngine[Any], value: Any) -> Any:
    """Inverse of _to_cache_value, driven by the column's Python type."""
    if not isinstance(value, str):
        return value
    try:
        python_type = column_type.python_type
    except NotImplementedError:
        return value
    if python_type is datetime:
        return datetime.fromisoformat(value)
    if python_type is date:
        return date.fromisoformat(value)
    if python_type is time:
        return time.fromisoformat(value)
    if python_type is Decimal:
        return Decimal(value)
    if python_type is uuid.UUID:
        return uuid.UUID(value)
    if python_type is bytes:
        return base64.b64decode(value)
    if isinstance(python_type, type) and issubclass(python_type, Enum):
        return python_type[value]
    return value


ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with cached find_by/find_one, create, update, delete and hooks.

    Single-record lookups go through the find-by cache when the model has a
    matching cacheable attribute set declared in the registry. Cached rows are
    stored as JSON-safe dicts of column values and rebuilt as detached
    instances merged into the session without a reload.

    Subclasses override _on_after_update and _on_before_delete (calling super)
    to add behaviour; the base implementations run the registry's lifecycle
    hooks, which include find-by cache invalidation.
    """

    def __init__(
        self,
        db: AsyncSession,
        model: type[ModelType],
        registry: CacheRegistry | None = None,
    ) -> None:
        self.db = db
        self.model = model
        self.registry = registry or get_cache_registry()

    async def get_by_id(self, entity_id: Any) -> ModelType | None:
        """Return a single record by primary key, or None (cached when "id" is declared)."""
        model: Any = self.model
        return await self.find_one(select(self.model).where(model.id == entity_id))

    async def find_by(self, **attributes: Any) -> ModelType | None:
        """Return the first record matching all attributes by equality, or None."""
        return await self.find_one(select(self.model).filter_by(**attributes))

    async def find_one(
        self,
        stmt: Select[Any],
        params: dict[str, Any] | None = None,
        *,
        can_cache: bool = True,
    ) -> ModelType | None:
        """Execute stmt for its first record, through the find-by cache when eligible.

        Args:
            stmt: A select() of this repository's model.
            params: Values for bindparam() placeholders in stmt.
            can_cache: False always reads from the database.
        """
        loaded: list[ModelType] = []

        async def _load_row() -> dict[str, Any] | None:
            result = await self.db.execute(stmt, params or {})
            obj = result.scalars().first()
            if obj is None:
                return None
            loaded.append(obj)
            return self._to_cache_row(obj)

        row = await fetch_one_with_cache(
            descriptor_from_select(stmt, params),
            _load_row,
            registry=self.registry,
            can_cache=can_cache,
        )
        if loaded:
            return loaded[0]
        if row is None:
            return None
        return await self._from_cache_row(row)

    async def get_all(self, skip: int = 0, limit: int = 100) -> list[ModelType]:
        """Return records with pagination (never cached)."""
        result = await self.db.execute(select(self.model).offset(skip).limit(limit))
        return list(result.scalars().all())

    async def create(self, obj: ModelType) -> ModelType:
        """Persist a new record."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def update(
        self, obj: ModelType, *, skip_existence_check: bool = False
    ) -> ModelType:
        """Update an existing record (merge if detached) and run _on_after_update.

        Previous values of cached fields are captured before the flush so the
        after-update hooks can evict the keys the record was cached under.
        Raises ResourceNotFoundException if a detached record has no row.
        """
        mapper = sa_inspect(self.model)
        pk_keys = [mapper.get_property_by_column(col).key for col in mapper.primary_key]
        for key in pk_keys:
            if getattr(obj, key) is None:
                raise ValueError(
                    f"Cannot update: primary key '{key}' is missing on "
                    f"{self.model.__name__} instance."
                )
        attached = object_session(obj) is self.db.sync_session
        if not attached and not skip_existence_check:
            stmt = select(self.model).where(
                and_(
                    *(getattr(self.model, key) == getattr(obj, key) for key in pk_keys)
                )
            )
            result = await self.db.execute(stmt)
            if result.scalar_one_or_none() is None:
                pk_str = ",".join(str(getattr(obj, key)) for key in pk_keys)
                raise ResourceNotFoundException(self.model.__name__, pk_str)
            obj = await self.db.merge(obj)
        elif not attached:
            obj = await self.db.merge(obj)
        await self._load_cached_fields(obj)
        record = RecordSnapshot.capture(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        await self._on_after_update(record)
        return obj

    async def delete(self, obj: ModelType) -> None:
        """Run _on_before_delete then delete the record."""
        await self._load_cached_fields(obj)
        await self._on_before_delete(RecordSnapshot.capture(obj))
        await self.db.delete(obj)
        await self.db.flush()

    async def flush_find_cache(self, obj: ModelType) -> None:
        """Evict obj from the find-by cache explicitly (uses its current values)."""
        await self._load_cached_fields(obj)
        await self.registry.invalidator.invalidate(RecordSnapshot.capture(obj))

    async def _on_after_update(self, record: RecordSnapshot[ModelType]) -> None:
        """Override in subclasses to emit events; call super to keep cache invalidation."""
        await self.registry.run_after_update(record)

    async def _on_before_delete(self, record: RecordSnapshot[ModelType]) -> None:
        """Override in subclasses to emit events; call super to keep cache invalidation."""
        await self.registry.run_before_delete(record)

    async def _load_cached_fields(self, obj: ModelType) -> None:
        """Load expired/deferred columns that appear in a declared attribute set."""
        state = sa_inspect(obj)
        if not state.persistent:
            return
        declared = {
            name
            for attribute_set in self.registry.cacheable_sets(type(obj))
            for name in attribute_set
        }
        unloaded = sorted(declared & state.unloaded)
        if unloaded:
            await self.db.refresh(obj, attribute_names=unloaded)

    def _to_cache_row(self, obj: ModelType) -> dict[str, Any]:
        state = sa_inspect(obj)
        return {
            attr.key: _to_cache_value(state.dict[attr.key])
            for attr in state.mapper.column_attrs
            if attr.key in state.dict
        }

    async def _from_cache_row(self, row: dict[str, Any]) -> ModelType:
        mapper = sa_inspect(self.model)
        values = {
            attr.key: _from_cache_value(attr.columns[0].type, row[attr.key])
            for attr in mapper.column_attrs
            if attr.key in row
        }
        identity = mapper.identity_key_from_primary_key(
            [values.get(mapper.get_property_by_column(col).key) for col in mapper.primary_key]
        )
        existing = self.db.identity_map.get(identity)
        if existing is not None:
            return existing
        obj = self.model(**values)
        make_transient_to_detached(obj)
        return await self.db.merge(obj, load=False)
