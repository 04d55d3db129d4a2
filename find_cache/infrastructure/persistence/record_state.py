"""Pre-mutation snapshot of an ORM instance for lifecycle hooks.

SQLAlchemy resets attribute history on flush, so the values a record held
before an update must be captured before the flush. RecordSnapshot does that
from the instance's attribute history and satisfies RecordState.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from sqlalchemy import inspect as sa_inspect

from find_cache.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

EntityT = TypeVar("EntityT")


class RecordSnapshot(Generic[EntityT]):
    """An entity plus the column values it held before the pending change."""

    def __init__(self, entity: EntityT, previous: dict[str, Any]) -> None:
        self.entity = entity
        self._previous = previous

    @classmethod
    def capture(cls, entity: EntityT) -> RecordSnapshot[EntityT]:
        """Snapshot previous column values from attribute history (call before flush).

        Changed attributes report their committed value, unchanged ones their
        current value. A column assigned without its old value ever being
        loaded has no known previous value and reports None.
        """
        state = sa_inspect(entity)
        previous: dict[str, Any] = {}
        for attr in state.mapper.column_attrs:
            history = state.attrs[attr.key].history
            if history.deleted:
                previous[attr.key] = history.deleted[0]
            elif history.unchanged:
                previous[attr.key] = history.unchanged[0]
            elif history.added and state.persistent:
                logger.debug(
                    "Previous value of %s.%s was never loaded",
                    type(entity).__name__,
                    attr.key,
                )
                previous[attr.key] = None
            elif history.added:
                previous[attr.key] = history.added[0]
        return cls(entity, previous)

    @property
    def entity_type(self) -> type:
        return type(self.entity)

    def attribute_was(self, name: str) -> Any:
        """Value before the pending change (current value for non-column attributes)."""
        if name in self._previous:
            return self._previous[name]
        return self.current(name)

    def current(self, name: str) -> Any:
        return getattr(self.entity, name)

    def __repr__(self) -> str:
        return f"RecordSnapshot({self.entity!r})"
