"""Lifecycle ports: what the persistence layer hands to mutation hooks."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class RecordState(Protocol):
    """A mutating entity instance with access to its pre-mutation values."""

    @property
    def entity_type(self) -> type:
        """The entity's type (used to look up declarations and the store)."""
        ...

    def attribute_was(self, name: str) -> Any:
        """Value the field held before the current update/delete."""
        ...

    def current(self, name: str) -> Any:
        """Value the field holds now."""
        ...


@runtime_checkable
class LifecycleHook(Protocol):
    """Handler run by the persistence layer after update and before delete."""

    async def on_after_update(self, record: RecordState) -> None:
        """Called after an update has been flushed."""
        ...

    async def on_before_delete(self, record: RecordState) -> None:
        """Called before a delete is issued."""
        ...
