"""Lookup descriptor: a declarative "find one record" request.

Built per request by the host data-access layer (see
infrastructure.persistence.lookup_adapter for SQLAlchemy) and inspected by
the cacheability analyzer. Never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from numbers import Number
from typing import Any


class ComparisonOperator(str, Enum):
    """Operator of a single where-constraint. Only EQ is cacheable."""

    EQ = "eq"
    NE = "ne"
    LT = "lt"
    LE = "le"
    GT = "gt"
    GE = "ge"
    IN = "in"
    NOT_IN = "not_in"
    IS = "is"
    IS_NOT = "is_not"
    LIKE = "like"
    OTHER = "other"


@dataclass(frozen=True)
class BindPlaceholder:
    """Unresolved right-hand side; resolved by field name against bound values."""

    name: str


@dataclass(frozen=True)
class Constraint:
    """One (field, operator, value) where-constraint."""

    field: str
    operator: ComparisonOperator
    value: Any


@dataclass(frozen=True)
class LookupDescriptor:
    """Candidate single-record lookup: constraints plus query modifiers.

    Attributes:
        entity_type: The mapped class (or any type) being looked up.
        constraints: Where-constraints in query order.
        bound_values: (field, value) pairs used to resolve BindPlaceholder values.
        offset: An OFFSET is applied.
        joins: Explicit joins are present.
        order_by: Explicit ordering is present.
        reverse_order: Default ordering is reversed.
        includes: Eager-load includes (joined loading) are present.
        preload: Preload directives (separate-query loading) are present.
        select: Explicit column selection instead of the whole entity.
        group_by: GROUP BY is present.
        from_override: The FROM source is overridden.
        lock: Row locking (FOR UPDATE / FOR SHARE) is requested.
        loaded: The result has already been materialized.
    """

    entity_type: type
    constraints: tuple[Constraint, ...] = ()
    bound_values: tuple[tuple[str, Any], ...] = ()
    offset: bool = False
    joins: bool = False
    order_by: bool = False
    reverse_order: bool = False
    includes: bool = False
    preload: bool = False
    select: bool = False
    group_by: bool = False
    from_override: bool = False
    lock: bool = False
    loaded: bool = False

    @classmethod
    def where(cls, entity_type: type, **equalities: Any) -> LookupDescriptor:
        """Descriptor for "all equalities, no modifiers" (the cacheable shape)."""
        constraints = tuple(
            Constraint(name, ComparisonOperator.EQ, value)
            for name, value in equalities.items()
        )
        return cls(entity_type=entity_type, constraints=constraints)

    @property
    def field_names(self) -> list[str]:
        """Constrained field names in query order (duplicates kept)."""
        return [c.field for c in self.constraints]

    @property
    def modifiers(self) -> tuple[str, ...]:
        """Names of the modifiers that are set."""
        return tuple(name for name in MODIFIER_NAMES if getattr(self, name))


def is_scalar_value(value: Any) -> bool:
    """Return True for str or a real number (bool excluded): the only cacheable values."""
    if isinstance(value, bool):
        return False
    if isinstance(value, str):
        return True
    return isinstance(value, Number) and not isinstance(value, complex)


# Modifiers that make a lookup ineligible for caching
MODIFIER_NAMES = (
    "offset",
    "joins",
    "order_by",
    "reverse_order",
    "includes",
    "preload",
    "select",
    "group_by",
    "from_override",
    "lock",
)
