"""Cacheability analyzer: may a single-record lookup be served from the cache?

Pure functions over a LookupDescriptor and the entity type's declared
cacheable attribute sets. A lookup qualifies only when it denotes exactly one
deterministic, default-ordered row selected by equality on a declared set of
fields; anything else falls back to direct execution. Never raises.
"""

from __future__ import annotations

from collections.abc import Collection
from typing import Any

from find_cache.domain.lookup import (
    BindPlaceholder,
    ComparisonOperator,
    LookupDescriptor,
    is_scalar_value,
)

_UNRESOLVED = object()


def _resolve_value(descriptor: LookupDescriptor, field: str, value: Any) -> Any:
    if not isinstance(value, BindPlaceholder):
        return value
    for bound_field, bound_value in descriptor.bound_values:
        if bound_field == field:
            return bound_value
    return _UNRESOLVED


def resolve_constraint_pairs(descriptor: LookupDescriptor) -> list[tuple[str, Any]] | None:
    """Return (field, value) pairs with placeholders resolved by field name.

    Returns:
        The pairs in constraint order, or None if any placeholder has no
        bound value for its field.
    """
    pairs: list[tuple[str, Any]] = []
    for constraint in descriptor.constraints:
        value = _resolve_value(descriptor, constraint.field, constraint.value)
        if value is _UNRESOLVED:
            return None
        pairs.append((constraint.field, value))
    return pairs


def ineligibility_reason(
    descriptor: LookupDescriptor,
    cacheable_sets: Collection[tuple[str, ...]],
) -> str | None:
    """Return why the lookup cannot be cached, or None when it can.

    Checks, in order: declarations exist, result not loaded, equality-only
    constraints, no field constrained twice, field set declared, scalar
    values, no modifiers.
    """
    if not cacheable_sets:
        return "no cacheable attribute sets declared"
    if descriptor.loaded:
        return "result already loaded"
    if not all(c.operator is ComparisonOperator.EQ for c in descriptor.constraints):
        return "non-equality constraint"
    fields = descriptor.field_names
    if len(set(fields)) != len(fields):
        # Placeholders resolve by field name, so a repeated field is ambiguous.
        return "field constrained more than once"
    if tuple(sorted(fields)) not in cacheable_sets:
        return "constrained fields do not match a declared set"
    pairs = resolve_constraint_pairs(descriptor)
    if pairs is None:
        return "unresolved bind placeholder"
    if not all(is_scalar_value(value) for _, value in pairs):
        return "non-scalar constraint value"
    if descriptor.modifiers:
        return f"query modifiers present: {', '.join(descriptor.modifiers)}"
    return None


def is_cacheable(
    descriptor: LookupDescriptor,
    cacheable_sets: Collection[tuple[str, ...]],
) -> bool:
    """Return True iff the lookup may be read from and stored into the cache.

    Args:
        descriptor: The candidate single-record lookup.
        cacheable_sets: Sorted field-name tuples declared for the entity type.
    """
    return ineligibility_reason(descriptor, cacheable_sets) is None
