"""Translate a SQLAlchemy 2.x Select into a LookupDescriptor.

Only the shape the cacheability analyzer needs is extracted: top-level
AND-ed where criteria as (field, operator, value) constraints, and whether
each query modifier is present. Anything not understood becomes an OTHER
constraint, which is never cacheable.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from sqlalchemy import Select
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapper
from sqlalchemy.orm.exc import UnmappedColumnError
from sqlalchemy.sql import operators
from sqlalchemy.sql.elements import (
    BinaryExpression,
    BindParameter,
    BooleanClauseList,
    ColumnClause,
    ColumnElement,
)

from find_cache.domain.lookup import (
    BindPlaceholder,
    ComparisonOperator,
    Constraint,
    LookupDescriptor,
)

_OPERATORS = {
    operators.eq: ComparisonOperator.EQ,
    operators.ne: ComparisonOperator.NE,
    operators.lt: ComparisonOperator.LT,
    operators.le: ComparisonOperator.LE,
    operators.gt: ComparisonOperator.GT,
    operators.ge: ComparisonOperator.GE,
    operators.in_op: ComparisonOperator.IN,
    operators.not_in_op: ComparisonOperator.NOT_IN,
    operators.is_: ComparisonOperator.IS,
    operators.is_not: ComparisonOperator.IS_NOT,
    operators.like_op: ComparisonOperator.LIKE,
}

_JOINED_STRATEGY = ("lazy", "joined")


def _flatten_and(clauses: tuple[ColumnElement[Any], ...]) -> Iterator[ColumnElement[Any]]:
    for clause in clauses:
        if isinstance(clause, BooleanClauseList) and clause.operator is operators.and_:
            yield from _flatten_and(tuple(clause.clauses))
        else:
            yield clause


def _right_value(right: Any) -> Any:
    if isinstance(right, BindParameter):
        if right.value is None and right.callable is None:
            return BindPlaceholder(right.key)
        return right.effective_value
    return right


def _attribute_key(mapper: Mapper[Any] | None, column: ColumnClause[Any]) -> str | None:
    """Mapped attribute name of column (which may differ from the column name)."""
    if mapper is None:
        return column.key
    try:
        return mapper.get_property_by_column(column).key
    except UnmappedColumnError:
        return None


def _constraint(clause: ColumnElement[Any], mapper: Mapper[Any] | None) -> Constraint:
    if not isinstance(clause, BinaryExpression):
        return Constraint(str(clause), ComparisonOperator.OTHER, clause)
    left = clause.left
    field = _attribute_key(mapper, left) if isinstance(left, ColumnClause) else None
    if field is None:
        # Expressions and columns of other tables never match an entity field.
        return Constraint(str(clause), ComparisonOperator.OTHER, clause.right)
    operator = _OPERATORS.get(clause.operator, ComparisonOperator.OTHER)
    return Constraint(field, operator, _right_value(clause.right))


def _loader_flags(stmt: Select[Any]) -> tuple[bool, bool]:
    """Return (includes, preload): joined eager loads vs. any other loader option."""
    includes = preload = False
    for option in stmt._with_options:
        strategies = {
            strategy
            for element in getattr(option, "context", ())
            for strategy in (getattr(element, "strategy", None) or ())
        }
        if _JOINED_STRATEGY in strategies:
            includes = True
        else:
            preload = True
    return includes, preload


def descriptor_from_select(
    stmt: Select[Any],
    params: Mapping[str, Any] | None = None,
) -> LookupDescriptor:
    """Build a LookupDescriptor for a select() of a single mapped entity.

    Args:
        stmt: e.g. ``select(User).where(User.email == "a@example.com")``.
        params: Execution parameters keyed by bind name; used to resolve
            ``bindparam()`` placeholders, reported as (field, value) pairs.

    Raises:
        ValueError: If the statement does not select a mapped entity.
    """
    descriptions = stmt.column_descriptions
    entity_type = descriptions[0].get("entity") if descriptions else None
    if entity_type is None:
        raise ValueError("select() does not target a mapped entity")
    mapper = sa_inspect(entity_type, raiseerr=False)

    constraints = tuple(
        _constraint(clause, mapper) for clause in _flatten_and(stmt._where_criteria)
    )
    params = params or {}
    bound_values = tuple(
        (c.field, params[c.value.name])
        for c in constraints
        if isinstance(c.value, BindPlaceholder) and c.value.name in params
    )
    includes, preload = _loader_flags(stmt)
    selects_entity = len(descriptions) == 1 and descriptions[0].get("expr") is entity_type

    return LookupDescriptor(
        entity_type=entity_type,
        constraints=constraints,
        bound_values=bound_values,
        offset=stmt._offset_clause is not None,
        joins=bool(stmt._setup_joins),
        order_by=bool(stmt._order_by_clauses),
        includes=includes,
        preload=preload,
        select=not selects_entity,
        group_by=bool(stmt._group_by_clauses) or bool(stmt._having_criteria),
        from_override=bool(stmt._from_obj),
        lock=stmt._for_update_arg is not None,
    )
