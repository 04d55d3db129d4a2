"""Cache key builders. Single place for the find-by key format (DRY).

Keys look like ``cache_find_by/<storage id>/<field1>/<value1>/...`` with
fields sorted by name. Every segment is percent-encoded so only
``[A-Za-z0-9._~-]`` survive unescaped; the separator can therefore never
appear inside a segment and keys are safe as path segments or Redis keys.
"""

from collections.abc import Iterable
from typing import Any
from urllib.parse import quote

from find_cache.core.constants import CACHE_KEY_SEP, CACHE_PREFIX_FIND_BY
from find_cache.domain.exceptions import CacheKeyValueException
from find_cache.domain.lookup import is_scalar_value


def _encode_segment(segment: str) -> str:
    # quote() always keeps ASCII letters, digits and "_.-~"; safe="" escapes "/" too.
    return quote(segment, safe="")


def _stringify(field: str, value: Any) -> str:
    if not is_scalar_value(value):
        raise CacheKeyValueException(field, value)
    return str(value)


def storage_identifier(entity_type: type) -> str:
    """Return the storage id (table name) of an entity type.

    Mapped SQLAlchemy classes answer with their __table__ name; other types
    must define __tablename__.

    Raises:
        AttributeError: If the type exposes neither.
    """
    table = getattr(entity_type, "__table__", None)
    if table is not None and getattr(table, "name", None):
        return table.name
    return entity_type.__tablename__  # type: ignore[attr-defined]


def cache_key_for(storage_id: str, pairs: Iterable[tuple[str, Any]]) -> str:
    """Cache key for a single-record lookup by the given attribute pairs.

    Args:
        storage_id: Table/collection name of the entity type.
        pairs: (field, value) pairs in any order; values must be str or numbers.

    Returns:
        The canonical key; identical for any permutation of pairs.

    Raises:
        CacheKeyValueException: If a value is not a str or number.
    """
    attrs = sorted(
        ((str(field), _stringify(str(field), value)) for field, value in pairs),
        key=lambda pair: pair[0],
    )
    segments = [CACHE_PREFIX_FIND_BY, storage_id]
    for field, value in attrs:
        segments.extend((field, value))
    return CACHE_KEY_SEP.join(_encode_segment(s) for s in segments)
