"""Application services: cacheability analysis of single-record lookups."""

from find_cache.application.services.cacheability import (
    ineligibility_reason,
    is_cacheable,
    resolve_constraint_pairs,
)

__all__ = [
    "ineligibility_reason",
    "is_cacheable",
    "resolve_constraint_pairs",
]
