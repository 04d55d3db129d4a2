"""Domain layer: lookup descriptors and exceptions.

No dependencies on infrastructure. Used by application and infrastructure
layers.
"""

from find_cache.domain.exceptions import (
    CacheKeyValueException,
    FindCacheException,
    InvalidDeclarationException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
)
from find_cache.domain.lookup import (
    MODIFIER_NAMES,
    BindPlaceholder,
    ComparisonOperator,
    Constraint,
    LookupDescriptor,
    is_scalar_value,
)

__all__ = [
    # Lookup
    "BindPlaceholder",
    "ComparisonOperator",
    "Constraint",
    "LookupDescriptor",
    "MODIFIER_NAMES",
    "is_scalar_value",
    # Exceptions
    "CacheKeyValueException",
    "FindCacheException",
    "InvalidDeclarationException",
    "ResourceNotFoundException",
    "SqlNotConfiguredException",
]
