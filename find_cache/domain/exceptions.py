"""Domain exceptions for the find-by cache.

Only configuration and contract violations are raised here. Ineligible
lookups are never an error (they fall back to direct execution) and errors
from the backing store propagate unchanged.
"""

from typing import Any


class FindCacheException(Exception):
    """Base exception for all find-by cache errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. entity_type, field).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class InvalidDeclarationException(FindCacheException):
    """Raised when a cacheable attribute set is declared with an invalid field name.

    Startup-time configuration error; not meant to be caught.
    """

    def __init__(self, entity_type: str, field: Any = None, reason: str | None = None) -> None:
        """Initialize with the entity type and the offending field (if any).

        Args:
            entity_type: Name of the entity type being declared.
            field: The rejected field name (omitted for an empty declaration).
            reason: Optional explanation; a default is built from field.
        """
        if reason is None:
            reason = f"field name must be a simple identifier, got {field!r}"
        details: dict[str, Any] = {"entity_type": entity_type}
        if field is not None:
            details["field"] = repr(field)
        super().__init__(
            f"Invalid cache_find_by declaration on {entity_type}: {reason}",
            "INVALID_DECLARATION",
            details,
        )


class CacheKeyValueException(FindCacheException):
    """Raised when a non-scalar value reaches the cache key encoder."""

    def __init__(self, field: str, value: Any) -> None:
        """Initialize with the field and its rejected value.

        Args:
            field: Field name whose value could not be encoded.
            value: The value (only its type is reported).
        """
        super().__init__(
            f"Cannot build cache key: value for {field!r} is {type(value).__name__}, "
            "expected str or number",
            "CACHE_KEY_VALUE_ERROR",
            {"field": field, "value_type": type(value).__name__},
        )


class ResourceNotFoundException(FindCacheException):
    """Raised when a record to update does not exist."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'User').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class SqlNotConfiguredException(FindCacheException):
    """Raised when a database session is requested but no database_url is set."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
