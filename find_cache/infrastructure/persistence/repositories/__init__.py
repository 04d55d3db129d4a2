"""Persistence repositories. Re-exports for dependency injection."""

from find_cache.infrastructure.persistence.repositories.base import BaseRepository

__all__ = ["BaseRepository"]
