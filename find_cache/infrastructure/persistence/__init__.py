"""Persistence: SQLAlchemy engine/session, Select translation, snapshots and repositories."""

from find_cache.infrastructure.persistence.database import (
    Base,
    create_engine_from_settings,
    create_session_factory,
    dispose_engine,
    get_db,
)
from find_cache.infrastructure.persistence.lookup_adapter import descriptor_from_select
from find_cache.infrastructure.persistence.record_state import RecordSnapshot
from find_cache.infrastructure.persistence.repositories import BaseRepository

__all__ = [
    "Base",
    "BaseRepository",
    "RecordSnapshot",
    "create_engine_from_settings",
    "create_session_factory",
    "descriptor_from_select",
    "dispose_engine",
    "get_db",
]
