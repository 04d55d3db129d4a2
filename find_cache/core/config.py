"""Library configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Values are validated when get_settings() is first called,
not at import time.
"""

import logging
from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CACHE_BACKENDS = ("memory", "redis")


class Settings(BaseSettings):
    """Settings loaded from environment (FIND_CACHE_ prefix) and .env.

    Every field has a default; the process-wide default store is chosen from
    cache_backend the first time an entity type resolves its store.
    """

    debug: bool = False
    # Level for the find_cache logger tree only (e.g. "DEBUG" to trace HIT/MISS);
    # None = inherit the process level
    cache_log_level: str | None = None

    # Default store: "memory" (process-local LRU) or "redis"
    cache_backend: str = "memory"
    # None = entries never expire (eviction only)
    cache_ttl: int | None = None
    memory_cache_max_entries: int = 10_000

    # Redis (used when cache_backend is "redis")
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    redis_socket_timeout: float = 5.0

    # Database (host data-access layer; used by tests and scripts)
    database_url: str = ""
    database_echo: bool = False

    model_config = SettingsConfigDict(
        env_prefix="FIND_CACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_cache_settings(self) -> "Settings":
        """Reject unknown backends, non-positive limits and unknown log levels."""
        if self.cache_backend not in CACHE_BACKENDS:
            raise ValueError(
                f"cache_backend must be one of {CACHE_BACKENDS}, got: {self.cache_backend!r}"
            )
        if self.cache_ttl is not None and self.cache_ttl <= 0:
            raise ValueError("FIND_CACHE_CACHE_TTL must be a positive number of seconds")
        if self.memory_cache_max_entries <= 0:
            raise ValueError("FIND_CACHE_MEMORY_CACHE_MAX_ENTRIES must be positive")
        if self.cache_log_level is not None:
            level = self.cache_log_level.upper()
            if level not in logging.getLevelNamesMapping():
                raise ValueError(
                    f"FIND_CACHE_CACHE_LOG_LEVEL is not a logging level: {self.cache_log_level!r}"
                )
            self.cache_log_level = level
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings (single instance per process).

    In tests, call get_settings.cache_clear() after overriding env vars so the
    next get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
