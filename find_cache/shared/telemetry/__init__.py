"""Telemetry: logging setup."""

from find_cache.shared.telemetry.logging import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
