"""Shared cross-cutting helpers (logging). No business logic."""

from find_cache.shared.telemetry import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
