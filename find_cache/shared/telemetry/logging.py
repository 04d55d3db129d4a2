"""Logging for the find-by cache: process setup and the find_cache logger tree."""

import logging
import sys

from find_cache.core.config import get_settings
from find_cache.core.constants import LOGGER_NAMESPACE


def setup_logging(*, configure_root: bool = True) -> logging.Logger:
    """Configure logging and return the find_cache namespace logger.

    With configure_root, the process gets a stdout handler at DEBUG when
    settings.debug is True, otherwise INFO. Hosts that own their logging pass
    configure_root=False and only the namespace logger is touched.

    settings.cache_log_level sets the namespace level independently, so cache
    HIT/MISS/SET/DELETE lines can be traced without DEBUG everywhere else.
    """
    settings = get_settings()
    if configure_root:
        log_level = logging.DEBUG if settings.debug else logging.INFO
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            handlers=[logging.StreamHandler(sys.stdout)],
        )
    namespace = logging.getLogger(LOGGER_NAMESPACE)
    namespace.setLevel(settings.cache_log_level or logging.NOTSET)
    return namespace


def get_logger(name: str) -> logging.Logger:
    """Return a logger inside the find_cache tree.

    Names already under the namespace (module __name__ values) are used as is;
    any other name becomes a child, e.g. "myapp.users" -> "find_cache.myapp.users".
    """
    if name == LOGGER_NAMESPACE or name.startswith(LOGGER_NAMESPACE + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")
