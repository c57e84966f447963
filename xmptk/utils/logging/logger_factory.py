"""Module: logger_factory.py

Date: 2025-05-31

logger_factory.py
Logger factory with caching. Provides centralized logger management with
thread-safe operations, so that bridge modules used from several threads at
once share one logger instance per module name.
"""

from __future__ import annotations

import logging
import threading

# Library loggers hang off this name; the host application owns the handlers.
ROOT_LOGGER_NAME = "xmptk"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


class LoggerFactory:
    """Thread-safe logger factory with caching.

    Maintains a single logger instance per module name. Loggers propagate to
    the ``xmptk`` root logger, which carries only a ``NullHandler`` until
    the application calls :func:`xmptk.utils.logging.init_logging`.
    """

    _loggers: dict[str, logging.Logger] = {}
    _lock = threading.Lock()

    @classmethod
    def get_logger(cls, name: str | None = None) -> logging.Logger:
        """Get or create a cached logger for the given name.

        Args:
            name: Logger name, typically ``__name__`` from the calling module.

        Returns:
            Cached logger instance.

        """
        name = name or ROOT_LOGGER_NAME

        with cls._lock:
            if name not in cls._loggers:
                logger = logging.getLogger(name)
                logger.propagate = True
                cls._loggers[name] = logger

            return cls._loggers[name]

    @classmethod
    def get_cached_names(cls) -> list[str]:
        """Get list of all cached logger names."""
        with cls._lock:
            return list(cls._loggers.keys())


def get_cached_logger(name: str | None = None) -> logging.Logger:
    """Convenience function for getting a cached logger.

    Args:
        name: Logger name

    Returns:
        Cached logger instance

    """
    return LoggerFactory.get_logger(name)
