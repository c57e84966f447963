"""Module: init_logging.py

Date: 2025-05-12

init_logging.py
Provides a single entry point for applications (and test sessions) that
want to see xmptk's log output.
Functions:
init_logging(level): Attaches a console handler to the xmptk root logger.
"""

from __future__ import annotations

import logging

from xmptk.config import LOG_DATE_FORMAT, LOG_FORMAT, LOG_LEVEL, LOG_TO_CONSOLE
from xmptk.utils.logging.logger_factory import ROOT_LOGGER_NAME, get_cached_logger

_CONSOLE_HANDLER_FLAG = "_xmptk_console_handler"


def init_logging(level: int | str | None = None) -> logging.Logger:
    """Configures console output for the xmptk logger hierarchy.

    Calling it more than once only updates the level; no duplicate handlers
    are attached.

    Args:
        level: Logging level or level name. Defaults to ``LOG_LEVEL`` from
            config (which honours the ``XMPTK_LOG_LEVEL`` environment variable).

    Returns:
        logging.Logger: The xmptk root logger.

    """
    logger = get_cached_logger(ROOT_LOGGER_NAME)
    resolved = level if level is not None else LOG_LEVEL
    if isinstance(resolved, str):
        resolved = logging.getLevelName(resolved.upper())
        if not isinstance(resolved, int):
            resolved = logging.WARNING

    logger.setLevel(resolved)

    if LOG_TO_CONSOLE and not any(
        getattr(handler, _CONSOLE_HANDLER_FLAG, False) for handler in logger.handlers
    ):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        setattr(handler, _CONSOLE_HANDLER_FLAG, True)
        logger.addHandler(handler)

    return logger
