"""Logging setup for applications and scripts that use temsim.

Library modules only create loggers under the ``"temsim"`` namespace
and log at debug level; nothing is printed until an application
configures handlers, for example with :func:`setup_logging`.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOGGER_NAME = "temsim"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(
    level: int = logging.INFO,
    log_file: str | Path | None = None,
) -> logging.Logger:
    """Configure the ``"temsim"`` logger.

    Any handlers from an earlier call are replaced, so calling this
    twice does not duplicate output.

    Args:
        level: Logging level, e.g. ``logging.DEBUG`` to see bond
            inference and compositing details.
        log_file: Optional path to also write the log to.  The file
            is overwritten.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("logging initialised at level %s", logging.getLevelName(level))
    return logger
