"""
Logging setup for entry points. Library modules only create loggers.
"""

from __future__ import annotations

import logging
from typing import TextIO

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class _VerilicHandler(logging.StreamHandler):
    """Marks the handler installed by :func:`setup_logger`."""


def setup_logger(
    log_level: int,
    stream: TextIO | None = None,
    name: str = "verilic",
) -> logging.Logger:
    """
    Route the package logger to ``stream`` (stderr by default) at ``log_level``.

    A handler installed by an earlier call is replaced, so repeated setup
    picks up the new level and stream instead of stacking output. Handlers
    added by the application are left alone.

    Args:
        log_level: The logging level to set
        stream: Where records are written
        name: The logger to configure
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    for existing in list(logger.handlers):
        if isinstance(existing, _VerilicHandler):
            logger.removeHandler(existing)
            existing.close()

    handler = _VerilicHandler(stream)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger
