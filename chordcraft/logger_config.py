"""Logging setup for the chordcraft package logger."""

import logging
import sys
from typing import Union

LOGGER_NAME = "chordcraft"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(LOGGER_NAME)


def setup_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Attach one stderr handler to the package logger and set its level.

    Safe to call repeatedly: the handler is only added once, later calls
    just change the level.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
    return logger
