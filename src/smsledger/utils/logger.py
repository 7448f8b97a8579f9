"""Logging setup for the command line."""

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "WARNING") -> logging.Logger:
    """Configure the ``smsledger`` logger with a stderr handler.

    Args:
        level: Level name such as "DEBUG" or "info"

    Returns:
        The package logger
    """
    logger = logging.getLogger("smsledger")
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    # Re-running the CLI in one process (tests) must not stack handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    return logger
