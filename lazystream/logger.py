"""Library logger configuration for lazystream."""

import logging
import os
import sys

__all__ = ["logger", "setup_logger"]

LOGGER_NAME = "lazystream"


def setup_logger(
    level: str | None = None,
    format_string: str | None = None,
) -> logging.Logger:
    """
    Attach a stdout handler to the lazystream logger.

    The library itself never calls this; applications opt in when they
    want to see chunk plans and executor activity.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string

    Returns:
        Configured logger instance
    """
    level = level or os.getenv("LAZYSTREAM_LOG_LEVEL", "INFO")
    format_string = format_string or (
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    configured = logging.getLogger(LOGGER_NAME)

    # Only add a stream handler once
    if not any(isinstance(h, logging.StreamHandler) for h in configured.handlers):
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(fmt=format_string, datefmt="%Y-%m-%d %H:%M:%S")
        handler.setFormatter(formatter)
        configured.addHandler(handler)
    configured.setLevel(getattr(logging, level.upper()))

    return configured


# Silent by default, as a library should be
logger = logging.getLogger(LOGGER_NAME)
logger.addHandler(logging.NullHandler())
