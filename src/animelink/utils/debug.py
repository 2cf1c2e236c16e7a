"""Logging helpers for animelink.

Provides debug(), info(), warn(), error() functions writing to the
``animelink`` logger. Debug output is controlled by the ANIMELINK_DEBUG
environment variable; library modules log through
``logging.getLogger(__name__)`` and inherit the same handler.
"""

import logging
import os

DEBUG_ON = os.getenv("ANIMELINK_DEBUG", "0") == "1"

_logger: logging.Logger | None = None


def setup_logger() -> logging.Logger:
    """Attach a stream handler to the ``animelink`` logger once and return it."""
    global _logger
    if _logger is not None:
        return _logger
    logger = logging.getLogger("animelink")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("[%(levelname)s] %(asctime)s %(name)s: %(message)s")
        )
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG if DEBUG_ON else logging.INFO)
    _logger = logger
    return logger


def debug(msg: str, *args: object) -> None:
    """Log a debug message if debugging is enabled."""
    if DEBUG_ON:
        setup_logger().debug(msg, *args)


def info(msg: str, *args: object) -> None:
    """Log an info message."""
    setup_logger().info(msg, *args)


def warn(msg: str, *args: object) -> None:
    """Log a warning message."""
    setup_logger().warning(msg, *args)


def error(msg: str, *args: object) -> None:
    """Log an error message."""
    setup_logger().error(msg, *args)
