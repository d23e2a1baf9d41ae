"""
Loguru setup for quick-review.

Records go to stderr so stdout stays free for the review itself. Every
module logs through a logger bound to its own name via get_logger().
"""

import sys
from typing import Optional

from loguru import logger

from quick_review.config import settings

ROOT_LOGGER_NAME = "quick_review"

CONSOLE_FORMAT = (
    "<dim>{time:HH:mm:ss.SSS}</dim> "
    "<level>{level: <7}</level> "
    "<cyan>{extra[logger_name]}</cyan> "
    "<level>{message}</level>"
)
PLAIN_FORMAT = "{time:YYYY-MM-DDTHH:mm:ss.SSSZ} {level} {extra[logger_name]} {message}"


def configure_logging(debug: Optional[bool] = None) -> None:
    """Route quick-review logs to stderr.

    Development gets a short coloured console line; any other environment
    emits one JSON object per record.
    """
    debug = settings.debug if debug is None else debug
    level = "DEBUG" if debug else "INFO"

    logger.remove()
    logger.configure(extra={"logger_name": ROOT_LOGGER_NAME})

    if settings.environment == "development":
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True, diagnose=debug)
    else:
        logger.add(sys.stderr, format=PLAIN_FORMAT, level=level, serialize=True)


configure_logging()


def get_logger(name: Optional[str] = None):
    """Logger bound to `name` (or the package name)."""
    return logger.bind(logger_name=name or ROOT_LOGGER_NAME)
