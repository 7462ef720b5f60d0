"""Logging setup for feed_ingest.

All modules log through children of the ``feed_ingest`` logger.
"""

import logging
import sys
from typing import Optional

from feed_ingest.config import Config, get_config


LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

logger = logging.getLogger("feed_ingest")


def setup_logging(config: Optional[Config] = None) -> logging.Logger:
    """Configure the package logger with a single stderr handler.

    Calling this again replaces the previous handler rather than stacking a new one.

    Args:
        config: Optional configuration (uses the active config if not provided)

    Returns:
        The configured package logger
    """
    if config is None:
        config = get_config()

    level = logging.getLevelName(config.log_level)
    if not isinstance(level, int):
        level = logging.INFO

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the package namespace.

    Args:
        name: Module name, usually ``__name__``

    Returns:
        Logger instance
    """
    if name == "feed_ingest" or name.startswith("feed_ingest."):
        return logging.getLogger(name)
    return logger.getChild(name)
