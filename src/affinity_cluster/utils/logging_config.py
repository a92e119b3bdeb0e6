"""
Logging configuration for Affinity Cluster.

Modules obtain their logger with ``get_logger(__name__)``; entry points
(the CLI, scripts) call ``setup_logging()`` once at startup.
"""

import logging
import sys
from typing import Optional, Union

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
PACKAGE_LOGGER = "affinity_cluster"


class PackageStreamHandler(logging.StreamHandler):
    """Stream handler installed on the package logger by ``setup_logging``."""


def setup_logging(
    level: Optional[Union[int, str]] = None,
    fmt: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Log level name or number. Defaults to ``LOG_LEVEL`` from config.
        fmt: Format string for the stream handler.

    Returns:
        The configured package logger.

    Raises:
        ValueError: If *level* is not a known logging level name.
    """
    if level is None:
        from ..config import config

        level = config.log_level

    if isinstance(level, str):
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level: {level}")
        level = numeric

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    # Avoid stacking handlers when called more than once
    handler = next((h for h in logger.handlers if isinstance(h, PackageStreamHandler)), None)
    if handler is None:
        handler = PackageStreamHandler(sys.stderr)
        logger.addHandler(handler)
    handler.setFormatter(logging.Formatter(fmt))
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger for *name* (normally ``__name__``)."""
    return logging.getLogger(name)
