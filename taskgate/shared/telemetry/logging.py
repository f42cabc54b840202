"""Logging configuration for taskgate.

Workflow code logs task lifecycle transitions (created, breached,
escalated, resolved) at INFO; timer and signal plumbing logs at DEBUG.
"""

import logging
import sys

from taskgate.core.config import get_settings

# Third-party loggers that are noisy at DEBUG.
_QUIET_LOGGERS = ("sqlalchemy.engine", "asyncio")


def setup_logging(level: int | None = None) -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.debug is True, otherwise INFO, unless
    an explicit level is passed. Output goes to stdout.

    Args:
        level: Optional logging level overriding the settings-derived one.
    """
    settings = get_settings()
    if level is None:
        level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name.

    Args:
        name: Usually __name__ of the calling module.
    """
    return logging.getLogger(name)
