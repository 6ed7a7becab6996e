# logvault/core/logging.py
"""
Application-wide logging configuration.

Purpose:
- Centralize logging setup (DRY)
- Provide consistent, readable log output
- Make it easy to increase verbosity in dev without code changes
"""

from __future__ import annotations

import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging for the application.

    Args:
        level: Logging level as a string (e.g. "INFO", "DEBUG", "WARNING").

    Behavior:
    - Sets a single stream handler to stdout (container-friendly)
    - Applies a consistent, readable log format
    - Safe to call again (existing root handlers are replaced)
    """

    # Unknown names fall back to INFO
    log_level = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    # The ORM is chatty at INFO when echo is toggled on; keep it at WARNING.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
