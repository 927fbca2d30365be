"""Structured logging configuration for nugget-press."""

from __future__ import annotations

import logging
import sys


def setup_logging(
    level: int = logging.INFO,
    module_name: str = "nuggetpress",
) -> logging.Logger:
    """Configure and return a logger with consistent formatting.

    Loggers are namespaced under ``nuggetpress`` so the CLI can raise or
    lower verbosity for the whole build in one place.

    Args:
        level: Logging level (default INFO).
        module_name: Name for the logger instance.

    Returns:
        Configured logger.
    """
    if module_name != "nuggetpress" and not module_name.startswith("nuggetpress."):
        module_name = f"nuggetpress.{module_name}"
    logger = logging.getLogger(module_name)

    if logger.handlers:
        return logger

    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.NOTSET)

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


def set_verbosity(level: int) -> None:
    """Apply ``level`` to every nugget-press logger created so far."""
    root = logging.getLogger("nuggetpress")
    root.setLevel(level)
    for name, logger in logging.root.manager.loggerDict.items():
        if name.startswith("nuggetpress.") and isinstance(logger, logging.Logger):
            logger.setLevel(level)
