"""Logging helpers backed by rich.

Usage:
    from commit_rush.log import get_logger

    logger = get_logger(__name__)
    logger.info("Loaded %d commits", count)
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "commit_rush"

console = Console(stderr=True)


def _rich_handler() -> RichHandler:
    handler = RichHandler(
        console=console,
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
    return handler


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Return a logger whose records reach a rich console handler.

    The handler lives on the package logger so module loggers share it.

    Args:
        name: Logger name, normally ``__name__``.
        level: Logging level name. Falls back to ``LOG_LEVEL`` or INFO.
    """
    logger = logging.getLogger(name)
    package = logging.getLogger(PACKAGE_LOGGER)
    if not package.handlers and not logging.getLogger().handlers:
        package.addHandler(_rich_handler())
        package.setLevel((level or os.getenv("LOG_LEVEL", "INFO")).upper())
    elif level is not None:
        logger.setLevel(level.upper())
    # Records still reach root handlers and capture fixtures.
    logger.propagate = True
    return logger


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure the root logger once, at the CLI entry point."""
    level = os.getenv("LOG_LEVEL", level).upper()
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(_rich_handler())

    # Records now reach the root handler; drop the package fallback.
    package = logging.getLogger(PACKAGE_LOGGER)
    package.handlers.clear()
    package.setLevel(level)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root.addHandler(file_handler)
