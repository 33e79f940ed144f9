"""Logging setup for the command-line tool."""

from __future__ import annotations

import logging
import sys
from pathlib import Path


def setup_logger(
    name: str = "steadybench",
    level: int = logging.INFO,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure and return a logger with console (and optional file) output.

    Args:
        name: Logger name; child loggers of the package propagate to it.
        level: Console logging level.
        log_file: Optional file receiving DEBUG-level records.

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG if log_file else level)

    # Drop handlers from a previous call
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(fmt="[%(levelname)s] %(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
