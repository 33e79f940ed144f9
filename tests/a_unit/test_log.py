"""Unit tests for steadybench.log module."""

from __future__ import annotations

import logging
from pathlib import Path

from steadybench.log import setup_logger


def close_handlers(logger: logging.Logger) -> None:
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()


def test_console_only() -> None:
    """Test the default console configuration."""
    logger = setup_logger("steadybench.test_console", level=logging.WARNING)

    assert len(logger.handlers) == 1
    assert logger.handlers[0].level == logging.WARNING
    assert logger.propagate is False
    close_handlers(logger)


def test_file_receives_debug(tmp_path: Path) -> None:
    """Test that the log file gets DEBUG records in its own directory."""
    log_file = tmp_path / "logs" / "run.log"
    logger = setup_logger("steadybench.test_file", log_file=log_file)

    logger.debug("round details")
    close_handlers(logger)

    text = log_file.read_text()
    assert "round details" in text
    assert "[DEBUG]" in text


def test_repeated_setup_does_not_duplicate() -> None:
    """Test that calling setup twice keeps one console handler."""
    setup_logger("steadybench.test_repeat")
    logger = setup_logger("steadybench.test_repeat")

    assert len(logger.handlers) == 1
    close_handlers(logger)


def test_repeated_setup_closes_file(tmp_path: Path) -> None:
    """Test that a second setup closes the previous log file."""
    first = setup_logger("steadybench.test_reopen", log_file=tmp_path / "a.log")
    old_file = next(h for h in first.handlers if isinstance(h, logging.FileHandler))

    logger = setup_logger("steadybench.test_reopen")

    assert old_file.stream is None
    assert len(logger.handlers) == 1
    close_handlers(logger)
