"""Logging utilities for fruit test runs."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "fruitrun"
_CONSOLE_PREFIX = "[fruit]"


class _ConsoleFormatter(logging.Formatter):
    """Plain progress lines for INFO, level-tagged lines for everything else."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.levelno != logging.INFO:
            message = f"{_CONSOLE_PREFIX} {record.levelname} {message}"
        if record.exc_info:
            if not record.exc_text:
                record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            message = f"{message}\n{record.exc_text}"
        if record.stack_info:
            message = f"{message}\n{self.formatStack(record.stack_info)}"
        return message


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the fruitrun hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the fruitrun logger for console output and an optional file sink.

    ``quiet`` hides progress messages such as ``Scanning <file>``; ``verbose``
    wins when both are set.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when the CLI is invoked multiple times.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(_ConsoleFormatter())
    logger.addHandler(console)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)
        # the file always gets the full debug trail
        logger.setLevel(logging.DEBUG)

    return logger


__all__ = ["configure_logging", "get_logger"]
