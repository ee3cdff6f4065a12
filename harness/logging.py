"""Logging utilities for harness commands."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "harness"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the harness hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: int = 0, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the harness logger with console output and an optional file sink.

    ``verbose`` is a count: one flag enables INFO, two or more enable DEBUG.
    ``quiet`` limits console output to errors.
    """
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(min(level, logging.DEBUG) if log_file is not None else level)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when the CLI is invoked multiple times.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[harness] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "get_logger"]
