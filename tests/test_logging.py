from __future__ import annotations

import logging
from pathlib import Path

from harness.logging import configure_logging, get_logger


def test_get_logger_namespaces_under_harness() -> None:
    assert get_logger().name == "harness"
    assert get_logger("scan").name == "harness.scan"


def test_verbosity_levels() -> None:
    assert configure_logging().handlers[0].level == logging.WARNING
    assert configure_logging(verbose=1).handlers[0].level == logging.INFO
    assert configure_logging(verbose=2).handlers[0].level == logging.DEBUG
    assert configure_logging(verbose=2, quiet=True).handlers[0].level == logging.ERROR


def test_reconfigure_does_not_duplicate_handlers() -> None:
    configure_logging()
    logger = configure_logging()
    assert len(logger.handlers) == 1


def test_log_file_captures_debug(tmp_path: Path) -> None:
    log_file = tmp_path / "harness.log"
    logger = configure_logging(log_file=log_file)

    get_logger("test").debug("written to file only")
    for handler in logger.handlers:
        handler.flush()

    assert "written to file only" in log_file.read_text(encoding="utf-8")
    configure_logging()
