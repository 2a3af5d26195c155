"""Tests for specbuild.logging."""

from __future__ import annotations

import logging
from pathlib import Path

from specbuild.logging import configure_logging, get_logger, resolve_level


def test_get_logger_nests_components_under_root() -> None:
    assert get_logger().name == "specbuild"
    assert get_logger("graph").name == "specbuild.graph"


def test_resolve_level_prefers_verbose() -> None:
    assert resolve_level() == logging.INFO
    assert resolve_level(quiet=True) == logging.WARNING
    assert resolve_level(verbose=True, quiet=True) == logging.DEBUG


def test_configure_logging_replaces_previous_handlers(tmp_path: Path) -> None:
    configure_logging()
    logger = configure_logging(quiet=True, log_file=tmp_path / "run.log")

    assert len(logger.handlers) == 2
    assert logger.level == logging.DEBUG
    assert logger.handlers[0].level == logging.WARNING
    assert logger.propagate is False

    get_logger("reader").debug("parsed %s", "a.toml")
    for handler in logger.handlers:
        handler.flush()
    assert "specbuild.reader: parsed a.toml" in (tmp_path / "run.log").read_text(encoding="utf-8")
