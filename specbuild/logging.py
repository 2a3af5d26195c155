"""Logger hierarchy shared by the build pipeline and the preview service."""

from __future__ import annotations

import logging
from pathlib import Path

ROOT_LOGGER = "specbuild"
CONSOLE_FORMAT = "[specbuild] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(component: str | None = None) -> logging.Logger:
    """Return ``specbuild.<component>``, or the root ``specbuild`` logger."""
    if not component:
        return logging.getLogger(ROOT_LOGGER)
    return logging.getLogger(f"{ROOT_LOGGER}.{component}")


def resolve_level(*, verbose: bool = False, quiet: bool = False) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def _attach(logger: logging.Logger, handler: logging.Handler, level: int, fmt: str) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Route specbuild records to stderr and, optionally, to ``log_file``.

    ``verbose`` wins over ``quiet``. The file sink always records at DEBUG so a
    quiet console run still leaves a full trace behind.
    """
    level = resolve_level(verbose=verbose, quiet=quiet)
    logger = get_logger()
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    _attach(logger, logging.StreamHandler(), level, CONSOLE_FORMAT)
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        _attach(logger, logging.FileHandler(log_file, encoding="utf-8"), logging.DEBUG, FILE_FORMAT)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(level)
    return logger


__all__ = ["configure_logging", "get_logger", "resolve_level"]
