"""Logging helpers.

Library modules call ``get_logger(__name__)`` and only log; applications
call ``configure_logging()`` once at start-up.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

ROOT_LOGGER = "haarlab"


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Return a logger under the ``haarlab`` namespace."""
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def configure_logging(
    level: int | str | None = None,
    log_file: str | Path | None = None,
    overwrite: bool = True,
) -> logging.Logger:
    """Configure the package logger with a console and optional file handler.

    Args:
        level: Logging level (int or name such as "DEBUG"); the configured
            ``[logging] level`` if None
        log_file: Optional path to also write logs to
        overwrite: Truncate the log file if True, append otherwise

    Returns:
        The configured ``haarlab`` logger
    """
    if level is None:
        from haarlab.config import get_settings

        level = get_settings().logging.level
    if isinstance(level, str):
        name = level
        level = logging.getLevelName(name.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown logging level: {name!r}")

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.propagate = False

    # Repeated calls (notebooks, tests) must not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(stream=sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path, mode="w" if overwrite else "a", encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    return logger
