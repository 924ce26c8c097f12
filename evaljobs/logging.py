"""Diagnostics for hydra-eval-jobs.

Standard output carries nothing but the job document, so every diagnostic
goes through the ``evaljobs`` logger hierarchy to stderr (and optionally a
log file).
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Mapping, TextIO

_LOGGER_NAME = "evaljobs"
_CONSOLE_FORMAT = "[hydra-eval-jobs] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Route evaljobs diagnostics to ``stream`` (stderr by default).

    ``verbose`` enables the per-path trace of the walker. A ``log_file``
    receives the same records with timestamps; its directory is created.
    Calling this again replaces the handlers of the previous call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def log_stats(logger: logging.Logger, stats: Mapping[str, int]) -> None:
    """Report evaluation counters, one ``name: value`` record each, aligned."""
    if not stats:
        return
    width = max(len(key) for key in stats)
    for key, value in stats.items():
        logger.info("%-*s %d", width + 1, f"{key}:", value)


__all__ = ["configure_logging", "get_logger", "log_stats"]
