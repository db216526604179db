"""Logging utilities for plgen commands."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "plgen"


class StageFilter(logging.Filter):
    """Tag records with the pipeline stage that emitted them.

    The stage is the logger name below ``plgen`` (``analyzer``, ``module_writer``,
    ``compiler``...); records from the root ``plgen`` logger get ``plgen``.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        prefix = f"{_LOGGER_NAME}."
        record.stage = record.name[len(prefix):] if record.name.startswith(prefix) else _LOGGER_NAME
        return True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a stage logger under the plgen hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the plgen logger with console output and optional file sink.

    Console lines read ``[plgen] INFO analyzer: ...``; debug output from every
    stage is enabled with ``verbose``.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.addFilter(StageFilter())
    stream_handler.setFormatter(logging.Formatter("[plgen] %(levelname)s %(stage)s: %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.addFilter(StageFilter())
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(stage)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["StageFilter", "configure_logging", "get_logger"]
