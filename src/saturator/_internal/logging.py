"""Logging setup for Saturator.

All loggers live under the ``saturator`` namespace so the CLI can route
engine diagnostics to stderr without touching the report on stdout.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime

_ROOT_LOGGER = "saturator"

# Optional context attached via ``extra={...}`` that the JSON formatter keeps.
_CONTEXT_FIELDS = ("phase", "batch_size", "concurrency")


class _JsonFormatter(logging.Formatter):
    """One-line JSON log formatter.

    Emits objects with keys: timestamp, level, logger, message, plus any
    batch context fields present on the record.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_logging(
    level: int = logging.WARNING,
    *,
    json_format: bool = False,
) -> logging.Logger:
    """Configure and return the ``saturator`` root logger.

    Repeated calls only adjust the level of the existing handler, so the
    CLI and the tests can both call this freely.

    Args:
        level: Logging level. Defaults to WARNING so progress bars and the
            report are not interleaved with engine chatter.
        json_format: Emit structured JSON lines instead of plain text.

    Returns:
        The configured ``saturator`` logger.
    """
    logger = logging.getLogger(_ROOT_LOGGER)
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if json_format:
        formatter: logging.Formatter = _JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child logger, e.g. ``get_logger("engine.runner")``."""
    return logging.getLogger(f"{_ROOT_LOGGER}.{name}")
