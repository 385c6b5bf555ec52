"""Log output for quickprop runs.

All package loggers hang off the "quickprop" logger. configure_logging()
attaches one stderr handler there, formatted per RunnerConfig.log_format
("text" or "json"), and stops propagation so records are not printed
twice by an application's root handler. A config with log_format=None
leaves logging to the host application (pytest's caplog, for one).
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from datetime import datetime, timezone

from quickprop.config import LOG_FORMATS, RunnerConfig

PACKAGE_LOGGER = "quickprop"
EXTRA_PREFIX = "qp_"

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _extras(record: logging.LogRecord) -> dict:
    """qp_* attributes attached through extra= (qp_property, qp_shrink_steps, ...)."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key.startswith(EXTRA_PREFIX)
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per record, qp_* extras as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = "".join(traceback.format_exception(*record.exc_info))
        entry.update(_extras(record))
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Plain lines with qp_* extras appended as key=value pairs."""

    def __init__(self) -> None:
        super().__init__(TEXT_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = _extras(record)
        if not extras:
            return line
        pairs = " ".join(f"{key[len(EXTRA_PREFIX):]}={value}" for key, value in extras.items())
        return f"{line} [{pairs}]"


class _QuickpropHandler(logging.StreamHandler):
    """Marker type so repeated setup replaces only our own handler."""


def setup_logging(log_format: str, level: int = logging.INFO) -> logging.Logger:
    """Install a single stderr handler on the quickprop package logger.

    Raises:
        ValueError: log_format is not one of LOG_FORMATS
    """
    if log_format not in LOG_FORMATS:
        raise ValueError(f"log_format must be one of {LOG_FORMATS}, got {log_format!r}")

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in package_logger.handlers[:]:
        if isinstance(handler, _QuickpropHandler):
            package_logger.removeHandler(handler)

    handler = _QuickpropHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if log_format == "json" else TextFormatter())

    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = False
    return package_logger


def configure_logging(config: RunnerConfig) -> logging.Logger | None:
    """Apply config.log_format; verbose runs log at DEBUG, others at INFO."""
    if config.log_format is None:
        return None
    return setup_logging(config.log_format, logging.DEBUG if config.verbose else logging.INFO)
