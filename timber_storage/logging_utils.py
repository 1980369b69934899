"""
Logging utilities for timber storage.

Every store logs through a StoreLoggerAdapter, so each record carries the
store name and the user id that was current when it was emitted. Remote
write failures are only ever logged, and these fields are how they are
traced back to a store and a user.

configure_logging() installs one handler on the package logger, as plain
text or as JSON lines. TimberStorage.create() calls it when the
configuration sets ``log_format``; otherwise logging is left to the host
application.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import IO, Any

LOGGER_NAME = "timber_storage"
LOG_FORMATS = ("text", "json")

# Record attributes set by StoreLoggerAdapter and BestEffortSync
CONTEXT_FIELDS = ("store", "user_id", "operation", "error_details")

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(store)s user=%(user_id)s] %(name)s: %(message)s"


class StructuredJsonFormatter(logging.Formatter):
    """
    Formats each record as one JSON object per line.

    Fields: timestamp (record creation time, UTC), level, logger, message,
    then whichever store context fields are set on the record, then the
    formatted exception if any.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class _ContextDefaults(logging.Filter):
    """Fills missing context fields so TEXT_FORMAT works for every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name in ("store", "user_id"):
            if not hasattr(record, name):
                setattr(record, name, "-")
        return True


def configure_logging(
    log_format: str = "text",
    level: int | str = logging.INFO,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """
    Install a single handler on the timber_storage logger.

    Args:
        log_format: "text" or "json"
        level: Level for the package logger
        stream: Output stream (default: stderr)

    Returns:
        The package logger
    """
    if log_format not in LOG_FORMATS:
        raise ValueError(f"Unknown log format {log_format!r}, expected one of {LOG_FORMATS}")

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    if log_format == "json":
        handler.setFormatter(StructuredJsonFormatter())
    else:
        handler.addFilter(_ContextDefaults())
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    return logger


def get_storage_logger(name: str) -> logging.Logger:
    """Logger named ``timber_storage.{name}``."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


class StoreLoggerAdapter(logging.LoggerAdapter):
    """
    Adds store context to every record.

    ``extra`` is read at emit time, so a store updates ``user_id`` in place
    when the identity changes. Per-call extras (operation, error_details)
    are kept alongside it.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**kwargs.get("extra", {}), **self.extra}
        return msg, kwargs
