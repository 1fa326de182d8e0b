"""Structured key=value logging for the Kit Playground backend."""

import logging
import sys
from typing import Any

from playground.core.config import get_settings


class StructuredFormatter(logging.Formatter):
    """One key=value line per record; request_id and context fields are appended."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = getattr(record, "request_id", None)
        if request_id:
            log_data["request_id"] = request_id

        log_data.update(getattr(record, "context", {}))
        return " ".join(f"{k}={v}" for k, v in log_data.items())


def get_logger(name: str) -> logging.Logger:
    """Logger writing structured lines to stdout; DEBUG in the dev environment."""
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG if get_settings().PLAYGROUND_ENV == "dev" else logging.INFO)

    return logger


def log_with_context(logger: logging.Logger, level: int, msg: str, **kwargs: Any) -> None:
    """
    Log with request-scoped fields.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        msg: Log message
        **kwargs: Context fields; request_id is rendered right after the message
    """
    request_id = kwargs.pop("request_id", None)
    logger.log(level, msg, extra={"request_id": request_id, "context": kwargs})
