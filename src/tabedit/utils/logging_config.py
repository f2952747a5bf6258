"""Logging setup with a per-run correlation id."""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from uuid import uuid4

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="-")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"


class CorrelationIdFilter(logging.Filter):
    """Attach the current correlation id to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        return True


def set_correlation_id(correlation_id: str | None = None) -> str:
    correlation_id = correlation_id or uuid4().hex[:12]
    _correlation_id.set(correlation_id)
    return correlation_id


def get_correlation_id() -> str:
    return _correlation_id.get()


def setup_logging(level: str = "INFO") -> None:
    """Send tabedit logs to stderr at the given level.

    Stdout stays free for shell output and the stdio transport.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(CorrelationIdFilter())

    logger = logging.getLogger("tabedit")
    logger.handlers = [handler]
    logger.setLevel(level.upper())
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
