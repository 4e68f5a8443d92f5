"""
Structured logging for tick records.

The engine logs with ``extra={...}`` fields; the handlers installed here
add the active request context and trace identifiers to every record and
render it as one JSON object per line (or ``key=value`` text). When an OTel
LoggerProvider is supplied, records are also shipped through the OTel
LoggingHandler, which turns the same fields into log attributes.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

from opentelemetry import trace
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler

from ..context import current_request_context

LOGGER_NAME = "workloadsim"

# Attributes every LogRecord has; anything else came from extra= or a filter.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
    """Structured fields attached to a record (extra= kwargs and filter-added fields)."""
    return {
        k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS and not k.startswith("_")
    }


class RequestContextFilter(logging.Filter):
    """Copy the active request context and span identifiers onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = current_request_context()
        if context is not None:
            for key, value in context.as_dict().items():
                if not hasattr(record, key):
                    setattr(record, key, value)
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid and not hasattr(record, "trace_id"):
            record.trace_id = format(span_context.trace_id, "032x")
            record.span_id = format(span_context.span_id, "016x")
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger, message, then structured fields."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        data.update(record_extras(record))
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


class KeyValueFormatter(logging.Formatter):
    """Plain text line followed by ``key=value`` pairs for the structured fields."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)-7s %(name)s - %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = record_extras(record)
        if not extras:
            return line
        pairs = " ".join(f"{k}={v}" for k, v in extras.items())
        head, sep, tail = line.partition("\n")
        return f"{head} {pairs}{sep}{tail}"


def configure_logging(
    level: str = "INFO",
    fmt: str = "json",
    logger_provider: LoggerProvider | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Install handlers on the package logger; safe to call more than once."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False

    context_filter = RequestContextFilter()
    console = logging.StreamHandler(stream or sys.stderr)
    console.setFormatter(JSONFormatter() if fmt == "json" else KeyValueFormatter())
    console.addFilter(context_filter)
    logger.addHandler(console)

    if logger_provider is not None:
        otel_handler = LoggingHandler(level=logging.NOTSET, logger_provider=logger_provider)
        otel_handler.addFilter(context_filter)
        logger.addHandler(otel_handler)
    return logger


def log_self_test(logger: logging.Logger) -> None:
    """Emit one line per level so a new deployment can confirm what reaches the sink."""
    for level in (logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR):
        logger.log(level, "Logging self-test at %s level", logging.getLevelName(level))
