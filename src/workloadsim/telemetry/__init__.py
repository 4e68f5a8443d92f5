"""Tracing handles, providers and structured logging."""

from .logs import (
    JSONFormatter,
    KeyValueFormatter,
    RequestContextFilter,
    configure_logging,
    log_self_test,
)
from .providers import TelemetryProviders, build_resource
from .spans import NO_ACTIVE_SPAN, SpanHandle

__all__ = [
    "SpanHandle",
    "NO_ACTIVE_SPAN",
    "TelemetryProviders",
    "build_resource",
    "RequestContextFilter",
    "JSONFormatter",
    "KeyValueFormatter",
    "configure_logging",
    "log_self_test",
]
