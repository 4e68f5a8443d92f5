"""
Explicit span handle passed into each tick.

The engine never starts or ends spans. The trigger hands it a SpanHandle;
when no span is recording-capable the handle is NO_ACTIVE_SPAN and every
operation on it is a no-op, so ticks outside a trace still run and simply
carry no exemplar.
"""

from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

from ..config import EXEMPLAR_SPAN_KEY, EXEMPLAR_TRACE_KEY


class SpanHandle:
    """Borrowed reference to one span for the duration of a tick."""

    def __init__(self, span: Span | None = None):
        if span is not None and span.get_span_context().is_valid:
            self._span: Span | None = span
        else:
            self._span = None

    @classmethod
    def current(cls) -> "SpanHandle":
        """Handle for the ambient current span (NO_ACTIVE_SPAN state when there is none)."""
        return cls(trace.get_current_span())

    @property
    def active(self) -> bool:
        return self._span is not None

    @property
    def trace_id(self) -> str | None:
        if self._span is None:
            return None
        return format(self._span.get_span_context().trace_id, "032x")

    @property
    def span_id(self) -> str | None:
        if self._span is None:
            return None
        return format(self._span.get_span_context().span_id, "016x")

    def exemplar_tags(self) -> dict[str, str]:
        """Span and trace identifiers as exemplar labels; empty without a span."""
        if self._span is None:
            return {}
        return {EXEMPLAR_SPAN_KEY: self.span_id, EXEMPLAR_TRACE_KEY: self.trace_id}

    def set_attribute(self, key: str, value: Any) -> None:
        if self._span is not None:
            self._span.set_attribute(key, value)

    def record_failure(self, error: BaseException, attributes: dict[str, Any] | None = None) -> None:
        """Record the exception event and mark the span as errored."""
        if self._span is None:
            return
        self._span.record_exception(error, attributes=attributes)
        self._span.set_status(Status(StatusCode.ERROR, f"{type(error).__name__}: {error}"))

    def __repr__(self) -> str:
        if self._span is None:
            return "SpanHandle(<no active span>)"
        return f"SpanHandle(trace_id={self.trace_id}, span_id={self.span_id})"


NO_ACTIVE_SPAN = SpanHandle(None)
