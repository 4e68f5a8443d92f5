"""
JSON-lines exporters for offline inspection of tick spans and log records.

Each exported item becomes one line, so the files can be tailed while the
runner is active and joined on trace_id afterwards.
"""

import json
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from opentelemetry.sdk._logs.export import LogExportResult, LogRecordExporter
from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult


def _hex_id(value: int | None, width: int) -> str | None:
    return format(value, f"0{width}x") if value else None


class _JsonLinesFile:
    """Append-only JSON-lines writer shared by the exporters."""

    def __init__(self, output_path: str | Path, append: bool = True):
        self.output_path = Path(output_path)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        if not append and self.output_path.exists():
            self.output_path.unlink()
        self._lock = threading.Lock()

    def write(self, rows: Sequence[dict[str, Any]]) -> None:
        with self._lock, open(self.output_path, "a", encoding="utf-8") as f:
            for row in rows:
                f.write(json.dumps(row, default=str) + "\n")


class FileSpanExporter(SpanExporter):
    """Export tick spans to a JSON-lines file."""

    def __init__(self, output_path: str | Path, append: bool = True):
        self._file = _JsonLinesFile(output_path, append)
        self.output_path = self._file.output_path

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        rows = []
        for span in spans:
            rows.append(
                {
                    "name": span.name,
                    "trace_id": _hex_id(span.context.trace_id, 32),
                    "span_id": _hex_id(span.context.span_id, 16),
                    "parent_span_id": _hex_id(span.parent.span_id, 16) if span.parent else None,
                    "start_time": span.start_time,
                    "end_time": span.end_time,
                    "status": span.status.status_code.name,
                    "attributes": dict(span.attributes) if span.attributes else {},
                    "events": [
                        {"name": e.name, "attributes": dict(e.attributes or {})}
                        for e in span.events
                    ],
                    "resource": dict(span.resource.attributes) if span.resource else {},
                }
            )
        try:
            self._file.write(rows)
        except OSError:
            return SpanExportResult.FAILURE
        return SpanExportResult.SUCCESS

    def shutdown(self) -> None:
        pass

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return True


class FileLogExporter(LogRecordExporter):
    """Export tick log records to a JSON-lines file."""

    def __init__(self, output_path: str | Path, append: bool = True):
        self._file = _JsonLinesFile(output_path, append)
        self.output_path = self._file.output_path

    def export(self, batch: Sequence[Any]) -> LogExportResult:  # type: ignore[override]
        rows = []
        for item in batch:
            record = item.log_record
            resource = getattr(item, "resource", None) or getattr(record, "resource", None)
            severity = getattr(record, "severity_number", None)
            rows.append(
                {
                    "timestamp": getattr(record, "timestamp", None),
                    "severity_number": severity.value if severity else None,
                    "severity_text": getattr(record, "severity_text", None),
                    "body": str(record.body) if getattr(record, "body", None) else None,
                    "attributes": dict(record.attributes) if record.attributes else {},
                    "trace_id": _hex_id(getattr(record, "trace_id", None), 32),
                    "span_id": _hex_id(getattr(record, "span_id", None), 16),
                    "resource": dict(resource.attributes) if resource else {},
                }
            )
        try:
            self._file.write(rows)
        except OSError:
            return LogExportResult.FAILURE
        return LogExportResult.SUCCESS

    def shutdown(self) -> None:
        pass

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return True
