"""Tests for exporter selection and the JSON-lines exporters."""

import json
import logging
from pathlib import Path

from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import SimpleLogRecordProcessor
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor

from workloadsim.config import SimulatorConfig
from workloadsim.exporters import FileLogExporter, FileSpanExporter, create_exporters
from workloadsim.exporters.otlp_exporter import _grpc_target, _http_url
from workloadsim.telemetry import build_resource


def test_file_span_exporter_writes_one_line_per_span(tmp_path: Path) -> None:
    exporter = FileSpanExporter(tmp_path / "spans.jsonl")
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    tracer = provider.get_tracer("tests")

    for delay in (101, 202):
        with tracer.start_as_current_span("workload.tick") as span:
            span.set_attribute("custom.attribute", delay)
    provider.shutdown()

    rows = [json.loads(line) for line in exporter.output_path.read_text().splitlines()]
    assert [r["attributes"]["custom.attribute"] for r in rows] == [101, 202]
    assert all(len(r["trace_id"]) == 32 and r["parent_span_id"] is None for r in rows)


def test_output_file_selects_file_exporters(tmp_path: Path) -> None:
    config = SimulatorConfig(output_file=str(tmp_path / "ticks.jsonl"), otlp_endpoint="http://x:4318")

    spans, logs = create_exporters(config)

    assert isinstance(spans, FileSpanExporter)
    assert isinstance(logs, FileLogExporter)
    assert logs.output_path.name == "ticks_logs.jsonl"


def test_log_path_without_jsonl_suffix(tmp_path: Path) -> None:
    _, logs = create_exporters(SimulatorConfig(output_file=str(tmp_path / "ticks")))
    assert logs.output_path.name == "ticks.logs"


def test_console_exporters() -> None:
    spans, logs = create_exporters(SimulatorConfig(console_telemetry=True))
    assert isinstance(spans, ConsoleSpanExporter)
    assert logs is not None


def test_no_backend_configured() -> None:
    assert create_exporters(SimulatorConfig()) == (None, None)


def test_otlp_endpoint_helpers() -> None:
    assert _http_url("http://collector:4318/", "/v1/traces") == "http://collector:4318/v1/traces"
    assert _http_url("http://collector:4318/v1/logs", "/v1/logs") == "http://collector:4318/v1/logs"
    assert _grpc_target("https://collector:4317") == "collector:4317"


def test_file_log_exporter_writes_one_line_per_record(tmp_path: Path, tracer) -> None:
    exporter = FileLogExporter(tmp_path / "ticks_logs.jsonl")
    provider = LoggerProvider(resource=build_resource("workloadsim-test"))
    provider.add_log_record_processor(SimpleLogRecordProcessor(exporter))
    handler = LoggingHandler(level=logging.NOTSET, logger_provider=provider)
    logger = logging.getLogger("tests.file_log_exporter")
    logger.setLevel(logging.INFO)
    logger.propagate = False
    logger.addHandler(handler)
    try:
        with tracer.start_as_current_span("workload.tick") as span:
            logger.info("task complete", extra={"random_int": 101, "success": 1})
            trace_id = format(span.get_span_context().trace_id, "032x")
    finally:
        logger.removeHandler(handler)
        logger.propagate = True
        provider.shutdown()

    (row,) = [json.loads(line) for line in exporter.output_path.read_text().splitlines()]
    assert row["body"] == "task complete"
    assert row["severity_text"] == "INFO"
    assert row["attributes"]["random_int"] == 101
    assert row["attributes"]["success"] == 1
    assert row["trace_id"] == trace_id
    assert row["resource"]["service.name"] == "workloadsim-test"
