"""Span and log exporters for the tracing and log-shipping collaborators."""

from ..config import SimulatorConfig
from .console_exporter import create_console_exporters
from .file_exporter import FileLogExporter, FileSpanExporter
from .otlp_exporter import create_otlp_log_exporter, create_otlp_trace_exporter


def create_exporters(config: SimulatorConfig):
    """
    Pick span/log exporters from config.

    ``output_file`` wins over ``otlp_endpoint``; console exporters are used
    when ``console_telemetry`` is set and neither is configured.

    Returns:
        Tuple of (span_exporter, log_exporter); both None when no backend is configured.
    """
    if config.output_file:
        logs_path = config.output_file.replace(".jsonl", "_logs.jsonl")
        if logs_path == config.output_file:
            logs_path = f"{config.output_file}.logs"
        return FileSpanExporter(config.output_file), FileLogExporter(logs_path)
    if config.otlp_endpoint:
        return (
            create_otlp_trace_exporter(config.otlp_endpoint, protocol=config.otlp_protocol),
            create_otlp_log_exporter(config.otlp_endpoint, protocol=config.otlp_protocol),
        )
    if config.console_telemetry:
        return create_console_exporters()
    return None, None


__all__ = [
    "create_exporters",
    "create_otlp_trace_exporter",
    "create_otlp_log_exporter",
    "FileSpanExporter",
    "FileLogExporter",
    "create_console_exporters",
]
