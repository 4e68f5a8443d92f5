"""
Console exporters for debugging and development.

Prints tick spans and log records to stdout for quick verification.
"""

from opentelemetry.sdk._logs.export import ConsoleLogRecordExporter
from opentelemetry.sdk.trace.export import ConsoleSpanExporter


def create_console_exporters():
    """
    Create console exporters for spans and logs.

    Returns:
        Tuple of (span_exporter, log_exporter)
    """
    return ConsoleSpanExporter(), ConsoleLogRecordExporter()
