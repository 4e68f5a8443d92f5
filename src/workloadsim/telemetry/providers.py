"""
Tracer and logger providers for the runner process.

Spans are started by the trigger, one per tick; the engine only borrows
them. Both providers share one Resource identifying the service.
"""

from opentelemetry import trace
from opentelemetry._logs import set_logger_provider
from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter
from opentelemetry.trace import Tracer

from .. import __version__

TRACER_NAME = "workloadsim"


def build_resource(service_name: str) -> Resource:
    return Resource.create({"service.name": service_name, "service.version": __version__})


class TelemetryProviders:
    """Owns the tracer provider and, when a log exporter is given, the logger provider."""

    def __init__(
        self,
        service_name: str = "workloadsim",
        span_exporter: SpanExporter | None = None,
        log_exporter=None,
    ):
        resource = build_resource(service_name)
        self.tracer_provider = TracerProvider(resource=resource)
        if span_exporter is not None:
            self.tracer_provider.add_span_processor(BatchSpanProcessor(span_exporter))

        self.logger_provider: LoggerProvider | None = None
        if log_exporter is not None:
            self.logger_provider = LoggerProvider(resource=resource)
            self.logger_provider.add_log_record_processor(BatchLogRecordProcessor(log_exporter))

    def install_global(self) -> None:
        """Make these providers the process-wide defaults (call once, at bootstrap)."""
        trace.set_tracer_provider(self.tracer_provider)
        if self.logger_provider is not None:
            set_logger_provider(self.logger_provider)

    def tracer(self) -> Tracer:
        return self.tracer_provider.get_tracer(TRACER_NAME)

    def shutdown(self) -> None:
        """Flush and stop both providers."""
        self.tracer_provider.shutdown()
        if self.logger_provider is not None:
            self.logger_provider.shutdown()
