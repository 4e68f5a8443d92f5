"""
OTLP exporters for tick spans and log records.

Metrics are not pushed: the golden-signal metrics are scraped from the
Prometheus endpoint. Supports both HTTP and gRPC protocols.
"""

from typing import Any


def _grpc_target(endpoint: str) -> str:
    return endpoint.replace("http://", "").replace("https://", "")


def _http_url(endpoint: str, path: str) -> str:
    endpoint = endpoint.rstrip("/")
    return endpoint if endpoint.endswith(path) else f"{endpoint}{path}"


def create_otlp_trace_exporter(
    endpoint: str = "http://localhost:4318",
    protocol: str = "http",
    headers: dict[str, str] | None = None,
    **kwargs: Any,
):
    """
    Create an OTLP span exporter.

    Args:
        endpoint: OTLP endpoint URL
        protocol: "http" or "grpc"
        headers: Optional headers to include
        **kwargs: Additional exporter configuration

    Returns:
        Configured SpanExporter
    """
    if protocol == "grpc":
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

        return OTLPSpanExporter(endpoint=_grpc_target(endpoint), headers=headers, **kwargs)

    from opentelemetry.exporter.otlp.proto.http.trace_exporter import (  # type: ignore[assignment]
        OTLPSpanExporter,
    )

    return OTLPSpanExporter(endpoint=_http_url(endpoint, "/v1/traces"), headers=headers, **kwargs)


def create_otlp_log_exporter(
    endpoint: str = "http://localhost:4318",
    protocol: str = "http",
    headers: dict[str, str] | None = None,
    **kwargs: Any,
):
    """
    Create an OTLP log record exporter.

    Args:
        endpoint: OTLP endpoint URL
        protocol: "http" or "grpc"
        headers: Optional headers to include
        **kwargs: Additional exporter configuration

    Returns:
        Configured log record exporter
    """
    if protocol == "grpc":
        from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter

        return OTLPLogExporter(endpoint=_grpc_target(endpoint), headers=headers, **kwargs)

    from opentelemetry.exporter.otlp.proto.http._log_exporter import (  # type: ignore[assignment]
        OTLPLogExporter,
    )

    return OTLPLogExporter(endpoint=_http_url(endpoint, "/v1/logs"), headers=headers, **kwargs)
