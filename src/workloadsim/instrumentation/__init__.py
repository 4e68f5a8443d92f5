"""Golden-signal metrics and their scrape endpoint."""

from .bundle import (
    DuplicateMetricError,
    InstrumentationBundle,
    MetricsBackendUnavailable,
    exemplar_labels,
)
from .server import serve_metrics
from .summary import QuantileSummary

__all__ = [
    "InstrumentationBundle",
    "QuantileSummary",
    "MetricsBackendUnavailable",
    "DuplicateMetricError",
    "exemplar_labels",
    "serve_metrics",
]
