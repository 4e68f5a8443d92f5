"""
Golden-signal metrics for the synthetic workload.

Five metric identities share one namespace:

- ``gauge``          last drawn delay (saturation proxy)
- ``traffic``        one increment per tick
- ``errors``         one increment per failed tick, optionally with an exemplar
- ``latency_timer``  tick duration as streaming quantiles (0.5, 0.95)
- ``histogram``      tick duration in fixed buckets, optionally with an exemplar

Exemplars are only rendered by the OpenMetrics exposition format; the plain
text format drops them but still carries the counts.
"""

import logging
import re
from collections.abc import Mapping, Sequence

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    GCCollector,
    Histogram,
    PlatformCollector,
    ProcessCollector,
)

from ..config import (
    METRIC_ERRORS,
    METRIC_GAUGE,
    METRIC_LATENCY_HISTOGRAM,
    METRIC_LATENCY_SUMMARY,
    METRIC_TRAFFIC,
)
from ..statistics.quantiles import Quantile
from .summary import DEFAULT_QUANTILES, QuantileSummary

logger = logging.getLogger(__name__)

# OpenMetrics caps the combined length of exemplar label names and values.
EXEMPLAR_MAX_RUNES = 128
_LABEL_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


class MetricsBackendUnavailable(RuntimeError):
    """Raised when metrics cannot be registered or the scrape endpoint cannot start."""

    pass


class DuplicateMetricError(MetricsBackendUnavailable):
    """Raised when a metric identity is already registered in the target registry."""

    pass


def exemplar_labels(tags: Mapping[str, object] | None) -> dict[str, str] | None:
    """Return tags as exemplar labels, or None when they cannot be attached."""
    if not tags:
        return None
    labels = {str(k): str(v) for k, v in tags.items()}
    if not all(_LABEL_NAME_RE.match(k) for k in labels):
        logger.debug("Dropping exemplar with invalid label names: %s", sorted(labels))
        return None
    runes = sum(len(k) + len(v) for k, v in labels.items())
    if runes > EXEMPLAR_MAX_RUNES:
        logger.debug("Dropping exemplar of %d runes (limit %d)", runes, EXEMPLAR_MAX_RUNES)
        return None
    return labels


class InstrumentationBundle:
    """Owns the five golden-signal metrics and their exemplar behaviour."""

    def __init__(
        self,
        namespace: str = "custommetricsdemo",
        registry: CollectorRegistry | None = None,
        exemplars_enabled: bool = True,
        runtime_metrics: bool = False,
        buckets: Sequence[float] = Histogram.DEFAULT_BUCKETS,
        quantiles: Sequence[Quantile] = DEFAULT_QUANTILES,
    ):
        self.namespace = namespace
        self.registry = registry if registry is not None else CollectorRegistry()
        self.exemplars_enabled = exemplars_enabled
        try:
            self._register(buckets, quantiles)
            if runtime_metrics:
                ProcessCollector(registry=self.registry)
                PlatformCollector(registry=self.registry)
                GCCollector(registry=self.registry)
        except ValueError as exc:
            raise DuplicateMetricError(
                f"Metric identity already registered under namespace '{namespace}': {exc}"
            ) from exc
        logger.info(
            "Registered metrics under namespace '%s' (exemplars enabled: %s)",
            namespace,
            exemplars_enabled,
        )

    def _register(self, buckets: Sequence[float], quantiles: Sequence[Quantile]) -> None:
        self.gauge = Gauge(
            METRIC_GAUGE,
            "Last drawn workload delay in milliseconds",
            namespace=self.namespace,
            registry=self.registry,
        )
        self.traffic = Counter(
            METRIC_TRAFFIC,
            "Workload ticks executed",
            namespace=self.namespace,
            registry=self.registry,
        )
        self.errors = Counter(
            METRIC_ERRORS,
            "Workload ticks that failed",
            namespace=self.namespace,
            registry=self.registry,
        )
        self.latency_summary = QuantileSummary(
            f"{self.namespace}_{METRIC_LATENCY_SUMMARY}",
            "Workload tick latency in seconds",
            quantiles=quantiles,
            registry=self.registry,
        )
        self.latency_histogram = Histogram(
            METRIC_LATENCY_HISTOGRAM,
            "Workload tick latency distribution in seconds",
            namespace=self.namespace,
            buckets=buckets,
            registry=self.registry,
        )

    def _exemplar(self, tags: Mapping[str, object] | None) -> dict[str, str] | None:
        if not self.exemplars_enabled:
            return None
        return exemplar_labels(tags)

    def record_traffic(self) -> None:
        self.traffic.inc()

    def set_load(self, value: float) -> None:
        self.gauge.set(value)

    def record_error(self, exemplar_tags: Mapping[str, object] | None = None) -> None:
        """Count one failure; attach the tags as an exemplar when possible."""
        self.errors.inc(exemplar=self._exemplar(exemplar_tags))

    def observe_latency_summary(self, seconds: float) -> None:
        self.latency_summary.observe(seconds)

    def observe_latency_histogram(
        self, seconds: float, exemplar_tags: Mapping[str, object] | None = None
    ) -> None:
        """Add one latency observation; attach the tags as an exemplar when possible."""
        self.latency_histogram.observe(seconds, exemplar=self._exemplar(exemplar_tags))
