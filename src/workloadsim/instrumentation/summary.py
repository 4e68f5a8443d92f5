"""
Summary metric with quantiles.

prometheus_client's own Summary exports only _count and _sum, so latency
quantiles are served by a custom collector backed by a time-windowed
CKMS estimator.
"""

import threading
from collections.abc import Iterable, Sequence

from prometheus_client.core import SummaryMetricFamily
from prometheus_client.registry import Collector, CollectorRegistry
from prometheus_client.utils import floatToGoString

from ..statistics.quantiles import Quantile, TimeWindowQuantiles

DEFAULT_QUANTILES = (Quantile(0.5, 0.01), Quantile(0.95, 0.01))


class QuantileSummary(Collector):
    """Summary exposing ``quantile``-labelled samples plus _count and _sum."""

    def __init__(
        self,
        name: str,
        documentation: str,
        quantiles: Sequence[Quantile] = DEFAULT_QUANTILES,
        max_age_seconds: float = 600.0,
        age_buckets: int = 5,
        registry: CollectorRegistry | None = None,
    ):
        self.name = name
        self.documentation = documentation
        self.quantiles = tuple(quantiles)
        self._window = TimeWindowQuantiles(self.quantiles, max_age_seconds, age_buckets)
        self._lock = threading.Lock()
        self._count = 0
        self._sum = 0.0
        if registry is not None:
            registry.register(self)

    def observe(self, amount: float) -> None:
        with self._lock:
            self._count += 1
            self._sum += amount
        self._window.insert(amount)

    def quantile(self, q: float) -> float:
        return self._window.get(q)

    def describe(self) -> Iterable[SummaryMetricFamily]:
        return [SummaryMetricFamily(self.name, self.documentation)]

    def collect(self) -> Iterable[SummaryMetricFamily]:
        with self._lock:
            count, total = self._count, self._sum
        family = SummaryMetricFamily(
            self.name, self.documentation, count_value=count, sum_value=total
        )
        for target in self.quantiles:
            family.add_sample(
                self.name,
                {"quantile": floatToGoString(target.quantile)},
                self._window.get(target.quantile),
            )
        return [family]
