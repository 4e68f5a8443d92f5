"""
Streaming quantile estimation for latency summaries.

CKMSQuantiles implements the targeted-quantiles variant of
Cormode, Korn, Muthukrishnan and Srivastava, "Effective Computation of
Biased Quantiles over Data Streams" (ICDE 2005): for each target
(quantile, error) the reported value's rank is within error * n of the
true rank, using space far below the number of observations.

TimeWindowQuantiles keeps a ring of estimators so that reported quantiles
reflect only the last ``max_age_seconds`` of observations.
"""

import math
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class Quantile:
    """A target quantile and its allowed rank error (both in (0, 1))."""

    quantile: float
    error: float

    def __post_init__(self) -> None:
        if not 0.0 < self.quantile < 1.0:
            raise ValueError(f"quantile must be in (0, 1), got {self.quantile}")
        if not 0.0 < self.error < 1.0:
            raise ValueError(f"error must be in (0, 1), got {self.error}")


@dataclass
class _Sample:
    value: float
    g: int
    delta: int


class CKMSQuantiles:
    """Targeted quantile estimator. Not thread-safe; see TimeWindowQuantiles."""

    def __init__(self, quantiles: Sequence[Quantile], buffer_size: int = 500):
        if not quantiles:
            raise ValueError("at least one target quantile is required")
        self.quantiles = tuple(quantiles)
        self._buffer_size = buffer_size
        self._buffer: list[float] = []
        self._samples: list[_Sample] = []
        self._count = 0

    def __len__(self) -> int:
        return self._count + len(self._buffer)

    def _allowable_error(self, rank: float) -> float:
        size = self._count
        minimum = float(size + 1)
        for target in self.quantiles:
            if rank <= target.quantile * size:
                error = 2.0 * target.error * (size - rank) / (1.0 - target.quantile)
            else:
                error = 2.0 * target.error * rank / target.quantile
            # Never looser anywhere than at the target rank itself.
            minimum = min(minimum, error, 2.0 * target.error * size)
        return minimum

    def insert(self, value: float) -> None:
        self._buffer.append(value)
        if len(self._buffer) >= self._buffer_size:
            self._flush()

    def get(self, q: float) -> float:
        """Estimated value at quantile q; NaN when nothing was observed."""
        self._flush()
        if not self._samples:
            return math.nan
        desired = q * self._count
        bound = desired + self._allowable_error(desired) / 2.0
        rank = 0
        prev = self._samples[0]
        for cur in self._samples[1:]:
            rank += prev.g
            if rank + cur.g + cur.delta > bound:
                return prev.value
            prev = cur
        return prev.value

    def _flush(self) -> None:
        if not self._buffer:
            return
        self._buffer.sort()
        values = iter(self._buffer)
        if not self._samples:
            self._samples.append(_Sample(next(values), 1, 0))
            self._count += 1
        idx = 0
        rank = 0
        for value in values:
            while idx < len(self._samples) and self._samples[idx].value <= value:
                rank += self._samples[idx].g
                idx += 1
            if idx == 0 or idx == len(self._samples):
                delta = 0
            else:
                # Rank uncertainty is bounded by the successor's.
                successor = self._samples[idx]
                allowed = int(math.floor(self._allowable_error(rank)))
                delta = max(0, min(successor.g + successor.delta, allowed) - 1)
            self._samples.insert(idx, _Sample(value, 1, delta))
            self._count += 1
            rank += 1
            idx += 1
        self._buffer.clear()
        self._compress()

    def _compress(self) -> None:
        if len(self._samples) < 3:
            return
        # The first sample is never merged so the observed minimum survives.
        first = self._samples[0]
        kept = [first]
        rank = first.g
        prev = self._samples[1]
        for nxt in self._samples[2:]:
            if prev.g + nxt.g + nxt.delta <= self._allowable_error(rank):
                nxt.g += prev.g
            else:
                kept.append(prev)
                rank += prev.g
            prev = nxt
        kept.append(prev)
        self._samples = kept


class TimeWindowQuantiles:
    """Quantiles over a sliding time window, rotated in ``age_buckets`` steps."""

    def __init__(
        self,
        quantiles: Sequence[Quantile],
        max_age_seconds: float = 600.0,
        age_buckets: int = 5,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_age_seconds <= 0 or age_buckets <= 0:
            raise ValueError("max_age_seconds and age_buckets must be positive")
        self.quantiles = tuple(quantiles)
        self._clock = clock
        self._ring = [CKMSQuantiles(self.quantiles) for _ in range(age_buckets)]
        self._current = 0
        self._rotate_every = max_age_seconds / age_buckets
        self._last_rotate = clock()
        self._lock = threading.Lock()

    def insert(self, value: float) -> None:
        with self._lock:
            self._rotate()
            for bucket in self._ring:
                bucket.insert(value)

    def get(self, q: float) -> float:
        with self._lock:
            return self._rotate().get(q)

    def _rotate(self) -> CKMSQuantiles:
        elapsed = self._clock() - self._last_rotate
        while elapsed > self._rotate_every:
            self._ring[self._current] = CKMSQuantiles(self.quantiles)
            self._current = (self._current + 1) % len(self._ring)
            elapsed -= self._rotate_every
            self._last_rotate += self._rotate_every
        return self._ring[self._current]
