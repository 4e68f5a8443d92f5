"""
Simulated unit of work with deterministic fault injection.

Every requested delay divisible by FAULT_DIVISOR fails: the workload issues
an intentionally inverted range draw, which raises InvalidRange, and reports
the run as a failure with that error as its cause. With delays drawn
uniformly from [0, 750] ms, 151 of the 751 possible values are multiples of
5, so about 20.1% of runs fail. All other runs suspend for the requested
delay and succeed.
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum

from ..statistics.random_range import InvalidRange, RandomRangeGenerator

logger = logging.getLogger(__name__)

FAULT_DIVISOR = 5
# Inverted on purpose: min > max always raises InvalidRange.
FAULT_RANGE = (750, 500)


class Outcome(IntEnum):
    """Per-run result; the integer value is what the log record carries."""

    FAILURE = 0
    SUCCESS = 1


@dataclass(frozen=True)
class WorkloadResult:
    """What a single workload run produced."""

    delay_ms: int
    outcome: Outcome
    error: BaseException | None = None
    interrupted: bool = False

    @property
    def succeeded(self) -> bool:
        return self.outcome is Outcome.SUCCESS


def injects_fault(delay_ms: int) -> bool:
    """True when a run with this delay takes the fault-injection branch."""
    return delay_ms % FAULT_DIVISOR == 0


class SyntheticWorkload:
    """
    Suspend for a requested delay, failing on multiples of FAULT_DIVISOR.

    Suspension waits on ``cancel_event``. Setting the event cuts the wait
    short; the run is then reported as interrupted but not failed, and the
    event is left set so the caller still sees the cancellation request.
    ``suspend`` replaces the wait entirely (it receives seconds and returns
    True when interrupted).
    """

    def __init__(
        self,
        generator: RandomRangeGenerator,
        cancel_event: threading.Event | None = None,
        suspend: Callable[[float], bool] | None = None,
    ):
        self.generator = generator
        self.cancel_event = cancel_event or threading.Event()
        self._suspend = suspend or self.cancel_event.wait

    def run(self, requested_delay_ms: int) -> WorkloadResult:
        if injects_fault(requested_delay_ms):
            return self._inject_fault(requested_delay_ms)

        started = time.perf_counter()
        interrupted = bool(self._suspend(requested_delay_ms / 1000.0))
        if interrupted:
            actual_ms = int((time.perf_counter() - started) * 1000)
            logger.warning(
                "Workload suspension interrupted after %d of %d ms",
                actual_ms,
                requested_delay_ms,
            )
            return WorkloadResult(actual_ms, Outcome.SUCCESS, interrupted=True)
        return WorkloadResult(requested_delay_ms, Outcome.SUCCESS)

    def _inject_fault(self, requested_delay_ms: int) -> WorkloadResult:
        try:
            self.generator.draw(*FAULT_RANGE)
        except InvalidRange as exc:
            # The fault branch never suspends.
            return WorkloadResult(0, Outcome.FAILURE, error=exc)
        raise AssertionError(f"fault range {FAULT_RANGE} did not raise InvalidRange")
