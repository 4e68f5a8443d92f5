"""
Per-tick execution: context, workload, instrumentation, log record.

Each call to ``ExecutionEngine.run_once`` walks one tick through

    IDLE -> CONTEXT_ESTABLISHED -> RUNNING -> COMPLETED -> IDLE

and always produces exactly one traffic increment, one gauge set, one
summary observation, one histogram observation and one "task complete"
log record. The error counter moves only when the workload failed.
Workload errors never escape; the request context is cleared on every
exit path.
"""

import itertools
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from .config import SPAN_ATTRIBUTE_DELAY, SimulatorConfig
from .context import RequestContext, request_scope
from .instrumentation.bundle import InstrumentationBundle
from .statistics.random_range import RandomRangeGenerator
from .telemetry.spans import SpanHandle
from .workload.synthetic import Outcome, SyntheticWorkload, WorkloadResult

logger = logging.getLogger(__name__)


class ExecutionState(Enum):
    IDLE = "idle"
    CONTEXT_ESTABLISHED = "context_established"
    RUNNING = "running"
    COMPLETED = "completed"


_NEXT_STATE = {
    ExecutionState.IDLE: ExecutionState.CONTEXT_ESTABLISHED,
    ExecutionState.CONTEXT_ESTABLISHED: ExecutionState.RUNNING,
    ExecutionState.RUNNING: ExecutionState.COMPLETED,
    ExecutionState.COMPLETED: ExecutionState.IDLE,
}


class _Tick:
    """State of one in-flight tick; ticks never share one of these."""

    _ids = itertools.count(1)

    def __init__(self) -> None:
        self.number = next(self._ids)
        self.state = ExecutionState.IDLE

    def advance(self, state: ExecutionState) -> None:
        if _NEXT_STATE[self.state] is not state:
            raise RuntimeError(f"Illegal tick transition {self.state.value} -> {state.value}")
        logger.debug("tick %d: %s -> %s", self.number, self.state.value, state.value)
        self.state = state


@dataclass(frozen=True)
class TickResult:
    """Everything one tick produced, for callers and tests."""

    delay_ms: int
    outcome: Outcome
    elapsed_seconds: float
    duration_ms: int
    request: RequestContext
    exemplar_tags: dict[str, str] = field(default_factory=dict)
    interrupted: bool = False
    error: BaseException | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is Outcome.SUCCESS


class ExecutionEngine:
    """Runs one instrumented tick per ``run_once`` call; never schedules itself."""

    def __init__(
        self,
        instrumentation: InstrumentationBundle,
        request_context: RequestContext,
        generator: RandomRangeGenerator | None = None,
        workload: SyntheticWorkload | None = None,
        min_delay_ms: int = 0,
        max_delay_ms: int = 750,
        status_code: int = 200,
        clock: Callable[[], float] = time.perf_counter,
    ):
        if not 0 <= min_delay_ms < max_delay_ms:
            raise ValueError(
                f"delay range must satisfy 0 <= min < max, got [{min_delay_ms}, {max_delay_ms}]"
            )
        self.instrumentation = instrumentation
        self.request_context = request_context
        self.generator = generator or RandomRangeGenerator()
        self.workload = workload or SyntheticWorkload(self.generator)
        self.min_delay_ms = min_delay_ms
        self.max_delay_ms = max_delay_ms
        self.status_code = status_code
        self._clock = clock
        self._lock = threading.Lock()
        self._in_flight = 0

    @classmethod
    def from_config(
        cls,
        config: SimulatorConfig,
        instrumentation: InstrumentationBundle,
        cancel_event: threading.Event | None = None,
    ) -> "ExecutionEngine":
        generator = RandomRangeGenerator()
        return cls(
            instrumentation=instrumentation,
            request_context=RequestContext.from_mapping(config.request_fields()),
            generator=generator,
            workload=SyntheticWorkload(generator, cancel_event=cancel_event),
            min_delay_ms=config.min_delay_ms,
            max_delay_ms=config.max_delay_ms,
            status_code=config.status_code,
        )

    @property
    def in_flight(self) -> int:
        """Number of ticks currently executing (overlap shows up as > 1)."""
        with self._lock:
            return self._in_flight

    def run_once(
        self,
        span: SpanHandle | None = None,
        request: RequestContext | None = None,
    ) -> TickResult:
        """
        Execute one tick.

        Args:
            span: Handle for the span the trigger opened for this tick; the
                ambient current span is used when omitted.
            request: Correlation fields for this tick; defaults to the
                engine's configured request context.
        """
        span = span if span is not None else SpanHandle.current()
        request = request or self.request_context
        tick = _Tick()
        with self._lock:
            self._in_flight += 1
        try:
            with request_scope(request):
                tick.advance(ExecutionState.CONTEXT_ESTABLISHED)
                result = self._execute(tick, span, request)
            tick.advance(ExecutionState.IDLE)
            return result
        finally:
            with self._lock:
                self._in_flight -= 1

    def _execute(self, tick: _Tick, span: SpanHandle, request: RequestContext) -> TickResult:
        instrumentation = self.instrumentation
        delay_ms = self.generator.draw(self.min_delay_ms, self.max_delay_ms)
        instrumentation.record_traffic()
        instrumentation.set_load(delay_ms)

        tick.advance(ExecutionState.RUNNING)
        started = self._clock()
        try:
            work = self.workload.run(delay_ms)
        except Exception as exc:
            work = WorkloadResult(delay_ms, Outcome.FAILURE, error=exc)
        elapsed = self._clock() - started
        tick.advance(ExecutionState.COMPLETED)

        exemplar_tags = span.exemplar_tags()
        if work.succeeded:
            span.set_attribute(SPAN_ATTRIBUTE_DELAY, delay_ms)
        else:
            instrumentation.record_error(exemplar_tags)
            if work.error is not None:
                span.record_failure(work.error)
                logger.error("Workload failed: %s", work.error, exc_info=work.error)
            else:
                logger.error("Workload failed without an error cause")

        instrumentation.observe_latency_summary(elapsed)
        instrumentation.observe_latency_histogram(elapsed, exemplar_tags)

        duration_ms = int(elapsed * 1000)
        fields = {
            "random_int": delay_ms,
            "success": int(work.outcome),
            "status": self.status_code,
            "duration_ms": duration_ms,
        }
        if work.interrupted:
            fields["interrupted"] = True
        if span.active:
            fields["trace_id"] = span.trace_id
            fields["span_id"] = span.span_id
        logger.info("task complete", extra=fields)

        return TickResult(
            delay_ms=delay_ms,
            outcome=work.outcome,
            elapsed_seconds=elapsed,
            duration_ms=duration_ms,
            request=request,
            exemplar_tags=exemplar_tags,
            interrupted=work.interrupted,
            error=work.error,
        )
