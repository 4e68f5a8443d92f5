"""
Fixed-rate trigger driving ``ExecutionEngine.run_once``.

One tick is in flight at a time. Ticks start every ``period_ms`` measured
from the previous scheduled start; a tick that overruns its period is
followed immediately by the next one, and the schedule is re-anchored
rather than replaying the missed starts. Each tick runs inside its own span
so the engine can attach attributes and exemplars to it.
"""

import logging
import threading
import time
from collections.abc import Callable

from opentelemetry.trace import Tracer

from .engine import ExecutionEngine, TickResult
from .telemetry.spans import NO_ACTIVE_SPAN, SpanHandle

logger = logging.getLogger(__name__)

TICK_SPAN_NAME = "workload.tick"


class PeriodicTrigger:
    """Invoke the engine on a fixed period until stopped or ``max_ticks`` is reached."""

    def __init__(
        self,
        engine: ExecutionEngine,
        period_ms: int = 1000,
        initial_delay_ms: int = 0,
        tracer: Tracer | None = None,
        stop_event: threading.Event | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if period_ms <= 0:
            raise ValueError(f"period_ms must be positive, got {period_ms}")
        self.engine = engine
        self.period = period_ms / 1000.0
        self.initial_delay = max(0, initial_delay_ms) / 1000.0
        self.tracer = tracer
        self.stop_event = stop_event or threading.Event()
        self._clock = clock
        self.ticks = 0
        self.overruns = 0

    def stop(self) -> None:
        """Request shutdown; also cuts short an in-flight workload suspension sharing the event."""
        self.stop_event.set()

    def fire(self) -> TickResult:
        """Run one tick, inside a fresh span when a tracer is configured."""
        if self.tracer is None:
            return self.engine.run_once(span=NO_ACTIVE_SPAN)
        with self.tracer.start_as_current_span(TICK_SPAN_NAME) as span:
            return self.engine.run_once(span=SpanHandle(span))

    def run(
        self,
        max_ticks: int | None = None,
        on_tick: Callable[[TickResult], None] | None = None,
    ) -> int:
        """Block running ticks; returns the number of ticks executed."""
        if self.initial_delay and self.stop_event.wait(self.initial_delay):
            return self.ticks
        next_start = self._clock()
        while not self.stop_event.is_set():
            if max_ticks is not None and self.ticks >= max_ticks:
                break
            result = self.fire()
            self.ticks += 1
            if on_tick is not None:
                on_tick(result)

            next_start += self.period
            now = self._clock()
            if now >= next_start:
                self.overruns += 1
                logger.debug("Tick %d overran its period by %.3fs", self.ticks, now - next_start)
                next_start = now
                continue
            if max_ticks is not None and self.ticks >= max_ticks:
                break
            if self.stop_event.wait(next_start - now):
                break
        logger.info("Trigger stopped after %d ticks (%d overran)", self.ticks, self.overruns)
        return self.ticks
