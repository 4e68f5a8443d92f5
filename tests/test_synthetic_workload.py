"""Tests for the simulated workload and its fault-injection branch."""

import random
import threading
import time

from conftest import no_wait

from workloadsim.statistics import InvalidRange, RandomRangeGenerator
from workloadsim.workload import FAULT_DIVISOR, Outcome, SyntheticWorkload, injects_fault


def test_delay_not_divisible_by_five_succeeds() -> None:
    """Delay 101: suspends for the delay and succeeds."""
    waits: list[float] = []

    def record(seconds: float) -> bool:
        waits.append(seconds)
        return False

    result = SyntheticWorkload(RandomRangeGenerator(), suspend=record).run(101)

    assert result.outcome is Outcome.SUCCESS
    assert result.delay_ms == 101
    assert result.error is None
    assert not result.interrupted
    assert waits == [0.101]


def test_delay_divisible_by_five_fails_with_invalid_range() -> None:
    """Delay 5 takes the fault branch: InvalidRange caught and reported as failure."""
    waits: list[float] = []
    workload = SyntheticWorkload(RandomRangeGenerator(), suspend=lambda s: waits.append(s) or False)

    result = workload.run(5)

    assert result.outcome is Outcome.FAILURE
    assert isinstance(result.error, InvalidRange)
    assert result.delay_ms == 0
    assert waits == []


def test_zero_delay_is_a_multiple_of_five() -> None:
    result = SyntheticWorkload(RandomRangeGenerator(), suspend=no_wait).run(0)
    assert result.outcome is Outcome.FAILURE


def test_outcome_values_match_log_flag() -> None:
    assert int(Outcome.SUCCESS) == 1
    assert int(Outcome.FAILURE) == 0


def test_real_suspension_takes_about_the_delay() -> None:
    started = time.perf_counter()
    result = SyntheticWorkload(RandomRangeGenerator()).run(41)
    elapsed = time.perf_counter() - started
    assert result.succeeded
    assert elapsed >= 0.035


def test_preset_cancellation_is_not_a_failure() -> None:
    """A cancelled suspension returns at once, succeeds, and leaves the event set."""
    cancel = threading.Event()
    cancel.set()
    workload = SyntheticWorkload(RandomRangeGenerator(), cancel_event=cancel)

    started = time.perf_counter()
    result = workload.run(4999)

    assert time.perf_counter() - started < 1.0
    assert result.outcome is Outcome.SUCCESS
    assert result.interrupted
    assert cancel.is_set()


def test_cancellation_during_suspension_cuts_wait_short() -> None:
    cancel = threading.Event()
    workload = SyntheticWorkload(RandomRangeGenerator(), cancel_event=cancel)
    timer = threading.Timer(0.05, cancel.set)
    timer.start()
    try:
        result = workload.run(4999)
    finally:
        timer.cancel()

    assert result.interrupted
    assert result.outcome is Outcome.SUCCESS
    assert result.delay_ms < 4999
    assert cancel.is_set()


def test_fault_fraction_over_full_delay_range() -> None:
    """151 of the 751 delays in [0, 750] are multiples of 5."""
    faults = [d for d in range(0, 751) if injects_fault(d)]
    assert FAULT_DIVISOR == 5
    assert len(faults) == 151


def test_failure_rate_converges_to_one_fifth() -> None:
    generator = RandomRangeGenerator(random.Random(42))
    workload = SyntheticWorkload(generator, suspend=no_wait)
    results = [workload.run(generator.draw(0, 750)) for _ in range(5000)]
    rate = sum(1 for r in results if r.outcome is Outcome.FAILURE) / len(results)
    assert 0.17 <= rate <= 0.23
