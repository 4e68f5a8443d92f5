"""Shared fixtures: isolated registries, deterministic draws, in-memory spans."""

import logging
import os
import random

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from prometheus_client import CollectorRegistry

from workloadsim.context import RequestContext
from workloadsim.instrumentation import InstrumentationBundle
from workloadsim.statistics import RandomRangeGenerator
from workloadsim.telemetry.logs import LOGGER_NAME, RequestContextFilter

NAMESPACE = "test"


class FixedRandom(random.Random):
    """Random source whose randint returns the given values in a cycle."""

    def __init__(self, *values: int):
        super().__init__(0)
        self._values = list(values)
        self._index = 0

    def randint(self, a: int, b: int) -> int:
        value = self._values[self._index % len(self._values)]
        self._index += 1
        return value


def fixed_generator(*values: int) -> RandomRangeGenerator:
    return RandomRangeGenerator(FixedRandom(*values))


def no_wait(seconds: float) -> bool:
    """Suspension stand-in: returns immediately, never interrupted."""
    return False


def sample(registry: CollectorRegistry, name: str, labels: dict[str, str] | None = None) -> float:
    value = registry.get_sample_value(name, labels or {})
    return 0.0 if value is None else value


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop WORKLOADSIM_* variables so config tests start from defaults."""
    for key in list(os.environ):
        if key.startswith("WORKLOADSIM_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """configure_logging() stops propagation; undo it so caplog keeps working."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def bundle(registry: CollectorRegistry) -> InstrumentationBundle:
    return InstrumentationBundle(namespace=NAMESPACE, registry=registry)


@pytest.fixture
def request_ctx() -> RequestContext:
    return RequestContext(
        tenant_id="tenant-1", user_id="user-1", job_id="job-1", customer_id="customer-1"
    )


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def tracer(span_exporter: InMemorySpanExporter):
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    yield provider.get_tracer("tests")
    provider.shutdown()


@pytest.fixture
def tick_logs(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    """caplog with the request-context filter the real handlers carry."""
    caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
    caplog.handler.addFilter(RequestContextFilter())
    return caplog
