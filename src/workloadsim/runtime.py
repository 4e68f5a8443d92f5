"""
Process bootstrap: wire config, telemetry providers, metrics and engine.

The runtime mirrors how the runner is deployed: tracer/logger providers
installed globally, the golden-signal metrics registered once and served
on a scrape endpoint, and a fixed-rate trigger sharing its stop event with
the workload so shutdown interrupts an in-flight suspension.
"""

import logging
import threading

from .config import SimulatorConfig
from .engine import ExecutionEngine
from .exporters import create_exporters
from .instrumentation.bundle import InstrumentationBundle, MetricsBackendUnavailable
from .instrumentation.server import serve_metrics
from .scheduler import PeriodicTrigger
from .telemetry.logs import configure_logging, log_self_test
from .telemetry.providers import TelemetryProviders

logger = logging.getLogger(__name__)


class Runtime:
    """Everything one runner process owns."""

    def __init__(
        self,
        config: SimulatorConfig,
        serve: bool = True,
        install_global: bool = True,
        self_test: bool = False,
    ):
        self.config = config
        span_exporter, log_exporter = create_exporters(config)
        self.providers = TelemetryProviders(config.service_name, span_exporter, log_exporter)
        if install_global:
            self.providers.install_global()
        configure_logging(config.log_level, config.log_format, self.providers.logger_provider)
        if self_test:
            log_self_test(logging.getLogger("workloadsim"))

        self.instrumentation = InstrumentationBundle(
            namespace=config.namespace,
            exemplars_enabled=config.exemplars_enabled,
            runtime_metrics=config.runtime_metrics,
        )
        self.metrics_server = None
        if serve:
            try:
                self.metrics_server = serve_metrics(
                    config.metrics_port, config.metrics_addr, self.instrumentation.registry
                )
            except MetricsBackendUnavailable as exc:
                logger.error("%s; continuing without a scrape endpoint", exc)

        self.stop_event = threading.Event()
        self.engine = ExecutionEngine.from_config(
            config, self.instrumentation, cancel_event=self.stop_event
        )
        self.trigger = PeriodicTrigger(
            self.engine,
            period_ms=config.period_ms,
            initial_delay_ms=config.initial_delay_ms,
            tracer=self.providers.tracer(),
            stop_event=self.stop_event,
        )

    def shutdown(self) -> None:
        """Stop the trigger and flush telemetry."""
        self.trigger.stop()
        self.providers.shutdown()
