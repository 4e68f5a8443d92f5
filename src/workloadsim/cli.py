"""
Command-line interface for the workload runner.

Provides commands for:
- Running the periodic workload with metrics, spans and logs
- Running a single tick
- Showing the resolved configuration
"""

import argparse
import json
import signal
import sys
import threading

from .config import LOG_FORMATS, OTLP_PROTOCOLS, ConfigError, SimulatorConfig, load_config
from .engine import TickResult
from .runtime import Runtime


def _format_tick_line(number: int, result: TickResult) -> str:
    status = "ok" if result.succeeded else "FAILED"
    if result.interrupted:
        status += " (interrupted)"
    trace_id = result.exemplar_tags.get("trace_id", "-")
    return f"   [{number}] delay={result.delay_ms}ms duration={result.duration_ms}ms {status} trace_id={trace_id}"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="workloadsim",
        description="Synthetic workload runner emitting golden-signal metrics, spans and logs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run forever, one tick per second, metrics on :8081
  workloadsim run

  # Ship spans and logs to an OTLP collector
  workloadsim run --endpoint http://localhost:4318

  # Ten quick ticks written to JSON-lines files
  workloadsim run --count 10 --period-ms 200 --output-file ticks.jsonl

  # One tick, no scrape endpoint
  workloadsim once
        """,
    )
    parser.add_argument("--config", type=str, default=None, help="YAML config file")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--namespace", type=str, help="Metric namespace (default: custommetricsdemo)")
    common.add_argument("--endpoint", dest="otlp_endpoint", type=str, help="OTLP endpoint for spans and logs")
    common.add_argument("--protocol", dest="otlp_protocol", choices=OTLP_PROTOCOLS, help="OTLP protocol")
    common.add_argument("--output-file", type=str, help="Write spans (and *_logs.jsonl) to JSON-lines files")
    common.add_argument("--console", dest="console_telemetry", action="store_const", const=True,
                        help="Print spans and log records to stdout")
    common.add_argument("--service-name", type=str, help="Service name for telemetry (default: workloadsim)")
    common.add_argument("--no-exemplars", dest="exemplars_enabled", action="store_const", const=False,
                        help="Do not attach exemplars to errors and histogram observations")
    common.add_argument("--log-level", type=str, help="Log level (default: INFO)")
    common.add_argument("--log-format", choices=LOG_FORMATS, help="Log line format (default: json)")
    common.add_argument("--log-self-test", action="store_true",
                        help="Emit one log line per level at startup")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    run_parser = subparsers.add_parser("run", parents=[common], help="Run the periodic workload")
    run_parser.add_argument("--period-ms", type=int, help="Tick period in ms (default: 1000)")
    run_parser.add_argument("--initial-delay-ms", type=int, help="Delay before the first tick (default: 0)")
    run_parser.add_argument("--count", type=int, default=None, help="Stop after this many ticks")
    run_parser.add_argument("--metrics-port", type=int, help="Scrape endpoint port (default: 8081)")
    run_parser.add_argument("--metrics-addr", type=str, help="Scrape endpoint address (default: 0.0.0.0)")
    run_parser.add_argument("--no-runtime-metrics", dest="runtime_metrics", action="store_const", const=False,
                            help="Do not export process/platform/GC metrics")
    run_parser.add_argument("--show-ticks", action="store_true", help="Print one line per tick")

    subparsers.add_parser("once", parents=[common], help="Run a single tick and print its result")
    subparsers.add_parser("show-config", help="Print the resolved configuration")

    return parser


_OVERRIDABLE = (
    "namespace",
    "otlp_endpoint",
    "otlp_protocol",
    "output_file",
    "console_telemetry",
    "service_name",
    "exemplars_enabled",
    "log_level",
    "log_format",
    "period_ms",
    "initial_delay_ms",
    "metrics_port",
    "metrics_addr",
    "runtime_metrics",
)


def resolve_config(args: argparse.Namespace) -> SimulatorConfig:
    """Load config and apply CLI flags that were given."""
    config = load_config(args.config)
    for name in _OVERRIDABLE:
        value = getattr(args, name, None)
        if value is not None:
            setattr(config, name, value)
    return config.validate()


def cmd_run(args: argparse.Namespace, config: SimulatorConfig):
    """Run the periodic workload until interrupted or --count ticks."""
    print("Starting workload runner...")
    print(f"   Namespace: {config.namespace}")
    print(f"   Period: {config.period_ms}ms (initial delay {config.initial_delay_ms}ms)")
    print(f"   Delay range: [{config.min_delay_ms}, {config.max_delay_ms}]ms")
    print(f"   Metrics: http://{config.metrics_addr}:{config.metrics_port}/metrics")
    if args.count:
        print(f"   Count: {args.count}")
    print()

    runtime = Runtime(config, self_test=args.log_self_test)

    def on_tick(result: TickResult):
        if args.show_ticks:
            print(_format_tick_line(runtime.trigger.ticks, result))

    worker = threading.Thread(
        target=runtime.trigger.run,
        kwargs={"max_ticks": args.count, "on_tick": on_tick},
        name="workloadsim-trigger",
        daemon=True,
    )
    signal.signal(signal.SIGTERM, lambda *_: runtime.trigger.stop())
    worker.start()
    try:
        while worker.is_alive():
            worker.join(0.5)
    except KeyboardInterrupt:
        print("\nStopping after the current tick...")
        runtime.trigger.stop()
        worker.join()
    finally:
        runtime.shutdown()

    print()
    print(f"Ran {runtime.trigger.ticks} ticks ({runtime.trigger.overruns} overran their period)")


def cmd_once(args: argparse.Namespace, config: SimulatorConfig):
    """Run a single tick without a scrape endpoint."""
    runtime = Runtime(config, serve=False, self_test=args.log_self_test)
    try:
        result = runtime.trigger.fire()
    finally:
        runtime.shutdown()
    print(_format_tick_line(1, result))
    if result.error is not None:
        print(f"   Cause: {type(result.error).__name__}: {result.error}")


def cmd_show_config(args: argparse.Namespace, config: SimulatorConfig):
    """Print the resolved configuration as JSON."""
    print(json.dumps(config.as_dict(), indent=2))


def main():
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        config = resolve_config(args)
    except ConfigError as e:
        print(f"Configuration error: {e}")
        sys.exit(2)

    if args.command == "run":
        cmd_run(args, config)
    elif args.command == "once":
        cmd_once(args, config)
    elif args.command == "show-config":
        cmd_show_config(args, config)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
