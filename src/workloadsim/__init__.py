"""
Workload Simulator - golden-signal workload runner.

Periodically runs a synthetic job that fails on a fixed schedule and emits,
per tick, Prometheus metrics with trace exemplars, a span attribute or
failure record, and one structured log line carrying the request context.
"""

__version__ = "1.0.0"
