"""
Configuration for the synthetic workload runner.

Values are resolved in three layers, later layers winning:
1. Built-in defaults (the reference demo: namespace "custommetricsdemo",
   one tick per second, delays drawn from [0, 750] ms, metrics on :8081).
2. An optional YAML file (``--config`` or WORKLOADSIM_CONFIG).
3. WORKLOADSIM_* environment variables.

The CLI applies its own flags on top of the resolved config.
"""

import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .defaults import default_request_fields

ENV_PREFIX = "WORKLOADSIM_"

# Metric identities; all share the configured namespace.
METRIC_GAUGE = "gauge"
METRIC_TRAFFIC = "traffic"
METRIC_ERRORS = "errors"
METRIC_LATENCY_SUMMARY = "latency_timer"
METRIC_LATENCY_HISTOGRAM = "histogram"
METRIC_NAMES = (
    METRIC_GAUGE,
    METRIC_TRAFFIC,
    METRIC_ERRORS,
    METRIC_LATENCY_SUMMARY,
    METRIC_LATENCY_HISTOGRAM,
)

# Span attribute written on successful ticks.
SPAN_ATTRIBUTE_DELAY = "custom.attribute"

# Exemplar label keys linking a metric sample to a trace.
EXEMPLAR_SPAN_KEY = "span_id"
EXEMPLAR_TRACE_KEY = "trace_id"

LOG_FORMATS = ("json", "text")
OTLP_PROTOCOLS = ("http", "grpc")


class ConfigError(ValueError):
    """Raised when a configuration value is missing or out of range."""

    pass


def load_yaml(path: Path, default: Any = None) -> Any:
    """Load YAML file; return default on missing file or parse error."""
    if default is None:
        default = {}
    if not path.exists():
        return default
    try:
        with path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except (OSError, yaml.YAMLError):
        return default
    return data if isinstance(data, dict) else default


@dataclass
class SimulatorConfig:
    """Resolved runtime configuration."""

    namespace: str = "custommetricsdemo"
    period_ms: int = 1000
    initial_delay_ms: int = 0
    min_delay_ms: int = 0
    max_delay_ms: int = 750
    status_code: int = 200
    metrics_port: int = 8081
    metrics_addr: str = "0.0.0.0"
    exemplars_enabled: bool = True
    runtime_metrics: bool = True
    service_name: str = "workloadsim"
    otlp_endpoint: str | None = None
    otlp_protocol: str = "http"
    output_file: str | None = None
    console_telemetry: bool = False
    log_level: str = "INFO"
    log_format: str = "json"
    tenant_id: str = field(default_factory=lambda: default_request_fields()["tenant_id"])
    user_id: str = field(default_factory=lambda: default_request_fields()["user_id"])
    job_id: str = field(default_factory=lambda: default_request_fields()["job_id"])
    customer_id: str = field(default_factory=lambda: default_request_fields()["customer_id"])

    def validate(self) -> "SimulatorConfig":
        """Check value ranges; raise ConfigError on the first problem found."""
        if not self.namespace.strip():
            raise ConfigError("namespace must not be empty")
        if self.period_ms <= 0:
            raise ConfigError(f"period_ms must be positive, got {self.period_ms}")
        if self.initial_delay_ms < 0:
            raise ConfigError(f"initial_delay_ms must be >= 0, got {self.initial_delay_ms}")
        if self.min_delay_ms < 0 or self.min_delay_ms >= self.max_delay_ms:
            raise ConfigError(
                f"delay range must satisfy 0 <= min < max, got [{self.min_delay_ms}, {self.max_delay_ms}]"
            )
        if not 0 <= self.metrics_port <= 65535:
            raise ConfigError(f"metrics_port out of range: {self.metrics_port}")
        if self.otlp_protocol not in OTLP_PROTOCOLS:
            raise ConfigError(f"otlp_protocol must be one of {', '.join(OTLP_PROTOCOLS)}")
        if self.log_format not in LOG_FORMATS:
            raise ConfigError(f"log_format must be one of {', '.join(LOG_FORMATS)}")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigError(f"log_level is not a logging level: {self.log_level!r}")
        return self

    def request_fields(self) -> dict[str, str]:
        """The four correlation fields used for each tick's request context."""
        return {
            "tenant_id": self.tenant_id,
            "user_id": self.user_id,
            "job_id": self.job_id,
            "customer_id": self.customer_id,
        }

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def _coerce(name: str, raw: Any, target: Any) -> Any:
    """Convert a YAML/env value to the type of the dataclass default."""
    if raw is None:
        return None
    if isinstance(target, bool):
        if isinstance(raw, bool):
            return raw
        text = str(raw).strip().lower()
        if text in ("1", "true", "yes", "on"):
            return True
        if text in ("0", "false", "no", "off"):
            return False
        raise ConfigError(f"{name} must be a boolean, got {raw!r}")
    if isinstance(target, int):
        try:
            return int(raw)
        except (TypeError, ValueError):
            raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    return str(raw).strip()


def _apply(config: SimulatorConfig, values: dict[str, Any]) -> None:
    defaults = SimulatorConfig()
    for f in fields(SimulatorConfig):
        if f.name not in values:
            continue
        current = getattr(defaults, f.name)
        raw = values[f.name]
        if current is None:
            # Optional string fields: empty means unset.
            setattr(config, f.name, _coerce(f.name, raw, "") or None)
        elif raw is None:
            raise ConfigError(f"{f.name} must have a value")
        else:
            setattr(config, f.name, _coerce(f.name, raw, current))


def _env_values() -> dict[str, str]:
    values: dict[str, str] = {}
    for f in fields(SimulatorConfig):
        raw = os.environ.get(f"{ENV_PREFIX}{f.name.upper()}")
        if raw is not None and raw.strip():
            values[f.name] = raw
    return values


def load_config(path: str | Path | None = None) -> SimulatorConfig:
    """Resolve configuration from defaults, optional YAML file, then environment."""
    config = SimulatorConfig()
    config_path = path or os.environ.get(f"{ENV_PREFIX}CONFIG")
    if config_path:
        p = Path(config_path)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {p}")
        data = load_yaml(p)
        # Request context may be grouped under a "request_context" block.
        block = data.pop("request_context", None)
        if isinstance(block, dict):
            data.update(block)
        _apply(config, data)
    _apply(config, _env_values())
    return config.validate()
