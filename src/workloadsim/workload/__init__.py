"""Simulated work driven by each tick."""

from .synthetic import (
    FAULT_DIVISOR,
    Outcome,
    SyntheticWorkload,
    WorkloadResult,
    injects_fault,
)

__all__ = [
    "FAULT_DIVISOR",
    "Outcome",
    "SyntheticWorkload",
    "WorkloadResult",
    "injects_fault",
]
