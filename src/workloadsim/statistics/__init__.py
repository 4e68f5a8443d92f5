"""Random draws and streaming quantile estimation."""

from .quantiles import CKMSQuantiles, Quantile, TimeWindowQuantiles
from .random_range import InvalidRange, RandomRangeGenerator

__all__ = [
    "InvalidRange",
    "RandomRangeGenerator",
    "Quantile",
    "CKMSQuantiles",
    "TimeWindowQuantiles",
]
