"""
Bounded-range integer draws.

The workload delay and the injected fault both go through here, so the
range check is a hard constraint rather than something to clamp.
"""

import random


class InvalidRange(ValueError):
    """Raised when a range is requested with min >= max."""

    def __init__(self, min_value: int, max_value: int):
        super().__init__(f"max must be greater than min (got min={min_value}, max={max_value})")
        self.min_value = min_value
        self.max_value = max_value


class RandomRangeGenerator:
    """Uniform integer generator over an inclusive [min, max] range."""

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.Random()

    def draw(self, min_value: int, max_value: int) -> int:
        """Return an integer uniformly distributed in [min_value, max_value]."""
        if min_value >= max_value:
            raise InvalidRange(min_value, max_value)
        return self._rng.randint(min_value, max_value)
