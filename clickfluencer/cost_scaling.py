from __future__ import annotations

import math
from typing import Callable


class CostScaling:
    """Determines how a price changes with the number of ranks already bought."""

    def __init__(self, fn: Callable[[float, int], float]) -> None:
        self._fn = fn

    def compute(self, base_cost: float, current_count: int) -> int:
        """Price of the next unit, floored to whole creds."""
        return math.floor(self._fn(base_cost, current_count))

    @classmethod
    def fixed(cls) -> CostScaling:
        """Cost never changes."""
        return cls(lambda base, _count: base)

    @classmethod
    def exponential(cls, growth_rate: float = 1.15) -> CostScaling:
        """Cost = base * growth_rate^count."""
        gr = growth_rate  # capture

        def _compute(base: float, count: int) -> float:
            return base * gr ** count

        return cls(_compute)

    @classmethod
    def for_multiplier(cls, growth_rate: float) -> CostScaling:
        """Fixed pricing for a 1.0 multiplier, exponential otherwise."""
        if growth_rate == 1.0:
            return cls.fixed()
        return cls.exponential(growth_rate)
