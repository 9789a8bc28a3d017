"""Cost curves — price of the next level as a pure function of (level, base cost).

Each curve may carry a closed form for the cumulative cost of the first N
levels.  The integrity pass compares an upgrade's recorded spend against it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Optional


@dataclass(frozen=True)
class CostCurve:
    """Cost of level ``level -> level + 1`` given ``cost_per_level``."""

    name: str
    cost: Callable[[int, float], float]
    # Sum of cost(i) for i in [0, level); None means sum it term by term
    closed_form: Optional[Callable[[int, float], float]] = None

    def __call__(self, level: int, base: float) -> float:
        return self.cost(level, base)

    def total(self, level: int, base: float) -> float:
        """Cumulative cost paid to reach ``level`` from 0."""
        if level <= 0:
            return 0.0
        if self.closed_form is not None:
            return self.closed_form(level, base)
        total = 0.0
        for i in range(level):
            total += self.cost(i, base)
            # Costs never decrease, so once the sum overflows it stays infinite
            if math.isinf(total):
                return math.inf
        return total


# ── Shipped curves ───────────────────────────────────────────────

LINEAR = CostCurve(
    name="linear",
    cost=lambda level, base: base * (1 + level),
    closed_form=lambda level, base: level * (level + 1) / 2 * base,
)

FLAT = CostCurve(
    name="flat",
    cost=lambda level, base: base,
    closed_form=lambda level, base: level * base,
)

# (l+1)(l+2)/2 per level; cumulative is the tetrahedral number
TRIANGULAR = CostCurve(
    name="triangular",
    cost=lambda level, base: (level + 2) * (level + 1) / 2 * base,
    closed_form=lambda level, base: level * (level + 1) * (level + 2) / 6 * base,
)

# First level is a cheap taster, every later level costs 250x
STARTER = CostCurve(
    name="starter",
    cost=lambda level, base: (250 if level >= 1 else 1) * base,
    closed_form=lambda level, base: (min(level, 1) + 250 * max(0, level - 1)) * base,
)


def _compounding(level: int, base: float) -> float:
    try:
        growth = 1.05 ** level * 1e-20
    except OverflowError:
        return math.inf
    return base * (1 + level) * max(1.0, growth)


# Linear until 1.05^level overtakes 1e20, then compounding
COMPOUNDING = CostCurve(name="compounding", cost=_compounding)


ALL_CURVES: dict[str, CostCurve] = {
    c.name: c for c in [LINEAR, FLAT, TRIANGULAR, STARTER, COMPOUNDING]
}
