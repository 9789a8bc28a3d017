"""Blessing tables — weighted reward categories filled by opening cubes.

Each table partitions ``[0, span)`` into contiguous buckets.  A bucket's width
is proportional to its weight, so a uniform draw over the span lands in a
bucket with probability ``weight / batch_size``.  The last bucket also owns
the closed upper bound.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Bucket:
    """One reward category: [lower, upper) of the draw domain."""

    name: str
    weight: int
    lower: float
    upper: float

    def contains(self, x: float) -> bool:
        return self.lower <= x < self.upper


@dataclass(frozen=True)
class BucketTable:
    """Ordered, contiguous, exhaustive partition of the draw domain."""

    name: str
    buckets: tuple[Bucket, ...]
    span: float = 100.0

    def __post_init__(self) -> None:
        if not self.buckets:
            raise ValueError(f"{self.name}: a table needs at least one bucket")
        if self.buckets[0].lower != 0:
            raise ValueError(f"{self.name}: first bucket must start at 0")
        if not math.isclose(self.buckets[-1].upper, self.span):
            raise ValueError(f"{self.name}: last bucket must end at {self.span:g}")

        total = sum(b.weight for b in self.buckets)
        for prev, cur in zip(self.buckets, self.buckets[1:]):
            if not math.isclose(prev.upper, cur.lower):
                raise ValueError(f"{self.name}: gap or overlap between {prev.name} and {cur.name}")
        for b in self.buckets:
            if b.weight <= 0:
                raise ValueError(f"{self.name}: {b.name} must have a positive weight")
            if not math.isclose(b.upper - b.lower, b.weight / total * self.span, abs_tol=1e-9):
                raise ValueError(f"{self.name}: width of {b.name} does not match its weight")

    @property
    def batch_size(self) -> int:
        return sum(b.weight for b in self.buckets)

    @property
    def names(self) -> list[str]:
        return [b.name for b in self.buckets]

    def classify(self, x: float) -> str:
        """Name of the bucket a draw ``x`` falls into."""
        for b in self.buckets:
            if b.contains(x):
                return b.name
        if math.isclose(x, self.span):
            return self.buckets[-1].name
        raise ValueError(f"{self.name}: draw {x!r} is outside [0, {self.span:g}]")


def _table(name: str, weights: list[tuple[str, int]], span: float = 100.0) -> BucketTable:
    """Lay the buckets out end to end in declaration order."""
    total = sum(w for _, w in weights)
    buckets = []
    lower = 0.0
    for i, (bucket_name, weight) in enumerate(weights):
        upper = span if i == len(weights) - 1 else lower + weight * span / total
        buckets.append(Bucket(bucket_name, weight, lower, upper))
        lower = upper
    return BucketTable(name=name, buckets=tuple(buckets), span=span)


# Cubes, tesseracts and hypercubes: 20 units per batch
BLESSINGS = _table("blessings", [
    ("accelerator", 4),
    ("multiplier", 4),
    ("offering", 2),
    ("rune_exp", 2),
    ("obtainium", 2),
    ("ant_speed", 2),
    ("ant_sacrifice", 1),
    ("ant_elo", 1),
    ("talisman_bonus", 1),
    ("global_speed", 1),
])

# Platonic cubes: 40000 units per batch, with four one-in-40000 jackpots
PLATONIC_BLESSINGS = _table("platonic_blessings", [
    ("cubes", 13200),
    ("tesseracts", 13200),
    ("hypercubes", 13200),
    ("platonics", 396),
    ("hypercube_bonus", 1),
    ("taxes", 1),
    ("score_bonus", 1),
    ("global_speed", 1),
])


ALL_TABLES: dict[str, BucketTable] = {
    t.name: t for t in [BLESSINGS, PLATONIC_BLESSINGS]
}
