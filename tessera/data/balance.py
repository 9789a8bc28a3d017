"""Balance constants — all tuning knobs in one place.

Tweak these to adjust pacing and safety limits.
Upgrade costs follow each definition's cost curve: curve(level, cost_per_level)
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class EconomyBalance:
    """Tuning for currency storage and display."""

    # Every wallet saturates here instead of growing without bound
    max_value: float = 1e300

    # Large number formatting thresholds
    suffixes: tuple[tuple[float, str], ...] = (
        (1e3, "K"),
        (1e6, "M"),
        (1e9, "B"),
        (1e12, "T"),
        (1e15, "Qa"),
        (1e18, "Qi"),
        (1e21, "Sx"),
        (1e24, "Sp"),
    )


@dataclass(frozen=True)
class UpgradeBalance:
    """Tuning for leveled upgrades."""

    # Absolute ceiling used when a definition does not set max_cap_level
    default_max_cap_level: int = 10_000
    # Multiplies every max_cap_level (raise it in a balance patch to lift all ceilings)
    cap_up_multiplier: float = 1.0
    # "Buy max" on an uncapped upgrade stops after this many levels
    buy_max_iterations: int = 1_000
    # Largest per-click toggle amount a player may set
    max_toggle: int = 100_000


@dataclass(frozen=True)
class CubeBalance:
    """Tuning for cube opening and the quark yield it feeds.

    Per-kind quark base rates live on each ``OpenableDef``.
    """

    # Quark multiplier granted by the matching shop upgrade
    shop_quark_mult: float = 1.5
    # Highest singularity needed before auto-open percentages take effect
    auto_open_singularity: int = 35


@dataclass(frozen=True)
class SingularityBalance:
    """Tuning for the singularity reset and golden quark shop."""

    golden_quark_base_cost: int = 100_000
    golden_quark_min_cost: int = 1_000
    # Discount per completed singularity
    golden_quark_discount_per_singularity: int = 100
    # Golden Quarks earned on entering singularity N, before upgrade bonuses
    golden_quarks_per_singularity: float = 10.0


@dataclass(frozen=True)
class IncomeBalance:
    """Passive income credited every tick."""

    # Units per second, before cube upgrade multipliers
    cubes_per_s: float = 2.0
    tesseracts_per_s: float = 0.5
    hypercubes_per_s: float = 0.1
    platonics_per_s: float = 0.02
    # BB Shards per second per highest singularity reached
    bbshards_per_s: float = 0.05
    # Longest gap a single catch-up tick will pay out
    max_catchup_s: float = 60.0


@dataclass(frozen=True)
class GameBalance:
    """Top-level container for all balance constants."""

    economy: EconomyBalance = field(default_factory=EconomyBalance)
    upgrades: UpgradeBalance = field(default_factory=UpgradeBalance)
    cubes: CubeBalance = field(default_factory=CubeBalance)
    singularity: SingularityBalance = field(default_factory=SingularityBalance)
    income: IncomeBalance = field(default_factory=IncomeBalance)

    # Front-end timing
    tick_rate_hz: float = 4.0
    autosave_interval_s: float = 30.0


# Singleton — import this everywhere
BALANCE = GameBalance()
