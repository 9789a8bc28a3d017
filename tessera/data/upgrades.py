"""Upgrade definitions — every leveled upgrade as plain configuration.

Two families share the same engine:
  * Singularity upgrades, paid in Golden Quarks and gated on the current
    singularity count.
  * BB Shard upgrades, paid in BB Shards and gated on the highest singularity
    count ever reached.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Optional, Union

from tessera.engine.caps import FIXED_CAPS, UNCAPPED, CapPolicy
from tessera.engine.curves import COMPOUNDING, FLAT, LINEAR, STARTER, TRIANGULAR, CostCurve
from tessera.engine.economy import format_number


class UpgradeKind(Enum):
    """Shape of an upgrade's level."""

    LEVELED = auto()   # 0..max level
    FLAG = auto()      # owned / not owned


@dataclass(frozen=True)
class Effect:
    """What an upgrade currently does at a given level."""

    bonus: Union[float, bool]
    desc: str


@dataclass(frozen=True)
class UpgradeDef:
    """Definition of a single upgrade."""

    id: str
    name: str
    description: str
    cost_per_level: float
    # UNCAPPED (-1) = levelable forever, bounded only by the cap policy
    max_level: int
    currency: str = "golden_quarks"
    kind: UpgradeKind = UpgradeKind.LEVELED
    curve: CostCurve = LINEAR
    cap_policy: CapPolicy = FIXED_CAPS
    max_cap_level: Optional[int] = None
    # Purchases need getattr(state, unlock_counter) >= unlock_threshold
    unlock_threshold: int = 0
    unlock_counter: str = "singularity_count"
    effect: Optional[Callable[[int], Effect]] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.max_level != UNCAPPED and (self.max_level < 1 or self.max_level != int(self.max_level)):
            raise ValueError(f"{self.id}: max_level must be {UNCAPPED} or >= 1, got {self.max_level}")
        if self.kind is UpgradeKind.FLAG and self.max_level != 1:
            raise ValueError(f"{self.id}: flag upgrades have max_level 1")

    @property
    def is_toggle(self) -> bool:
        """A pure unlock: effective max is always exactly 1."""
        return self.kind is UpgradeKind.FLAG or self.max_level == 1

    def describe_effect(self, level: int) -> str:
        if self.effect is None:
            return ""
        return self.effect(level).desc


# ── Effect helpers ───────────────────────────────────────────────


def _percent(per_level: float, what: str) -> Callable[[int], Effect]:
    def effect(n: int) -> Effect:
        return Effect(bonus=1 + per_level * n / 100, desc=f"+{per_level * n:g}% {what}.")
    return effect


def _unlock(what: str) -> Callable[[int], Effect]:
    def effect(n: int) -> Effect:
        return Effect(bonus=n > 0, desc=f"{what} is {'' if n > 0 else 'NOT '}unlocked.")
    return effect


def _flat(per_level: float, template: str) -> Callable[[int], Effect]:
    def effect(n: int) -> Effect:
        return Effect(bonus=per_level * n, desc=template.format(per_level * n))
    return effect


def _power(base: float, what: str) -> Callable[[int], Effect]:
    """``base ** n`` multiplier; saturates at infinity instead of overflowing."""
    def effect(n: int) -> Effect:
        try:
            mult = base ** n
        except OverflowError:
            mult = math.inf
        return Effect(bonus=mult, desc=f"{what} x{format_number(mult)}.")
    return effect


# ── Cap policies ─────────────────────────────────────────────────

# Ant God raises every real cap by 1% per singularity; Sing Sing adds flat levels
SINGULARITY_CAPS = CapPolicy(
    percent_source="sing_max_level_up",
    percent_counter="singularity_count",
    flat_counter="singsing",
)

# Automation has no fixed max, but each Wormhole level doubles how far it can go
AUTOMATION_CAPS = CapPolicy(
    uncapped_base=50,
    doubling_source="sing_wormhole",
)


# ── Singularity upgrades (Golden Quarks) ─────────────────────────

_SINGULARITY_DEFS = [
    UpgradeDef(
        id="golden_quarks1",
        name="Golden Quarks I",
        description="Gain 5% more Golden Quarks on singularities. Also reduces the Golden Quark shop price by 500 per level.",
        cost_per_level=12,
        max_level=10,
        max_cap_level=20,
        effect=_percent(5, "Golden Quarks"),
    ),
    UpgradeDef(
        id="golden_quarks2",
        name="Golden Quarks II",
        description="Gain 2% more Golden Quarks on singularities. Also reduces the Golden Quark shop price by 200 per level.",
        cost_per_level=60,
        max_level=25,
        max_cap_level=50,
        effect=_percent(2, "Golden Quarks"),
    ),
    UpgradeDef(
        id="golden_quarks3",
        name="Golden Quarks III",
        description="Gain 1 Golden Quark per hour from exports. Also reduces the Golden Quark shop price by 1,000 per level.",
        cost_per_level=1000,
        max_level=5,
        max_cap_level=10,
        effect=_flat(1, "+{:g} Golden Quarks per hour."),
    ),
    UpgradeDef(
        id="starter_pack",
        name="Starter Pack",
        description="Cube gain is permanently multiplied by 5, and Obtainium and Offerings by 6.",
        cost_per_level=10,
        max_level=1,
        kind=UpgradeKind.FLAG,
        effect=_unlock("Starter Pack"),
    ),
    UpgradeDef(
        id="wow_pass",
        name="Wow Pass Unlock",
        description="The seal merchant sells more Wow Passes, and the shop is always accessible.",
        cost_per_level=500,
        max_level=1,
        kind=UpgradeKind.FLAG,
        effect=_unlock("Wow Pass"),
    ),
    UpgradeDef(
        id="cookies",
        name="Cookie Recipes I",
        description="Re-open Wow! Bakery, adding five cookie-related cube upgrades.",
        cost_per_level=100,
        max_level=1,
        kind=UpgradeKind.FLAG,
        effect=_unlock("Cookie Recipes I"),
    ),
    UpgradeDef(
        id="ascensions",
        name="Improved Ascension Gain",
        description="+2% Ascension Count forever, per level.",
        cost_per_level=5,
        max_level=UNCAPPED,
        effect=_percent(2, "Ascension Count"),
    ),
    UpgradeDef(
        id="sing_offerings1",
        name="Offering Charge",
        description="+2% Offerings per level, forever.",
        cost_per_level=1,
        max_level=UNCAPPED,
        effect=_percent(2, "Offerings"),
    ),
    UpgradeDef(
        id="sing_offerings2",
        name="Offering Storm",
        description="+8% Offerings per level.",
        cost_per_level=25,
        max_level=25,
        max_cap_level=100,
        cap_policy=SINGULARITY_CAPS,
        effect=_percent(8, "Offerings"),
    ),
    UpgradeDef(
        id="sing_offerings3",
        name="Offering Tempest",
        description="+4% Offerings per level.",
        cost_per_level=500,
        max_level=40,
        max_cap_level=100,
        cap_policy=SINGULARITY_CAPS,
        effect=_percent(4, "Offerings"),
    ),
    UpgradeDef(
        id="sing_obtainium1",
        name="Obtainium Wave",
        description="+2% Obtainium per level, forever.",
        cost_per_level=1,
        max_level=UNCAPPED,
        effect=_percent(2, "Obtainium"),
    ),
    UpgradeDef(
        id="sing_obtainium2",
        name="Obtainium Flood",
        description="+8% Obtainium per level.",
        cost_per_level=25,
        max_level=25,
        max_cap_level=100,
        cap_policy=SINGULARITY_CAPS,
        effect=_percent(8, "Obtainium"),
    ),
    UpgradeDef(
        id="sing_cubes1",
        name="Cube Flame",
        description="+2% Cubes per level, forever.",
        cost_per_level=1,
        max_level=UNCAPPED,
        effect=_percent(2, "Cubes"),
    ),
    UpgradeDef(
        id="sing_cubes2",
        name="Cube Blaze",
        description="+8% Cubes per level.",
        cost_per_level=25,
        max_level=25,
        max_cap_level=100,
        cap_policy=SINGULARITY_CAPS,
        effect=_percent(8, "Cubes"),
    ),
    UpgradeDef(
        id="sing_cubes3",
        name="Cube Inferno",
        description="+4% Cubes per level.",
        cost_per_level=500,
        max_level=40,
        max_cap_level=100,
        cap_policy=SINGULARITY_CAPS,
        effect=_percent(4, "Cubes"),
    ),
    UpgradeDef(
        id="octeract_unlock",
        name="Octeracts",
        description="Unlock Octeracts.",
        cost_per_level=8888,
        max_level=1,
        kind=UpgradeKind.FLAG,
        unlock_threshold=10,
        effect=_unlock("Octeracts"),
    ),
    UpgradeDef(
        id="offering_automatic",
        name="Offering Lootzifer",
        description="Each second, gain +2% of Offering gain automatically per level.",
        cost_per_level=2000,
        max_level=50,
        unlock_threshold=6,
        cap_policy=SINGULARITY_CAPS,
        effect=_flat(2, "+{:g}% of Offering gain per second."),
    ),
    UpgradeDef(
        id="sing_time_accel",
        name="Time Accel",
        description="+1% Global Speed per singularity and per level.",
        cost_per_level=200,
        max_level=20,
        max_cap_level=50,
        unlock_threshold=1,
        cap_policy=SINGULARITY_CAPS,
        effect=_percent(1, "Global Speed per singularity"),
    ),
    UpgradeDef(
        id="sing_automation",
        name="Singularity Automation",
        description="Unlocks automations when entering a singularity. Power = level x singularity count squared; each automation still needs luck.",
        cost_per_level=1,
        max_level=UNCAPPED,
        unlock_threshold=1,
        cap_policy=AUTOMATION_CAPS,
        effect=_flat(1, "Automation level {:g}."),
    ),
    UpgradeDef(
        id="sing_gq_discount",
        name="Golden Quarks Discount",
        description="Reduces the Golden Quark shop price by 1,000 per level.",
        cost_per_level=500,
        max_level=25,
        max_cap_level=50,
        unlock_threshold=3,
        cap_policy=SINGULARITY_CAPS,
        effect=_flat(1000, "Golden Quarks cost {:g} fewer Quarks."),
    ),
    UpgradeDef(
        id="sing_wormhole",
        name="Singularity Wormhole",
        description="Each level doubles the maximum level of Singularity Automation.",
        cost_per_level=100_000_000,
        max_level=10,
        unlock_threshold=10,
        effect=_flat(1, "Automation cap doubled {:g} times."),
    ),
    UpgradeDef(
        id="sing_max_level_up",
        name="Singularity of Ant God",
        description="Every singularity raises the maximum level of all singularity upgrades above 1 by 1%.",
        cost_per_level=1_000_000_000,
        max_level=1,
        kind=UpgradeKind.FLAG,
        unlock_threshold=10,
        effect=_unlock("Cap growth"),
    ),
]


# ── BB Shard upgrades ────────────────────────────────────────────


def _shard(**kwargs) -> UpgradeDef:
    kwargs.setdefault("currency", "bbshards")
    kwargs.setdefault("unlock_counter", "highest_singularity_count")
    return UpgradeDef(**kwargs)


_SHARD_DEFS = [
    _shard(
        id="bbshard_starter",
        name="BBShard Starter",
        description="Reduce the Singularity Penalties exponent by 0.05 per level.",
        cost_per_level=1,
        max_level=2,
        curve=STARTER,
        effect=_flat(0.05, "Singularity Penalties exponent -{:.2f}."),
    ),
    _shard(
        id="bbshard_singularity_penalties",
        name="Singularity Penalties",
        description="Reduce the Singularity Penalties exponent by 0.01 per level.",
        cost_per_level=10,
        max_level=40,
        effect=_flat(0.01, "Singularity Penalties exponent -{:.2f}."),
    ),
    _shard(
        id="bbshard_singularity_trail",
        name="Singularity Trail",
        description="Below your highest singularity, divide the Singularity Penalties by 100% per level.",
        cost_per_level=1,
        max_level=UNCAPPED,
        curve=FLAT,
        effect=_flat(100, "Singularity Penalties divided by {:g}% per level."),
    ),
    _shard(
        id="bbshard_no_reset_quarks",
        name="Quark Beyond Singularity",
        description="Lose 10% fewer Quarks on singularity per level.",
        cost_per_level=1,
        max_level=10,
        curve=FLAT,
        effect=_flat(10, "Lose {:g}% fewer Quarks on singularity."),
    ),
    _shard(
        id="bbshard_daily_quality",
        name="Daily Quality",
        description="+5% chance per level for daily code rewards to roll again.",
        cost_per_level=1,
        max_level=20,
        curve=FLAT,
        effect=_flat(5, "{:g}% chance to roll again."),
    ),
    _shard(
        id="bbshard_cubes",
        name="BBShard Cubes",
        description="+10% to all types of Cubes per level.",
        cost_per_level=1,
        max_level=UNCAPPED,
        curve=FLAT,
        unlock_threshold=150,
        effect=_percent(10, "all Cubes"),
    ),
    _shard(
        id="bbshard_forge_cost",
        name="Hepteract Forge Cost",
        description="Reduce the Hepteract Forge cost exponent by 0.1 per level.",
        cost_per_level=1,
        max_level=10,
        unlock_threshold=150,
        effect=_flat(0.1, "Forge cost exponent -{:.1f}."),
    ),
    _shard(
        id="bbshard_corruption",
        name="Corruptions",
        description="Adds one level to the cap on corruptions.",
        cost_per_level=10,
        max_level=2,
        curve=TRIANGULAR,
        unlock_threshold=220,
        effect=_flat(1, "Corruption level cap +{:g}."),
    ),
    _shard(
        id="bbshard_global_speed_penalty",
        name="Global Speed Penalty",
        description="Reduce the Global Speed divisor exponent by 0.01 per level.",
        cost_per_level=1,
        max_level=50,
        unlock_threshold=450,
        effect=_flat(0.01, "Global Speed divisor exponent -{:.2f}."),
    ),
    _shard(
        id="bbshard_ascension_speed2",
        name="Ascension Speed Accelerator",
        description="Ascension Speed is 1.1x per level.",
        cost_per_level=1,
        max_level=UNCAPPED,
        curve=COMPOUNDING,
        unlock_threshold=500,
        effect=_power(1.1, "Ascension Speed"),
    ),
]


# ── Registries ───────────────────────────────────────────────────

SINGULARITY_UPGRADES: dict[str, UpgradeDef] = {u.id: u for u in _SINGULARITY_DEFS}
SHARD_UPGRADES: dict[str, UpgradeDef] = {u.id: u for u in _SHARD_DEFS}

# Family name -> definitions; families are the unit of registry + persistence
UPGRADE_FAMILIES: dict[str, dict[str, UpgradeDef]] = {
    "singularity": SINGULARITY_UPGRADES,
    "shards": SHARD_UPGRADES,
}

# Golden Quark shop price reduction per level of these upgrades
GOLDEN_QUARK_DISCOUNTS: dict[str, int] = {
    "golden_quarks1": 500,
    "golden_quarks2": 200,
    "golden_quarks3": 1000,
    "sing_gq_discount": 1000,
}
