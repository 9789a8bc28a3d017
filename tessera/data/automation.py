"""Automation gates — unlocked by luck when entering a singularity.

Rolled in declaration order; a gate whose ``requires`` is not yet unlocked is
skipped for this roll.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AutomationGate:
    id: str
    name: str
    threshold: float
    requires: Optional[str] = None
    # Independent chance to unlock regardless of power
    fallback_chance: float = 0.0


_GATES = [
    AutomationGate("auto_coin_buildings", "Auto Coin Buildings", 30),
    AutomationGate("accelerators", "Accelerators", 50),
    AutomationGate("multipliers", "Multipliers", 70),
    AutomationGate("autobuyer_coin_buildings", "Autobuyer Coin Buildings", 100),
    AutomationGate("auto_coin_upgrades", "Automatic Coin Upgrades", 150),
    AutomationGate("auto_diamond_buildings", "Auto Diamond Buildings", 200),
    AutomationGate("auto_diamond_upgrades", "Automatic Diamond Upgrades", 220),
    AutomationGate("auto_prestige", "Automatic Prestige", 250, requires="auto_diamond_buildings"),
    AutomationGate("duplication_rune", "Duplication Rune", 300),
    AutomationGate("transcend_accelerator_boost", "Transcend Accelerator Boost", 350),
    AutomationGate("autobuyer_diamond_buildings", "Autobuyer Diamond Buildings", 400, requires="auto_prestige"),
    AutomationGate("autobuyer_crystal_upgrades", "Autobuyer Crystal Upgrades", 450, requires="auto_prestige"),
    AutomationGate("prism_rune", "Prism Rune", 700),
    AutomationGate("auto_transcensions", "Automatic Transcensions", 800),
    AutomationGate("auto_generator_shop", "Automatic Generator Shop", 900, fallback_chance=0.1),
    AutomationGate("auto_mythos_buildings", "Auto Mythos Buildings", 1000, requires="auto_transcensions"),
    AutomationGate("mythos_upgrades", "Mythos Upgrades", 2000, requires="auto_transcensions"),
    AutomationGate("atomic_production", "Atomic Production", 3000),
    AutomationGate("auto_reincarnate", "Automatic Reincarnate", 7000, requires="atomic_production"),
    AutomationGate("thrift_rune", "Thrift Rune", 13000, requires="atomic_production"),
    AutomationGate("auto_ant_buy", "Auto Ant Buy", 20000, requires="auto_reincarnate"),
    AutomationGate("superior_intellect_rune", "Superior Intellect Rune", 25000, requires="auto_reincarnate"),
]

AUTOMATION_GATES: dict[str, AutomationGate] = {g.id: g for g in _GATES}
