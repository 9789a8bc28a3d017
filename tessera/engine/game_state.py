"""Game state — single source of truth, passed explicitly into every operation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from tessera.data.cubes import OPENABLES
from tessera.data.upgrades import UPGRADE_FAMILIES
from tessera.engine.economy import Wallet, new_wallets
from tessera.engine.registry import LeveledUpgrade, UpgradeRegistry


def _new_registries() -> dict[str, UpgradeRegistry]:
    return {
        family: UpgradeRegistry.from_defs(defs)
        for family, defs in UPGRADE_FAMILIES.items()
    }


def _new_blessings() -> dict[str, dict[str, int]]:
    return {kind: {name: 0 for name in o.table.names} for kind, o in OPENABLES.items()}


def _per_openable(value: float) -> dict[str, float]:
    return {kind: value for kind in OPENABLES}


@dataclass
class GameState:
    """Complete mutable state: wallets, upgrades, counters and cube progress."""

    # ── Currencies ───────────────────────────────────────
    wallets: dict[str, Wallet] = field(default_factory=new_wallets)

    # ── Upgrades: family → registry ──────────────────────
    registries: dict[str, UpgradeRegistry] = field(default_factory=_new_registries)

    # ── Progression counters ─────────────────────────────
    singularity_count: int = 0
    highest_singularity_count: int = 0
    # Flat bonus levels on every singularity upgrade with a real max
    singsing: float = 0.0
    # Completions of the ascension challenge; multiplies cube blessings
    ascension_challenge_bonus: float = 0.0
    # Opaque multiplier applied to quark yields (tax, patreon, ...)
    quark_bonus: float = 1.0

    # ── Cubes ────────────────────────────────────────────
    # Kinds whose shop quark multiplier has been bought
    shop_quark_upgrades: set[str] = field(default_factory=set)
    blessings: dict[str, dict[str, int]] = field(default_factory=_new_blessings)
    # Cumulative units opened today, and quarks already paid for them
    opened_daily: dict[str, float] = field(default_factory=lambda: _per_openable(0.0))
    quark_daily: dict[str, float] = field(default_factory=lambda: _per_openable(0.0))
    # Percentage of newly gained units opened automatically
    auto_open_percent: dict[str, float] = field(default_factory=lambda: _per_openable(0.0))
    # Fraction of a unit owed to auto-open from earlier gains (not saved)
    auto_open_carry: dict[str, float] = field(default_factory=lambda: _per_openable(0.0))

    # ── Automation ───────────────────────────────────────
    automation_unlocks: set[str] = field(default_factory=set)

    # ── Helpers ──────────────────────────────────────────

    def wallet(self, currency: str) -> Wallet:
        return self.wallets[currency]

    def registry(self, family: str) -> UpgradeRegistry:
        return self.registries[family]

    def find_upgrade(self, upgrade_id: str) -> Optional[LeveledUpgrade]:
        """Look an upgrade up across every family."""
        for registry in self.registries.values():
            if upgrade_id in registry:
                return registry[upgrade_id]
        return None

    def upgrade_level(self, upgrade_id: str) -> int:
        upgrade = self.find_upgrade(upgrade_id)
        return upgrade.level if upgrade is not None else 0

    def all_upgrades(self) -> list[LeveledUpgrade]:
        return [u for registry in self.registries.values() for u in registry]
