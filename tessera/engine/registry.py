"""Upgrade registry — per-upgrade mutable state keyed by id."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from tessera.data.upgrades import UpgradeDef


@dataclass
class LeveledUpgrade:
    """Mutable state of one upgrade.  The definition is shared config."""

    definition: UpgradeDef
    level: int = 0
    # Currency paid for the levels currently held
    invested: float = 0.0
    # Levels bought per click; -1 = buy max
    toggle_buy: int = 1

    @property
    def id(self) -> str:
        return self.definition.id

    @property
    def name(self) -> str:
        return self.definition.name

    def reset(self) -> None:
        self.level = 0
        self.invested = 0.0


class UpgradeRegistry:
    """One family of upgrades (e.g. singularity, shards)."""

    def __init__(self, upgrades: dict[str, LeveledUpgrade]) -> None:
        self._upgrades = upgrades

    @classmethod
    def from_defs(cls, defs: dict[str, UpgradeDef]) -> UpgradeRegistry:
        return cls({uid: LeveledUpgrade(definition=d) for uid, d in defs.items()})

    def __getitem__(self, upgrade_id: str) -> LeveledUpgrade:
        return self._upgrades[upgrade_id]

    def __contains__(self, upgrade_id: object) -> bool:
        return upgrade_id in self._upgrades

    def __iter__(self) -> Iterator[LeveledUpgrade]:
        return iter(self._upgrades.values())
