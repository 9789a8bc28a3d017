"""Passive income — cubes and BB Shards earned every tick."""

from __future__ import annotations

from tessera.data.balance import BALANCE
from tessera.data.cubes import OPENABLES
from tessera.engine.cubes import OpenResult, gain_cubes
from tessera.engine.game_state import GameState

# Upgrades whose effect bonus multiplies every openable's income
CUBE_INCOME_UPGRADES = ("sing_cubes1", "sing_cubes2", "sing_cubes3", "bbshard_cubes")


def cube_income_multiplier(state: GameState) -> float:
    mult = 1.0
    for uid in CUBE_INCOME_UPGRADES:
        upgrade = state.find_upgrade(uid)
        if upgrade is not None and upgrade.definition.effect is not None:
            mult *= upgrade.definition.effect(upgrade.level).bonus
    return mult


def income_per_s(state: GameState) -> dict[str, float]:
    """Units earned per second for every openable kind and BB Shards."""
    mult = cube_income_multiplier(state)
    rates = {kind: getattr(BALANCE.income, f"{kind}_per_s") * mult for kind in OPENABLES}
    rates["bbshards"] = BALANCE.income.bbshards_per_s * state.highest_singularity_count
    return rates


def tick_income(state: GameState, dt: float) -> list[OpenResult]:
    """Apply ``dt`` seconds of income.  Returns any auto-open results."""
    dt = min(dt, BALANCE.income.max_catchup_s)
    if dt <= 0:
        return []
    opened = []
    for kind, rate in income_per_s(state).items():
        if kind in OPENABLES:
            result = gain_cubes(state, kind, rate * dt)
            if result is not None:
                opened.append(result)
        else:
            state.wallet(kind).add(rate * dt)
    return opened
