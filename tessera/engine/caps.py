"""Cap policies — the *current* maximum level of an upgrade.

A definition's ``max_level`` is only the starting point.  Other upgrades can
grow every cap by a percentage (scaled by the singularity count) or by powers
of two, an external counter can add flat levels, and the definition's
``max_cap_level`` times ``BALANCE.upgrades.cap_up_multiplier`` bounds the
result.  Caps only ever grow as dependencies level up.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from tessera.data.balance import BALANCE

if TYPE_CHECKING:
    from tessera.data.upgrades import UpgradeDef
    from tessera.engine.game_state import GameState


UNCAPPED = -1


@dataclass(frozen=True)
class CapPolicy:
    """How an upgrade's maximum level grows with the rest of the game state."""

    # cap *= 1 + counter * level(percent_source) / 100
    percent_source: Optional[str] = None
    percent_counter: str = "singularity_count"
    # cap *= 2 ** level(doubling_source)
    doubling_source: Optional[str] = None
    # cap += floor(counter), only for upgrades with a real (non-toggle) max
    flat_counter: Optional[str] = None
    # Base cap for max_level == UNCAPPED; None keeps them truly unbounded
    uncapped_base: Optional[float] = None

    def growth_factor(self, state: GameState) -> float:
        factor = 1.0
        if self.percent_source is not None:
            counter = getattr(state, self.percent_counter)
            factor *= 1.0 + counter * state.upgrade_level(self.percent_source) / 100
        if self.doubling_source is not None:
            factor *= 2.0 ** state.upgrade_level(self.doubling_source)
        return factor


FIXED_CAPS = CapPolicy()


def ceiling_for(udef: UpgradeDef) -> float:
    """Absolute ceiling no amount of cap growth can exceed."""
    cap = udef.max_cap_level
    if cap is None:
        cap = BALANCE.upgrades.default_max_cap_level
    return cap * BALANCE.upgrades.cap_up_multiplier


def max_level_for(udef: UpgradeDef, state: GameState) -> float:
    """Effective maximum level of ``udef`` right now.

    Returns ``math.inf`` for uncapped upgrades without an ``uncapped_base``.
    """
    if udef.is_toggle:
        return 1

    policy = udef.cap_policy
    if udef.max_level == UNCAPPED:
        if policy.uncapped_base is None:
            return math.inf
        base = policy.uncapped_base
    else:
        base = udef.max_level

    level = min(ceiling_for(udef), base * policy.growth_factor(state))
    if policy.flat_counter is not None and udef.max_level != UNCAPPED:
        level += math.floor(getattr(state, policy.flat_counter))
    return math.floor(level)
