"""Singularity — the top-level reset, and the Golden Quark shop."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional

from tessera.data.balance import BALANCE
from tessera.data.cubes import OPENABLES
from tessera.data.upgrades import GOLDEN_QUARK_DISCOUNTS
from tessera.engine.automation import roll_automation_unlocks
from tessera.engine.economy import format_number
from tessera.engine.exceptions import AffordabilityError, ValidationError
from tessera.engine.game_state import GameState
from tessera.engine.upgrades import BUY_MAX, check_upgrades

logger = logging.getLogger(__name__)


@dataclass
class SingularityResult:
    singularity_count: int
    golden_quarks: float
    automations: list[str] = field(default_factory=list)
    refunded: list[str] = field(default_factory=list)


# ── Golden Quark shop ────────────────────────────────────────────


def golden_quark_cost(state: GameState) -> tuple[float, float]:
    """(price in quarks, discount applied) for one Golden Quark."""
    sb = BALANCE.singularity
    reduction = sum(per_level * state.upgrade_level(uid) for uid, per_level in GOLDEN_QUARK_DISCOUNTS.items())
    reduction += sb.golden_quark_discount_per_singularity * state.singularity_count
    reduction = min(reduction, sb.golden_quark_base_cost - sb.golden_quark_min_cost)
    return sb.golden_quark_base_cost - reduction, reduction


def max_golden_quarks(state: GameState) -> int:
    cost, _ = golden_quark_cost(state)
    return math.floor(state.wallet("quarks").get() / cost)


def buy_golden_quarks(state: GameState, amount: int) -> int:
    """Trade quarks for ``amount`` Golden Quarks (``-1`` = as many as possible)."""
    affordable = max_golden_quarks(state)
    if affordable == 0:
        raise AffordabilityError("You cannot afford a single Golden Quark.")
    if amount == BUY_MAX:
        amount = affordable
    if amount < 1 or int(amount) != amount:
        raise ValidationError("Please buy a positive whole number of Golden Quarks.")
    amount = int(amount)
    if amount > affordable:
        raise AffordabilityError(f"You can only afford {format_number(affordable)} Golden Quarks.")

    cost, _ = golden_quark_cost(state)
    state.wallet("quarks").sub(amount * cost)
    state.wallet("golden_quarks").add(amount)
    logger.debug("Bought %d Golden Quarks for %s quarks", amount, format_number(amount * cost))
    return amount


# ── Reset ────────────────────────────────────────────────────────


def golden_quark_multiplier(state: GameState) -> float:
    mult = 1.0
    for uid in ("golden_quarks1", "golden_quarks2"):
        upgrade = state.find_upgrade(uid)
        if upgrade is not None and upgrade.definition.effect is not None:
            mult *= upgrade.definition.effect(upgrade.level).bonus
    return mult


def singularity_reward(state: GameState, target: Optional[int] = None) -> float:
    """Base Golden Quarks for entering ``target`` (default: the next singularity)."""
    if target is None:
        target = state.singularity_count + 1
    return BALANCE.singularity.golden_quarks_per_singularity * max(0, target)


def _reset_cubes(state: GameState) -> None:
    for kind, openable in OPENABLES.items():
        state.wallet(kind).value = 0.0
        state.blessings[kind] = {name: 0 for name in openable.table.names}


def perform_singularity(
    state: GameState,
    golden_quarks: float = 0.0,
    target: Optional[int] = None,
) -> SingularityResult:
    """Enter singularity ``target`` (default: the next one).

    Upgrades are kept.  Cube wallets and blessings reset, the automation
    cascade rolls once and the integrity pass runs against the new counters.
    """
    if target is None:
        target = state.singularity_count + 1
    if target < 1 or target > state.highest_singularity_count + 1:
        raise ValidationError(
            f"You can only enter singularities 1 to {state.highest_singularity_count + 1}."
        )
    if not math.isfinite(golden_quarks) or golden_quarks < 0:
        raise ValidationError("Golden Quarks earned must be a non-negative number.")

    earned = golden_quarks * golden_quark_multiplier(state)
    state.wallet("golden_quarks").add(earned)

    state.singularity_count = target
    state.highest_singularity_count = max(state.highest_singularity_count, target)
    _reset_cubes(state)

    automations = roll_automation_unlocks(state)
    refunded = check_upgrades(state)
    logger.info("Entered singularity %d (+%s Golden Quarks)", target, format_number(earned))
    return SingularityResult(
        singularity_count=target,
        golden_quarks=earned,
        automations=automations,
        refunded=refunded,
    )
