"""Automation unlock cascade — rolled once per singularity."""

from __future__ import annotations

import logging
import random

from tessera.data.automation import AUTOMATION_GATES, AutomationGate
from tessera.engine.game_state import GameState

logger = logging.getLogger(__name__)


def automation_power(state: GameState) -> float:
    return state.upgrade_level("sing_automation") * state.singularity_count ** 2


def roll_unlock(power: float, threshold: float) -> bool:
    """One draw: unlocked when ``power / u > threshold`` for ``u`` in [0, 1)."""
    if power <= 0:
        return False
    draw = random.random()
    if draw == 0:
        return True
    return power / draw > threshold


def _gate_opens(gate: AutomationGate, power: float) -> bool:
    if roll_unlock(power, gate.threshold):
        return True
    return gate.fallback_chance > 0 and random.random() < gate.fallback_chance


def roll_automation_unlocks(state: GameState) -> list[str]:
    """Roll every locked gate once; returns names of the newly unlocked ones."""
    power = automation_power(state)
    unlocked: list[str] = []
    for gate in AUTOMATION_GATES.values():
        if gate.id in state.automation_unlocks:
            continue
        if gate.requires is not None and gate.requires not in state.automation_unlocks:
            continue
        if _gate_opens(gate, power):
            state.automation_unlocks.add(gate.id)
            unlocked.append(gate.name)
    if unlocked:
        logger.debug("Automation power %g unlocked %s", power, ", ".join(unlocked))
    return unlocked
