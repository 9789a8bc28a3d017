"""Player actions — the boundary where engine errors become alerts.

Front-ends call these instead of the engine functions.  Every action returns
``True`` on success.  Failures are reported through ``hooks.say`` and leave the
state untouched; nothing raised by the engine escapes from here.  Prompt
answers arrive as ``str | None`` where ``None`` means the player cancelled.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from tessera.engine import cubes, income, singularity, upgrades
from tessera.engine.economy import format_number
from tessera.engine.exceptions import TesseraError, ValidationError
from tessera.engine.game_state import GameState
from tessera.engine.hooks import Hooks
from tessera.engine.registry import LeveledUpgrade

logger = logging.getLogger(__name__)

CANCELLED = "Okay, maybe next time."


def _lookup(state: GameState, family: str, upgrade_id: str) -> LeveledUpgrade:
    registry = state.registries.get(family)
    if registry is None or upgrade_id not in registry:
        raise ValidationError(f"There is no upgrade {family}/{upgrade_id}.")
    return registry[upgrade_id]


def _parse_amount(answer: str) -> float:
    """A finite whole number, or -1 for 'everything'."""
    try:
        value = float(answer)
    except ValueError:
        raise ValidationError(f"{answer!r} is not a number.") from None
    if not math.isfinite(value) or not value.is_integer():
        raise ValidationError("Please use a finite whole number.")
    if value < -1:
        raise ValidationError("Please use -1 or a non-negative number.")
    return value


def run_integrity(state: GameState, hooks: Hooks) -> list[str]:
    """Integrity pass with a single notice for everything refunded."""
    refunded = upgrades.check_upgrades(state)
    if refunded:
        hooks.announce(upgrades.integrity_notice(refunded))
        hooks.fire_refresh()
    return refunded


# ── Upgrades ─────────────────────────────────────────────────────


def buy_upgrade(
    state: GameState,
    family: str,
    upgrade_id: str,
    hooks: Hooks,
    quantity: Optional[int] = None,
) -> bool:
    try:
        upgrade = _lookup(state, family, upgrade_id)
        bought = upgrades.buy_level(state, upgrade, quantity)
    except TesseraError as err:
        hooks.say(str(err))
        return False
    hooks.say(f"Bought {bought} level(s) of {upgrade.name}.")
    hooks.fire_refresh()
    return True


def buy_upgrade_with_budget(
    state: GameState,
    family: str,
    upgrade_id: str,
    answer: Optional[str],
    hooks: Hooks,
) -> bool:
    """Buy max, spending at most ``answer`` of the upgrade's currency (-1 = all)."""
    if answer is None:
        hooks.say(CANCELLED)
        return False
    try:
        upgrade = _lookup(state, family, upgrade_id)
        budget = _parse_amount(answer)
        bought = upgrades.buy_level(
            state,
            upgrade,
            upgrades.BUY_MAX,
            budget=None if budget == -1 else budget,
        )
    except TesseraError as err:
        hooks.say(str(err))
        return False
    hooks.say(f"Bought {bought} level(s) of {upgrade.name}.")
    hooks.fire_refresh()
    return True


def sell_upgrade(
    state: GameState,
    family: str,
    upgrade_id: str,
    hooks: Hooks,
    quantity: Optional[int] = None,
) -> bool:
    try:
        upgrade = _lookup(state, family, upgrade_id)
        sold = upgrades.sale_level(state, upgrade, quantity)
    except TesseraError as err:
        hooks.say(str(err))
        return False
    hooks.say(f"Sold {sold} level(s) of {upgrade.name}.")
    hooks.fire_refresh()
    # Caps that depended on the sold levels may have shrunk
    run_integrity(state, hooks)
    return True


def toggle_upgrade(
    state: GameState,
    family: str,
    upgrade_id: str,
    answer: Optional[str],
    hooks: Hooks,
) -> bool:
    if answer is None:
        hooks.say(CANCELLED)
        return False
    try:
        upgrade = _lookup(state, family, upgrade_id)
        value = upgrades.change_toggle(upgrade, answer)
    except TesseraError as err:
        hooks.say(str(err))
        return False
    label = "max" if value == upgrades.BUY_MAX else str(value)
    hooks.say(f"{upgrade.name} now buys {label} level(s) per click.")
    hooks.fire_refresh()
    return True


# ── Cubes ────────────────────────────────────────────────────────


def _report_open(result: cubes.OpenResult, hooks: Hooks) -> None:
    msg = f"Opened {format_number(result.opened)} {result.kind}."
    if result.quarks > 0:
        msg += f" +{format_number(result.quarks)} Quarks!"
    hooks.say(msg)
    hooks.fire_refresh()


def open_cubes(
    state: GameState,
    kind: str,
    hooks: Hooks,
    amount: Optional[int] = None,
    open_all: bool = False,
) -> bool:
    try:
        result = cubes.open_cubes(state, kind, amount, open_all=open_all)
    except TesseraError as err:
        hooks.say(str(err))
        return False
    _report_open(result, hooks)
    return True


def open_custom(state: GameState, kind: str, answer: Optional[str], hooks: Hooks) -> bool:
    """Open an amount typed by the player: ``N``, ``-N``, ``N%`` or ``-N%``."""
    if answer is None:
        hooks.say(CANCELLED)
        return False
    try:
        cubes.openable_for(kind)
        amount = cubes.parse_open_amount(answer, state.wallet(kind).get())
        result = cubes.open_cubes(state, kind, amount)
    except TesseraError as err:
        hooks.say(str(err))
        return False
    _report_open(result, hooks)
    return True


def set_auto_open(state: GameState, kind: str, answer: Optional[str], hooks: Hooks) -> bool:
    if answer is None:
        hooks.say(CANCELLED)
        return False
    try:
        percent = cubes.set_auto_open(state, kind, answer)
    except TesseraError as err:
        hooks.say(str(err))
        return False
    hooks.say(f"{cubes.openable_for(kind).name} now auto-open {percent}% of what you gain.")
    hooks.fire_refresh()
    return True


def advance(state: GameState, dt: float, hooks: Hooks) -> None:
    """Pay ``dt`` seconds of passive income; auto-open quark gains are announced."""
    for result in income.tick_income(state, dt):
        if result.quarks > 0:
            hooks.announce(
                f"Auto-opened {result.kind}: +{format_number(result.quarks)} Quarks!"
            )
    hooks.fire_refresh()


# ── Singularity ──────────────────────────────────────────────────


def buy_golden_quarks(state: GameState, answer: Optional[str], hooks: Hooks) -> bool:
    if answer is None:
        hooks.say(CANCELLED)
        return False
    try:
        amount = _parse_amount(answer)
        bought = singularity.buy_golden_quarks(state, int(amount))
    except TesseraError as err:
        hooks.say(str(err))
        return False
    hooks.say(f"Bought {format_number(bought)} Golden Quarks.")
    hooks.fire_refresh()
    return True


def enter_singularity(
    state: GameState,
    hooks: Hooks,
    golden_quarks: float = 0.0,
    target: Optional[int] = None,
) -> bool:
    try:
        result = singularity.perform_singularity(state, golden_quarks, target)
    except TesseraError as err:
        hooks.say(str(err))
        return False
    hooks.say(f"Welcome to Singularity #{result.singularity_count}.")
    for name in result.automations:
        hooks.announce(f"Automation unlocked: {name}")
    if result.refunded:
        hooks.announce(upgrades.integrity_notice(result.refunded))
    hooks.fire_refresh()
    return True
