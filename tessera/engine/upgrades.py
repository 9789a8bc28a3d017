"""Upgrade engine — purchase, sale, refund and the integrity pass.

Every function takes the ``GameState`` explicitly and raises a
``TesseraError`` subclass on failure.  Each purchase iteration commits level,
spend and balance together, so a loop that runs out of currency part-way
leaves the state consistent.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Union

from tessera.data.balance import BALANCE
from tessera.engine.caps import max_level_for
from tessera.engine.economy import format_number
from tessera.engine.exceptions import (
    AffordabilityError,
    ConsistencyError,
    MaxLevelError,
    UnlockGateError,
    ValidationError,
)
from tessera.engine.game_state import GameState
from tessera.engine.registry import LeveledUpgrade

logger = logging.getLogger(__name__)

BUY_MAX = -1

_CURRENCY_NAMES = {
    "golden_quarks": "Golden Quarks",
    "bbshards": "BB Shards",
    "quarks": "Quarks",
}


def currency_name(code: str) -> str:
    return _CURRENCY_NAMES.get(code, code.replace("_", " ").title())


# ── Queries ──────────────────────────────────────────────────────


def get_max_level(state: GameState, upgrade: LeveledUpgrade) -> float:
    return max_level_for(upgrade.definition, state)


def get_cost_tnl(state: GameState, upgrade: LeveledUpgrade) -> float:
    """Cost of the next level; 0 means maxed, never free."""
    if upgrade.level >= get_max_level(state, upgrade):
        return 0.0
    d = upgrade.definition
    return d.curve(upgrade.level, d.cost_per_level)


def is_unlocked(state: GameState, upgrade: LeveledUpgrade) -> bool:
    d = upgrade.definition
    return getattr(state, d.unlock_counter) >= d.unlock_threshold


def check_unlock(state: GameState, upgrade: LeveledUpgrade) -> None:
    if not is_unlocked(state, upgrade):
        d = upgrade.definition
        raise UnlockGateError(d.name, d.unlock_threshold, d.unlock_counter)


# ── Purchase / sale ──────────────────────────────────────────────


def _levels_wanted(state: GameState, upgrade: LeveledUpgrade, quantity: int) -> float:
    headroom = get_max_level(state, upgrade) - upgrade.level
    if quantity == BUY_MAX:
        if math.isinf(headroom):
            return BALANCE.upgrades.buy_max_iterations
        return headroom
    if quantity < 1:
        raise ValidationError(f"Cannot buy {quantity} levels.")
    return min(quantity, headroom)


def buy_level(
    state: GameState,
    upgrade: LeveledUpgrade,
    quantity: Optional[int] = None,
    budget: Optional[float] = None,
) -> int:
    """Buy up to ``quantity`` levels (default: the upgrade's toggle).

    ``quantity=-1`` buys as many as the currency and cap allow.  ``budget``
    bounds the currency this call may spend.  Returns levels bought.
    """
    d = upgrade.definition
    check_unlock(state, upgrade)
    if get_cost_tnl(state, upgrade) <= 0:
        raise MaxLevelError(d.name)

    if quantity is None:
        quantity = upgrade.toggle_buy
    remaining = _levels_wanted(state, upgrade, quantity)

    wallet = state.wallet(d.currency)
    spendable = wallet.get() if budget is None else min(budget, wallet.get())

    bought = 0
    while remaining > 0:
        cost = get_cost_tnl(state, upgrade)
        if cost <= 0 or spendable < cost:
            break
        wallet.sub(cost)
        spendable -= cost
        upgrade.invested += cost
        upgrade.level += 1
        bought += 1
        remaining -= 1

    if bought == 0:
        cost = get_cost_tnl(state, upgrade)
        raise AffordabilityError(
            f"You cannot afford {d.name}: the next level costs "
            f"{format_number(cost)} {currency_name(d.currency)}."
        )

    logger.debug("Bought %d level(s) of %s (now %d)", bought, d.id, upgrade.level)
    return bought


def sale_level(state: GameState, upgrade: LeveledUpgrade, quantity: Optional[int] = None) -> int:
    """Sell levels back one at a time, most expensive first.

    If the recorded spend cannot cover a level's marginal cost the upgrade is
    refunded in full instead.  Returns levels sold.
    """
    d = upgrade.definition
    if upgrade.level <= 0:
        raise ValidationError(f"{d.name} has no levels to sell.")
    if quantity is None:
        quantity = upgrade.toggle_buy
    if quantity == BUY_MAX:
        quantity = upgrade.level
    if quantity < 1:
        raise ValidationError(f"Cannot sell {quantity} levels.")

    wallet = state.wallet(d.currency)
    sold = 0
    returned = 0.0
    while sold < quantity and upgrade.level > 0:
        marginal = d.curve(upgrade.level - 1, d.cost_per_level)
        if upgrade.invested < marginal:
            sold += upgrade.level
            returned += refund(state, upgrade)
            break
        upgrade.level -= 1
        upgrade.invested -= marginal
        wallet.add(marginal)
        returned += marginal
        sold += 1

    logger.debug("Sold %d level(s) of %s for %s", sold, d.id, format_number(returned))
    return sold


def refund(state: GameState, upgrade: LeveledUpgrade) -> float:
    """Return everything invested and reset the upgrade to level 0."""
    amount = upgrade.invested
    state.wallet(upgrade.definition.currency).add(amount)
    upgrade.reset()
    return amount


# ── Toggle ───────────────────────────────────────────────────────


def parse_toggle(text: Union[str, int, float]) -> int:
    """Validate a levels-per-click amount: -1 (buy max) or 1..max_toggle."""
    if isinstance(text, bool):
        raise ValidationError(f"{text!r} is not a number.")
    try:
        value = float(text)
    except (TypeError, ValueError):
        raise ValidationError(f"{text!r} is not a number.") from None
    if not math.isfinite(value) or not value.is_integer():
        raise ValidationError("Please use a whole number.")
    value = int(value)
    if value == BUY_MAX:
        return value
    if not 1 <= value <= BALANCE.upgrades.max_toggle:
        raise ValidationError(
            f"Levels per click must be -1 or between 1 and {BALANCE.upgrades.max_toggle}."
        )
    return value


def change_toggle(upgrade: LeveledUpgrade, text: Union[str, int, float]) -> int:
    upgrade.toggle_buy = parse_toggle(text)
    return upgrade.toggle_buy


# ── Integrity pass ───────────────────────────────────────────────


def _same_amount(a: float, b: float) -> bool:
    if not (math.isfinite(a) and math.isfinite(b)):
        return a == b
    return round(a) == round(b)


def _normalize(upgrade: LeveledUpgrade) -> None:
    """Zero out a level or spend that is not a finite non-negative number."""
    if not math.isfinite(upgrade.level) or upgrade.level < 0 or int(upgrade.level) != upgrade.level:
        logger.warning("Resetting malformed level of %s: %r", upgrade.id, upgrade.level)
        upgrade.level = 0
    upgrade.level = int(upgrade.level)
    if not math.isfinite(upgrade.invested) or upgrade.invested < 0:
        logger.warning("Resetting malformed spend of %s: %r", upgrade.id, upgrade.invested)
        upgrade.invested = 0.0


def verify_upgrade(state: GameState, upgrade: LeveledUpgrade) -> None:
    """Raise ConsistencyError if ``upgrade`` no longer matches the rules."""
    d = upgrade.definition
    max_level = get_max_level(state, upgrade)
    if upgrade.level > max_level:
        raise ConsistencyError(d.id, f"level {upgrade.level} above max {max_level:g}")

    if upgrade.level > 0 and not is_unlocked(state, upgrade):
        raise ConsistencyError(
            d.id, f"held while {d.unlock_counter} is below {d.unlock_threshold}"
        )

    expected = d.curve.total(upgrade.level, d.cost_per_level)
    if not _same_amount(upgrade.invested, expected):
        raise ConsistencyError(
            d.id, f"invested {upgrade.invested:g} but {upgrade.level} level(s) cost {expected:g}"
        )


def integrity_refund(state: GameState, upgrade: LeveledUpgrade) -> float:
    """Forced refund: credit the recorded spend, but never more than the
    held levels cost under the current curve."""
    d = upgrade.definition
    worth = d.curve.total(upgrade.level, d.cost_per_level)
    amount = min(upgrade.invested, worth)
    state.wallet(d.currency).add(amount)
    upgrade.reset()
    return amount


def check_upgrades(state: GameState) -> list[str]:
    """Refund every upgrade that drifted from the current rules.

    Repeats until a pass refunds nothing, since a refund can shrink other
    caps.  Idempotent.  Returns the names of refunded upgrades.
    """
    refunded: list[str] = []
    for upgrade in state.all_upgrades():
        _normalize(upgrade)
    while True:
        changed = False
        for upgrade in state.all_upgrades():
            try:
                verify_upgrade(state, upgrade)
            except ConsistencyError as err:
                logger.warning("Refunding %s: %s", err.upgrade_id, err.reason)
                integrity_refund(state, upgrade)
                if upgrade.name not in refunded:
                    refunded.append(upgrade.name)
                changed = True
        if not changed:
            return refunded


def integrity_notice(refunded: list[str]) -> str:
    return (
        "Some upgrades no longer matched the current rules and were refunded in full: "
        + ", ".join(refunded)
        + "."
    )


# ── Display ──────────────────────────────────────────────────────


def describe_upgrade(state: GameState, upgrade: LeveledUpgrade) -> str:
    """Multi-line summary for the upgrade panel and the web API."""
    d = upgrade.definition
    currency = currency_name(d.currency)
    max_level = get_max_level(state, upgrade)
    lines = [d.name, d.description]

    if d.unlock_threshold > 0:
        mark = "" if is_unlocked(state, upgrade) else " (locked)"
        lines.append(f"Requires {d.unlock_counter.replace('_', ' ')} {d.unlock_threshold}{mark}")

    lines.append(f"Level {upgrade.level}/{format_number(max_level)}")
    cost = get_cost_tnl(state, upgrade)
    lines.append(f"Next level: {format_number(cost)} {currency}" if cost > 0 else "Maxed")
    lines.append(f"Invested: {format_number(upgrade.invested)} {currency}")

    effect = d.describe_effect(upgrade.level)
    if effect:
        lines.append(effect)
    return "\n".join(lines)
