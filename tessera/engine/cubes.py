"""Cube opening — batched blessing distribution and the quark yield it feeds.

``distribute`` hands out full batches by weight with no randomness and only
samples the remainder unit by unit, so opening 1e12 cubes costs the same as
opening a few hundred.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Optional

from tessera.data.balance import BALANCE
from tessera.data.blessings import BucketTable
from tessera.data.cubes import OPENABLES, OpenableDef
from tessera.engine.economy import format_number
from tessera.engine.exceptions import AffordabilityError, UnlockGateError, ValidationError
from tessera.engine.game_state import GameState

logger = logging.getLogger(__name__)


@dataclass
class OpenResult:
    """What one open call produced."""

    kind: str
    opened: int
    blessings: dict[str, int] = field(default_factory=dict)
    quarks: float = 0.0


# ── Allocation ───────────────────────────────────────────────────


def distribute(amount: int, table: BucketTable, multiplier: int = 1) -> dict[str, int]:
    """Split ``amount`` units across ``table``'s buckets.

    Full batches give each bucket exactly ``weight * batches``.  The
    remainder is assigned one unit per uniform draw over the table's span.
    ``multiplier`` scales every bucket after the split.
    """
    if amount < 0 or int(amount) != amount:
        raise ValidationError(f"Cannot distribute {amount!r} units.")
    amount = int(amount)

    batches, remainder = divmod(amount, table.batch_size)
    counts = {b.name: b.weight * batches for b in table.buckets}
    for _ in range(remainder):
        counts[table.classify(random.random() * table.span)] += 1

    if multiplier != 1:
        counts = {name: n * multiplier for name, n in counts.items()}
    return counts


# ── Quarks ───────────────────────────────────────────────────────


def quark_multiplier(state: GameState, openable: OpenableDef) -> float:
    mult = 1.0
    if openable.shop_mult_always or openable.kind in state.shop_quark_upgrades:
        mult *= BALANCE.cubes.shop_quark_mult
    return mult * openable.quark_base * state.quark_bonus


def check_quark_gain(state: GameState, kind: str) -> int:
    """Total quarks owed for everything opened today (0 below one unit)."""
    opened = state.opened_daily[kind]
    if opened < 1:
        return 0
    return math.floor(math.log10(opened) * quark_multiplier(state, OPENABLES[kind]))


def cubes_to_next_quark(state: GameState, kind: str) -> int:
    """Units still to open before the next quark is earned."""
    rate = quark_multiplier(state, OPENABLES[kind])
    if rate <= 0:
        return 0
    target = 10 ** ((check_quark_gain(state, kind) + 1) / rate)
    return max(0, math.ceil(target - state.opened_daily[kind]))


def _collect_quarks(state: GameState, kind: str) -> float:
    """Pay out quarks above the recorded high-water mark."""
    total = check_quark_gain(state, kind)
    gained = max(0, total - state.quark_daily[kind])
    if gained > 0:
        state.quark_daily[kind] = total
        state.wallet("quarks").add(gained)
    return gained


# ── Opening ──────────────────────────────────────────────────────


def openable_for(kind: str) -> OpenableDef:
    openable = OPENABLES.get(kind)
    if openable is None:
        raise ValidationError(f"Unknown openable {kind!r}.")
    return openable


def open_cubes(state: GameState, kind: str, amount: Optional[int] = None, open_all: bool = False) -> OpenResult:
    """Open ``amount`` units of ``kind`` (clamped to what is held)."""
    openable = openable_for(kind)
    wallet = state.wallet(kind)
    held = math.floor(wallet.get())
    if open_all or amount is None:
        amount = held
    if amount < 0 or int(amount) != amount:
        raise ValidationError(f"Cannot open {amount!r} {openable.name}.")
    amount = min(int(amount), held)
    if amount <= 0:
        raise AffordabilityError(f"You have no {openable.name} to open.")

    multiplier = 1
    if openable.challenge_bonus:
        multiplier += math.floor(state.ascension_challenge_bonus)

    wallet.sub(amount)
    gained = distribute(amount, openable.table, multiplier)
    for name, n in gained.items():
        state.blessings[kind][name] += n
    state.opened_daily[kind] += amount
    quarks = _collect_quarks(state, kind)

    logger.debug("Opened %s %s (+%s quarks)", format_number(amount), kind, format_number(quarks))
    return OpenResult(kind=kind, opened=amount, blessings=gained, quarks=quarks)


def gain_cubes(state: GameState, kind: str, amount: float) -> Optional[OpenResult]:
    """Credit newly earned units, auto-opening the configured share of them."""
    openable_for(kind)
    if not math.isfinite(amount) or amount < 0:
        raise ValidationError(f"Cannot gain {amount!r} {kind}.")
    state.wallet(kind).add(amount)
    percent = state.auto_open_percent.get(kind, 0.0)
    if percent <= 0 or not auto_open_unlocked(state):
        return None
    owed = state.auto_open_carry[kind] + amount * percent / 100
    to_open = min(math.floor(owed), math.floor(state.wallet(kind).get()))
    state.auto_open_carry[kind] = owed - to_open
    if to_open <= 0:
        return None
    return open_cubes(state, kind, to_open)


def auto_open_unlocked(state: GameState) -> bool:
    return state.highest_singularity_count >= BALANCE.cubes.auto_open_singularity


def set_auto_open(state: GameState, kind: str, text: str) -> int:
    """Set the share of newly gained ``kind`` units opened automatically."""
    openable = openable_for(kind)
    if not auto_open_unlocked(state):
        raise UnlockGateError(
            f"Auto-open {openable.name}",
            BALANCE.cubes.auto_open_singularity,
            "highest_singularity_count",
        )
    try:
        value = float(text)
    except ValueError:
        raise ValidationError(f"{text!r} is not a number.") from None
    if not math.isfinite(value) or not value.is_integer() or not 0 <= value <= 100:
        raise ValidationError("Auto-open takes a whole percentage from 0 to 100.")
    state.auto_open_percent[kind] = value
    state.auto_open_carry[kind] = 0.0
    return int(value)


# ── Custom amounts ───────────────────────────────────────────────


def parse_open_amount(text: str, held: float) -> int:
    """Resolve ``N``, ``-N``, ``N%`` or ``-N%`` against the units held.

    ``-N`` keeps N units back; ``-N%`` keeps N percent back.
    """
    raw = text.strip()
    percent = raw.endswith("%")
    keep_back = raw.startswith("-")
    number = raw.rstrip("%").lstrip("-").strip()

    try:
        value = float(number)
    except ValueError:
        raise ValidationError(f"{text!r} is not a number.") from None
    if not math.isfinite(value):
        raise ValidationError("Please enter a finite amount.")
    if not value.is_integer():
        raise ValidationError("Please use a whole number.")

    held = math.floor(held)
    if percent:
        if not 0 <= value <= 100:
            raise ValidationError("Percentages must be between 0 and 100.")
        share = 100 - value if keep_back else value
        result = math.floor(held * share / 100)
    else:
        result = held - int(value) if keep_back else int(value)

    if result < 0:
        raise ValidationError("That would open a negative amount.")
    if result == 0:
        raise ValidationError("That would open nothing.")
    if result > held:
        raise ValidationError(f"You don't have enough: you hold {format_number(held)}.")
    return result
