"""Save/load — persists the game state to disk between sessions.

The integrity pass runs immediately after every load, so a save written
under older balance rules is normalised rather than trusted.
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Optional

from tessera.data.automation import AUTOMATION_GATES
from tessera.data.cubes import OPENABLES
from tessera.engine.actions import run_integrity
from tessera.engine.exceptions import ValidationError
from tessera.engine.game_state import GameState
from tessera.engine.hooks import Hooks
from tessera.engine.upgrades import parse_toggle

logger = logging.getLogger(__name__)

SAVE_DIR = Path.home() / ".tessera"
SAVE_FILE = SAVE_DIR / "save.json"


# ── Coercion ─────────────────────────────────────────────────────


def _number(value: Any, default: float = 0.0, key: str = "") -> float:
    """Finite non-negative float, or ``default`` if the value is malformed."""
    try:
        n = float(value)
    except (TypeError, ValueError):
        logger.warning("Malformed value for %s: %r", key, value)
        return default
    if not math.isfinite(n) or n < 0:
        logger.warning("Out-of-range value for %s: %r", key, value)
        return default
    return n


def _mapping(d: dict, key: str) -> dict:
    value = d.get(key, {})
    if not isinstance(value, dict):
        logger.warning("Expected a mapping for %s, got %r", key, type(value).__name__)
        return {}
    return value


def _list(d: dict, key: str) -> list:
    value = d.get(key, [])
    if not isinstance(value, list):
        logger.warning("Expected a list for %s, got %r", key, type(value).__name__)
        return []
    return value


def _level(value: Any, key: str) -> int:
    n = _number(value, key=key)
    if not n.is_integer():
        logger.warning("Fractional level for %s: %r", key, value)
        return 0
    return int(n)


def _toggle(value: Any, key: str) -> int:
    try:
        return parse_toggle(value)
    except ValidationError:
        logger.warning("Malformed levels-per-click for %s: %r", key, value)
        return 1


# ── Serialisation helpers ────────────────────────────────────────


def _state_to_dict(state: GameState) -> dict:
    s = state
    return {
        "wallets": {code: w.get() for code, w in s.wallets.items()},
        "upgrades": {
            family: {
                u.id: {"level": u.level, "invested": u.invested, "toggle_buy": u.toggle_buy}
                for u in registry
            }
            for family, registry in s.registries.items()
        },
        "singularity_count": s.singularity_count,
        "highest_singularity_count": s.highest_singularity_count,
        "singsing": s.singsing,
        "ascension_challenge_bonus": s.ascension_challenge_bonus,
        "quark_bonus": s.quark_bonus,
        "shop_quark_upgrades": sorted(s.shop_quark_upgrades),
        "blessings": {kind: dict(b) for kind, b in s.blessings.items()},
        "opened_daily": dict(s.opened_daily),
        "quark_daily": dict(s.quark_daily),
        "auto_open_percent": dict(s.auto_open_percent),
        "automation_unlocks": sorted(s.automation_unlocks),
    }


def _dict_to_state(d: dict) -> GameState:
    state = GameState()

    for code, value in _mapping(d, "wallets").items():
        if code in state.wallets:
            state.wallets[code].value = _number(value, key=f"wallets.{code}")

    for family, saved in _mapping(d, "upgrades").items():
        registry = state.registries.get(family)
        if registry is None or not isinstance(saved, dict):
            logger.warning("Ignoring unknown upgrade family %r", family)
            continue
        for uid, entry in saved.items():
            if uid not in registry or not isinstance(entry, dict):
                logger.warning("Ignoring unknown upgrade %s/%s", family, uid)
                continue
            upgrade = registry[uid]
            key = f"{family}.{uid}"
            upgrade.level = _level(entry.get("level", 0), key)
            upgrade.invested = _number(entry.get("invested", 0.0), key=key)
            upgrade.toggle_buy = _toggle(entry.get("toggle_buy", 1), key)

    state.singularity_count = int(_number(d.get("singularity_count", 0), key="singularity_count"))
    state.highest_singularity_count = max(
        state.singularity_count,
        int(_number(d.get("highest_singularity_count", 0), key="highest_singularity_count")),
    )
    state.singsing = _number(d.get("singsing", 0.0), key="singsing")
    state.ascension_challenge_bonus = _number(d.get("ascension_challenge_bonus", 0.0), key="ascension_challenge_bonus")
    state.quark_bonus = _number(d.get("quark_bonus", 1.0), default=1.0, key="quark_bonus")
    state.shop_quark_upgrades = {k for k in _list(d, "shop_quark_upgrades") if k in OPENABLES}

    for kind, saved in _mapping(d, "blessings").items():
        if kind not in state.blessings or not isinstance(saved, dict):
            continue
        for name in state.blessings[kind]:
            state.blessings[kind][name] = int(_number(saved.get(name, 0), key=f"blessings.{kind}.{name}"))

    for attr in ("opened_daily", "quark_daily", "auto_open_percent"):
        target = getattr(state, attr)
        for kind, value in _mapping(d, attr).items():
            if kind in target:
                target[kind] = _number(value, key=f"{attr}.{kind}")
    for kind, percent in state.auto_open_percent.items():
        state.auto_open_percent[kind] = min(100.0, percent)

    state.automation_unlocks = {g for g in _list(d, "automation_unlocks") if g in AUTOMATION_GATES}
    return state


# ── Public API ───────────────────────────────────────────────────


def save_game(state: GameState, path: Optional[Path] = None) -> bool:
    """Persist the state to disk.  Returns False if the write failed."""
    path = path or SAVE_FILE
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(_state_to_dict(state), indent=2))
    except OSError:
        logger.warning("Could not write save file %s", path, exc_info=True)
        return False
    return True


def load_game(path: Optional[Path] = None, hooks: Optional[Hooks] = None) -> Optional[GameState]:
    """Load a saved game and run the integrity pass on it.

    Returns None if no save exists or it cannot be parsed.
    """
    path = path or SAVE_FILE
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text())
    except (OSError, ValueError):
        logger.warning("Corrupt save file %s, starting fresh", path, exc_info=True)
        return None
    if not isinstance(data, dict):
        logger.warning("Save file %s does not hold an object, starting fresh", path)
        return None

    state = _dict_to_state(data)
    run_integrity(state, hooks or Hooks())
    return state


def delete_save(path: Optional[Path] = None) -> None:
    path = path or SAVE_FILE
    try:
        path.unlink(missing_ok=True)
    except OSError:
        logger.warning("Could not delete save file %s", path, exc_info=True)
