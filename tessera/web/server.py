"""Tessera Web — Flask JSON API over the game engine.

Single-player: one in-memory session guarded by a lock.  Every action
response carries ``ok``, the alert/notify ``messages`` the action produced
and the full ``state``.  Autosave happens lazily on requests.
"""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Any, Optional

from flask import Flask, jsonify, request

from tessera.data.balance import BALANCE
from tessera.data.cubes import OPENABLES
from tessera.engine import actions
from tessera.engine.cubes import auto_open_unlocked, check_quark_gain, cubes_to_next_quark
from tessera.engine.economy import format_number
from tessera.engine.exceptions import ValidationError
from tessera.engine.game_state import GameState
from tessera.engine.hooks import Hooks
from tessera.engine.income import income_per_s
from tessera.engine.save import load_game, save_game
from tessera.engine.singularity import golden_quark_cost, max_golden_quarks, singularity_reward
from tessera.engine.upgrades import (
    describe_upgrade,
    get_cost_tnl,
    get_max_level,
    is_unlocked,
    parse_toggle,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Flask app
# ---------------------------------------------------------------------------

app = Flask(__name__)
# Path of the save file; None uses ~/.tessera/save.json
app.config.setdefault("TESSERA_SAVE_PATH", None)
# Pay passive income for the time elapsed between requests
app.config.setdefault("TESSERA_IDLE_INCOME", True)

# ---------------------------------------------------------------------------
# In-memory game session (single-player)
# ---------------------------------------------------------------------------

_lock = threading.Lock()
_state: GameState | None = None
_last_tick: float = 0.0
_last_autosave: float = 0.0
# Messages from loading (integrity refunds) shown with the next response
_pending_messages: list[str] = []


def _save_path() -> Optional[Path]:
    path = app.config.get("TESSERA_SAVE_PATH")
    return Path(path) if path is not None else None


def _ensure_game() -> None:
    """Load the saved game, or start fresh, on first use; then catch up ticks."""
    global _state, _last_autosave, _last_tick
    if _state is None:
        hooks = Hooks()
        _state = load_game(_save_path(), hooks) or GameState()
        _pending_messages.extend(hooks.messages)
        _last_autosave = time.time()
        _last_tick = time.time()
    _do_ticks()


def _do_ticks() -> None:
    """Pay passive income for the time since the last request."""
    global _last_tick
    assert _state is not None
    now = time.time()
    dt = now - _last_tick
    _last_tick = now
    if dt <= 0 or not app.config.get("TESSERA_IDLE_INCOME"):
        return
    hooks = Hooks()
    actions.advance(_state, dt, hooks)
    _pending_messages.extend(hooks.messages)


def reset_session(state: GameState | None = None) -> None:
    """Drop the in-memory session (the next request reloads from disk)."""
    global _state, _last_tick
    with _lock:
        _state = state
        _last_tick = time.time()
        _pending_messages.clear()


def _maybe_autosave() -> None:
    global _last_autosave
    now = time.time()
    if now - _last_autosave >= BALANCE.autosave_interval_s:
        assert _state is not None
        save_game(_state, _save_path())
        _last_autosave = now


# ---------------------------------------------------------------------------
# JSON views
# ---------------------------------------------------------------------------


def _upgrades_json(s: GameState) -> dict:
    out: dict[str, list[dict]] = {}
    for family, registry in s.registries.items():
        rows = []
        for u in registry:
            max_level = get_max_level(s, u)
            rows.append({
                "id": u.id,
                "name": u.name,
                "currency": u.definition.currency,
                "level": u.level,
                "max_level": None if max_level == float("inf") else max_level,
                "invested": u.invested,
                "cost": get_cost_tnl(s, u),
                "toggle_buy": u.toggle_buy,
                "unlocked": is_unlocked(s, u),
            })
        out[family] = rows
    return out


def _state_json() -> dict:
    s = _state
    assert s is not None
    gq_cost, gq_discount = golden_quark_cost(s)
    rates = income_per_s(s)
    return {
        "wallets": {code: w.get() for code, w in s.wallets.items()},
        "wallets_display": {code: format_number(w.get()) for code, w in s.wallets.items()},
        "singularity_count": s.singularity_count,
        "highest_singularity_count": s.highest_singularity_count,
        "upgrades": _upgrades_json(s),
        "cubes": {
            kind: {
                "held": s.wallet(kind).get(),
                "blessings": dict(s.blessings[kind]),
                "opened_daily": s.opened_daily[kind],
                "quarks_earned": check_quark_gain(s, kind),
                "to_next_quark": cubes_to_next_quark(s, kind),
                "auto_open_percent": s.auto_open_percent[kind],
                "income_per_s": rates[kind],
            }
            for kind in OPENABLES
        },
        "auto_open_unlocked": auto_open_unlocked(s),
        "bbshards_per_s": rates["bbshards"],
        "singularity_reward": singularity_reward(s),
        "golden_quarks": {
            "cost": gq_cost,
            "discount": gq_discount,
            "max_buy": max_golden_quarks(s),
        },
        "automation_unlocks": sorted(s.automation_unlocks),
    }


def _respond(ok: bool, hooks: Hooks, **extra: Any):
    messages = _pending_messages + hooks.messages
    _pending_messages.clear()
    data = {"ok": ok, "messages": messages, "state": _state_json()}
    data.update(extra)
    return jsonify(data)


def _body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def _answer(body: dict, key: str) -> Optional[str]:
    """A prompt answer; JSON null (or missing) means the player cancelled."""
    value = body.get(key)
    return None if value is None else str(value)


def _quantity(body: dict, hooks: Hooks) -> tuple[bool, Optional[int]]:
    if body.get("quantity") is None:
        return True, None
    try:
        return True, parse_toggle(body["quantity"])
    except ValidationError as err:
        hooks.say(str(err))
        return False, None


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.route("/api/state")
def api_state():
    with _lock:
        _ensure_game()
        return _respond(True, Hooks())


@app.route("/api/upgrades/<family>/<upgrade_id>")
def api_describe(family: str, upgrade_id: str):
    with _lock:
        _ensure_game()
        assert _state is not None
        registry = _state.registries.get(family)
        if registry is None or upgrade_id not in registry:
            return jsonify({"error": f"No upgrade {family}/{upgrade_id}"}), 404
        return jsonify({"text": describe_upgrade(_state, registry[upgrade_id])})


@app.route("/api/upgrades/<family>/<upgrade_id>/buy", methods=["POST"])
def action_buy(family: str, upgrade_id: str):
    with _lock:
        _ensure_game()
        assert _state is not None
        hooks = Hooks()
        body = _body()
        if "budget" in body:
            ok = actions.buy_upgrade_with_budget(_state, family, upgrade_id, _answer(body, "budget"), hooks)
        else:
            ok, quantity = _quantity(body, hooks)
            if ok:
                ok = actions.buy_upgrade(_state, family, upgrade_id, hooks, quantity)
        _maybe_autosave()
        return _respond(ok, hooks)


@app.route("/api/upgrades/<family>/<upgrade_id>/sell", methods=["POST"])
def action_sell(family: str, upgrade_id: str):
    with _lock:
        _ensure_game()
        assert _state is not None
        hooks = Hooks()
        ok, quantity = _quantity(_body(), hooks)
        if ok:
            ok = actions.sell_upgrade(_state, family, upgrade_id, hooks, quantity)
        _maybe_autosave()
        return _respond(ok, hooks)


@app.route("/api/upgrades/<family>/<upgrade_id>/toggle", methods=["POST"])
def action_toggle(family: str, upgrade_id: str):
    with _lock:
        _ensure_game()
        assert _state is not None
        hooks = Hooks()
        ok = actions.toggle_upgrade(_state, family, upgrade_id, _answer(_body(), "amount"), hooks)
        return _respond(ok, hooks)


@app.route("/api/cubes/<kind>/open", methods=["POST"])
def action_open(kind: str):
    """Body: ``{"custom": "50%"}``, ``{"amount": 10}`` or ``{"all": true}``."""
    with _lock:
        _ensure_game()
        assert _state is not None
        hooks = Hooks()
        body = _body()
        if "custom" in body:
            ok = actions.open_custom(_state, kind, _answer(body, "custom"), hooks)
        else:
            amount = body.get("amount")
            if amount is not None and (isinstance(amount, bool) or not isinstance(amount, int)):
                hooks.say("Please use a whole number.")
                ok = False
            else:
                ok = actions.open_cubes(_state, kind, hooks, amount, open_all=bool(body.get("all")))
        _maybe_autosave()
        return _respond(ok, hooks)


@app.route("/api/cubes/<kind>/auto_open", methods=["POST"])
def action_auto_open(kind: str):
    """Body: ``{"percent": "25"}``; null cancels."""
    with _lock:
        _ensure_game()
        assert _state is not None
        hooks = Hooks()
        ok = actions.set_auto_open(_state, kind, _answer(_body(), "percent"), hooks)
        return _respond(ok, hooks)


@app.route("/api/golden_quarks/buy", methods=["POST"])
def action_buy_golden_quarks():
    with _lock:
        _ensure_game()
        assert _state is not None
        hooks = Hooks()
        ok = actions.buy_golden_quarks(_state, _answer(_body(), "amount"), hooks)
        _maybe_autosave()
        return _respond(ok, hooks)


@app.route("/api/singularity", methods=["POST"])
def action_singularity():
    with _lock:
        _ensure_game()
        assert _state is not None
        hooks = Hooks()
        body = _body()
        target = body.get("target")
        if target is not None and (isinstance(target, bool) or not isinstance(target, int)):
            hooks.say("Please pick a whole singularity number.")
            return _respond(False, hooks)
        # Default: the standard reward for the singularity being entered
        golden_quarks = body.get("golden_quarks")
        if golden_quarks is None:
            golden_quarks = singularity_reward(_state, target)
        if isinstance(golden_quarks, bool) or not isinstance(golden_quarks, (int, float)):
            hooks.say("Golden Quarks earned must be a number.")
            return _respond(False, hooks)
        ok = actions.enter_singularity(_state, hooks, float(golden_quarks), target)
        if ok:
            save_game(_state, _save_path())
        return _respond(ok, hooks)


@app.route("/api/save", methods=["POST"])
def action_save():
    with _lock:
        _ensure_game()
        assert _state is not None
        saved = save_game(_state, _save_path())
        return jsonify({"saved": saved})


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def run_server(host: str = "127.0.0.1", port: int = 5000, debug: bool = False) -> None:
    """Start the Flask development server."""
    app.run(host=host, port=port, debug=debug, use_reloader=False)
