"""Tessera — Main Textual Application.

Wires the engine's player actions into a keyboard-driven TUI.  Every
engine message is routed to ``App.notify`` through a ``Hooks`` bundle.
"""

from __future__ import annotations

import time

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.timer import Timer
from textual.widgets import Footer, Header

from tessera.data.balance import BALANCE
from tessera.data.cubes import OPENABLES
from tessera.engine import actions
from tessera.engine.game_state import GameState
from tessera.engine.hooks import Hooks
from tessera.engine.save import load_game, save_game
from tessera.engine.singularity import golden_quark_cost, max_golden_quarks, singularity_reward
from tessera.engine.economy import format_number
from tessera.engine.upgrades import currency_name
from tessera.ui.blessings_panel import BlessingsPanel
from tessera.ui.hud import HUD
from tessera.ui.prompt_screen import PromptScreen
from tessera.ui.singularity_screen import SingularityScreen
from tessera.ui.upgrade_panel import UpgradePanel


class TesseraApp(App):
    """The Tessera TUI application."""

    TITLE = "Tessera"
    SUB_TITLE = "Level. Open. Collapse. Repeat."

    CSS = """
    #game-container {
        height: 1fr;
    }

    #hud-panel {
        width: 30;
    }

    #upgrade-panel {
        width: 2fr;
    }

    #blessings-panel {
        width: 1fr;
    }
    """

    BINDINGS = [
        Binding("up", "select(-1)", "Prev", show=False),
        Binding("down", "select(1)", "Next", show=False),
        Binding("tab", "switch_family", "Family", show=True, priority=True),
        Binding("b", "buy", "Buy", show=True),
        Binding("B", "buy_budget", "Buy w/ budget", show=False),
        Binding("s", "sell", "Sell", show=True),
        Binding("t", "toggle", "Per click", show=True),
        Binding("k", "switch_kind", "Cube kind", show=True),
        Binding("o", "open_custom", "Open", show=True),
        Binding("O", "open_all", "Open all", show=False),
        Binding("a", "auto_open", "Auto-open", show=False),
        Binding("g", "buy_golden_quarks", "Golden Quarks", show=True),
        Binding("x", "singularity", "Singularity", show=True),
        Binding("w", "save", "Save", show=False),
        Binding("q", "quit_game", "Quit", show=True),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._hooks = Hooks(
            alert=lambda msg: self.notify(msg, timeout=2),
            notify=lambda msg: self.notify(msg, severity="warning", timeout=6),
            refresh=self._sync_ui,
        )
        # Load messages are replayed once the app is mounted
        load_hooks = Hooks()
        saved = load_game(hooks=load_hooks)
        self._load_messages = load_hooks.messages
        self._state: GameState = saved if saved is not None else GameState()
        self._last_tick: float = time.time()
        self._last_autosave: float = time.time()
        self._tick_timer: Timer | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="game-container"):
            yield HUD(id="hud-panel")
            yield UpgradePanel(id="upgrade-panel")
            yield BlessingsPanel(id="blessings-panel")
        yield Footer()

    def on_mount(self) -> None:
        interval = 1.0 / BALANCE.tick_rate_hz
        self._tick_timer = self.set_interval(interval, self._game_tick)
        for msg in self._load_messages:
            self.notify(msg, severity="warning", timeout=8)
        self._sync_ui()

    def _game_tick(self) -> None:
        """Main game loop — called BALANCE.tick_rate_hz times per second."""
        now = time.time()
        dt = now - self._last_tick
        self._last_tick = now

        # Passive income, auto-opening as configured
        actions.advance(self._state, dt, self._hooks)

        if now - self._last_autosave >= BALANCE.autosave_interval_s:
            save_game(self._state)
            self._last_autosave = now

    def _sync_ui(self) -> None:
        """Push game state to all UI widgets."""
        self.query_one("#hud-panel", HUD).update_from_state(self._state)
        self.query_one("#upgrade-panel", UpgradePanel).update_from_state(self._state)
        self.query_one("#blessings-panel", BlessingsPanel).update_from_state(self._state)

    # ── Helpers ──────────────────────────────────────

    @property
    def _panel(self) -> UpgradePanel:
        return self.query_one("#upgrade-panel", UpgradePanel)

    @property
    def _kind(self) -> str:
        return self.query_one("#blessings-panel", BlessingsPanel).kind

    # ── Actions ──────────────────────────────────────

    def action_select(self, step: int) -> None:
        self._panel.move(step)

    def action_switch_family(self) -> None:
        self._panel.next_family()

    def action_switch_kind(self) -> None:
        self.query_one("#blessings-panel", BlessingsPanel).next_kind()

    def action_buy(self) -> None:
        upgrade = self._panel.selected_upgrade()
        if upgrade is not None:
            actions.buy_upgrade(self._state, self._panel.family, upgrade.id, self._hooks)

    def action_buy_budget(self) -> None:
        upgrade = self._panel.selected_upgrade()
        if upgrade is None:
            return
        family = self._panel.family
        currency = currency_name(upgrade.definition.currency)
        self.push_screen(
            PromptScreen(
                f"How many {currency} will you spend on {upgrade.name}? Type -1 to spend them all.",
                placeholder="-1",
            ),
            lambda answer: actions.buy_upgrade_with_budget(
                self._state, family, upgrade.id, answer, self._hooks
            ),
        )

    def action_sell(self) -> None:
        upgrade = self._panel.selected_upgrade()
        if upgrade is not None:
            actions.sell_upgrade(self._state, self._panel.family, upgrade.id, self._hooks)

    def action_toggle(self) -> None:
        upgrade = self._panel.selected_upgrade()
        if upgrade is None:
            return
        family = self._panel.family
        self.push_screen(
            PromptScreen(
                f"How many levels of {upgrade.name} per click? Type -1 to buy max.",
                placeholder=str(upgrade.toggle_buy),
            ),
            lambda answer: actions.toggle_upgrade(self._state, family, upgrade.id, answer, self._hooks),
        )

    def action_open_custom(self) -> None:
        kind = self._kind
        held = self._state.wallet(kind).get()
        self.push_screen(
            PromptScreen(
                f"You have {format_number(held)} {OPENABLES[kind].name}. How many will you open? "
                "N opens N, -N keeps N back, N% opens a share, -N% keeps a share back.",
                placeholder="100%",
            ),
            lambda answer: actions.open_custom(self._state, kind, answer, self._hooks),
        )

    def action_auto_open(self) -> None:
        kind = self._kind
        self.push_screen(
            PromptScreen(
                f"What percentage of newly gained {OPENABLES[kind].name} should open automatically? (0-100)",
                placeholder=f"{self._state.auto_open_percent[kind]:g}",
            ),
            lambda answer: actions.set_auto_open(self._state, kind, answer, self._hooks),
        )

    def action_open_all(self) -> None:
        actions.open_cubes(self._state, self._kind, self._hooks, open_all=True)

    def action_buy_golden_quarks(self) -> None:
        cost, discount = golden_quark_cost(self._state)
        self.push_screen(
            PromptScreen(
                f"Golden Quarks cost {format_number(cost)} Quarks (discounted by "
                f"{format_number(discount)}). You can buy up to "
                f"{format_number(max_golden_quarks(self._state))}. How many? Type -1 to buy max.",
                placeholder="-1",
            ),
            lambda answer: actions.buy_golden_quarks(self._state, answer, self._hooks),
        )

    def action_singularity(self) -> None:
        self.push_screen(SingularityScreen(self._state), self._on_singularity_confirmed)

    def _on_singularity_confirmed(self, confirmed: bool | None) -> None:
        if not confirmed:
            return
        reward = singularity_reward(self._state)
        if actions.enter_singularity(self._state, self._hooks, reward):
            save_game(self._state)

    def action_save(self) -> None:
        if save_game(self._state):
            self.notify("Game saved.", timeout=1)
        else:
            self.notify("Could not save the game.", severity="error", timeout=3)

    def action_quit_game(self) -> None:
        save_game(self._state)
        self.exit()
