"""HUD widget — wallets, singularity counters and the Golden Quark price."""

from __future__ import annotations

from rich.text import Text
from textual.widget import Widget

from tessera.data.automation import AUTOMATION_GATES
from tessera.engine.automation import automation_power
from tessera.engine.economy import format_number
from tessera.engine.game_state import GameState
from tessera.engine.singularity import golden_quark_cost, max_golden_quarks

_WALLET_ROWS = [
    ("golden_quarks", "Golden Quarks", "bold yellow"),
    ("bbshards", "BB Shards", "bold magenta"),
    ("quarks", "Quarks", "bold cyan"),
]


class HUD(Widget):
    """Heads-up display showing the player's currencies and progress."""

    DEFAULT_CSS = """
    HUD {
        width: 100%;
        height: 100%;
        padding: 1;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._state: GameState | None = None

    def render(self) -> Text:
        text = Text()
        state = self._state
        if state is None:
            return text

        text.append(f"  === Singularity {state.singularity_count} ===\n", style="bold cyan")
        text.append(f"  Highest: {state.highest_singularity_count}\n\n", style="dim")

        for code, label, style in _WALLET_ROWS:
            text.append(f"  {label}: ", style="dim")
            text.append(f"{format_number(state.wallet(code).get())}\n", style=style)

        text.append("\n")
        cost, discount = golden_quark_cost(state)
        text.append("  Golden Quark: ", style="dim")
        text.append(f"{format_number(cost)} Quarks\n", style="yellow")
        if discount > 0:
            text.append(f"  (discounted by {format_number(discount)})\n", style="dim")
        text.append(f"  Can buy: {format_number(max_golden_quarks(state))}\n", style="dim")

        text.append("\n")
        text.append("  Automation: ", style="dim")
        text.append(f"{len(state.automation_unlocks)}/{len(AUTOMATION_GATES)}\n", style="green")
        text.append(f"  Power: {format_number(automation_power(state))}\n", style="dim")

        return text

    def update_from_state(self, state: GameState) -> None:
        self._state = state
        self.refresh()
