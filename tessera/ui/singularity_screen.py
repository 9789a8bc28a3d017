"""Singularity Screen — confirm the top-level reset.

Shows what the next singularity keeps and resets, and the automation power
that will be rolled against the locked gates.  [X] confirms, [Esc] backs out.
"""

from __future__ import annotations

from rich.text import Text
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import Footer, Static

from tessera.data.automation import AUTOMATION_GATES
from tessera.data.cubes import OPENABLES
from tessera.engine.economy import format_number
from tessera.engine.game_state import GameState
from tessera.engine.singularity import golden_quark_multiplier, singularity_reward


class SingularityScreen(Screen[bool]):
    """Full-screen confirmation before entering the next singularity."""

    BINDINGS = [
        Binding("escape", "cancel", "Back"),
        Binding("x", "confirm", "ENTER SINGULARITY", show=True),
    ]

    DEFAULT_CSS = """
    SingularityScreen {
        background: $surface;
        align: center top;
        padding: 2 4;
    }

    #sing-header {
        width: 100%;
        text-align: center;
        padding-bottom: 1;
    }

    #sing-body {
        width: 100%;
        height: auto;
        padding: 0 2;
    }
    """

    def __init__(self, state: GameState, **kwargs) -> None:
        super().__init__(**kwargs)
        self._state = state

    def compose(self):
        yield Static(id="sing-header")
        with Vertical(id="sing-body"):
            yield Static(id="sing-details")
        yield Footer()

    def on_mount(self) -> None:
        self._refresh_display()

    def action_cancel(self) -> None:
        self.dismiss(False)

    def action_confirm(self) -> None:
        self.dismiss(True)

    def _refresh_display(self) -> None:
        state = self._state
        target = state.singularity_count + 1

        h = Text()
        h.append(f"✦ SINGULARITY {target} ✦\n", style="bold bright_magenta")
        h.append("Everything collapses. Only what you built upon stays.\n", style="dim italic")
        self.query_one("#sing-header", Static).update(h)

        body = Text()
        reward = singularity_reward(state, target) * golden_quark_multiplier(state)
        body.append("  Reward: ", style="bold yellow")
        body.append(f"{format_number(reward)} Golden Quarks\n", style="yellow")
        body.append("  Kept: ", style="bold green")
        body.append("upgrades, Golden Quarks, BB Shards, Quarks\n", style="green")
        body.append("  Reset: ", style="bold red")
        body.append(", ".join(o.name for o in OPENABLES.values()) + " and their blessings\n\n", style="red")

        level = state.upgrade_level("sing_automation")
        power = level * target ** 2
        locked = [g for g in AUTOMATION_GATES.values() if g.id not in state.automation_unlocks]
        body.append("  Automation power next singularity: ", style="dim")
        body.append(f"{format_number(power)}\n", style="bold cyan")
        if locked:
            body.append(f"  {len(locked)} automation(s) still locked; the next needs ", style="dim")
            body.append(f"{format_number(locked[0].threshold)}\n", style="cyan")
        else:
            body.append("  Every automation is unlocked.\n", style="dim")

        body.append("\n  [X] ENTER SINGULARITY  ", style="bold bright_red")
        body.append("  [Esc] Cancel\n", style="dim")
        self.query_one("#sing-details", Static).update(body)
