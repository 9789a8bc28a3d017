"""Blessings panel — openable wallets and what they have been opened into."""

from __future__ import annotations

from rich.text import Text
from textual.reactive import reactive
from textual.widget import Widget

from tessera.data.cubes import OPENABLES
from tessera.engine.cubes import auto_open_unlocked, check_quark_gain, cubes_to_next_quark
from tessera.engine.economy import format_number
from tessera.engine.game_state import GameState
from tessera.engine.income import income_per_s


class BlessingsPanel(Widget):
    """Shows the selected openable kind in full and the others as one line each."""

    DEFAULT_CSS = """
    BlessingsPanel {
        width: 100%;
        height: 100%;
        padding: 1;
        overflow-y: auto;
    }
    """

    kind: reactive[str] = reactive("cubes")

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._state: GameState | None = None

    def next_kind(self) -> None:
        kinds = list(OPENABLES)
        self.kind = kinds[(kinds.index(self.kind) + 1) % len(kinds)]

    def render(self) -> Text:
        text = Text()
        text.append("  ═══ Cubes ═══\n\n", style="bold magenta")
        state = self._state
        if state is None:
            return text

        for kind, openable in OPENABLES.items():
            active = kind == self.kind
            marker = "▶ " if active else "  "
            text.append(f"  {marker}{openable.name}: ", style="bold cyan" if active else "dim")
            text.append(f"{format_number(state.wallet(kind).get())}\n", style="bold" if active else "dim")

        openable = OPENABLES[self.kind]
        rate = income_per_s(state)[self.kind]
        text.append(f"\n  +{format_number(rate)}/s", style="green")
        if auto_open_unlocked(state):
            text.append(f" · auto-open {state.auto_open_percent[self.kind]:g}%\n", style="cyan")
        else:
            text.append("\n")
        text.append(f"\n  ─── {openable.name} blessings ───\n", style="bold yellow")
        blessings = state.blessings[self.kind]
        for name in openable.table.names:
            count = blessings[name]
            style = "green" if count > 0 else "dim"
            text.append(f"  {name.replace('_', ' ').title()}: ", style="dim")
            text.append(f"{format_number(count)}\n", style=style)

        text.append("\n")
        text.append(f"  Opened today: {format_number(state.opened_daily[self.kind])}\n", style="dim")
        text.append(f"  Quarks earned: {format_number(check_quark_gain(state, self.kind))}\n", style="cyan")
        text.append(
            f"  Next quark in {format_number(cubes_to_next_quark(state, self.kind))} more\n",
            style="dim italic",
        )
        return text

    def update_from_state(self, state: GameState) -> None:
        self._state = state
        self.refresh()
