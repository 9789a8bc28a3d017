"""Upgrade panel — one upgrade family with a selection cursor."""

from __future__ import annotations

from rich.text import Text
from textual.reactive import reactive
from textual.widget import Widget

from tessera.engine.economy import format_number
from tessera.engine.game_state import GameState
from tessera.engine.registry import LeveledUpgrade
from tessera.engine.upgrades import (
    BUY_MAX,
    currency_name,
    describe_upgrade,
    get_cost_tnl,
    get_max_level,
    is_unlocked,
)

FAMILY_TITLES = {
    "singularity": "Singularity Upgrades",
    "shards": "BB Shard Upgrades",
}


class UpgradePanel(Widget):
    """Lists every upgrade of ``family``; the selected one is described below."""

    DEFAULT_CSS = """
    UpgradePanel {
        width: 100%;
        height: 100%;
        padding: 1;
        overflow-y: auto;
    }
    """

    family: reactive[str] = reactive("singularity")
    selected: reactive[int] = reactive(0)
    # Serialized level/cost data for reactivity
    summary: reactive[str] = reactive("")

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._state: GameState | None = None

    def _upgrades(self) -> list[LeveledUpgrade]:
        if self._state is None:
            return []
        return list(self._state.registry(self.family))

    def selected_upgrade(self) -> LeveledUpgrade | None:
        upgrades = self._upgrades()
        if not upgrades:
            return None
        return upgrades[min(self.selected, len(upgrades) - 1)]

    def move(self, step: int) -> None:
        count = len(self._upgrades())
        if count:
            self.selected = (self.selected + step) % count

    def next_family(self) -> None:
        if self._state is None:
            return
        families = list(self._state.registries)
        self.family = families[(families.index(self.family) + 1) % len(families)]
        self.selected = 0

    def render(self) -> Text:
        text = Text()
        text.append(f"  ═══ {FAMILY_TITLES.get(self.family, self.family)} ═══\n\n", style="bold magenta")

        state = self._state
        if state is None:
            return text

        for i, u in enumerate(self._upgrades()):
            cost = get_cost_tnl(state, u)
            maxed = cost <= 0
            unlocked = is_unlocked(state, u)
            affordable = unlocked and not maxed and state.wallet(u.definition.currency).get() >= cost

            marker = "▶ " if i == self.selected else "  "
            text.append(f"  {marker}", style="bold cyan")

            if not unlocked:
                text.append(f"{u.name} ", style="dim")
                text.append("LOCKED\n", style="dim red")
                continue
            if maxed:
                text.append(f"{u.name} ", style="dim")
                text.append("MAX\n", style="bold green")
                continue

            name_style = "bold green" if affordable else "bold red"
            text.append(f"{u.name} ", style=name_style)
            text.append(f"Lv.{u.level}/{format_number(get_max_level(state, u))} ", style="dim")
            cost_style = "green" if affordable else "red"
            text.append(f"{format_number(cost)}\n", style=cost_style)

        upgrade = self.selected_upgrade()
        if upgrade is not None:
            text.append("\n")
            lines = describe_upgrade(state, upgrade).split("\n")
            text.append(f"  {lines[0]}\n", style="bold")
            for line in lines[1:]:
                text.append(f"  {line}\n", style="dim italic")
            toggle = "max" if upgrade.toggle_buy == BUY_MAX else str(upgrade.toggle_buy)
            text.append(
                f"  Buys {toggle} per click · paid in {currency_name(upgrade.definition.currency)}\n",
                style="cyan",
            )

        return text

    def update_from_state(self, state: GameState) -> None:
        """Sync panel with game state."""
        self._state = state
        self.summary = "|".join(
            f"{u.id}:{u.level}:{u.toggle_buy}" for u in self._upgrades()
        ) + "|" + "|".join(f"{w.get():.0f}" for w in state.wallets.values())
        self.refresh()
