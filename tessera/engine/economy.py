"""Economy engine — currency wallets and number formatting."""

from __future__ import annotations

import math
from dataclasses import dataclass

from tessera.data.balance import BALANCE


# Every currency the game tracks.  Openable kinds double as wallets.
CURRENCIES: tuple[str, ...] = (
    "golden_quarks",
    "bbshards",
    "quarks",
    "cubes",
    "tesseracts",
    "hypercubes",
    "platonics",
)


@dataclass
class Wallet:
    """A currency balance that saturates instead of growing without bound."""

    value: float = 0.0

    def get(self) -> float:
        return self.value

    def add(self, amount: float) -> float:
        """Credit ``amount``, clamped to ``BALANCE.economy.max_value``."""
        self.value = min(BALANCE.economy.max_value, self.value + amount)
        return self.value

    def sub(self, amount: float) -> float:
        """Debit ``amount``, never dropping below zero."""
        self.value = max(0.0, self.value - amount)
        return self.value

    @property
    def digits(self) -> int:
        if self.value < 1:
            return 1
        return int(math.floor(math.log10(self.value))) + 1


def new_wallets() -> dict[str, Wallet]:
    return {code: Wallet() for code in CURRENCIES}


def format_number(n: float) -> str:
    """Format a number with suffixes for readability."""
    if math.isinf(n):
        return "∞" if n > 0 else "-∞"
    if n < 0:
        return f"-{format_number(-n)}"

    suffixes = BALANCE.economy.suffixes
    if n >= suffixes[-1][0] * 1000:
        return f"{n:.2e}"

    for threshold, suffix in reversed(suffixes):
        if n >= threshold:
            value = n / threshold
            if value >= 100:
                return f"{value:.0f}{suffix}"
            elif value >= 10:
                return f"{value:.1f}{suffix}"
            else:
                return f"{value:.2f}{suffix}"

    if n >= 100:
        return f"{n:.0f}"
    elif n >= 10:
        return f"{n:.1f}"
    elif n == int(n):
        return str(int(n))
    else:
        return f"{n:.1f}"
