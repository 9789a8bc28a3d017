"""Front-end hooks — alerts, notifications and display refresh.

The engine never talks to a screen directly.  Each front-end builds a
``Hooks`` bundle (the TUI routes to ``App.notify``, the web server collects
messages into the JSON response) and passes it into the actions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class Hooks:
    """Callbacks the action layer fires.  All are optional."""

    alert: Optional[Callable[[str], None]] = None
    notify: Optional[Callable[[str], None]] = None
    refresh: Optional[Callable[[], None]] = None
    # Every message sent through alert/notify, oldest first
    messages: list[str] = field(default_factory=list)

    def say(self, message: str) -> None:
        """Report a failure or result the player asked for."""
        self.messages.append(message)
        if self.alert is not None:
            self.alert(message)

    def announce(self, message: str) -> None:
        """Tell the player about something they did not ask for (e.g. a refund)."""
        self.messages.append(message)
        if self.notify is not None:
            self.notify(message)
        elif self.alert is not None:
            self.alert(message)

    def fire_refresh(self) -> None:
        """Redraw after a mutation.  A failing redraw never undoes the mutation."""
        if self.refresh is None:
            return
        try:
            self.refresh()
        except Exception:
            logger.exception("Display refresh hook failed")
