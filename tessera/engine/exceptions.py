"""Exceptions raised by the Tessera engine.

Engine functions raise these; ``tessera.engine.actions`` catches them at the
action boundary and reports them through the alert hook.
"""


class TesseraError(RuntimeError):
    """Base class for engine exceptions."""


class ValidationError(TesseraError):
    """Raised when user input is not a finite, whole, in-range value."""


class UnlockGateError(TesseraError):
    """Raised when an action is attempted below its progression threshold."""

    def __init__(self, name: str, required: int, counter: str) -> None:
        super().__init__(
            f"You're not powerful enough to purchase {name} yet "
            f"(requires {counter.replace('_', ' ')} {required})."
        )
        self.required = required
        self.counter = counter


class MaxLevelError(TesseraError):
    """Raised when an upgrade is already at its effective maximum level."""

    def __init__(self, name: str) -> None:
        super().__init__(f"{name} is already maxed.")


class AffordabilityError(TesseraError):
    """Raised when zero levels or units could be paid for."""


class ConsistencyError(TesseraError):
    """Raised by the integrity pass when recorded state drifts from the rules.

    Never escapes ``check_upgrades``: the offending upgrade is refunded.
    """

    def __init__(self, upgrade_id: str, reason: str) -> None:
        super().__init__(f"{upgrade_id}: {reason}")
        self.upgrade_id = upgrade_id
        self.reason = reason
