"""Exception hierarchy for reactree."""

from __future__ import annotations


class ReactreeError(Exception):
    """Base exception for all reactree errors."""


class ImmutabilityViolation(ReactreeError, TypeError):
    """Attempted to mutate state through a read-only (subscribable) proxy.

    Signals a programming error in the consuming code: state can only be
    changed inside an action.
    """

    def __init__(self, operation: str, target: object = None) -> None:
        self.operation = operation
        self.target = target
        super().__init__(
            f"cannot {operation} on subscribable state; mutate state inside an action"
        )


class InvalidStateShape(ReactreeError, TypeError):
    """The root state is not a dict or list."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(
            f"state must be a dict or list, got {type(value).__name__}"
        )
