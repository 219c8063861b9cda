"""Exceptions raised by the arena."""

from __future__ import annotations

from typing import Iterable

from hexroyale.core.enums import BattleStatus


class ArenaError(Exception):
    """Base class for arena errors."""


class LifecycleError(ArenaError):
    """A lifecycle operation was called from the wrong battle state."""

    def __init__(
        self,
        action: str,
        actual: BattleStatus,
        expected: Iterable[BattleStatus] = (),
        detail: str = "",
    ) -> None:
        self.action = action
        self.actual = actual
        self.expected = tuple(expected)
        if self.expected:
            wanted = " or ".join(s.value for s in self.expected)
            message = f"Cannot {action}: battle is {actual.value}, expected {wanted}"
        else:
            message = f"Cannot {action}: battle is {actual.value}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
