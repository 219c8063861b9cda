"""Thread-safe narrative feed of battle events for spectators."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class BattleEvent:
    """One line of the battle feed."""

    epoch: int
    category: str
    message: str
    agent_ids: tuple[str, ...] = ()


class EventLog:
    """Bounded event feed. The orchestrator appends once per epoch.

    Readers get copies, so a transport layer may poll from another thread
    while an epoch is being processed.
    """

    __slots__ = ("_buffer", "_lock")

    def __init__(self, maxlen: int | None = 5000) -> None:
        self._buffer: deque[BattleEvent] = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)

    def append(self, event: BattleEvent) -> None:
        with self._lock:
            self._buffer.append(event)

    def append_many(self, events: list[BattleEvent]) -> None:
        with self._lock:
            self._buffer.extend(events)

    def for_epoch(self, epoch: int) -> list[BattleEvent]:
        with self._lock:
            return [e for e in self._buffer if e.epoch == epoch]

    def since_epoch(self, epoch: int) -> list[BattleEvent]:
        """Return all events with epoch >= *epoch*."""
        with self._lock:
            return [e for e in self._buffer if e.epoch >= epoch]

    def latest(self, count: int = 50) -> list[BattleEvent]:
        with self._lock:
            items = list(self._buffer)
        return items[-count:]
