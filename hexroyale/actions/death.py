"""Death detection, cause attribution and final words."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from hexroyale.core.enums import DeathCause

FINAL_WORDS: dict[DeathCause, tuple[str, ...]] = {
    DeathCause.PREDICTION: (
        "The market... it betrayed me...",
        "I should have gone the other way...",
        "My charts... were wrong...",
    ),
    DeathCause.COMBAT: (
        "You fight without honor...",
        "I will be avenged...",
        "Tell them... I died fighting...",
    ),
    DeathCause.BLEED: (
        "Time... is the cruelest enemy...",
        "The arena drains us all...",
        "Slowly... but surely...",
    ),
    DeathCause.MULTI: (
        "Everything hit at once...",
        "Death by a thousand cuts...",
        "They all came for me...",
    ),
}


@dataclass(slots=True)
class DamageLedger:
    """HP lost by one agent during the current epoch, by source."""

    prediction: int = 0
    combat: int = 0
    environment: int = 0      # bleed, storm and traps
    by_attacker: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.prediction + self.combat + self.environment

    def add_combat(self, amount: int, attacker_id: str | None = None) -> None:
        if amount <= 0:
            return
        self.combat += amount
        if attacker_id is not None:
            self.by_attacker[attacker_id] = self.by_attacker.get(attacker_id, 0) + amount


@dataclass(frozen=True, slots=True)
class DeathEvent:
    agent_id: str
    agent_name: str
    epoch: int
    cause: DeathCause
    final_words: str
    killer_id: str | None = None
    killer_name: str | None = None


def determine_cause(ledger: DamageLedger) -> DeathCause:
    """A source with more than half the damage is the cause, otherwise ``multi``."""
    total = ledger.total
    if total <= 0:
        return DeathCause.BLEED
    for cause, amount in (
        (DeathCause.PREDICTION, ledger.prediction),
        (DeathCause.COMBAT, ledger.combat),
        (DeathCause.BLEED, ledger.environment),
    ):
        if amount * 2 > total:
            return cause
    return DeathCause.MULTI


def find_killer(ledger: DamageLedger) -> str | None:
    """The attacker who took the most HP this epoch; ties go to the lowest id."""
    if not ledger.by_attacker:
        return None
    return min(ledger.by_attacker.items(), key=lambda kv: (-kv[1], kv[0]))[0]


def check_deaths(hp_by_agent: Iterable[tuple[str, int, bool]]) -> list[str]:
    """Ids of agents at 0 HP that have not been eliminated yet.

    Accepts ``(agent_id, hp, eliminated)`` triples in roster order.
    """
    return [agent_id for agent_id, hp, eliminated in hp_by_agent if hp <= 0 and not eliminated]
