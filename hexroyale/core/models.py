"""Agent model and battle records."""

from __future__ import annotations

from dataclasses import dataclass, field

from hexroyale.core.enums import CLASS_SKILLS, AgentClass, DeathCause, SkillName
from hexroyale.core.hex import HexCoord
from hexroyale.core.items import ItemBuff


@dataclass(slots=True)
class Agent:
    """Mutable combatant owned by the arena manager.

    Only the epoch orchestrator mutates agents, and only while processing an
    epoch. HP is always clamped to ``[0, max_hp]``.
    """

    id: str
    name: str
    agent_class: AgentClass
    hp: int = 1000
    max_hp: int = 1000
    position: HexCoord | None = None
    kills: int = 0
    epochs_survived: int = 0
    eliminated: bool = False

    # --- Skill ---
    skill_cooldown: int = 0          # Epochs until the skill can be used again
    skill_active: bool = False       # True only during the epoch it was activated

    # --- Alliance ---
    ally_id: str | None = None
    alliance_epochs_remaining: int = 0

    buffs: list[ItemBuff] = field(default_factory=list)

    @property
    def is_alive(self) -> bool:
        return self.hp > 0 and not self.eliminated

    @property
    def skill(self) -> SkillName:
        return CLASS_SKILLS[self.agent_class]

    @property
    def can_use_skill(self) -> bool:
        return self.is_alive and self.skill_cooldown <= 0

    def take_damage(self, amount: int) -> int:
        """Lose up to *amount* HP; returns the HP actually lost."""
        if amount <= 0:
            return 0
        lost = min(amount, self.hp)
        self.hp -= lost
        return lost

    def heal(self, amount: int) -> int:
        """Gain up to *amount* HP (never above max); the dead cannot heal."""
        if amount <= 0 or not self.is_alive:
            return 0
        gained = min(amount, self.max_hp - self.hp)
        self.hp += gained
        return gained

    def apply_hp_delta(self, delta: int) -> int:
        return self.heal(delta) if delta >= 0 else -self.take_damage(-delta)

    def break_alliance(self) -> None:
        self.ally_id = None
        self.alliance_epochs_remaining = 0


@dataclass(frozen=True, slots=True)
class EliminationRecord:
    agent_id: str
    agent_name: str
    agent_class: AgentClass
    eliminated_at_epoch: int
    final_hp: int
    cause: DeathCause | None = None
    killer_id: str | None = None


@dataclass(frozen=True, slots=True)
class RosterEntry:
    agent_id: str
    agent_name: str
    agent_class: AgentClass
    final_hp: int
    kills: int
    epochs_survived: int
    is_alive: bool


@dataclass(frozen=True, slots=True)
class BattleRecord:
    """Summary written once when a battle completes."""

    battle_id: str
    winner_id: str | None
    winner_name: str | None
    winner_reason: str
    total_epochs: int
    roster: tuple[RosterEntry, ...]
    eliminations: tuple[EliminationRecord, ...]
