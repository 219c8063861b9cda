"""Immutable per-agent view of the battle handed to decision workers."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping

from hexroyale.core.enums import AgentClass, Asset
from hexroyale.core.grid import HexGrid
from hexroyale.core.hex import HexCoord
from hexroyale.core.items import Item, ItemBuff
from hexroyale.core.phases import PhaseEntry, get_current_phase
from hexroyale.systems.loot import has_oracle_buff, visible_items
from hexroyale.systems.market import MarketSnapshot

if TYPE_CHECKING:
    from hexroyale.core.models import Agent
    from hexroyale.engine.arena import ArenaManager


@dataclass(frozen=True, slots=True)
class AgentView:
    """Public facts about one agent."""

    id: str
    name: str
    agent_class: AgentClass
    hp: int
    max_hp: int
    is_alive: bool
    position: HexCoord | None
    kills: int
    ally_id: str | None
    skill_cooldown: int

    @classmethod
    def of(cls, agent: Agent) -> AgentView:
        return cls(
            id=agent.id,
            name=agent.name,
            agent_class=agent.agent_class,
            hp=agent.hp,
            max_hp=agent.max_hp,
            is_alive=agent.is_alive,
            position=agent.position,
            kills=agent.kills,
            ally_id=agent.ally_id,
            skill_cooldown=agent.skill_cooldown,
        )


@dataclass(frozen=True, slots=True)
class ArenaView:
    """Read-only battle state for one agent, safe to share across threads.

    The market is the last known snapshot; ``price_changes`` holds the
    percent moves that were resolved last epoch. Traps are only listed in
    ``items`` while the agent holds an ORACLE buff.
    """

    battle_id: str
    epoch: int
    phase: PhaseEntry
    self_id: str
    agents: Mapping[str, AgentView]
    grid: HexGrid
    market: MarketSnapshot
    price_changes: Mapping[Asset, float]
    items: tuple[Item, ...]
    buffs: tuple[ItemBuff, ...]

    @classmethod
    def build(
        cls,
        arena: ArenaManager,
        agent: Agent,
        market: MarketSnapshot,
        price_changes: Mapping[Asset, float],
    ) -> ArenaView:
        phase = get_current_phase(arena.epoch, arena.phase_config)
        return cls(
            battle_id=arena.battle_id,
            epoch=arena.epoch,
            phase=phase,
            self_id=agent.id,
            agents=MappingProxyType({a.id: AgentView.of(a) for a in arena.agents.values()}),
            grid=arena.grid,  # grid values are never mutated in place
            market=market,
            price_changes=MappingProxyType(dict(price_changes)),
            items=tuple(visible_items(arena.grid, has_oracle_buff(agent.buffs))),
            buffs=tuple(agent.buffs),
        )

    @property
    def me(self) -> AgentView:
        return self.agents[self.self_id]

    def opponents(self) -> list[AgentView]:
        """Living agents other than this one, in id order."""
        return [
            a for aid, a in sorted(self.agents.items())
            if aid != self.self_id and a.is_alive
        ]

    def is_storm(self, coord: HexCoord) -> bool:
        return self.grid.is_storm_tile(coord, self.phase)
