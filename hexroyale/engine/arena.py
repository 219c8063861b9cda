"""ArenaManager: battle lifecycle, roster, grid ownership and win detection.

Classic flow:      PENDING -> BETTING_OPEN -> ACTIVE -> COMPLETED
Multiplayer flow:  LOBBY -> COUNTDOWN -> ACTIVE -> COMPLETED
LOBBY and COUNTDOWN may also end in CANCELLED.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from hexroyale.api.schemas import (
    AgentStateSchema,
    BattleStateSchema,
    BuffSchema,
    CoordSchema,
    EliminationSchema,
    GridSchema,
)
from hexroyale.config import ArenaConfig
from hexroyale.core.enums import AgentClass, Asset, BattleStatus, DeathCause, Domain
from hexroyale.core.grid import HexGrid, create_grid
from hexroyale.core.hex import HexCoord
from hexroyale.core.items import ItemIdAllocator
from hexroyale.core.models import Agent, BattleRecord, EliminationRecord, RosterEntry
from hexroyale.core.phases import PhaseConfig, PhaseEntry, compute_phase_config, get_current_phase
from hexroyale.errors import ArenaError, LifecycleError
from hexroyale.systems.loot import LootSpawner
from hexroyale.systems.market import MarketSnapshot
from hexroyale.systems.rng import DeterministicRNG
from hexroyale.utils.event_log import BattleEvent, EventLog

logger = logging.getLogger(__name__)

NAME_POOLS: dict[AgentClass, tuple[str, ...]] = {
    AgentClass.WARRIOR: ("Bloodfang", "Ironjaw", "Wrathbringer", "Skullcrusher", "Doomhammer"),
    AgentClass.TRADER: ("Quant", "Fibonacci", "Bollinger", "Ichimoku", "Stochastic"),
    AgentClass.SURVIVOR: ("Cockroach", "Endurance", "Tortoise", "Wallflower", "Persistence"),
    AgentClass.PARASITE: ("Leech", "Mimic", "Copycat", "Shadow", "Symbiote"),
    AgentClass.GAMBLER: ("Dice", "Jackpot", "Wildcard", "Roulette", "Chaos"),
}

AgentSpec = AgentClass | tuple[AgentClass, str]


@dataclass(frozen=True, slots=True)
class LobbyEntry:
    agent_class: AgentClass
    name: str


@dataclass(frozen=True, slots=True)
class TargetLookup:
    """Outcome of resolving an agent reference; ``agent`` is None when not found."""

    agent: Agent | None
    reason: str = ""

    @property
    def found(self) -> bool:
        return self.agent is not None


class ArenaManager:
    """Owns one battle: its status, agents, grid, phases and eliminations."""

    __slots__ = (
        "config",
        "rng",
        "battle_id",
        "status",
        "epoch",
        "agents",
        "grid",
        "phase_config",
        "eliminations",
        "lobby",
        "event_log",
        "loot",
        "previous_market",
        "price_changes",
        "record",
        "_winner_id",
        "_winner_reason",
    )

    def __init__(
        self,
        config: ArenaConfig | None = None,
        rng: DeterministicRNG | None = None,
        battle_id: str | None = None,
        lobby: bool = False,
        item_ids: ItemIdAllocator | None = None,
    ) -> None:
        self.config = config or ArenaConfig()
        self.rng = rng or DeterministicRNG(self.config.seed)
        self.battle_id = battle_id or f"battle-{self.config.seed}"
        self.status = BattleStatus.LOBBY if lobby else BattleStatus.PENDING
        self.epoch = 0
        self.agents: dict[str, Agent] = {}
        self.grid: HexGrid = create_grid(self.config.grid_radius)
        self.phase_config: PhaseConfig | None = None
        self.eliminations: list[EliminationRecord] = []
        self.lobby: list[LobbyEntry] = []
        self.event_log = EventLog()
        self.loot = LootSpawner(self.config, self.rng, item_ids)
        self.previous_market: MarketSnapshot | None = None
        self.price_changes: dict[Asset, float] = {}
        self.record: BattleRecord | None = None
        self._winner_id: str | None = None
        self._winner_reason: str = ""

    def _require(self, action: str, *expected: BattleStatus) -> None:
        if self.status not in expected:
            raise LifecycleError(action, self.status, expected)

    def _log(self, category: str, message: str, *agent_ids: str) -> None:
        self.event_log.append(BattleEvent(self.epoch, category, message, tuple(agent_ids)))

    # -- spawning --

    def spawn_agents(self, specs: Sequence[AgentSpec]) -> list[Agent]:
        """Create the roster and place it on shuffled outer-ring tiles."""
        self._require("spawn agents", BattleStatus.PENDING)
        return self._spawn("spawn agents", specs)

    def _spawn(self, action: str, specs: Sequence[AgentSpec]) -> list[Agent]:
        if self.agents:
            raise LifecycleError(action, self.status, detail="agents already spawned")
        if len(specs) < 2:
            raise ArenaError(f"Cannot {action}: need at least 2 agents, got {len(specs)}")

        used: set[str] = set()
        spawned: list[Agent] = []
        for i, spec in enumerate(specs):
            agent_class, name = spec if isinstance(spec, tuple) else (spec, None)
            name = name or self._pick_name(agent_class, used)
            used.add(name.lower())
            spawned.append(Agent(
                id=f"agent-{i + 1}",
                name=name,
                agent_class=agent_class,
                hp=self.config.starting_hp,
                max_hp=self.config.starting_hp,
            ))

        for agent, coord in zip(spawned, self._spawn_tiles(len(spawned))):
            agent.position = coord
            self.grid = self.grid.place_agent(agent.id, coord)
            self.agents[agent.id] = agent

        logger.info("Battle %s: spawned %d agents", self.battle_id, len(spawned))
        self._log("spawn", f"{len(spawned)} agents entered the arena", *self.agents)
        return spawned

    def _pick_name(self, agent_class: AgentClass, used: set[str]) -> str:
        pool = NAME_POOLS[agent_class]
        for name in self.rng.shuffle(Domain.SPAWN, f"names-{agent_class.value}", 0, pool):
            if name.lower() not in used:
                return name
        n = 2
        while f"{pool[0]}-{n}".lower() in used:
            n += 1
        return f"{pool[0]}-{n}"

    def _spawn_tiles(self, count: int) -> list[HexCoord]:
        """Outer-ring tiles, shuffled and round-robined.

        When agents outnumber outer tiles the next empty tiles, lowest level
        first, are used so no tile ever holds two agents.
        """
        outer = [t.coord for t in self.grid.get_outer_ring_tiles() if t.occupant_id is None]
        outer = self.rng.shuffle(Domain.SPAWN, "placement", 0, outer)
        chosen: list[HexCoord] = []
        taken: set[HexCoord] = set()
        for i in range(count):
            coord = outer[i % len(outer)] if outer else None
            if coord is None or coord in taken:
                spare = sorted(
                    (t for t in self.grid.get_empty_tiles() if t.coord not in taken),
                    key=lambda t: (t.level, t.coord.q, t.coord.r),
                )
                if not spare:
                    raise ArenaError("Cannot spawn agents: the arena is full")
                coord = spare[0].coord
            taken.add(coord)
            chosen.append(coord)
        return chosen

    # -- classic lifecycle --

    def open_betting(self) -> None:
        self._require("open betting", BattleStatus.PENDING)
        if not self.agents:
            raise LifecycleError("open betting", self.status, detail="no agents spawned")
        self.status = BattleStatus.BETTING_OPEN
        logger.info("Battle %s: betting open", self.battle_id)

    def start_battle(self) -> None:
        self._require("start battle", BattleStatus.BETTING_OPEN)
        self._activate()

    def start_battle_immediate(self) -> None:
        """Skip betting: PENDING with a roster goes straight to ACTIVE."""
        self._require("start battle immediately", BattleStatus.PENDING)
        if not self.agents:
            raise LifecycleError("start battle immediately", self.status, detail="no agents spawned")
        self._activate()

    def _activate(self) -> None:
        self.phase_config = compute_phase_config(len(self.agents))
        self.grid, items = self.loot.spawn_cornucopia_items(self.grid)
        self.status = BattleStatus.ACTIVE
        logger.info(
            "Battle %s: ACTIVE with %d agents, %d epochs, %d cornucopia items",
            self.battle_id, len(self.agents), self.phase_config.total_epochs, len(items),
        )
        self._log("lifecycle", "The battle begins")

    # -- lobby lifecycle --

    def join_lobby(self, agent_class: AgentClass, name: str | None = None) -> LobbyEntry:
        self._require("join lobby", BattleStatus.LOBBY, BattleStatus.COUNTDOWN)
        if len(self.lobby) >= self.config.max_players:
            raise LifecycleError("join lobby", self.status, detail="lobby is full")
        used = {e.name.lower() for e in self.lobby}
        if name is not None and name.lower() in used:
            raise ArenaError(f"Cannot join lobby: name {name!r} is taken")
        entry = LobbyEntry(agent_class, name or self._pick_name(agent_class, used))
        self.lobby.append(entry)
        logger.info("Battle %s: %s joined the lobby (%d/%d)",
                    self.battle_id, entry.name, len(self.lobby), self.config.max_players)
        if self.status == BattleStatus.LOBBY and len(self.lobby) >= self.config.min_players:
            self.start_countdown()
        return entry

    def start_countdown(self) -> None:
        self._require("start countdown", BattleStatus.LOBBY)
        if len(self.lobby) < 2:
            raise LifecycleError("start countdown", self.status, detail="need at least 2 players")
        self.status = BattleStatus.COUNTDOWN
        logger.info("Battle %s: countdown started", self.battle_id)

    def spawn_from_lobby(self) -> list[Agent]:
        self._require("spawn from lobby", BattleStatus.COUNTDOWN)
        return self._spawn("spawn from lobby", [(e.agent_class, e.name) for e in self.lobby])

    def start_battle_from_lobby(self) -> None:
        self._require("start battle from lobby", BattleStatus.COUNTDOWN)
        if not self.agents:
            self.spawn_from_lobby()
        self._activate()

    def cancel_battle(self, reason: str = "") -> None:
        self._require("cancel battle", BattleStatus.LOBBY, BattleStatus.COUNTDOWN)
        self.status = BattleStatus.CANCELLED
        logger.info("Battle %s: cancelled %s", self.battle_id, reason)

    # -- roster --

    def get_agent(self, agent_id: str) -> Agent | None:
        return self.agents.get(agent_id)

    def get_agent_by_name(self, name: str) -> Agent | None:
        lowered = name.lower()
        for agent in self.agents.values():
            if agent.name.lower() == lowered:
                return agent
        return None

    def alive_agents(self) -> list[Agent]:
        return [a for a in self.agents.values() if a.is_alive]

    def resolve_target(self, ref: str | None, actor_id: str | None = None) -> TargetLookup:
        """Find a living agent by name, then by id. Never raises."""
        if not ref:
            return TargetLookup(None, "no target given")
        agent = self.get_agent_by_name(ref) or self.get_agent(ref)
        if agent is None:
            return TargetLookup(None, f"unknown agent {ref!r}")
        if not agent.is_alive:
            return TargetLookup(None, f"{agent.name} is dead")
        if agent.id == actor_id:
            return TargetLookup(None, "cannot target self")
        return TargetLookup(agent)

    def set_grid(self, grid: HexGrid) -> None:
        self.grid = grid

    # -- epochs --

    @property
    def phase(self) -> PhaseEntry | None:
        if self.phase_config is None:
            return None
        return get_current_phase(max(1, self.epoch), self.phase_config)

    def increment_epoch(self) -> int:
        self._require("increment epoch", BattleStatus.ACTIVE)
        self.epoch += 1
        return self.epoch

    def eliminate_agent(
        self,
        agent_id: str,
        cause: DeathCause | None = None,
        killer_id: str | None = None,
    ) -> EliminationRecord | None:
        """Force an agent out of the battle. Repeat calls are no-ops."""
        agent = self.agents.get(agent_id)
        if agent is None:
            raise ArenaError(f"Cannot eliminate unknown agent {agent_id!r}")
        if agent.eliminated:
            return None
        final_hp = agent.hp
        agent.hp = 0
        agent.eliminated = True
        if agent.position is not None:
            self.grid = self.grid.remove_agent(agent.position)
        record = EliminationRecord(
            agent_id=agent.id,
            agent_name=agent.name,
            agent_class=agent.agent_class,
            eliminated_at_epoch=self.epoch,
            final_hp=final_hp,
            cause=cause,
            killer_id=killer_id,
        )
        self.eliminations.append(record)
        logger.info("Epoch %d: %s eliminated (%s)", self.epoch, agent.name,
                    cause.value if cause else "forced")
        return record

    def get_eliminations(self) -> list[EliminationRecord]:
        return list(self.eliminations)

    # -- outcome --

    def is_complete(self) -> bool:
        if self.status.is_terminal:
            return True
        if self.status != BattleStatus.ACTIVE:
            return False
        return len(self.alive_agents()) <= 1

    def get_winner(self) -> Agent | None:
        """Sole survivor, or the top killer when everyone fell together."""
        if self._winner_id is not None:
            return self.agents[self._winner_id]
        if not self.agents or not self.is_complete():
            return None

        alive = self.alive_agents()
        if len(alive) == 1:
            winner = alive[0]
            self._winner_reason = f"{winner.name} is the last agent standing"
        elif alive:
            return None
        else:
            top = max(a.kills for a in self.agents.values())
            leaders = sorted(a.id for a in self.agents.values() if a.kills == top)
            winner_id = self.rng.choice(Domain.TIEBREAK, self.battle_id, self.epoch, leaders)
            winner = self.agents[winner_id]
            self._winner_reason = (
                f"Everyone got rekt at once; {winner.name} wins with the most kills ({top})"
            )
        self._winner_id = winner.id
        return winner

    @property
    def winner_reason(self) -> str:
        return self._winner_reason

    def complete_battle(self) -> BattleRecord:
        self._require("complete battle", BattleStatus.ACTIVE)
        winner = self.get_winner()
        self.status = BattleStatus.COMPLETED
        self.record = BattleRecord(
            battle_id=self.battle_id,
            winner_id=winner.id if winner else None,
            winner_name=winner.name if winner else None,
            winner_reason=self._winner_reason,
            total_epochs=self.epoch,
            roster=tuple(
                RosterEntry(
                    agent_id=a.id,
                    agent_name=a.name,
                    agent_class=a.agent_class,
                    final_hp=a.hp,
                    kills=a.kills,
                    epochs_survived=a.epochs_survived,
                    is_alive=a.is_alive,
                )
                for a in self.agents.values()
            ),
            eliminations=tuple(self.eliminations),
        )
        logger.info("Battle %s: COMPLETED after %d epochs. %s",
                    self.battle_id, self.epoch, self._winner_reason)
        self._log("lifecycle", self._winner_reason or "The battle is over",
                  *((winner.id,) if winner else ()))
        return self.record

    # -- serialization --

    def get_state(self) -> BattleStateSchema:
        phase = self.phase
        return BattleStateSchema(
            battle_id=self.battle_id,
            status=self.status,
            epoch=self.epoch,
            phase=phase.name if phase else None,
            total_epochs=self.phase_config.total_epochs if self.phase_config else None,
            agents=[_agent_schema(a) for a in self.agents.values()],
            grid=GridSchema.model_validate(self.grid.serialize()),
            eliminations=[
                EliminationSchema(
                    agent_id=e.agent_id,
                    agent_name=e.agent_name,
                    agent_class=e.agent_class,
                    eliminated_at_epoch=e.eliminated_at_epoch,
                    final_hp=e.final_hp,
                    cause=e.cause.value if e.cause else None,
                    killer_id=e.killer_id,
                )
                for e in self.eliminations
            ],
            winner_id=self._winner_id,
        )


def _agent_schema(agent: Agent) -> AgentStateSchema:
    pos = agent.position
    return AgentStateSchema(
        id=agent.id,
        name=agent.name,
        agent_class=agent.agent_class,
        hp=agent.hp,
        max_hp=agent.max_hp,
        is_alive=agent.is_alive,
        position=CoordSchema(q=pos.q, r=pos.r) if pos is not None else None,
        kills=agent.kills,
        epochs_survived=agent.epochs_survived,
        skill_cooldown=agent.skill_cooldown,
        skill_active=agent.skill_active,
        ally_id=agent.ally_id,
        alliance_epochs_remaining=agent.alliance_epochs_remaining,
        buffs=[
            BuffSchema(type=b.type, remaining_epochs=b.remaining_epochs, source_item_id=b.source_item_id)
            for b in agent.buffs
        ],
    )
