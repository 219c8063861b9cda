"""EpochProcessor: the fixed per-epoch pipeline.

Stage order:
   1. Advance the epoch counter, fetch the market
   2. Collect decisions concurrently (failures fall back to defaults)
   3. Movement (all contenders for one tile fail)
   4. Traps, then item pickups on the tiles agents moved onto
   5. Sponsor boosts
   6. Skills, alliance breaks / proposals, betrayal detection
   7. Predictions
   8. Combat (defend costs, then attacks)
   9. Loot spawn, buff ticks
  10. Bleed, then storm damage
  11. Deaths, kills, final words
  12. Survival counters, win check, skill and alliance countdowns
  13. Assemble the EpochResult

Later stages read HP written by earlier ones, so the order is fixed.
"""

from __future__ import annotations

import logging
import math
import time
from collections import defaultdict
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Callable, Mapping

from hexroyale.actions.alliances import (
    AllianceEvent,
    betray,
    break_on_death,
    is_betrayal,
    resolve_breaks,
    resolve_proposals,
    tick_alliances,
)
from hexroyale.actions.combat import (
    AttackInput,
    BleedResult,
    CombatantState,
    CombatResult,
    DefendCostResult,
    apply_bleed,
    resolve_combat,
)
from hexroyale.actions.death import (
    FINAL_WORDS,
    DamageLedger,
    DeathEvent,
    check_deaths,
    determine_cause,
    find_killer,
)
from hexroyale.actions.move import MoveResult, resolve_moves
from hexroyale.actions.prediction import PredictionInput, PredictionResult, resolve_predictions
from hexroyale.actions.skills import (
    TARGETED_SKILLS,
    SkillActivation,
    activate_skills,
    is_fortified,
    skill_active,
    tick_skills,
)
from hexroyale.ai.strategies import strategy_for
from hexroyale.api.schemas import CoordSchema, EpochResultSchema, SponsorEffect
from hexroyale.api.serialize import to_jsonable
from hexroyale.core.enums import Asset, DeathCause, Domain, SkillName, SponsorTier
from hexroyale.core.hex import HexCoord
from hexroyale.core.items import BuffTickResult, Item, PickupResult, TrapTriggerResult
from hexroyale.core.phases import PhaseEntry, PhaseTransition, detect_phase_transition, get_current_phase
from hexroyale.core.snapshot import ArenaView
from hexroyale.engine.worker_pool import WorkerPool
from hexroyale.systems.loot import add_buff, check_traps, get_weapon_bonus, has_shield_buff, tick_item_buffs
from hexroyale.utils.event_log import BattleEvent

if TYPE_CHECKING:
    from hexroyale.ai.base import AgentStrategy
    from hexroyale.api.schemas import BattleStateSchema
    from hexroyale.config import ArenaConfig
    from hexroyale.core.models import Agent
    from hexroyale.engine.arena import ArenaManager
    from hexroyale.systems.market import MarketSnapshot, MarketSource

logger = logging.getLogger(__name__)

FinalWordsFn = Callable[["Agent", DeathCause], str]


@dataclass(frozen=True, slots=True)
class SponsorBoost:
    agent_id: str
    hp_boost: int           # Actually applied, after the max-HP cap
    hp_before: int
    hp_after: int
    free_defend: bool = False
    attack_boost: float = 0.0
    tier: SponsorTier | None = None
    sponsorship_id: str | None = None
    message: str | None = None


@dataclass(frozen=True, slots=True)
class StormDamage:
    agent_id: str
    agent_name: str
    damage: int
    tile: HexCoord
    phase: str
    hp_after: int


@dataclass(slots=True)
class EpochResult:
    """Everything that happened in one epoch, in stage order."""

    battle_id: str
    epoch: int
    phase: PhaseEntry
    phase_transition: PhaseTransition | None
    market: MarketSnapshot
    previous_market: MarketSnapshot
    storm_tiles: tuple[HexCoord, ...]
    state: BattleStateSchema
    fallbacks: dict[str, str] = field(default_factory=dict)
    moves: list[MoveResult] = field(default_factory=list)
    traps: list[TrapTriggerResult] = field(default_factory=list)
    pickups: list[PickupResult] = field(default_factory=list)
    sponsor_boosts: list[SponsorBoost] = field(default_factory=list)
    skills: list[SkillActivation] = field(default_factory=list)
    alliance_events: list[AllianceEvent] = field(default_factory=list)
    predictions: list[PredictionResult] = field(default_factory=list)
    defend_costs: list[DefendCostResult] = field(default_factory=list)
    combat: list[CombatResult] = field(default_factory=list)
    spawned_items: list[Item] = field(default_factory=list)
    buff_ticks: list[BuffTickResult] = field(default_factory=list)
    bleed: list[BleedResult] = field(default_factory=list)
    storm_damage: list[StormDamage] = field(default_factory=list)
    deaths: list[DeathEvent] = field(default_factory=list)
    battle_complete: bool = False
    winner_id: str | None = None
    winner_name: str | None = None
    winner_reason: str | None = None

    _EVENT_FIELDS = (
        "moves", "traps", "pickups", "sponsor_boosts", "skills", "alliance_events",
        "predictions", "defend_costs", "combat", "spawned_items", "buff_ticks",
        "bleed", "storm_damage", "deaths",
    )

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready snapshot for transport, persistence and rendering."""
        schema = EpochResultSchema(
            battle_id=self.battle_id,
            epoch=self.epoch,
            phase=self.phase.name,
            phase_changed=to_jsonable(self.phase_transition),
            market={a.value: p for a, p in self.market.prices.items()},
            previous_market={a.value: p for a, p in self.previous_market.prices.items()},
            storm_tiles=[CoordSchema(q=c.q, r=c.r) for c in self.storm_tiles],
            events={name: to_jsonable(getattr(self, name)) for name in self._EVENT_FIELDS},
            battle=self.state,
            battle_complete=self.battle_complete,
            winner_id=self.winner_id,
            winner_reason=self.winner_reason,
        )
        return schema.model_dump(mode="json")


@dataclass(frozen=True, slots=True)
class _AttackIntent:
    attacker_id: str
    target_id: str
    stake: int
    betrayal: bool


class EpochProcessor:
    """Runs the epochs of one battle against a decision worker pool.

    Strategies are looked up per agent id; agents without one get the
    built-in strategy for their class on first use. Callers must not have
    more than one ``process`` call in flight.
    """

    __slots__ = ("_config", "_pool", "_strategies", "_events", "_epoch")

    def __init__(
        self,
        config: ArenaConfig,
        worker_pool: WorkerPool,
        strategies: Mapping[str, AgentStrategy] | None = None,
    ) -> None:
        self._config = config
        self._pool = worker_pool
        self._strategies: dict[str, AgentStrategy] = dict(strategies or {})
        self._events: list[BattleEvent] = []
        self._epoch = 0

    def _emit(self, category: str, message: str, *agent_ids: str) -> None:
        self._events.append(BattleEvent(self._epoch, category, message, tuple(agent_ids)))

    def _strategies_for(self, arena: ArenaManager) -> dict[str, AgentStrategy]:
        for agent in arena.agents.values():
            if agent.id not in self._strategies:
                self._strategies[agent.id] = strategy_for(agent.agent_class, arena.rng)
        return self._strategies

    # ------------------------------------------------------------------

    def process(
        self,
        arena: ArenaManager,
        market_source: MarketSource,
        previous_market: MarketSnapshot | None = None,
        final_words: FinalWordsFn | None = None,
        sponsor_effects: Mapping[str, SponsorEffect | dict[str, Any]] | None = None,
    ) -> EpochResult:
        """Process exactly one epoch of an ACTIVE battle."""
        t0 = time.perf_counter()
        cfg = self._config

        # 1. epoch counter and market
        epoch = arena.increment_epoch()
        self._epoch = epoch
        self._events = []
        assert arena.phase_config is not None
        phase = get_current_phase(epoch, arena.phase_config)
        transition = detect_phase_transition(epoch - 1, epoch, arena.phase_config)
        if transition is not None:
            self._emit("phase", f"Phase {transition.to_phase.value} begins")
            logger.info("Epoch %d: phase %s -> %s",
                        epoch, transition.from_phase.value, transition.to_phase.value)
        current = market_source.fetch_prices()
        previous = previous_market or arena.previous_market or current
        ledgers: dict[str, DamageLedger] = defaultdict(DamageLedger)

        # 2. decisions
        alive = arena.alive_agents()
        views = {a.id: ArenaView.build(arena, a, previous, arena.price_changes) for a in alive}
        outcomes = self._pool.collect(views, self._strategies_for(arena), epoch)
        actions = {aid: o.actions for aid, o in outcomes.items()}
        fallbacks = {aid: o.error for aid, o in outcomes.items() if o.fallback}

        result = EpochResult(
            battle_id=arena.battle_id,
            epoch=epoch,
            phase=phase,
            phase_transition=transition,
            market=current,
            previous_market=previous,
            storm_tiles=tuple(t.coord for t in arena.grid.get_storm_tiles(phase)),
            state=arena.get_state(),
            fallbacks=fallbacks,
        )

        self._resolve_movement(arena, actions, result)                              # 3
        self._resolve_items(arena, result, ledgers, epoch)                          # 4
        free_defenders, attack_boosts = self._apply_sponsors(arena, sponsor_effects, result)  # 5
        intents = self._resolve_intents(arena, actions, phase, result, ledgers)     # 6
        self._resolve_predictions(arena, actions, current, previous, result, ledgers)  # 7
        if phase.combat_enabled:                                                    # 8
            self._resolve_combat(arena, actions, intents, free_defenders, attack_boosts, result, ledgers)

        # 9. loot and buffs
        grid, result.spawned_items = arena.loot.spawn_items(arena.grid, epoch)
        arena.set_grid(grid)
        living = [a for a in arena.agents.values() if a.is_alive]
        updated, result.buff_ticks = tick_item_buffs({a.id: a.buffs for a in living})
        for agent in living:
            agent.buffs = updated[agent.id]

        self._apply_attrition(arena, phase, result, ledgers)                        # 10
        self._resolve_deaths(arena, final_words, result, ledgers, epoch)            # 11

        # 12. bookkeeping
        for agent in arena.alive_agents():
            agent.epochs_survived += 1
        complete = arena.is_complete()
        tick_skills(arena.agents)
        for event in tick_alliances(arena.agents):
            result.alliance_events.append(event)
            self._emit("alliance", event.description, event.agent_id, event.partner_id)
        arena.price_changes = {asset: current.percent_change(previous, asset) for asset in Asset}
        arena.previous_market = current

        if complete:
            arena.complete_battle()
            winner = arena.get_winner()
            result.battle_complete = True
            result.winner_id = winner.id if winner else None
            result.winner_name = winner.name if winner else None
            result.winner_reason = arena.winner_reason

        # 13. assemble
        result.state = arena.get_state()
        arena.event_log.append_many(self._events)
        elapsed = (time.perf_counter() - t0) * 1000
        logger.info(
            "Epoch %d [%s]: %d alive, %d deaths, %d fallbacks (%.1fms)",
            epoch, phase.name.value, len(arena.alive_agents()), len(result.deaths),
            len(fallbacks), elapsed,
        )
        return result

    def run(
        self,
        arena: ArenaManager,
        market_source: MarketSource,
        max_epochs: int | None = None,
        on_epoch: Callable[[EpochResult], None] | None = None,
    ) -> list[EpochResult]:
        """Process epochs until the battle completes or *max_epochs* is hit."""
        limit = max_epochs if max_epochs is not None else self._config.max_epochs
        results: list[EpochResult] = []
        while not arena.is_complete() and arena.epoch < limit:
            result = self.process(arena, market_source)
            results.append(result)
            if on_epoch is not None:
                on_epoch(result)
        return results

    # -- stage 3 --

    def _resolve_movement(self, arena: ArenaManager, actions: dict, result: EpochResult) -> None:
        requests = {
            aid: act.move.to_coord() for aid, act in actions.items() if act.move is not None
        }
        if not requests:
            return
        positions = {
            a.id: a.position for a in arena.alive_agents() if a.position is not None
        }
        grid, moves = resolve_moves(arena.grid, positions, requests)
        arena.set_grid(grid)
        for move in moves:
            if move.success:
                arena.agents[move.agent_id].position = move.to_coord
            elif move.reason:
                logger.debug("Epoch %d: move by %s rejected: %s",
                             result.epoch, move.agent_id, move.reason)
        result.moves = moves

    # -- stage 4 --

    def _resolve_items(
        self,
        arena: ArenaManager,
        result: EpochResult,
        ledgers: dict[str, DamageLedger],
        epoch: int,
    ) -> None:
        cfg = self._config
        grid = arena.grid
        for move in result.moves:
            if not move.success:
                continue
            agent = arena.agents[move.agent_id]
            grid, fired = check_traps(agent.id, move.to_coord, grid, cfg.trap_damage)
            for trap in fired:
                lost = agent.take_damage(trap.damage)
                ledgers[agent.id].environment += lost
                result.traps.append(trap)
                self._emit("trap", f"{agent.name} triggered a trap (-{lost} HP)", agent.id)
            if not agent.is_alive:
                continue
            for item in grid.items_at(move.to_coord):
                pickup = arena.loot.pickup_item(agent.id, item, agent.hp, agent.max_hp, epoch)
                if pickup.hp_change > 0:
                    agent.heal(pickup.hp_change)
                elif pickup.hp_change < 0:
                    ledgers[agent.id].environment += agent.take_damage(-pickup.hp_change)
                if pickup.buff is not None:
                    agent.buffs = add_buff(agent.buffs, pickup.buff)
                grid = grid.remove_item(move.to_coord, item.id)
                result.pickups.append(pickup)
                self._emit("pickup", f"{agent.name} picked up {item.type.value}: {pickup.effect}", agent.id)
        arena.set_grid(grid)

    # -- stage 5 --

    def _apply_sponsors(
        self,
        arena: ArenaManager,
        sponsor_effects: Mapping[str, SponsorEffect | dict[str, Any]] | None,
        result: EpochResult,
    ) -> tuple[set[str], dict[str, float]]:
        free_defenders: set[str] = set()
        attack_boosts: dict[str, float] = {}
        for agent_id in sorted(sponsor_effects or {}):
            agent = arena.get_agent(agent_id)
            if agent is None or not agent.is_alive:
                logger.debug("Sponsor effect for unavailable agent %s ignored", agent_id)
                continue
            raw = sponsor_effects[agent_id]
            effect = raw if isinstance(raw, SponsorEffect) else SponsorEffect.model_validate(raw)
            before = agent.hp
            gained = agent.heal(effect.hp_boost)
            if effect.free_defend:
                free_defenders.add(agent_id)
            if effect.attack_boost > 0:
                attack_boosts[agent_id] = effect.attack_boost
            result.sponsor_boosts.append(SponsorBoost(
                agent_id=agent_id,
                hp_boost=gained,
                hp_before=before,
                hp_after=agent.hp,
                free_defend=effect.free_defend,
                attack_boost=effect.attack_boost,
                tier=effect.tier,
                sponsorship_id=effect.sponsorship_id,
                message=effect.message,
            ))
            self._emit("sponsor", f"{agent.name} received a sponsor gift (+{gained} HP)", agent_id)
        return free_defenders, attack_boosts

    # -- stage 6 --

    def _resolve_intents(
        self,
        arena: ArenaManager,
        actions: dict,
        phase: PhaseEntry,
        result: EpochResult,
        ledgers: dict[str, DamageLedger],
    ) -> list[_AttackIntent]:
        cfg = self._config

        skill_requests: dict[str, str | None] = {}
        for aid in sorted(actions):
            act = actions[aid]
            agent = arena.agents[aid]
            if not act.use_skill or not agent.is_alive:
                continue
            target_id = None
            if agent.skill in TARGETED_SKILLS:
                lookup = arena.resolve_target(act.skill_target, aid)
                if not lookup.found:
                    logger.debug("Skill by %s dropped: %s", aid, lookup.reason)
                    continue
                target_id = lookup.agent.id
            skill_requests[aid] = target_id
        result.skills = activate_skills(
            skill_requests, arena.agents, cfg.skill_cooldown_epochs, cfg.siphon_percent,
        )
        for activation in result.skills:
            if activation.hp_stolen and activation.target_id:
                ledgers[activation.target_id].add_combat(activation.hp_stolen, activation.agent_id)
            self._emit("skill", f"{activation.agent_name} used {activation.skill.value}: "
                       f"{activation.description}", activation.agent_id)

        events = resolve_breaks(
            [aid for aid, act in actions.items() if act.break_alliance], arena.agents,
        )
        proposals: dict[str, str] = {}
        for aid, act in actions.items():
            if not act.propose_alliance:
                continue
            lookup = arena.resolve_target(act.propose_alliance, aid)
            if lookup.found:
                proposals[aid] = lookup.agent.id
            else:
                logger.debug("Alliance proposal by %s dropped: %s", aid, lookup.reason)
        events += resolve_proposals(proposals, arena.agents, cfg.alliance_duration_epochs)

        intents: list[_AttackIntent] = []
        if phase.combat_enabled:
            for aid in sorted(actions):
                attack = actions[aid].attack
                attacker = arena.agents[aid]
                if attack is None or not attacker.is_alive:
                    continue
                lookup = arena.resolve_target(attack.target, aid)
                if not lookup.found:
                    logger.debug("Attack by %s dropped: %s", aid, lookup.reason)
                    continue
                target = lookup.agent
                betrayal = is_betrayal(attacker, target)
                if betrayal:
                    events.append(betray(attacker, target, arena.agents))
                intents.append(_AttackIntent(aid, target.id, attack.stake, betrayal))

        for event in events:
            self._emit("alliance", event.description, event.agent_id, event.partner_id)
        result.alliance_events.extend(events)
        return intents

    # -- stage 7 --

    def _resolve_predictions(
        self,
        arena: ArenaManager,
        actions: dict,
        current: MarketSnapshot,
        previous: MarketSnapshot,
        result: EpochResult,
        ledgers: dict[str, DamageLedger],
    ) -> None:
        cfg = self._config
        inputs: list[PredictionInput] = []
        for aid in sorted(actions):
            agent = arena.agents[aid]
            if not agent.is_alive:
                continue
            pred = actions[aid].prediction
            pct = min(cfg.max_stake_percent, max(cfg.min_stake_percent, pred.stake_percent))
            stake = math.floor(agent.hp * pct / 100)
            if skill_active(agent, SkillName.ALL_IN):
                stake = math.floor(stake * cfg.all_in_stake_multiplier)
            stake = min(stake, agent.hp)
            if stake <= 0:
                continue
            inputs.append(PredictionInput(aid, pred.asset, pred.direction, stake))

        for res in resolve_predictions(inputs, current, previous, cfg.flat_threshold):
            agent = arena.agents[res.agent_id]
            if skill_active(agent, SkillName.INSIDER_INFO) and res.hp_change <= 0:
                res = replace(res, hp_change=res.stake, correct=True)
            elif is_fortified(agent) and res.hp_change < 0:
                res = replace(res, hp_change=0, correct=False)
            applied = agent.apply_hp_delta(res.hp_change)
            if applied < 0:
                ledgers[agent.id].prediction += -applied
            result.predictions.append(res)

    # -- stage 8 --

    def _resolve_combat(
        self,
        arena: ArenaManager,
        actions: dict,
        intents: list[_AttackIntent],
        free_defenders: set[str],
        attack_boosts: dict[str, float],
        result: EpochResult,
        ledgers: dict[str, DamageLedger],
    ) -> None:
        cfg = self._config
        agents = arena.agents

        attacks: list[AttackInput] = []
        for intent in intents:
            attacker = agents[intent.attacker_id]
            multiplier = (
                1.0
                + get_weapon_bonus(attacker.buffs, cfg.weapon_attack_bonus)
                + attack_boosts.get(attacker.id, 0.0)
            )
            if skill_active(attacker, SkillName.BERSERK):
                multiplier *= cfg.berserk_attack_multiplier
            if intent.betrayal:
                multiplier *= cfg.betrayal_multiplier
            attacks.append(AttackInput(
                intent.attacker_id, intent.target_id,
                math.floor(intent.stake * multiplier), intent.betrayal,
            ))

        damage_taken: dict[str, float] = {}
        for agent in agents.values():
            if is_fortified(agent):
                damage_taken[agent.id] = 0.0
            elif skill_active(agent, SkillName.BERSERK):
                damage_taken[agent.id] = cfg.berserk_damage_taken_multiplier

        defenders = {aid for aid, act in actions.items() if act.defend and agents[aid].is_alive}
        free = {aid for aid in defenders if has_shield_buff(agents[aid].buffs)} | free_defenders

        outcome = resolve_combat(
            {a.id: CombatantState(a.hp, a.is_alive) for a in agents.values()},
            attacks,
            defenders,
            free_defenders=free,
            damage_taken=damage_taken,
            defend_cost_percent=cfg.defend_cost_percent,
        )

        for cost in outcome.defend_costs:
            ledgers[cost.agent_id].add_combat(agents[cost.agent_id].take_damage(cost.cost))
        for res in outcome.attacks:
            attacker, target = agents[res.attacker_id], agents[res.target_id]
            if res.defended:
                lost = attacker.take_damage(-res.hp_transfer)
                target.heal(lost)
                ledgers[attacker.id].add_combat(lost)
                self._emit("combat", f"{target.name} blocked {attacker.name} (+{lost} HP)",
                           attacker.id, target.id)
            else:
                lost = target.take_damage(res.hp_transfer)
                attacker.heal(lost)
                ledgers[target.id].add_combat(lost, attacker.id)
                verb = "betrayed" if res.betrayal else "hit"
                self._emit("combat", f"{attacker.name} {verb} {target.name} for {lost} HP",
                           attacker.id, target.id)
        result.defend_costs = list(outcome.defend_costs)
        result.combat = list(outcome.attacks)

    # -- stage 10 --

    def _apply_attrition(
        self,
        arena: ArenaManager,
        phase: PhaseEntry,
        result: EpochResult,
        ledgers: dict[str, DamageLedger],
    ) -> None:
        states = {
            a.id: CombatantState(a.hp, a.is_alive) for a in arena.agents.values() if a.is_alive
        }
        result.bleed = apply_bleed(states, self._config.bleed_percent)
        for bleed in result.bleed:
            ledgers[bleed.agent_id].environment += arena.agents[bleed.agent_id].take_damage(bleed.bleed_amount)

        if phase.storm_ring < 0:
            return
        for agent in arena.alive_agents():
            if agent.position is None or is_fortified(agent):
                continue
            if not arena.grid.is_storm_tile(agent.position, phase):
                continue
            lost = agent.take_damage(self._config.storm_damage)
            ledgers[agent.id].environment += lost
            result.storm_damage.append(StormDamage(
                agent.id, agent.name, lost, agent.position, phase.name.value, agent.hp,
            ))
            self._emit("storm", f"{agent.name} is caught in the storm (-{lost} HP)", agent.id)

    # -- stage 11 --

    def _resolve_deaths(
        self,
        arena: ArenaManager,
        final_words: FinalWordsFn | None,
        result: EpochResult,
        ledgers: dict[str, DamageLedger],
        epoch: int,
    ) -> None:
        dead = check_deaths((a.id, a.hp, a.eliminated) for a in arena.agents.values())
        for agent_id in dead:
            agent = arena.agents[agent_id]
            ledger = ledgers.get(agent_id) or DamageLedger()
            cause = determine_cause(ledger)
            killer_id = find_killer(ledger)
            killer = arena.agents.get(killer_id) if killer_id else None
            if killer is not None and killer.id != agent_id:
                killer.kills += 1

            broken = break_on_death(agent, arena.agents)
            if broken is not None:
                result.alliance_events.append(broken)

            words = self._final_words(arena, agent, cause, final_words, epoch)
            arena.eliminate_agent(agent_id, cause, killer.id if killer else None)
            result.deaths.append(DeathEvent(
                agent_id=agent.id,
                agent_name=agent.name,
                epoch=epoch,
                cause=cause,
                final_words=words,
                killer_id=killer.id if killer else None,
                killer_name=killer.name if killer else None,
            ))
            by = f" by {killer.name}" if killer else ""
            self._emit("death", f"{agent.name} was REKT{by} ({cause.value}): \"{words}\"", agent.id)

    @staticmethod
    def _final_words(
        arena: ArenaManager,
        agent: Agent,
        cause: DeathCause,
        generator: FinalWordsFn | None,
        epoch: int,
    ) -> str:
        if generator is not None:
            try:
                words = generator(agent, cause)
                if isinstance(words, str) and words.strip():
                    return words.strip()
            except Exception:
                logger.exception("Final words generator failed for %s, using canned line", agent.id)
        return arena.rng.choice(Domain.FINAL_WORDS, agent.id, epoch, FINAL_WORDS[cause])


def process_epoch(
    arena: ArenaManager,
    market_source: MarketSource,
    previous_market: MarketSnapshot | None = None,
    final_words: FinalWordsFn | None = None,
    sponsor_effects: Mapping[str, SponsorEffect | dict[str, Any]] | None = None,
    strategies: Mapping[str, AgentStrategy] | None = None,
) -> EpochResult:
    """One-shot epoch with a throwaway worker pool.

    Long-running callers should keep an ``EpochProcessor`` instead so the
    worker threads are reused.
    """
    pool = WorkerPool(arena.config, arena.rng)
    try:
        processor = EpochProcessor(arena.config, pool, strategies)
        return processor.process(arena, market_source, previous_market, final_words, sponsor_effects)
    finally:
        pool.shutdown()
