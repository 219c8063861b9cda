"""Rule-based decision strategies, one per agent class."""

from __future__ import annotations

from typing import TYPE_CHECKING

from hexroyale.ai.base import (
    ASSETS,
    DIRECTIONS,
    AgentStrategy,
    momentum_call,
    non_allies,
    step_out_of_storm,
    step_toward,
    step_toward_item,
    strongest,
    strongest_trend,
    weakest,
)
from hexroyale.api.schemas import AttackAction, EpochActions, PredictionAction
from hexroyale.core.enums import AgentClass, Asset, Domain, MarketDirection, PhaseName

if TYPE_CHECKING:
    from hexroyale.core.snapshot import ArenaView
    from hexroyale.systems.rng import DeterministicRNG


def _stake(hp: int, fraction: float) -> int:
    return max(1, int(hp * fraction))


class WarriorStrategy(AgentStrategy):
    """Hunts the weakest opponent and goes berserk on wounded prey."""

    agent_class = AgentClass.WARRIOR

    def decide(self, view: ArenaView) -> EpochActions:
        me = view.me
        prey = weakest(non_allies(view))
        attack = None
        berserk = False
        if view.phase.combat_enabled and prey is not None:
            attack = AttackAction(target=prey.name, stake=_stake(me.hp, 0.2))
            berserk = prey.hp < me.hp

        move = step_out_of_storm(view)
        if move is None and prey is not None and prey.position is not None:
            move = step_toward(view, prey.position)

        return EpochActions(
            prediction=PredictionAction(
                asset=Asset.ETH, direction=momentum_call(view, Asset.ETH), stake_percent=15,
            ),
            move=move,
            attack=attack,
            use_skill=berserk and me.skill_cooldown == 0,
            reasoning=f"Hunting {prey.name}" if prey else "No prey left",
        )


class TraderStrategy(AgentStrategy):
    """Rides the strongest trend and saves insider info for the late game."""

    agent_class = AgentClass.TRADER

    def decide(self, view: ArenaView) -> EpochActions:
        me = view.me
        asset = strongest_trend(view)
        late = view.phase.name in (PhaseName.BLOOD, PhaseName.FINAL_STAND)
        insider = me.skill_cooldown == 0 and (late or me.hp < me.max_hp * 0.6)
        return EpochActions(
            prediction=PredictionAction(
                asset=asset,
                direction=momentum_call(view, asset),
                stake_percent=50 if insider else 30,
            ),
            move=step_out_of_storm(view) or step_toward_item(view),
            defend=view.phase.combat_enabled and me.hp < me.max_hp * 0.4,
            use_skill=insider,
            reasoning=f"Trading {asset.value} momentum",
        )


class SurvivorStrategy(AgentStrategy):
    """Stakes little, defends often, and looks for a protector."""

    agent_class = AgentClass.SURVIVOR

    def decide(self, view: ArenaView) -> EpochActions:
        me = view.me
        ally_target = None
        if me.ally_id is None:
            partner = strongest(view.opponents())
            ally_target = partner.name if partner else None
        return EpochActions(
            prediction=PredictionAction(
                asset=Asset.BTC, direction=momentum_call(view, Asset.BTC), stake_percent=5,
            ),
            move=step_out_of_storm(view) or step_toward_item(view),
            defend=view.phase.combat_enabled,
            use_skill=me.skill_cooldown == 0 and me.hp < me.max_hp * 0.5,
            propose_alliance=ally_target,
            reasoning="Staying alive",
        )


class ParasiteStrategy(AgentStrategy):
    """Allies with the strongest and drains them when the pact runs out."""

    agent_class = AgentClass.PARASITE

    def decide(self, view: ArenaView) -> EpochActions:
        me = view.me
        host = strongest(view.opponents())
        siphon_target = strongest(non_allies(view))
        attack = None
        prey = weakest(non_allies(view))
        if view.phase.combat_enabled and prey is not None and prey.hp < me.hp // 2:
            attack = AttackAction(target=prey.name, stake=_stake(me.hp, 0.15))

        asset = strongest_trend(view)
        return EpochActions(
            prediction=PredictionAction(
                asset=asset, direction=momentum_call(view, asset), stake_percent=10,
            ),
            move=step_out_of_storm(view),
            attack=attack,
            use_skill=me.skill_cooldown == 0 and siphon_target is not None,
            skill_target=siphon_target.name if siphon_target else None,
            propose_alliance=host.name if host and me.ally_id is None else None,
            reasoning=f"Feeding on {siphon_target.name}" if siphon_target else "Lurking",
        )


class GamblerStrategy(AgentStrategy):
    """Random calls at maximum stake, random fights, always all-in."""

    agent_class = AgentClass.GAMBLER

    def decide(self, view: ArenaView) -> EpochActions:
        if self.rng is None:
            raise RuntimeError("GamblerStrategy needs an RNG")
        me = view.me
        key, epoch = me.id, view.epoch
        asset = self.rng.choice(Domain.DECISION, key, epoch, ASSETS, salt=10)
        direction: MarketDirection = self.rng.choice(Domain.DECISION, key, epoch, DIRECTIONS, salt=11)

        attack = None
        targets = non_allies(view)
        if view.phase.combat_enabled and targets and self.rng.next_bool(Domain.DECISION, key, epoch, 0.5, salt=12):
            victim = self.rng.choice(Domain.DECISION, key, epoch, targets, salt=13)
            attack = AttackAction(target=victim.name, stake=_stake(me.hp, 0.25))

        return EpochActions(
            prediction=PredictionAction(asset=asset, direction=direction, stake_percent=50),
            move=step_out_of_storm(view),
            attack=attack,
            use_skill=me.skill_cooldown == 0,
            reasoning="Feeling lucky",
        )


STRATEGY_REGISTRY: dict[AgentClass, type[AgentStrategy]] = {
    cls.agent_class: cls
    for cls in (WarriorStrategy, TraderStrategy, SurvivorStrategy, ParasiteStrategy, GamblerStrategy)
}


def strategy_for(agent_class: AgentClass, rng: DeterministicRNG | None = None) -> AgentStrategy:
    return STRATEGY_REGISTRY[agent_class](rng)
