"""Combat resolver: attacks, defend costs and bleed.

Both resolvers are pure. They read a snapshot of ``{hp, is_alive}`` per
agent and return outcome records; the caller applies the deltas.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Collection, Iterable, Mapping

DEFEND_COST_PERCENT = 0.05
BLEED_PERCENT = 0.02


@dataclass(frozen=True, slots=True)
class CombatantState:
    hp: int
    is_alive: bool


@dataclass(frozen=True, slots=True)
class AttackInput:
    attacker_id: str
    target_id: str
    stake: int
    betrayal: bool = False


@dataclass(frozen=True, slots=True)
class CombatResult:
    attacker_id: str
    target_id: str
    attack_stake: int
    defended: bool
    hp_transfer: int       # Positive: attacker gained; negative: attacker lost to the defender
    betrayal: bool = False


@dataclass(frozen=True, slots=True)
class DefendCostResult:
    agent_id: str
    cost: int
    hp_before: int
    hp_after: int


@dataclass(frozen=True, slots=True)
class BleedResult:
    agent_id: str
    bleed_amount: int
    hp_before: int
    hp_after: int


@dataclass(frozen=True, slots=True)
class CombatOutcome:
    attacks: tuple[CombatResult, ...]
    defend_costs: tuple[DefendCostResult, ...]


def defend_cost(hp: int, percent: float = DEFEND_COST_PERCENT) -> int:
    return math.floor(hp * percent)


def bleed_amount(hp: int, percent: float = BLEED_PERCENT) -> int:
    return max(1, math.floor(hp * percent))


def resolve_combat(
    states: Mapping[str, CombatantState],
    attacks: Iterable[AttackInput],
    defenders: Collection[str],
    free_defenders: Collection[str] = (),
    damage_taken: Mapping[str, float] | None = None,
    defend_cost_percent: float = DEFEND_COST_PERCENT,
) -> CombatOutcome:
    """Resolve defend costs, then every attack independently.

    Defend costs are charged to every living defender whether attacked or not,
    except those in *free_defenders*. Each attack is then read against the same
    post-defend-cost snapshot, so no attack sees the result of another:

      - dead attacker or target: skipped
      - stake clamped to the attacker's HP; nothing left means skipped
      - defended target: attacker loses the stake, defender gains it
      - undefended target: attacker steals ``min(stake * taken, target.hp)``

    Overlapping transfers are settled by the caller, which applies each result
    through the clamped ``Agent.take_damage``/``Agent.heal``.

    *damage_taken* maps target ids to an incoming-damage multiplier; missing
    ids take 1.0, and 0.0 makes a target immune.
    """
    hp = {aid: s.hp for aid, s in states.items()}
    alive = {aid: s.is_alive for aid, s in states.items()}
    taken = damage_taken or {}
    defending = set(defenders)

    costs: list[DefendCostResult] = []
    for agent_id in sorted(defending):
        if not alive.get(agent_id, False):
            continue
        before = hp[agent_id]
        cost = 0 if agent_id in free_defenders else defend_cost(before, defend_cost_percent)
        hp[agent_id] = before - cost
        costs.append(DefendCostResult(agent_id, cost, before, hp[agent_id]))

    results: list[CombatResult] = []
    for attack in attacks:
        a, t = attack.attacker_id, attack.target_id
        if not alive.get(a, False) or not alive.get(t, False):
            continue
        stake = min(attack.stake, hp[a])
        if stake <= 0:
            continue

        if t in defending:
            results.append(CombatResult(a, t, stake, True, -stake, attack.betrayal))
            continue

        transfer = min(math.floor(stake * taken.get(t, 1.0)), hp[t])
        results.append(CombatResult(a, t, stake, False, transfer, attack.betrayal))

    return CombatOutcome(attacks=tuple(results), defend_costs=tuple(costs))


def apply_bleed(
    states: Mapping[str, CombatantState], percent: float = BLEED_PERCENT,
) -> list[BleedResult]:
    """Passive attrition for every living agent; at least 1 HP each."""
    results = []
    for agent_id in sorted(states):
        state = states[agent_id]
        if not state.is_alive:
            continue
        amount = min(bleed_amount(state.hp, percent), state.hp)
        results.append(BleedResult(agent_id, amount, state.hp, state.hp - amount))
    return results
