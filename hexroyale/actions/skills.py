"""Class skill activation and the per-epoch skill bookkeeping."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping

from hexroyale.core.enums import SkillName

if TYPE_CHECKING:
    from hexroyale.core.models import Agent

logger = logging.getLogger(__name__)

SKILL_DESCRIPTIONS: dict[SkillName, str] = {
    SkillName.BERSERK: "Double attack damage, but take 50% more damage",
    SkillName.INSIDER_INFO: "Prediction automatically succeeds",
    SkillName.FORTIFY: "Immune to all damage this epoch",
    SkillName.SIPHON: "Steal 10% of the target's HP",
    SkillName.ALL_IN: "Double the prediction stake",
}

TARGETED_SKILLS = frozenset({SkillName.SIPHON})


@dataclass(frozen=True, slots=True)
class SkillActivation:
    agent_id: str
    agent_name: str
    skill: SkillName
    description: str
    target_id: str | None = None
    hp_stolen: int = 0


def activate_skills(
    requests: Mapping[str, str | None],
    agents: Mapping[str, Agent],
    cooldown: int = 5,
    siphon_percent: float = 0.10,
) -> list[SkillActivation]:
    """Activate requested skills for agents off cooldown.

    *requests* maps agent id to the resolved skill target id (None for
    untargeted skills). A targeted skill without a living target is dropped
    and does not consume the cooldown. SIPHON resolves after every other
    activation so a FORTIFY target is already immune.
    """
    activated: list[Agent] = []
    targets: dict[str, str | None] = {}
    for agent_id in sorted(requests):
        agent = agents.get(agent_id)
        if agent is None or not agent.can_use_skill:
            continue
        target_id = requests[agent_id]
        if agent.skill in TARGETED_SKILLS:
            target = agents.get(target_id) if target_id else None
            if target is None or not target.is_alive or target.id == agent.id:
                logger.debug("Dropping %s for %s: no valid target", agent.skill.value, agent_id)
                continue
        agent.skill_active = True
        agent.skill_cooldown = cooldown
        activated.append(agent)
        targets[agent_id] = target_id

    results: list[SkillActivation] = []
    for agent in activated:
        skill = agent.skill
        if skill != SkillName.SIPHON:
            results.append(SkillActivation(
                agent.id, agent.name, skill, SKILL_DESCRIPTIONS[skill],
            ))
            continue
        target = agents[targets[agent.id]]
        if is_fortified(target):
            stolen = 0
        else:
            stolen = target.take_damage(math.floor(target.hp * siphon_percent))
            agent.heal(stolen)
        results.append(SkillActivation(
            agent.id, agent.name, skill,
            f"Siphoned {stolen} HP from {target.name}",
            target_id=target.id,
            hp_stolen=stolen,
        ))
    return results


def skill_active(agent: Agent, skill: SkillName) -> bool:
    return agent.skill_active and agent.skill == skill


def is_fortified(agent: Agent) -> bool:
    return skill_active(agent, SkillName.FORTIFY)


def tick_skills(agents: Mapping[str, Agent]) -> None:
    """End-of-epoch: clear active flags and count cooldowns down."""
    for agent in agents.values():
        agent.skill_active = False
        if agent.skill_cooldown > 0:
            agent.skill_cooldown -= 1
