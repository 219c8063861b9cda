"""Alliance proposals, breaks, betrayals and expiry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Collection, Mapping

from hexroyale.core.enums import AllianceEventType

if TYPE_CHECKING:
    from hexroyale.core.models import Agent


@dataclass(frozen=True, slots=True)
class AllianceEvent:
    type: AllianceEventType
    agent_id: str
    agent_name: str
    partner_id: str
    partner_name: str
    description: str
    epochs_remaining: int = 0


def _event(kind: AllianceEventType, agent: Agent, partner: Agent, text: str, remaining: int = 0) -> AllianceEvent:
    return AllianceEvent(kind, agent.id, agent.name, partner.id, partner.name, text, remaining)


def _dissolve(agent: Agent, agents: Mapping[str, Agent]) -> Agent | None:
    partner = agents.get(agent.ally_id) if agent.ally_id else None
    agent.break_alliance()
    if partner is not None and partner.ally_id == agent.id:
        partner.break_alliance()
    return partner


def resolve_breaks(requests: Collection[str], agents: Mapping[str, Agent]) -> list[AllianceEvent]:
    events = []
    for agent_id in sorted(requests):
        agent = agents.get(agent_id)
        if agent is None or agent.ally_id is None:
            continue
        partner = _dissolve(agent, agents)
        if partner is not None:
            events.append(_event(
                AllianceEventType.BROKEN, agent, partner,
                f"{agent.name} broke the alliance with {partner.name}",
            ))
    return events


def resolve_proposals(
    proposals: Mapping[str, str],
    agents: Mapping[str, Agent],
    duration: int = 3,
) -> list[AllianceEvent]:
    """Auto-accept proposals between two living, unallied agents.

    *proposals* maps proposer id to the resolved target id. Proposers are
    processed in id order so the outcome never depends on dict ordering.
    """
    events = []
    for proposer_id in sorted(proposals):
        proposer = agents.get(proposer_id)
        target = agents.get(proposals[proposer_id])
        if proposer is None or target is None or proposer.id == target.id:
            continue
        if not proposer.is_alive or not target.is_alive:
            continue
        if proposer.ally_id == target.id:
            continue
        events.append(_event(
            AllianceEventType.PROPOSED, proposer, target,
            f"{proposer.name} proposed an alliance to {target.name}",
        ))
        if proposer.ally_id is not None or target.ally_id is not None:
            continue
        proposer.ally_id, target.ally_id = target.id, proposer.id
        proposer.alliance_epochs_remaining = target.alliance_epochs_remaining = duration
        events.append(_event(
            AllianceEventType.FORMED, proposer, target,
            f"{proposer.name} and {target.name} formed an alliance for {duration} epochs",
            duration,
        ))
    return events


def is_betrayal(attacker: Agent, target: Agent) -> bool:
    return attacker.ally_id == target.id


def betray(attacker: Agent, target: Agent, agents: Mapping[str, Agent]) -> AllianceEvent:
    """Attacking an ally breaks the pact on both sides."""
    _dissolve(attacker, agents)
    return _event(
        AllianceEventType.BETRAYED, attacker, target,
        f"{attacker.name} betrayed {target.name}!",
    )


def break_on_death(agent: Agent, agents: Mapping[str, Agent]) -> AllianceEvent | None:
    if agent.ally_id is None:
        return None
    partner = _dissolve(agent, agents)
    if partner is None:
        return None
    return _event(
        AllianceEventType.BROKEN, agent, partner,
        f"The alliance between {agent.name} and {partner.name} ended with a death",
    )


def tick_alliances(agents: Mapping[str, Agent]) -> list[AllianceEvent]:
    """Count every alliance down by one epoch; one EXPIRED event per pair."""
    events = []
    seen: set[str] = set()
    for agent_id in sorted(agents):
        agent = agents[agent_id]
        if agent.ally_id is None or agent_id in seen:
            continue
        partner = agents.get(agent.ally_id)
        seen.add(agent_id)
        if partner is None or partner.ally_id != agent_id:
            agent.break_alliance()
            continue
        seen.add(partner.id)
        remaining = agent.alliance_epochs_remaining - 1
        agent.alliance_epochs_remaining = partner.alliance_epochs_remaining = remaining
        if remaining <= 0:
            agent.break_alliance()
            partner.break_alliance()
            events.append(_event(
                AllianceEventType.EXPIRED, agent, partner,
                f"The alliance between {agent.name} and {partner.name} expired",
            ))
    return events
