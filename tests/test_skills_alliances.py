"""Tests for class skills and alliance bookkeeping."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from hexroyale.actions.alliances import (
    betray,
    break_on_death,
    is_betrayal,
    resolve_breaks,
    resolve_proposals,
    tick_alliances,
)
from hexroyale.actions.skills import activate_skills, is_fortified, skill_active, tick_skills
from hexroyale.core.enums import AgentClass, AllianceEventType, SkillName
from hexroyale.core.models import Agent


def _make_agents(*classes: AgentClass, hp: int = 1000) -> dict[str, Agent]:
    return {
        f"a{i}": Agent(id=f"a{i}", name=f"Agent{i}", agent_class=cls, hp=hp, max_hp=1000)
        for i, cls in enumerate(classes, start=1)
    }


def _ally(x: Agent, y: Agent, epochs: int = 3) -> None:
    x.ally_id, y.ally_id = y.id, x.id
    x.alliance_epochs_remaining = y.alliance_epochs_remaining = epochs


class TestAgentModel:
    def test_hp_clamped(self):
        agent = Agent(id="a1", name="A", agent_class=AgentClass.WARRIOR, hp=990)
        assert agent.heal(50) == 10
        assert agent.hp == 1000
        assert agent.take_damage(2000) == 1000
        assert agent.hp == 0
        assert not agent.is_alive
        assert agent.heal(100) == 0

    def test_skill_mapping(self):
        agents = _make_agents(*AgentClass)
        assert [a.skill for a in agents.values()] == [
            SkillName.BERSERK, SkillName.INSIDER_INFO, SkillName.FORTIFY,
            SkillName.SIPHON, SkillName.ALL_IN,
        ]


class TestSkills:
    def test_activation_sets_cooldown(self):
        agents = _make_agents(AgentClass.WARRIOR)
        [act] = activate_skills({"a1": None}, agents, cooldown=5)
        assert act.skill == SkillName.BERSERK
        assert skill_active(agents["a1"], SkillName.BERSERK)
        assert agents["a1"].skill_cooldown == 5

    def test_on_cooldown_is_ignored(self):
        agents = _make_agents(AgentClass.SURVIVOR)
        agents["a1"].skill_cooldown = 2
        assert activate_skills({"a1": None}, agents) == []
        assert not is_fortified(agents["a1"])

    def test_cooldown_cycle(self):
        agents = _make_agents(AgentClass.GAMBLER)
        activate_skills({"a1": None}, agents, cooldown=5)
        for _ in range(5):
            tick_skills(agents)
            assert not agents["a1"].skill_active
        assert agents["a1"].can_use_skill

    def test_siphon_steals_ten_percent(self):
        agents = _make_agents(AgentClass.PARASITE, AgentClass.TRADER, hp=500)
        agents["a2"].hp = 800
        [act] = activate_skills({"a1": "a2"}, agents)
        assert act.hp_stolen == 80
        assert agents["a1"].hp == 580
        assert agents["a2"].hp == 720

    def test_siphon_on_fortified_target_steals_nothing(self):
        agents = _make_agents(AgentClass.PARASITE, AgentClass.SURVIVOR)
        results = activate_skills({"a1": "a2", "a2": None}, agents)
        siphon = next(r for r in results if r.skill == SkillName.SIPHON)
        assert siphon.hp_stolen == 0
        assert agents["a2"].hp == 1000

    def test_siphon_without_target_keeps_cooldown(self):
        agents = _make_agents(AgentClass.PARASITE)
        assert activate_skills({"a1": None}, agents) == []
        assert agents["a1"].skill_cooldown == 0


class TestAlliances:
    def test_proposal_forms_alliance(self):
        agents = _make_agents(AgentClass.SURVIVOR, AgentClass.WARRIOR)
        events = resolve_proposals({"a1": "a2"}, agents, duration=3)
        assert [e.type for e in events] == [AllianceEventType.PROPOSED, AllianceEventType.FORMED]
        assert agents["a1"].ally_id == "a2" and agents["a2"].ally_id == "a1"
        assert agents["a1"].alliance_epochs_remaining == 3

    def test_already_allied_target_only_proposed(self):
        agents = _make_agents(AgentClass.SURVIVOR, AgentClass.WARRIOR, AgentClass.TRADER)
        _ally(agents["a2"], agents["a3"])
        events = resolve_proposals({"a1": "a2"}, agents)
        assert [e.type for e in events] == [AllianceEventType.PROPOSED]
        assert agents["a1"].ally_id is None

    def test_mutual_proposals_form_once(self):
        agents = _make_agents(AgentClass.SURVIVOR, AgentClass.WARRIOR)
        events = resolve_proposals({"a1": "a2", "a2": "a1"}, agents)
        assert sum(e.type == AllianceEventType.FORMED for e in events) == 1

    def test_break_clears_both_sides(self):
        agents = _make_agents(AgentClass.SURVIVOR, AgentClass.WARRIOR)
        _ally(agents["a1"], agents["a2"])
        [event] = resolve_breaks(["a2"], agents)
        assert event.type == AllianceEventType.BROKEN
        assert agents["a1"].ally_id is None and agents["a2"].ally_id is None

    def test_betrayal(self):
        agents = _make_agents(AgentClass.PARASITE, AgentClass.WARRIOR)
        _ally(agents["a1"], agents["a2"])
        assert is_betrayal(agents["a1"], agents["a2"])
        event = betray(agents["a1"], agents["a2"], agents)
        assert event.type == AllianceEventType.BETRAYED
        assert agents["a2"].ally_id is None

    def test_expiry_emits_once_per_pair(self):
        agents = _make_agents(AgentClass.SURVIVOR, AgentClass.WARRIOR)
        _ally(agents["a1"], agents["a2"], epochs=2)
        assert tick_alliances(agents) == []
        assert agents["a1"].alliance_epochs_remaining == 1
        [event] = tick_alliances(agents)
        assert event.type == AllianceEventType.EXPIRED
        assert agents["a1"].ally_id is None and agents["a2"].ally_id is None

    def test_death_breaks_alliance(self):
        agents = _make_agents(AgentClass.SURVIVOR, AgentClass.WARRIOR)
        _ally(agents["a1"], agents["a2"])
        agents["a1"].hp = 0
        event = break_on_death(agents["a1"], agents)
        assert event.type == AllianceEventType.BROKEN
        assert agents["a2"].ally_id is None
        assert break_on_death(agents["a1"], agents) is None
