"""Tests for the built-in rule-based strategies."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from hexroyale.ai.strategies import STRATEGY_REGISTRY, GamblerStrategy, strategy_for
from hexroyale.api.schemas import EpochActions
from hexroyale.core.enums import AgentClass
from hexroyale.core.hex import HexCoord
from hexroyale.core.snapshot import ArenaView
from hexroyale.systems.market import DEFAULT_PRICES, MarketSnapshot
from tests.helpers.battle_harness import BattleHarness


def _view(h: BattleHarness, agent_id: str) -> ArenaView:
    market = MarketSnapshot(prices=DEFAULT_PRICES)
    return ArenaView.build(h.arena, h.agent(agent_id), market, {})


class TestStrategies:
    def test_registry_covers_every_class(self):
        assert set(STRATEGY_REGISTRY) == set(AgentClass)

    @pytest.mark.parametrize("epoch", [1, 5, 10, 14])
    def test_every_strategy_returns_valid_actions(self, epoch):
        h = BattleHarness()
        h.arena.epoch = epoch
        for agent in h.arena.agents.values():
            actions = strategy_for(agent.agent_class, h.arena.rng).decide(_view(h, agent.id))
            assert isinstance(actions, EpochActions)
            assert 0 < actions.prediction.stake_percent <= 100
            if not _view(h, agent.id).phase.combat_enabled:
                assert actions.attack is None
        h.close()

    def test_storm_escape_moves_inward(self):
        h = BattleHarness(classes=[AgentClass.SURVIVOR, AgentClass.WARRIOR])
        a, b = h.ids
        h.arrange({a: HexCoord(3, -3), b: HexCoord(-3, 3)})
        h.arena.epoch = 9  # BLOOD
        actions = strategy_for(AgentClass.SURVIVOR).decide(_view(h, a))
        assert actions.move is not None
        step = actions.move.to_coord()
        assert step.distance(HexCoord(0, 0)) == 2
        h.close()

    def test_warrior_targets_weakest(self):
        h = BattleHarness()
        h.arena.epoch = 5
        warrior = h.ids[0]
        weak = h.ids[3]
        h.agent(weak).hp = 100
        actions = strategy_for(AgentClass.WARRIOR).decide(_view(h, warrior))
        assert actions.attack.target == h.agent(weak).name
        h.close()

    def test_gambler_needs_rng(self):
        h = BattleHarness()
        gambler = h.ids[4]
        with pytest.raises(RuntimeError):
            GamblerStrategy().decide(_view(h, gambler))
        h.close()
