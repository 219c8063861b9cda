"""Tests for concurrent decision collection and its fallbacks."""

import sys
import os
import threading

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from hexroyale.api.schemas import EpochActions
from hexroyale.config import ArenaConfig
from hexroyale.core.enums import AgentClass
from hexroyale.core.snapshot import ArenaView
from hexroyale.engine.arena import ArenaManager
from hexroyale.engine.worker_pool import WorkerPool
from hexroyale.systems.market import DEFAULT_PRICES, MarketSnapshot
from tests.helpers.battle_harness import PASSIVE, ScriptedStrategy


def _make_views(arena: ArenaManager) -> dict[str, ArenaView]:
    market = MarketSnapshot(prices=DEFAULT_PRICES)
    return {a.id: ArenaView.build(arena, a, market, {}) for a in arena.alive_agents()}


def _make_arena(**overrides) -> ArenaManager:
    arena = ArenaManager(ArenaConfig(**overrides))
    arena.spawn_agents([AgentClass.WARRIOR, AgentClass.TRADER, AgentClass.SURVIVOR])
    arena.start_battle_immediate()
    return arena


def _raise(view):
    raise RuntimeError("model unavailable")


class TestWorkerPool:
    def test_valid_dict_is_accepted(self):
        arena = _make_arena(num_workers=1)
        pool = WorkerPool(arena.config, arena.rng)
        strategies = {aid: ScriptedStrategy() for aid in arena.agents}
        outcomes = pool.collect(_make_views(arena), strategies, 1)
        assert set(outcomes) == set(arena.agents)
        assert not any(o.fallback for o in outcomes.values())
        assert outcomes["agent-1"].actions.prediction.stake_percent == 5
        pool.shutdown()

    def test_exception_falls_back(self):
        arena = _make_arena(num_workers=1)
        pool = WorkerPool(arena.config, arena.rng)
        strategies = {aid: ScriptedStrategy() for aid in arena.agents}
        strategies["agent-2"] = ScriptedStrategy(_raise)
        outcomes = pool.collect(_make_views(arena), strategies, 1)
        assert outcomes["agent-2"].fallback
        assert "RuntimeError" in outcomes["agent-2"].error
        assert isinstance(outcomes["agent-2"].actions, EpochActions)
        assert outcomes["agent-2"].actions.move is None
        assert outcomes["agent-2"].actions.attack is None
        assert not outcomes["agent-1"].fallback
        pool.shutdown()

    def test_invalid_actions_fall_back(self):
        arena = _make_arena(num_workers=1)
        pool = WorkerPool(arena.config, arena.rng)
        strategies = {aid: ScriptedStrategy() for aid in arena.agents}
        strategies["agent-3"] = ScriptedStrategy({"prediction": {"asset": "DOGE", "direction": "UP"}})
        outcomes = pool.collect(_make_views(arena), strategies, 1)
        assert outcomes["agent-3"].fallback
        assert outcomes["agent-3"].error == "invalid actions"
        pool.shutdown()

    def test_missing_strategy_falls_back(self):
        arena = _make_arena(num_workers=1)
        pool = WorkerPool(arena.config, arena.rng)
        outcomes = pool.collect(_make_views(arena), {}, 1)
        assert all(o.fallback for o in outcomes.values())
        pool.shutdown()

    def test_fallback_is_deterministic(self):
        arena = _make_arena(num_workers=1)
        pool = WorkerPool(arena.config, arena.rng)
        first = pool.collect(_make_views(arena), {}, 4)
        second = pool.collect(_make_views(arena), {}, 4)
        for aid in first:
            assert first[aid].actions == second[aid].actions
        pool.shutdown()

    def test_timeout_falls_back(self):
        arena = _make_arena(num_workers=2, worker_timeout_seconds=0.2)
        pool = WorkerPool(arena.config, arena.rng)
        release = threading.Event()

        def _stall(view):
            release.wait(5)
            return dict(PASSIVE)

        strategies = {aid: ScriptedStrategy() for aid in arena.agents}
        strategies["agent-1"] = ScriptedStrategy(_stall)
        try:
            outcomes = pool.collect(_make_views(arena), strategies, 1)
        finally:
            release.set()
            pool.shutdown()
        assert outcomes["agent-1"].fallback
        assert outcomes["agent-1"].error == "timeout"
        assert not outcomes["agent-2"].fallback

    def test_concurrent_mode_returns_every_agent(self):
        arena = _make_arena(num_workers=4)
        pool = WorkerPool(arena.config, arena.rng)
        strategies = {aid: ScriptedStrategy() for aid in arena.agents}
        outcomes = pool.collect(_make_views(arena), strategies, 1)
        assert sorted(outcomes) == sorted(arena.agents)
        assert not any(o.fallback for o in outcomes.values())
        pool.shutdown()

    def test_empty_views(self):
        arena = _make_arena(num_workers=1)
        pool = WorkerPool(arena.config, arena.rng)
        assert pool.collect({}, {}, 1) == {}
        pool.shutdown()
