"""Parallel worker pool for agent decisions."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import TYPE_CHECKING, Mapping

from pydantic import ValidationError

from hexroyale.ai.base import default_actions
from hexroyale.api.schemas import EpochActions

if TYPE_CHECKING:
    from hexroyale.ai.base import AgentStrategy
    from hexroyale.config import ArenaConfig
    from hexroyale.core.snapshot import ArenaView
    from hexroyale.systems.rng import DeterministicRNG

logger = logging.getLogger(__name__)


class DecisionOutcome:
    """Validated actions for one agent, and whether they are the fallback."""

    __slots__ = ("agent_id", "actions", "fallback", "error")

    def __init__(self, agent_id: str, actions: EpochActions, fallback: bool = False, error: str = "") -> None:
        self.agent_id = agent_id
        self.actions = actions
        self.fallback = fallback
        self.error = error


class WorkerPool:
    """Runs every living agent's ``decide()`` concurrently.

    The batch never fails as a whole: an agent whose strategy raises, returns
    something that doesn't validate, or misses the timeout gets its default
    actions for the epoch.
    """

    __slots__ = ("_config", "_rng", "_executor")

    def __init__(self, config: ArenaConfig, rng: DeterministicRNG) -> None:
        self._config = config
        self._rng = rng
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, config.num_workers),
            thread_name_prefix="decision-worker",
        )

    def collect(
        self,
        views: Mapping[str, ArenaView],
        strategies: Mapping[str, AgentStrategy],
        epoch: int,
    ) -> dict[str, DecisionOutcome]:
        """Return one outcome per agent id in *views*."""
        if not views:
            return {}

        # Fast path: single-worker mode, run inline with no thread overhead
        if self._config.num_workers <= 1:
            return {
                agent_id: self._decide_safely(agent_id, strategies.get(agent_id), view, epoch)
                for agent_id, view in views.items()
            }

        futures: dict[str, Future[DecisionOutcome]] = {
            agent_id: self._executor.submit(
                self._decide_safely, agent_id, strategies.get(agent_id), view, epoch,
            )
            for agent_id, view in views.items()
        }
        wait(futures.values(), timeout=self._config.worker_timeout_seconds)

        outcomes: dict[str, DecisionOutcome] = {}
        for agent_id, future in futures.items():
            if future.done():
                outcomes[agent_id] = future.result()
                continue
            future.cancel()
            logger.warning("Decision for %s timed out, using default actions", agent_id)
            outcomes[agent_id] = self._fallback(agent_id, epoch, "timeout")
        return outcomes

    def _decide_safely(
        self,
        agent_id: str,
        strategy: AgentStrategy | None,
        view: ArenaView,
        epoch: int,
    ) -> DecisionOutcome:
        """Run one decision (in a worker thread) and validate its output."""
        if strategy is None:
            return self._fallback(agent_id, epoch, "no strategy")
        try:
            raw = strategy.decide(view)
            actions = raw if isinstance(raw, EpochActions) else EpochActions.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Invalid actions from %s, using defaults: %s", agent_id, exc.errors()[:1])
            return self._fallback(agent_id, epoch, "invalid actions")
        except Exception as exc:
            logger.exception("Decision failed for %s, using default actions", agent_id)
            return self._fallback(agent_id, epoch, f"{type(exc).__name__}: {exc}")
        return DecisionOutcome(agent_id, actions)

    def _fallback(self, agent_id: str, epoch: int, reason: str) -> DecisionOutcome:
        return DecisionOutcome(agent_id, default_actions(agent_id, self._rng, epoch), True, reason)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
