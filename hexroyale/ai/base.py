"""Decision contract shared by every agent class.

The orchestrator only ever calls ``decide(view)``; it never looks at which
strategy produced the actions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

from hexroyale.api.schemas import EpochActions, HexTarget, PredictionAction
from hexroyale.core.enums import AgentClass, Asset, Domain, MarketDirection

if TYPE_CHECKING:
    from hexroyale.core.hex import HexCoord
    from hexroyale.core.snapshot import AgentView, ArenaView
    from hexroyale.systems.rng import DeterministicRNG

ASSETS: tuple[Asset, ...] = tuple(Asset)
DIRECTIONS: tuple[MarketDirection, ...] = (MarketDirection.UP, MarketDirection.DOWN)


class AgentStrategy(ABC):
    """One agent's decision function.

    ``decide`` may return an ``EpochActions`` or a plain dict in the same
    shape; either way the worker pool validates it. Raising is allowed and
    costs the agent one passive epoch.
    """

    agent_class: ClassVar[AgentClass]

    def __init__(self, rng: DeterministicRNG | None = None) -> None:
        self.rng = rng

    @abstractmethod
    def decide(self, view: ArenaView) -> EpochActions | dict[str, Any]:
        ...


def default_actions(agent_id: str, rng: DeterministicRNG, epoch: int) -> EpochActions:
    """Safe fallback: minimum stake on a random call, no move, no combat."""
    return EpochActions(
        prediction=PredictionAction(
            asset=rng.choice(Domain.DECISION, agent_id, epoch, ASSETS, salt=1),
            direction=rng.choice(Domain.DECISION, agent_id, epoch, DIRECTIONS, salt=2),
            stake_percent=5,
        ),
        reasoning="default",
    )


# ---------------------------------------------------------------------------
# Helpers for strategies
# ---------------------------------------------------------------------------

def momentum_call(view: ArenaView, asset: Asset) -> MarketDirection:
    """Bet that last epoch's move continues."""
    return MarketDirection.DOWN if view.price_changes.get(asset, 0.0) < 0 else MarketDirection.UP


def strongest_trend(view: ArenaView) -> Asset:
    """Asset with the largest absolute move last epoch; ETH when nothing moved."""
    best = Asset.ETH
    best_move = 0.0
    for asset in ASSETS:
        move = abs(view.price_changes.get(asset, 0.0))
        if move > best_move:
            best, best_move = asset, move
    return best


def step_toward(view: ArenaView, goal: HexCoord) -> HexTarget | None:
    """First step of a shortest unoccupied path to *goal*, if any."""
    origin = view.me.position
    if origin is None or origin == goal:
        return None
    path = view.grid.find_path(origin, goal, avoid_occupied=True)
    if path is None or len(path) < 2:
        return None
    step = path[1]
    tile = view.grid.get_tile(step)
    if tile is None or tile.occupant_id is not None:
        return None
    return HexTarget(q=step.q, r=step.r)


def step_out_of_storm(view: ArenaView) -> HexTarget | None:
    """Move toward the nearest safe, empty tile when standing in the storm."""
    origin = view.me.position
    if origin is None or not view.is_storm(origin):
        return None
    safe = [t.coord for t in view.grid.get_safe_tiles(view.phase) if t.occupant_id is None]
    goal = view.grid.closest_to(origin, safe)
    return step_toward(view, goal) if goal is not None else None


def step_toward_item(view: ArenaView) -> HexTarget | None:
    origin = view.me.position
    if origin is None or not view.items:
        return None
    goal = view.grid.closest_to(origin, [i.coord for i in view.items])
    return step_toward(view, goal) if goal is not None else None


def weakest(agents: list[AgentView]) -> AgentView | None:
    return min(agents, key=lambda a: (a.hp, a.id), default=None)


def strongest(agents: list[AgentView]) -> AgentView | None:
    return max(agents, key=lambda a: (a.hp, a.id), default=None)


def non_allies(view: ArenaView) -> list[AgentView]:
    me = view.me
    return [a for a in view.opponents() if a.id != me.ally_id]
