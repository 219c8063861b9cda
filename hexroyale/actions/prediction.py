"""Prediction resolver: market-direction bets become HP deltas."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from hexroyale.core.enums import Asset, MarketDirection

if TYPE_CHECKING:
    from hexroyale.systems.market import MarketSnapshot

FLAT_THRESHOLD = 0.01  # percent


@dataclass(frozen=True, slots=True)
class PredictionInput:
    """A bet with the stake already converted to absolute HP and clamped."""

    agent_id: str
    asset: Asset
    direction: MarketDirection
    stake: int


@dataclass(frozen=True, slots=True)
class PredictionResult:
    agent_id: str
    asset: Asset
    direction: MarketDirection
    stake: int
    actual_change: float
    correct: bool
    hp_change: int


def percent_change(current: float, previous: float) -> float:
    if previous <= 0:
        return 0.0
    return (current - previous) / previous * 100.0


def resolve_predictions(
    predictions: Iterable[PredictionInput],
    current: MarketSnapshot,
    previous: MarketSnapshot,
    flat_threshold: float = FLAT_THRESHOLD,
) -> list[PredictionResult]:
    """Resolve every bet against the price move of its asset.

    A move smaller than *flat_threshold* percent is flat and costs nothing.
    Otherwise the agent gains the stake when the direction matches and loses
    it when it doesn't.
    """
    results = []
    for p in predictions:
        change = percent_change(current.price(p.asset), previous.price(p.asset))
        if abs(change) < flat_threshold:
            hp_change = 0
        else:
            went_up = change > 0
            hit = went_up == (p.direction == MarketDirection.UP)
            hp_change = p.stake if hit else -p.stake
        results.append(PredictionResult(
            agent_id=p.agent_id,
            asset=p.asset,
            direction=p.direction,
            stake=p.stake,
            actual_change=change,
            correct=hp_change > 0,
            hp_change=hp_change,
        ))
    return results
