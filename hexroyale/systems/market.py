"""Market snapshots and price sources.

The orchestrator only needs ``fetch_prices() -> MarketSnapshot``. Live feeds
live outside this package; ``SimulatedMarketFeed`` is a deterministic random
walk for headless runs and tests.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from hexroyale.core.enums import Asset, Domain
from hexroyale.systems.rng import DeterministicRNG

logger = logging.getLogger(__name__)

DEFAULT_PRICES: dict[Asset, float] = {
    Asset.ETH: 3200.0,
    Asset.BTC: 64000.0,
    Asset.SOL: 150.0,
    Asset.MON: 1.0,
}


class MarketSnapshot(BaseModel):
    prices: dict[Asset, float]
    timestamp: float = Field(0.0, ge=0.0)

    def price(self, asset: Asset) -> float:
        return self.prices.get(asset, 0.0)

    def percent_change(self, previous: MarketSnapshot, asset: Asset) -> float:
        prev = previous.price(asset)
        if prev <= 0:
            return 0.0
        return (self.price(asset) - prev) / prev * 100.0


@runtime_checkable
class MarketSource(Protocol):
    def fetch_prices(self) -> MarketSnapshot: ...


class StaticMarketFeed:
    """Always returns the same prices; every prediction resolves flat."""

    __slots__ = ("_snapshot",)

    def __init__(self, prices: dict[Asset, float] | None = None) -> None:
        self._snapshot = MarketSnapshot(prices=dict(prices or DEFAULT_PRICES))

    def fetch_prices(self) -> MarketSnapshot:
        return self._snapshot


class SimulatedMarketFeed:
    """Seeded random walk; each fetch advances one step.

    Every asset moves by up to ``volatility`` percent per step. A volatility
    of zero gives a flat market.
    """

    __slots__ = ("_rng", "_prices", "_volatility", "_step")

    def __init__(
        self,
        rng: DeterministicRNG,
        volatility: float = 1.5,
        prices: dict[Asset, float] | None = None,
    ) -> None:
        self._rng = rng
        self._volatility = volatility
        self._prices = dict(prices or DEFAULT_PRICES)
        self._step = 0

    def fetch_prices(self) -> MarketSnapshot:
        self._step += 1
        for asset in Asset:
            roll = self._rng.next_float(Domain.MARKET, asset.value, self._step)
            pct = (roll * 2.0 - 1.0) * self._volatility
            self._prices[asset] = round(self._prices[asset] * (1.0 + pct / 100.0), 6)
        logger.debug("Market step %d: %s", self._step, self._prices)
        return MarketSnapshot(prices=dict(self._prices), timestamp=float(self._step))
