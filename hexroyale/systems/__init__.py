"""Battle systems: deterministic RNG, loot and market feeds."""

from hexroyale.systems.loot import LootSpawner
from hexroyale.systems.market import MarketSnapshot, SimulatedMarketFeed, StaticMarketFeed
from hexroyale.systems.rng import DeterministicRNG

__all__ = ["DeterministicRNG", "LootSpawner", "MarketSnapshot", "SimulatedMarketFeed", "StaticMarketFeed"]
