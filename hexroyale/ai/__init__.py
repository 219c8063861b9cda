"""Agent decision layer: the strategy contract and the five class strategies."""

from hexroyale.ai.base import AgentStrategy, default_actions
from hexroyale.ai.strategies import STRATEGY_REGISTRY, strategy_for

__all__ = ["AgentStrategy", "STRATEGY_REGISTRY", "default_actions", "strategy_for"]
