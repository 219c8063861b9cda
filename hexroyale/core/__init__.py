"""Core data model: hex coordinates, grid, items, agents and phases."""

from hexroyale.core.enums import AgentClass, BattleStatus, ItemType, PhaseName, TileType
from hexroyale.core.grid import HexGrid, Tile, create_grid
from hexroyale.core.hex import HexCoord
from hexroyale.core.models import Agent
from hexroyale.core.phases import PhaseConfig, PhaseEntry, compute_phase_config

__all__ = [
    "Agent",
    "AgentClass",
    "BattleStatus",
    "HexCoord",
    "HexGrid",
    "ItemType",
    "PhaseConfig",
    "PhaseEntry",
    "PhaseName",
    "Tile",
    "TileType",
    "compute_phase_config",
    "create_grid",
]
