"""Movement resolution with the all-contenders-fail collision rule."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping

if TYPE_CHECKING:
    from hexroyale.core.grid import HexGrid
    from hexroyale.core.hex import HexCoord

logger = logging.getLogger(__name__)

COLLISION_REASON = "collision: multiple agents targeted the same tile"


@dataclass(frozen=True, slots=True)
class MoveResult:
    agent_id: str
    from_coord: HexCoord
    to_coord: HexCoord
    success: bool
    reason: str = ""


def _validate(grid: HexGrid, origin: HexCoord, target: HexCoord) -> str:
    """Empty string when the step is legal, otherwise the reason it isn't."""
    tile = grid.get_tile(target)
    if tile is None:
        return "target is outside the arena"
    if origin.distance(target) != 1:
        return "target is not adjacent"
    if tile.occupant_id is not None:
        return f"target is occupied by {tile.occupant_id}"
    return ""


def resolve_moves(
    grid: HexGrid,
    positions: Mapping[str, HexCoord],
    requests: Mapping[str, HexCoord],
) -> tuple[HexGrid, list[MoveResult]]:
    """Apply every legal single-step move simultaneously.

    Occupancy is judged against the grid as it was before anyone moved, so
    two agents cannot swap tiles and a tile vacated this epoch is not yet
    free. When two or more agents request the same tile, all of them fail.
    """
    demand = Counter(requests.values())
    results: list[MoveResult] = []
    moves: list[tuple[HexCoord, HexCoord]] = []

    for agent_id in sorted(requests):
        target = requests[agent_id]
        origin = positions.get(agent_id)
        if origin is None:
            continue
        if demand[target] > 1:
            results.append(MoveResult(agent_id, origin, target, False, COLLISION_REASON))
            continue
        reason = _validate(grid, origin, target)
        if reason:
            results.append(MoveResult(agent_id, origin, target, False, reason))
            continue
        moves.append((origin, target))
        results.append(MoveResult(agent_id, origin, target, True))

    for origin, target in moves:
        grid = grid.move_agent(origin, target)
    if moves:
        logger.debug("Resolved %d moves (%d rejected)", len(moves), len(results) - len(moves))
    return grid, results
