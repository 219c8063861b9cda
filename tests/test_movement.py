"""Tests for simultaneous movement resolution."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from hexroyale.actions.move import COLLISION_REASON, resolve_moves
from hexroyale.core.grid import create_grid
from hexroyale.core.hex import HexCoord


def _make_grid(**positions: HexCoord):
    grid = create_grid(3)
    for agent_id, coord in positions.items():
        grid = grid.place_agent(agent_id, coord)
    return grid, dict(positions)


class TestResolveMoves:
    def test_single_legal_move(self):
        grid, positions = _make_grid(a=HexCoord(0, -1))
        new_grid, [res] = resolve_moves(grid, positions, {"a": HexCoord(0, 0)})
        assert res.success
        assert new_grid.position_of("a") == HexCoord(0, 0)
        assert grid.position_of("a") == HexCoord(0, -1)

    def test_collision_fails_everyone(self):
        grid, positions = _make_grid(a=HexCoord(0, -1), b=HexCoord(0, 1))
        new_grid, results = resolve_moves(
            grid, positions, {"a": HexCoord(0, 0), "b": HexCoord(0, 0)},
        )
        assert [r.success for r in results] == [False, False]
        assert all(r.reason == COLLISION_REASON for r in results)
        assert new_grid.position_of("a") == HexCoord(0, -1)
        assert new_grid.position_of("b") == HexCoord(0, 1)
        assert new_grid.get_tile(HexCoord(0, 0)).occupant_id is None

    def test_non_adjacent_rejected(self):
        grid, positions = _make_grid(a=HexCoord(0, -2))
        _, [res] = resolve_moves(grid, positions, {"a": HexCoord(0, 0)})
        assert not res.success
        assert "adjacent" in res.reason

    def test_outside_grid_rejected(self):
        grid, positions = _make_grid(a=HexCoord(3, 0))
        _, [res] = resolve_moves(grid, positions, {"a": HexCoord(4, 0)})
        assert not res.success
        assert "outside" in res.reason

    def test_occupied_rejected(self):
        grid, positions = _make_grid(a=HexCoord(0, 0), b=HexCoord(1, 0))
        _, [res] = resolve_moves(grid, {"a": positions["a"]}, {"a": HexCoord(1, 0)})
        assert not res.success
        assert "occupied" in res.reason

    def test_no_swaps_and_no_chains(self):
        # a and b try to swap; c tries to step into the tile b is leaving
        grid, positions = _make_grid(a=HexCoord(0, 0), b=HexCoord(1, 0), c=HexCoord(2, 0))
        new_grid, results = resolve_moves(
            grid, positions,
            {"a": HexCoord(1, 0), "b": HexCoord(0, 0), "c": HexCoord(1, 0)},
        )
        assert not any(r.success for r in results)
        assert new_grid == grid

    def test_unknown_agent_ignored(self):
        grid, positions = _make_grid(a=HexCoord(0, 0))
        _, results = resolve_moves(grid, positions, {"ghost": HexCoord(1, 0)})
        assert results == []

    def test_results_in_agent_order(self):
        grid, positions = _make_grid(b=HexCoord(0, 2), a=HexCoord(0, -2))
        _, results = resolve_moves(
            grid, positions, {"b": HexCoord(0, 1), "a": HexCoord(0, -1)},
        )
        assert [r.agent_id for r in results] == ["a", "b"]
        assert all(r.success for r in results)
