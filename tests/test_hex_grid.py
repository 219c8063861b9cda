"""Tests for hex coordinates, the immutable grid, BFS pathfinding and storm rings."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from hexroyale.core.enums import HexDirection, ItemType, PhaseName, TileType
from hexroyale.core.grid import HexGrid, create_grid
from hexroyale.core.hex import (
    HexCoord,
    get_direction,
    get_distance,
    hex_key,
    is_adjacent,
    opposite_direction,
    parse_hex_key,
)
from hexroyale.core.items import Item
from hexroyale.core.phases import compute_phase_config, get_phase_by_name


def _coords(grid: HexGrid) -> list[HexCoord]:
    return [t.coord for t in grid.tiles()]


# ---------------------------------------------------------------------------
# Coordinates
# ---------------------------------------------------------------------------

class TestHexCoord:
    def test_cube_coordinate_is_derived(self):
        c = HexCoord(2, -3)
        assert c.s == 1
        assert c.q + c.r + c.s == 0

    def test_structural_equality(self):
        assert HexCoord(1, 2) == HexCoord(1, 2)
        assert len({HexCoord(1, 2), HexCoord(1, 2)}) == 1

    def test_distance(self):
        assert get_distance(HexCoord(0, 0), HexCoord(3, -3)) == 3
        assert get_distance(HexCoord(-1, 2), HexCoord(2, -1)) == 3
        assert get_distance(HexCoord(1, 1), HexCoord(1, 1)) == 0

    def test_six_neighbors_all_adjacent(self):
        origin = HexCoord(0, 0)
        neighbors = origin.neighbors()
        assert len(set(neighbors)) == 6
        assert all(is_adjacent(origin, n) for n in neighbors)

    def test_direction_round_trip(self):
        origin = HexCoord(1, -1)
        for d in HexDirection:
            target = origin.neighbor(d)
            assert get_direction(origin, target) == d
            assert get_direction(target, origin) == opposite_direction(d)

    def test_direction_of_non_adjacent_is_none(self):
        assert get_direction(HexCoord(0, 0), HexCoord(2, 0)) is None

    def test_key_round_trip(self):
        c = HexCoord(-2, 3)
        assert hex_key(c) == "-2,3"
        assert parse_hex_key(hex_key(c)) == c

    @pytest.mark.parametrize("key", ["", "1", "1,2,3", "a,b", "1;2"])
    def test_malformed_key_raises(self, key):
        with pytest.raises(ValueError):
            parse_hex_key(key)


# ---------------------------------------------------------------------------
# Grid creation
# ---------------------------------------------------------------------------

class TestGridCreation:
    def test_radius_three_has_37_tiles(self):
        assert len(create_grid(3)) == 37

    def test_tile_classification(self):
        g = create_grid(3)
        assert len(g.get_tiles_by_type(TileType.CORNUCOPIA)) == 7
        assert len(g.get_tiles_by_type(TileType.NORMAL)) == 12
        assert len(g.get_tiles_by_type(TileType.EDGE)) == 18

    def test_levels_by_ring(self):
        g = create_grid(3)
        assert g.get_tile(HexCoord(0, 0)).level == 4
        assert g.get_tile(HexCoord(1, 0)).level == 3
        assert g.get_tile(HexCoord(2, -1)).level == 2
        assert g.get_tile(HexCoord(3, -3)).level == 1

    def test_outer_ring_is_lowest_level(self):
        g = create_grid(3)
        outer = g.get_outer_ring_tiles()
        assert len(outer) == 18
        assert all(t.type == TileType.EDGE and t.level == 1 for t in outer)

    def test_lookup_outside_grid(self):
        g = create_grid(3)
        assert g.get_tile(HexCoord(4, 0)) is None
        assert not g.in_grid(HexCoord(0, 4))
        assert g.get_neighbors(HexCoord(10, 10)) == []

    def test_edge_tiles_have_fewer_neighbors(self):
        g = create_grid(3)
        assert len(g.get_neighbors(HexCoord(0, 0))) == 6
        assert len(g.get_neighbors(HexCoord(3, -3))) == 3


# ---------------------------------------------------------------------------
# Distance / adjacency properties
# ---------------------------------------------------------------------------

class TestDistanceProperties:
    def test_distance_is_symmetric(self):
        g = create_grid(3)
        coords = _coords(g)
        for a in coords:
            for b in coords:
                assert g.get_distance(a, b) == g.get_distance(b, a)

    def test_adjacent_iff_distance_one(self):
        g = create_grid(3)
        coords = _coords(g)
        for a in coords:
            for b in coords:
                assert g.is_adjacent(a, b) == (g.get_distance(a, b) == 1)


# ---------------------------------------------------------------------------
# Pathfinding
# ---------------------------------------------------------------------------

class TestFindPath:
    def test_path_length_is_distance_plus_one(self):
        g = create_grid(3)
        coords = _coords(g)
        for a in coords:
            for b in coords:
                path = g.find_path(a, b)
                assert path is not None
                assert len(path) == g.get_distance(a, b) + 1
                assert path[0] == a and path[-1] == b

    def test_path_steps_are_adjacent(self):
        g = create_grid(3)
        path = g.find_path(HexCoord(-3, 0), HexCoord(3, 0))
        for x, y in zip(path, path[1:]):
            assert g.is_adjacent(x, y)

    def test_same_start_and_end(self):
        g = create_grid(3)
        assert g.find_path(HexCoord(1, 1), HexCoord(1, 1)) == [HexCoord(1, 1)]

    def test_outside_grid_returns_none(self):
        g = create_grid(3)
        assert g.find_path(HexCoord(0, 0), HexCoord(5, 0)) is None
        assert g.find_path(HexCoord(-9, 0), HexCoord(0, 0)) is None

    def test_avoid_occupied_detours(self):
        g = create_grid(3).place_agent("blocker", HexCoord(0, 0))
        start, end = HexCoord(-1, 0), HexCoord(1, 0)
        path = g.find_path(start, end, avoid_occupied=True)
        assert path is not None
        assert HexCoord(0, 0) not in path
        assert path[0] == start and path[-1] == end
        assert len(path) > g.get_distance(start, end) + 1

    def test_avoid_occupied_allows_occupied_destination(self):
        g = create_grid(3).place_agent("target", HexCoord(1, 0))
        path = g.find_path(HexCoord(-1, 0), HexCoord(1, 0), avoid_occupied=True)
        assert path is not None
        assert path[-1] == HexCoord(1, 0)

    def test_occupied_ignored_without_flag(self):
        g = create_grid(3).place_agent("blocker", HexCoord(0, 0))
        path = g.find_path(HexCoord(-1, 0), HexCoord(1, 0))
        assert len(path) == 3


# ---------------------------------------------------------------------------
# Immutable mutation
# ---------------------------------------------------------------------------

class TestGridMutation:
    def test_move_agent_is_pure(self):
        g = create_grid(3).place_agent("a1", HexCoord(0, -1))
        moved = g.move_agent(HexCoord(0, -1), HexCoord(0, 0))
        assert moved.get_tile(HexCoord(0, -1)).occupant_id is None
        assert moved.get_tile(HexCoord(0, 0)).occupant_id == "a1"
        # input unchanged
        assert g.get_tile(HexCoord(0, -1)).occupant_id == "a1"
        assert g.get_tile(HexCoord(0, 0)).occupant_id is None

    def test_place_and_remove(self):
        g = create_grid(3)
        placed = g.place_agent("a1", HexCoord(2, 0))
        assert placed.position_of("a1") == HexCoord(2, 0)
        removed = placed.remove_agent(HexCoord(2, 0))
        assert removed.position_of("a1") is None
        assert placed.position_of("a1") == HexCoord(2, 0)

    def test_mutation_outside_grid_is_noop(self):
        g = create_grid(3)
        assert g.place_agent("a1", HexCoord(9, 9)) is g
        assert g.move_agent(HexCoord(9, 9), HexCoord(0, 0)) is g

    def test_item_add_and_remove(self):
        g = create_grid(3)
        item = Item("item-1", ItemType.WEAPON, HexCoord(1, 1), 2)
        with_item = g.add_item(item)
        assert with_item.items_at(HexCoord(1, 1)) == (item,)
        assert g.items_at(HexCoord(1, 1)) == ()
        assert with_item.remove_item(HexCoord(1, 1), "item-1").items_at(HexCoord(1, 1)) == ()

    def test_queries_on_items(self):
        g = create_grid(3).add_items([
            Item("item-1", ItemType.TRAP, HexCoord(0, 1), 1),
            Item("item-2", ItemType.RATION, HexCoord(2, 0), 1),
        ])
        assert len(g.get_all_items()) == 2
        assert [i.id for i in g.get_pickupable_items()] == ["item-2"]
        assert g.find_nearest_item_tile(HexCoord(0, 0)).coord == HexCoord(2, 0)
        assert g.find_nearest_item_tile(HexCoord(0, 0), include_traps=True).coord == HexCoord(0, 1)

    def test_closest_to_breaks_ties_deterministically(self):
        g = create_grid(3)
        candidates = [HexCoord(1, 0), HexCoord(-1, 0), HexCoord(0, 1)]
        assert g.closest_to(HexCoord(0, 0), candidates) == HexCoord(-1, 0)
        assert g.closest_to(HexCoord(0, 0), []) is None

    def test_empty_tiles_and_range(self):
        g = create_grid(3).place_agent("a1", HexCoord(0, 0))
        assert len(g.get_empty_tiles()) == 36
        assert len(g.get_tiles_in_range(HexCoord(0, 0), 1)) == 7


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

class TestSerialization:
    def test_round_trip(self):
        g = (
            create_grid(3)
            .place_agent("a1", HexCoord(3, -3))
            .place_agent("a2", HexCoord(0, 0))
            .add_item(Item("item-7", ItemType.ORACLE, HexCoord(1, -1), 4, is_cornucopia=True))
        )
        data = g.serialize()
        assert HexGrid.deserialize(data).serialize() == data
        assert HexGrid.deserialize(data) == g

    def test_empty_grid_round_trip(self):
        g = create_grid(2)
        assert HexGrid.deserialize(g.serialize()) == g


# ---------------------------------------------------------------------------
# Storm
# ---------------------------------------------------------------------------

class TestStorm:
    def test_no_storm_during_loot(self):
        g = create_grid(3)
        assert g.get_storm_tiles(PhaseName.LOOT) == []
        assert len(g.get_safe_tiles(PhaseName.LOOT)) == 37

    def test_storm_shrinks_safe_area(self):
        g = create_grid(3)
        assert len(g.get_storm_tiles(PhaseName.HUNT)) == 18
        assert len(g.get_storm_tiles(PhaseName.BLOOD)) == 30
        assert len(g.get_storm_tiles(PhaseName.FINAL_STAND)) == 36
        assert [t.coord for t in g.get_safe_tiles(PhaseName.FINAL_STAND)] == [HexCoord(0, 0)]

    def test_storm_and_safe_tiles_partition_grid(self):
        g = create_grid(3)
        for phase in PhaseName:
            assert len(g.get_storm_tiles(phase)) + len(g.get_safe_tiles(phase)) == 37

    def test_accepts_phase_entry(self):
        g = create_grid(3)
        blood = get_phase_by_name(PhaseName.BLOOD, compute_phase_config(5))
        assert g.is_storm_tile(HexCoord(2, 0), blood)
        assert not g.is_storm_tile(HexCoord(1, 0), blood)

    def test_outside_grid_is_not_storm(self):
        assert not create_grid(3).is_storm_tile(HexCoord(7, 0), PhaseName.FINAL_STAND)
