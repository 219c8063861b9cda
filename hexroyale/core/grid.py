"""Hex arena grid.

Tiles live in a flat tuple indexed through a coordinate -> index table that
is built once per radius and shared by every derived grid. Mutations copy the
tile tuple, replace one slot and return a new ``HexGrid``; the receiver is
never modified, so the grid from the previous epoch stays valid for diffing.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Any, Iterable

from hexroyale.core.enums import ItemType, PhaseName, TileType
from hexroyale.core.hex import CENTER, HexCoord, spiral_coords
from hexroyale.core.items import Item
from hexroyale.core.phases import PhaseEntry, storm_ring_for

DEFAULT_RADIUS = 3


@dataclass(frozen=True, slots=True)
class Tile:
    coord: HexCoord
    type: TileType
    level: int
    occupant_id: str | None = None
    items: tuple[Item, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.occupant_id is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "q": self.coord.q,
            "r": self.coord.r,
            "type": self.type.value,
            "level": self.level,
            "occupant_id": self.occupant_id,
            "items": [item.to_dict() for item in self.items],
        }


def classify(distance: int, radius: int) -> tuple[TileType, int]:
    """Tile type and level for a tile *distance* steps from the center."""
    if distance == 0:
        return TileType.CORNUCOPIA, 4
    if distance == 1:
        return TileType.CORNUCOPIA, 3
    if distance >= radius:
        return TileType.EDGE, 1
    return TileType.NORMAL, 2


@lru_cache(maxsize=8)
def _layout(radius: int) -> tuple[tuple[HexCoord, ...], dict[HexCoord, int]]:
    coords = tuple(spiral_coords(radius))
    return coords, {c: i for i, c in enumerate(coords)}


class HexGrid:
    """Immutable hexagonal grid of ``3r(r+1)+1`` tiles."""

    __slots__ = ("radius", "_tiles", "_index")

    def __init__(self, radius: int, tiles: tuple[Tile, ...] | None = None) -> None:
        coords, index = _layout(radius)
        self.radius = radius
        self._index = index
        if tiles is None:
            built = []
            for coord in coords:
                tile_type, level = classify(coord.distance(CENTER), radius)
                built.append(Tile(coord=coord, type=tile_type, level=level))
            tiles = tuple(built)
        self._tiles = tiles

    def _derive(self, tiles: list[Tile]) -> HexGrid:
        new = HexGrid.__new__(HexGrid)
        new.radius = self.radius
        new._index = self._index
        new._tiles = tuple(tiles)
        return new

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HexGrid):
            return NotImplemented
        return self.radius == other.radius and self._tiles == other._tiles

    def __hash__(self) -> int:
        return hash((self.radius, self._tiles))

    def __len__(self) -> int:
        return len(self._tiles)

    # -- access --

    def in_grid(self, coord: HexCoord) -> bool:
        return coord in self._index

    def get_tile(self, coord: HexCoord) -> Tile | None:
        idx = self._index.get(coord)
        if idx is None:
            return None
        return self._tiles[idx]

    def tiles(self) -> tuple[Tile, ...]:
        return self._tiles

    def get_neighbors(self, coord: HexCoord) -> list[Tile]:
        """In-grid neighbor tiles, in direction order."""
        result = []
        for n in coord.neighbors():
            idx = self._index.get(n)
            if idx is not None:
                result.append(self._tiles[idx])
        return result

    def is_adjacent(self, a: HexCoord, b: HexCoord) -> bool:
        return a.distance(b) == 1

    def get_distance(self, a: HexCoord, b: HexCoord) -> int:
        return a.distance(b)

    def position_of(self, agent_id: str) -> HexCoord | None:
        for tile in self._tiles:
            if tile.occupant_id == agent_id:
                return tile.coord
        return None

    def items_at(self, coord: HexCoord) -> tuple[Item, ...]:
        tile = self.get_tile(coord)
        return tile.items if tile is not None else ()

    # -- queries --

    def get_empty_tiles(self) -> list[Tile]:
        return [t for t in self._tiles if t.occupant_id is None]

    def get_tiles_in_range(self, origin: HexCoord, distance: int) -> list[Tile]:
        return [t for t in self._tiles if t.coord.distance(origin) <= distance]

    def get_tiles_by_type(self, tile_type: TileType) -> list[Tile]:
        return [t for t in self._tiles if t.type == tile_type]

    def get_outer_ring_tiles(self) -> list[Tile]:
        """Lowest-level tiles, used as spawn candidates."""
        lowest = min(t.level for t in self._tiles)
        return [t for t in self._tiles if t.level == lowest]

    def get_all_items(self) -> list[Item]:
        return [item for t in self._tiles for item in t.items]

    def get_pickupable_items(self) -> list[Item]:
        return [item for item in self.get_all_items() if item.type != ItemType.TRAP]

    def closest_to(self, origin: HexCoord, candidates: Iterable[HexCoord]) -> HexCoord | None:
        """Nearest candidate to *origin*; ties break on (q, r)."""
        best: HexCoord | None = None
        best_key: tuple[int, int, int] | None = None
        for c in candidates:
            key = (c.distance(origin), c.q, c.r)
            if best_key is None or key < best_key:
                best, best_key = c, key
        return best

    def find_nearest_item_tile(
        self, origin: HexCoord, include_traps: bool = False,
    ) -> Tile | None:
        """Nearest tile holding an item; hidden traps are ignored unless *include_traps*."""
        candidates = {}
        for t in self._tiles:
            if any(include_traps or i.type != ItemType.TRAP for i in t.items):
                candidates[t.coord] = t
        best = self.closest_to(origin, candidates)
        return candidates[best] if best is not None else None

    # -- pathfinding --

    def find_path(
        self,
        start: HexCoord,
        end: HexCoord,
        avoid_occupied: bool = False,
    ) -> list[HexCoord] | None:
        """Breadth-first shortest path from *start* to *end*, both inclusive.

        With *avoid_occupied*, occupied tiles other than the destination are
        not traversed. Returns None when either end is outside the grid or no
        path exists.
        """
        if start not in self._index or end not in self._index:
            return None
        if start == end:
            return [start]

        came_from: dict[HexCoord, HexCoord | None] = {start: None}
        frontier: deque[HexCoord] = deque([start])
        while frontier:
            current = frontier.popleft()
            for n in current.neighbors():
                if n in came_from:
                    continue
                idx = self._index.get(n)
                if idx is None:
                    continue
                if avoid_occupied and n != end and self._tiles[idx].occupant_id is not None:
                    continue
                came_from[n] = current
                if n == end:
                    return self._reconstruct(came_from, end)
                frontier.append(n)
        return None

    @staticmethod
    def _reconstruct(came_from: dict[HexCoord, HexCoord | None], end: HexCoord) -> list[HexCoord]:
        path = [end]
        step = came_from[end]
        while step is not None:
            path.append(step)
            step = came_from[step]
        path.reverse()
        return path

    # -- storm --

    def is_storm_tile(self, coord: HexCoord, phase: PhaseEntry | PhaseName) -> bool:
        if coord not in self._index:
            return False
        ring = storm_ring_for(phase)
        return ring >= 0 and coord.distance(CENTER) >= ring

    def get_storm_tiles(self, phase: PhaseEntry | PhaseName) -> list[Tile]:
        return [t for t in self._tiles if self.is_storm_tile(t.coord, phase)]

    def get_safe_tiles(self, phase: PhaseEntry | PhaseName) -> list[Tile]:
        return [t for t in self._tiles if not self.is_storm_tile(t.coord, phase)]

    # -- mutation (returns a new grid) --

    def _with_tile(self, coord: HexCoord, **changes: Any) -> HexGrid:
        idx = self._index.get(coord)
        if idx is None:
            return self
        tiles = list(self._tiles)
        tiles[idx] = replace(tiles[idx], **changes)
        return self._derive(tiles)

    def place_agent(self, agent_id: str, coord: HexCoord) -> HexGrid:
        return self._with_tile(coord, occupant_id=agent_id)

    def remove_agent(self, coord: HexCoord) -> HexGrid:
        return self._with_tile(coord, occupant_id=None)

    def move_agent(self, src: HexCoord, dst: HexCoord) -> HexGrid:
        src_idx = self._index.get(src)
        dst_idx = self._index.get(dst)
        if src_idx is None or dst_idx is None:
            return self
        agent_id = self._tiles[src_idx].occupant_id
        if agent_id is None:
            return self
        tiles = list(self._tiles)
        tiles[src_idx] = replace(tiles[src_idx], occupant_id=None)
        tiles[dst_idx] = replace(tiles[dst_idx], occupant_id=agent_id)
        return self._derive(tiles)

    def add_item(self, item: Item) -> HexGrid:
        tile = self.get_tile(item.coord)
        if tile is None:
            return self
        return self._with_tile(item.coord, items=tile.items + (item,))

    def add_items(self, items: Iterable[Item]) -> HexGrid:
        tiles = list(self._tiles)
        for item in items:
            idx = self._index.get(item.coord)
            if idx is None:
                continue
            tiles[idx] = replace(tiles[idx], items=tiles[idx].items + (item,))
        return self._derive(tiles)

    def remove_item(self, coord: HexCoord, item_id: str) -> HexGrid:
        tile = self.get_tile(coord)
        if tile is None:
            return self
        return self._with_tile(coord, items=tuple(i for i in tile.items if i.id != item_id))

    # -- serialization --

    def serialize(self) -> dict[str, Any]:
        return {"radius": self.radius, "tiles": [t.to_dict() for t in self._tiles]}

    @classmethod
    def deserialize(cls, data: dict[str, Any]) -> HexGrid:
        grid = cls(int(data["radius"]))
        tiles = list(grid._tiles)
        for raw in data["tiles"]:
            idx = grid._index.get(HexCoord(raw["q"], raw["r"]))
            if idx is None:
                continue
            tiles[idx] = Tile(
                coord=tiles[idx].coord,
                type=TileType(raw["type"]),
                level=raw["level"],
                occupant_id=raw.get("occupant_id"),
                items=tuple(Item.from_dict(i) for i in raw.get("items", ())),
            )
        return grid._derive(tiles)


def create_grid(radius: int = DEFAULT_RADIUS) -> HexGrid:
    return HexGrid(radius)
