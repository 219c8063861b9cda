"""Axial hex coordinates, direction offsets and coordinate keys."""

from __future__ import annotations

from dataclasses import dataclass

from hexroyale.core.enums import HexDirection


@dataclass(frozen=True, slots=True)
class HexCoord:
    """Immutable axial coordinate. The cube coordinate ``s`` is derived."""

    q: int = 0
    r: int = 0

    @property
    def s(self) -> int:
        return -self.q - self.r

    def __add__(self, other: HexCoord) -> HexCoord:
        return HexCoord(self.q + other.q, self.r + other.r)

    def __sub__(self, other: HexCoord) -> HexCoord:
        return HexCoord(self.q - other.q, self.r - other.r)

    def distance(self, other: HexCoord) -> int:
        return max(abs(self.q - other.q), abs(self.r - other.r), abs(self.s - other.s))

    def neighbor(self, direction: HexDirection) -> HexCoord:
        return self + DIRECTION_OFFSETS[direction]

    def neighbors(self) -> list[HexCoord]:
        """All six neighbors in direction order, whether or not they are in a grid."""
        return [self + off for off in DIRECTION_OFFSETS.values()]

    def to_dict(self) -> dict[str, int]:
        return {"q": self.q, "r": self.r}

    def __repr__(self) -> str:
        return f"({self.q}, {self.r})"


CENTER = HexCoord(0, 0)

# Insertion order is the canonical neighbor order used by BFS and ring walks
DIRECTION_OFFSETS: dict[HexDirection, HexCoord] = {
    HexDirection.N: HexCoord(0, -1),
    HexDirection.NE: HexCoord(1, -1),
    HexDirection.SE: HexCoord(1, 0),
    HexDirection.S: HexCoord(0, 1),
    HexDirection.SW: HexCoord(-1, 1),
    HexDirection.NW: HexCoord(-1, 0),
}

_OPPOSITE: dict[HexDirection, HexDirection] = {
    HexDirection.N: HexDirection.S,
    HexDirection.NE: HexDirection.SW,
    HexDirection.SE: HexDirection.NW,
    HexDirection.S: HexDirection.N,
    HexDirection.SW: HexDirection.NE,
    HexDirection.NW: HexDirection.SE,
}


def hex_key(coord: HexCoord) -> str:
    return f"{coord.q},{coord.r}"


def parse_hex_key(key: str) -> HexCoord:
    """Parse a ``"q,r"`` key. Raises ValueError on anything else."""
    parts = key.split(",")
    if len(parts) != 2:
        raise ValueError(f"Malformed hex key: {key!r}")
    try:
        return HexCoord(int(parts[0]), int(parts[1]))
    except ValueError:
        raise ValueError(f"Malformed hex key: {key!r}") from None


def get_distance(a: HexCoord, b: HexCoord) -> int:
    return a.distance(b)


def is_adjacent(a: HexCoord, b: HexCoord) -> bool:
    return a.distance(b) == 1


def get_direction(origin: HexCoord, target: HexCoord) -> HexDirection | None:
    """Direction from *origin* to an adjacent *target*, or None if not adjacent."""
    delta = target - origin
    for direction, offset in DIRECTION_OFFSETS.items():
        if offset == delta:
            return direction
    return None


def opposite_direction(direction: HexDirection) -> HexDirection:
    return _OPPOSITE[direction]


def ring_coords(radius: int) -> list[HexCoord]:
    """Coordinates exactly *radius* steps from the center, walked clockwise."""
    if radius <= 0:
        return [CENTER]
    # Start at radius steps along SW, then walk the six sides
    coord = HexCoord(-radius, radius)
    ring: list[HexCoord] = []
    for offset in DIRECTION_OFFSETS.values():
        for _ in range(radius):
            ring.append(coord)
            coord = coord + offset
    return ring


def spiral_coords(radius: int) -> list[HexCoord]:
    """Every coordinate within *radius* of the center, ring by ring."""
    coords: list[HexCoord] = []
    for ring in range(radius + 1):
        coords.extend(ring_coords(ring))
    return coords
