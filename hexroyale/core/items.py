"""Item definitions, per-agent buffs and loot outcome records."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any

from hexroyale.core.enums import ItemType
from hexroyale.core.hex import HexCoord


@dataclass(frozen=True, slots=True)
class Item:
    """A loot item lying on a tile until picked up or triggered."""

    id: str
    type: ItemType
    coord: HexCoord
    spawned_at_epoch: int
    is_cornucopia: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "coord": self.coord.to_dict(),
            "spawned_at_epoch": self.spawned_at_epoch,
            "is_cornucopia": self.is_cornucopia,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Item:
        return cls(
            id=data["id"],
            type=ItemType(data["type"]),
            coord=HexCoord(data["coord"]["q"], data["coord"]["r"]),
            spawned_at_epoch=data["spawned_at_epoch"],
            is_cornucopia=data.get("is_cornucopia", False),
        )


@dataclass(frozen=True, slots=True)
class ItemBuff:
    """Timed modifier granted by WEAPON / SHIELD / ORACLE pickups."""

    type: ItemType
    remaining_epochs: int
    source_item_id: str

    def ticked(self) -> ItemBuff:
        return ItemBuff(self.type, self.remaining_epochs - 1, self.source_item_id)


class ItemIdAllocator:
    """Monotonic item id sequence owned by one battle."""

    __slots__ = ("_prefix", "_counter")

    def __init__(self, prefix: str = "item", start: int = 1) -> None:
        self._prefix = prefix
        self._counter = itertools.count(start)

    def next_id(self) -> str:
        return f"{self._prefix}-{next(self._counter)}"


# ---------------------------------------------------------------------------
# Outcome records
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PickupResult:
    agent_id: str
    item: Item
    effect: str
    hp_change: int
    buff: ItemBuff | None = None


@dataclass(frozen=True, slots=True)
class TrapTriggerResult:
    agent_id: str
    item: Item
    damage: int
    description: str


@dataclass(frozen=True, slots=True)
class BuffTickResult:
    agent_id: str
    expired: tuple[ItemBuff, ...]
    active: tuple[ItemBuff, ...]
