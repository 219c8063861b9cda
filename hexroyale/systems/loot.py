"""Item spawning, pickups, trap triggers and timed buffs."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Mapping, Sequence

from hexroyale.core.enums import Domain, ItemType, TileType
from hexroyale.core.items import (
    BuffTickResult,
    Item,
    ItemBuff,
    ItemIdAllocator,
    PickupResult,
    TrapTriggerResult,
)

if TYPE_CHECKING:
    from hexroyale.config import ArenaConfig
    from hexroyale.core.grid import HexGrid
    from hexroyale.core.hex import HexCoord
    from hexroyale.systems.rng import DeterministicRNG

logger = logging.getLogger(__name__)

DROP_WEIGHTS: tuple[tuple[ItemType, float], ...] = (
    (ItemType.RATION, 0.40),
    (ItemType.WEAPON, 0.25),
    (ItemType.SHIELD, 0.20),
    (ItemType.TRAP, 0.10),
    (ItemType.ORACLE, 0.05),
)

# Biased toward fight-enabling gear; fewer traps so first movers aren't punished
CORNUCOPIA_WEIGHTS: tuple[tuple[ItemType, float], ...] = (
    (ItemType.RATION, 0.15),
    (ItemType.WEAPON, 0.35),
    (ItemType.SHIELD, 0.35),
    (ItemType.TRAP, 0.05),
    (ItemType.ORACLE, 0.10),
)


class LootSpawner:
    """Rolls item drops and pickup outcomes for one battle."""

    __slots__ = ("_config", "_rng", "_ids")

    def __init__(
        self,
        config: ArenaConfig,
        rng: DeterministicRNG,
        allocator: ItemIdAllocator | None = None,
    ) -> None:
        self._config = config
        self._rng = rng
        self._ids = allocator or ItemIdAllocator()

    def spawn_items(self, grid: HexGrid, epoch: int) -> tuple[HexGrid, list[Item]]:
        """Drop 1-3 items on tiles with no occupant and no existing item."""
        candidates = [t.coord for t in grid.tiles() if t.occupant_id is None and not t.items]
        if not candidates:
            return grid, []

        cfg = self._config
        count = self._rng.next_int(
            Domain.LOOT, "spawn-count", epoch, cfg.spawn_min_items, cfg.spawn_max_items,
        )
        chosen = self._rng.shuffle(Domain.LOOT, "spawn-tiles", epoch, candidates)[:count]
        items = [
            Item(
                id=self._ids.next_id(),
                type=self._rng.weighted(Domain.LOOT, "spawn-type", epoch, DROP_WEIGHTS, salt=i),
                coord=coord,
                spawned_at_epoch=epoch,
            )
            for i, coord in enumerate(chosen)
        ]
        logger.debug("Epoch %d: spawned %d items", epoch, len(items))
        return grid.add_items(items), items

    def spawn_cornucopia_items(self, grid: HexGrid) -> tuple[HexGrid, list[Item]]:
        """One item on every CORNUCOPIA tile at battle start."""
        items = [
            Item(
                id=self._ids.next_id(),
                type=self._rng.weighted(Domain.LOOT, "cornucopia", 0, CORNUCOPIA_WEIGHTS, salt=i),
                coord=tile.coord,
                spawned_at_epoch=0,
                is_cornucopia=True,
            )
            for i, tile in enumerate(grid.get_tiles_by_type(TileType.CORNUCOPIA))
        ]
        return grid.add_items(items), items

    def pickup_item(
        self, agent_id: str, item: Item, hp: int, max_hp: int, epoch: int = 0,
    ) -> PickupResult:
        cfg = self._config
        match item.type:
            case ItemType.RATION:
                roll = self._rng.next_int(
                    Domain.LOOT, item.id, epoch, cfg.ration_heal_min, cfg.ration_heal_max,
                )
                heal = max(0, min(roll, max_hp - hp))
                return PickupResult(agent_id, item, f"Healed {heal} HP", heal)
            case ItemType.WEAPON:
                buff = ItemBuff(ItemType.WEAPON, cfg.weapon_buff_epochs, item.id)
                bonus = int(cfg.weapon_attack_bonus * 100)
                return PickupResult(
                    agent_id, item, f"+{bonus}% attack for {buff.remaining_epochs} epochs", 0, buff,
                )
            case ItemType.SHIELD:
                buff = ItemBuff(ItemType.SHIELD, cfg.shield_buff_epochs, item.id)
                return PickupResult(
                    agent_id, item, f"Free defend for {buff.remaining_epochs} epochs", 0, buff,
                )
            case ItemType.ORACLE:
                buff = ItemBuff(ItemType.ORACLE, cfg.oracle_buff_epochs, item.id)
                return PickupResult(
                    agent_id, item, f"Sees hidden traps for {buff.remaining_epochs} epoch", 0, buff,
                )
            case ItemType.TRAP:
                # Normally consumed by check_traps before any pickup happens
                return PickupResult(
                    agent_id, item, f"Triggered a trap for {cfg.trap_damage} damage", -cfg.trap_damage,
                )
        raise ValueError(f"Unknown item type: {item.type!r}")


def check_traps(
    agent_id: str, coord: HexCoord, grid: HexGrid, trap_damage: int = 100,
) -> tuple[HexGrid, list[TrapTriggerResult]]:
    """Fire and consume every trap on the tile at *coord*."""
    triggered: list[TrapTriggerResult] = []
    for item in grid.items_at(coord):
        if item.type != ItemType.TRAP:
            continue
        grid = grid.remove_item(coord, item.id)
        triggered.append(TrapTriggerResult(
            agent_id=agent_id,
            item=item,
            damage=trap_damage,
            description=f"Stepped on a trap at {coord} for {trap_damage} damage",
        ))
    return grid, triggered


def tick_item_buffs(
    buffs: Mapping[str, Sequence[ItemBuff]],
) -> tuple[dict[str, list[ItemBuff]], list[BuffTickResult]]:
    """Decrement every buff by one epoch and evict those that run out."""
    updated: dict[str, list[ItemBuff]] = {}
    results: list[BuffTickResult] = []
    for agent_id in sorted(buffs):
        ticked = [b.ticked() for b in buffs[agent_id]]
        active = [b for b in ticked if b.remaining_epochs > 0]
        expired = [b for b in ticked if b.remaining_epochs <= 0]
        updated[agent_id] = active
        if ticked:
            results.append(BuffTickResult(agent_id, tuple(expired), tuple(active)))
    return updated, results


# ---------------------------------------------------------------------------
# Buff queries
# ---------------------------------------------------------------------------

def add_buff(buffs: Sequence[ItemBuff], buff: ItemBuff) -> list[ItemBuff]:
    return [*buffs, buff]


def has_active_buff(buffs: Sequence[ItemBuff], item_type: ItemType) -> bool:
    return any(b.type == item_type and b.remaining_epochs > 0 for b in buffs)


def get_weapon_bonus(buffs: Sequence[ItemBuff], per_buff: float = 0.25) -> float:
    """Additive attack bonus from stacked WEAPON buffs."""
    return per_buff * sum(1 for b in buffs if b.type == ItemType.WEAPON and b.remaining_epochs > 0)


def has_shield_buff(buffs: Sequence[ItemBuff]) -> bool:
    return has_active_buff(buffs, ItemType.SHIELD)


def has_oracle_buff(buffs: Sequence[ItemBuff]) -> bool:
    return has_active_buff(buffs, ItemType.ORACLE)


def visible_items(grid: HexGrid, reveal_traps: bool) -> list[Item]:
    """Items an agent can see; traps stay hidden without an ORACLE buff."""
    if reveal_traps:
        return grid.get_all_items()
    return grid.get_pickupable_items()
