"""Pydantic models for the battle's inbound and outbound contracts.

Inbound: what an agent's ``decide()`` returns and what a sponsor feed sends.
Outbound: the serialized battle state consumed by transport, persistence and
rendering layers.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from hexroyale.core.enums import (
    AgentClass,
    Asset,
    BattleStatus,
    ItemType,
    MarketDirection,
    PhaseName,
    SponsorTier,
    TileType,
)
from hexroyale.core.hex import HexCoord


# ---------------------------------------------------------------------------
# Agent decisions
# ---------------------------------------------------------------------------

class HexTarget(BaseModel):
    q: int
    r: int

    def to_coord(self) -> HexCoord:
        return HexCoord(self.q, self.r)


class PredictionAction(BaseModel):
    asset: Asset
    direction: MarketDirection
    stake_percent: float = Field(5, gt=0, le=100)


class AttackAction(BaseModel):
    target: str = Field(..., min_length=1)     # Agent name or id
    stake: int = Field(..., gt=0)              # Absolute HP


class EpochActions(BaseModel):
    """Everything one agent intends to do this epoch."""

    model_config = ConfigDict(extra="ignore")

    prediction: PredictionAction
    move: Optional[HexTarget] = None
    attack: Optional[AttackAction] = None
    defend: bool = False
    use_skill: bool = False
    skill_target: Optional[str] = None
    propose_alliance: Optional[str] = None     # Agent name or id
    break_alliance: bool = False
    reasoning: str = ""


# ---------------------------------------------------------------------------
# Sponsors
# ---------------------------------------------------------------------------

class SponsorEffect(BaseModel):
    hp_boost: int = Field(0, ge=0)
    free_defend: bool = False
    attack_boost: float = Field(0.0, ge=0.0)
    tier: Optional[SponsorTier] = None
    sponsorship_id: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def from_tier(
        cls, tier: SponsorTier, sponsorship_id: str | None = None, message: str | None = None,
    ) -> SponsorEffect:
        hp_boost, free_defend, attack_boost = SPONSOR_TIERS[tier]
        return cls(
            hp_boost=hp_boost,
            free_defend=free_defend,
            attack_boost=attack_boost,
            tier=tier,
            sponsorship_id=sponsorship_id,
            message=message,
        )


# tier -> (hp_boost, free_defend, attack_boost)
SPONSOR_TIERS: dict[SponsorTier, tuple[int, bool, float]] = {
    SponsorTier.BREAD_RATION: (25, False, 0.0),
    SponsorTier.MEDICINE_KIT: (75, False, 0.0),
    SponsorTier.ARMOR_PLATING: (50, True, 0.0),
    SponsorTier.WEAPON_CACHE: (25, False, 0.25),
    SponsorTier.CORNUCOPIA: (150, True, 0.25),
}


# ---------------------------------------------------------------------------
# Serialized battle state
# ---------------------------------------------------------------------------

class CoordSchema(BaseModel):
    q: int
    r: int


class ItemSchema(BaseModel):
    id: str
    type: ItemType
    coord: CoordSchema
    spawned_at_epoch: int
    is_cornucopia: bool = False


class TileSchema(BaseModel):
    q: int
    r: int
    type: TileType
    level: int = Field(..., ge=1, le=4)
    occupant_id: Optional[str] = None
    items: list[ItemSchema] = []


class GridSchema(BaseModel):
    radius: int
    tiles: list[TileSchema]


class BuffSchema(BaseModel):
    type: ItemType
    remaining_epochs: int
    source_item_id: str


class AgentStateSchema(BaseModel):
    id: str
    name: str
    agent_class: AgentClass
    hp: int
    max_hp: int
    is_alive: bool
    position: Optional[CoordSchema] = None
    kills: int = 0
    epochs_survived: int = 0
    skill_cooldown: int = 0
    skill_active: bool = False
    ally_id: Optional[str] = None
    alliance_epochs_remaining: int = 0
    buffs: list[BuffSchema] = []


class EliminationSchema(BaseModel):
    agent_id: str
    agent_name: str
    agent_class: AgentClass
    eliminated_at_epoch: int
    final_hp: int
    cause: Optional[str] = None
    killer_id: Optional[str] = None


class BattleStateSchema(BaseModel):
    battle_id: str
    status: BattleStatus
    epoch: int
    phase: Optional[PhaseName] = None
    total_epochs: Optional[int] = None
    agents: list[AgentStateSchema]
    grid: GridSchema
    eliminations: list[EliminationSchema] = []
    winner_id: Optional[str] = None


class EpochResultSchema(BaseModel):
    battle_id: str
    epoch: int
    phase: PhaseName
    phase_changed: Optional[dict[str, Any]] = None
    market: dict[str, float]
    previous_market: dict[str, float]
    storm_tiles: list[CoordSchema] = []
    events: dict[str, list[dict[str, Any]]]
    battle: BattleStateSchema
    battle_complete: bool = False
    winner_id: Optional[str] = None
    winner_reason: Optional[str] = None
