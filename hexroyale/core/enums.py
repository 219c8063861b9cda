"""Enumerations used throughout the arena.

Values that cross the serialized surface are string enums so payloads carry
readable names; RNG domains stay integer-valued for hashing.
"""

from __future__ import annotations

from enum import Enum, IntEnum, unique


@unique
class TileType(str, Enum):
    """Tile classification by distance from the arena center."""

    CORNUCOPIA = "CORNUCOPIA"
    NORMAL = "NORMAL"
    EDGE = "EDGE"


@unique
class HexDirection(str, Enum):
    """The six neighbor directions of a flat-topped axial hex."""

    N = "N"
    NE = "NE"
    SE = "SE"
    S = "S"
    SW = "SW"
    NW = "NW"


@unique
class ItemType(str, Enum):
    RATION = "RATION"
    WEAPON = "WEAPON"
    SHIELD = "SHIELD"
    TRAP = "TRAP"
    ORACLE = "ORACLE"


@unique
class PhaseName(str, Enum):
    LOOT = "LOOT"
    HUNT = "HUNT"
    BLOOD = "BLOOD"
    FINAL_STAND = "FINAL_STAND"


@unique
class BattleStatus(str, Enum):
    """Authoritative lifecycle state of a battle."""

    PENDING = "PENDING"
    BETTING_OPEN = "BETTING_OPEN"
    LOBBY = "LOBBY"
    COUNTDOWN = "COUNTDOWN"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (BattleStatus.COMPLETED, BattleStatus.CANCELLED)


@unique
class AgentClass(str, Enum):
    """The five fixed archetypes."""

    WARRIOR = "WARRIOR"
    TRADER = "TRADER"
    SURVIVOR = "SURVIVOR"
    PARASITE = "PARASITE"
    GAMBLER = "GAMBLER"


@unique
class Asset(str, Enum):
    ETH = "ETH"
    BTC = "BTC"
    SOL = "SOL"
    MON = "MON"


@unique
class MarketDirection(str, Enum):
    UP = "UP"
    DOWN = "DOWN"


@unique
class DeathCause(str, Enum):
    PREDICTION = "prediction"
    COMBAT = "combat"
    BLEED = "bleed"
    MULTI = "multi"


@unique
class SkillName(str, Enum):
    BERSERK = "BERSERK"            # WARRIOR: double attack stake, take 50% more damage
    INSIDER_INFO = "INSIDER_INFO"  # TRADER: prediction auto-succeeds
    FORTIFY = "FORTIFY"            # SURVIVOR: immune to losses for the epoch
    SIPHON = "SIPHON"              # PARASITE: steal 10% of a target's HP
    ALL_IN = "ALL_IN"              # GAMBLER: double prediction stake


@unique
class AllianceEventType(str, Enum):
    PROPOSED = "PROPOSED"
    FORMED = "FORMED"
    EXPIRED = "EXPIRED"
    BROKEN = "BROKEN"
    BETRAYED = "BETRAYED"


@unique
class SponsorTier(str, Enum):
    BREAD_RATION = "BREAD_RATION"
    MEDICINE_KIT = "MEDICINE_KIT"
    ARMOR_PLATING = "ARMOR_PLATING"
    WEAPON_CACHE = "WEAPON_CACHE"
    CORNUCOPIA = "CORNUCOPIA"


@unique
class Domain(IntEnum):
    """RNG domains for deterministic randomness isolation."""

    LOOT = 0
    SPAWN = 1
    MARKET = 2
    DECISION = 3
    FINAL_WORDS = 4
    TIEBREAK = 5


CLASS_SKILLS: dict[AgentClass, SkillName] = {
    AgentClass.WARRIOR: SkillName.BERSERK,
    AgentClass.TRADER: SkillName.INSIDER_INFO,
    AgentClass.SURVIVOR: SkillName.FORTIFY,
    AgentClass.PARASITE: SkillName.SIPHON,
    AgentClass.GAMBLER: SkillName.ALL_IN,
}
