"""Arena configuration with sensible defaults."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ArenaConfig:
    """Immutable configuration for one battle."""

    # World
    seed: int = 42
    grid_radius: int = 3

    # Agents
    starting_hp: int = 1000
    min_players: int = 5
    max_players: int = 8

    # Decisions
    num_workers: int = 4
    worker_timeout_seconds: float = 5.0

    # Prediction
    flat_threshold: float = 0.01           # |%change| below this is a flat market
    min_stake_percent: int = 5
    max_stake_percent: int = 50

    # Combat
    defend_cost_percent: float = 0.05      # Charged to every defender, attacked or not
    bleed_percent: float = 0.02            # Passive attrition per epoch, floor of 1 HP
    betrayal_multiplier: float = 2.0

    # Storm
    storm_damage: int = 50                 # HP lost per epoch on a storm tile

    # Items
    trap_damage: int = 100
    ration_heal_min: int = 50
    ration_heal_max: int = 150
    weapon_buff_epochs: int = 3
    shield_buff_epochs: int = 2
    oracle_buff_epochs: int = 1
    weapon_attack_bonus: float = 0.25      # Per stacked WEAPON buff
    spawn_min_items: int = 1
    spawn_max_items: int = 3

    # Skills
    skill_cooldown_epochs: int = 5
    siphon_percent: float = 0.10
    berserk_attack_multiplier: float = 2.0
    berserk_damage_taken_multiplier: float = 1.5
    all_in_stake_multiplier: float = 2.0

    # Alliances
    alliance_duration_epochs: int = 3

    # Run
    max_epochs: int = 100                  # Hard cap for headless runs
    replay_file: str = "replay.json"
    log_level: str = "INFO"
