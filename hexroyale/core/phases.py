"""Phase scheduler: maps an epoch number to a named phase.

Phase lengths scale with player count (clamped to 5..8). Every phase has a
base length of 4 epochs; bonus epochs are added at fixed break points of
``extra = players - 5``:

  extra >= 1 : HUNT +2, BLOOD +2
  extra >= 2 : FINAL_STAND +4
  extra >= 3 : LOOT +2, BLOOD +2

which gives totals of 16 / 20 / 24 / 28 epochs for 5 / 6 / 7 / 8 players.
"""

from __future__ import annotations

from dataclasses import dataclass

from hexroyale.core.enums import PhaseName

MIN_PLAYERS = 5
MAX_PLAYERS = 8
BASE_PHASE_EPOCHS = 4

PHASE_ORDER: tuple[PhaseName, ...] = (
    PhaseName.LOOT,
    PhaseName.HUNT,
    PhaseName.BLOOD,
    PhaseName.FINAL_STAND,
)

# Tiles at distance >= ring are storm; -1 means no storm at all
STORM_RING: dict[PhaseName, int] = {
    PhaseName.LOOT: -1,
    PhaseName.HUNT: 3,
    PhaseName.BLOOD: 2,
    PhaseName.FINAL_STAND: 1,
}

COMBAT_ENABLED: dict[PhaseName, bool] = {
    PhaseName.LOOT: False,
    PhaseName.HUNT: True,
    PhaseName.BLOOD: True,
    PhaseName.FINAL_STAND: True,
}


@dataclass(frozen=True, slots=True)
class PhaseEntry:
    name: PhaseName
    start_epoch: int
    end_epoch: int
    combat_enabled: bool
    storm_ring: int

    @property
    def duration(self) -> int:
        return self.end_epoch - self.start_epoch + 1

    def contains(self, epoch: int) -> bool:
        return self.start_epoch <= epoch <= self.end_epoch


@dataclass(frozen=True, slots=True)
class PhaseConfig:
    """Immutable phase schedule computed once at battle start."""

    player_count: int
    phases: tuple[PhaseEntry, ...]

    @property
    def total_epochs(self) -> int:
        return self.phases[-1].end_epoch


@dataclass(frozen=True, slots=True)
class PhaseTransition:
    from_phase: PhaseName
    to_phase: PhaseName
    new_phase: PhaseEntry


def _phase_lengths(extra: int) -> dict[PhaseName, int]:
    return {
        PhaseName.LOOT: BASE_PHASE_EPOCHS + (2 if extra >= 3 else 0),
        PhaseName.HUNT: BASE_PHASE_EPOCHS + (2 if extra >= 1 else 0),
        PhaseName.BLOOD: (
            BASE_PHASE_EPOCHS + (2 if extra >= 1 else 0) + (2 if extra >= 3 else 0)
        ),
        PhaseName.FINAL_STAND: BASE_PHASE_EPOCHS + (4 if extra >= 2 else 0),
    }


def compute_phase_config(player_count: int) -> PhaseConfig:
    """Build contiguous 1-indexed phase windows for *player_count* players."""
    clamped = max(MIN_PLAYERS, min(MAX_PLAYERS, player_count))
    lengths = _phase_lengths(clamped - MIN_PLAYERS)

    phases: list[PhaseEntry] = []
    start = 1
    for name in PHASE_ORDER:
        end = start + lengths[name] - 1
        phases.append(PhaseEntry(
            name=name,
            start_epoch=start,
            end_epoch=end,
            combat_enabled=COMBAT_ENABLED[name],
            storm_ring=STORM_RING[name],
        ))
        start = end + 1
    return PhaseConfig(player_count=clamped, phases=tuple(phases))


def get_current_phase(epoch: int, config: PhaseConfig) -> PhaseEntry:
    """Phase containing *epoch*; past the end saturates to the final phase."""
    for phase in config.phases:
        if phase.contains(epoch):
            return phase
    if epoch < config.phases[0].start_epoch:
        return config.phases[0]
    return config.phases[-1]


def detect_phase_transition(
    prev_epoch: int, curr_epoch: int, config: PhaseConfig,
) -> PhaseTransition | None:
    if prev_epoch <= 0:
        return None
    prev = get_current_phase(prev_epoch, config)
    curr = get_current_phase(curr_epoch, config)
    if prev.name == curr.name:
        return None
    return PhaseTransition(from_phase=prev.name, to_phase=curr.name, new_phase=curr)


def get_epochs_remaining_in_phase(epoch: int, config: PhaseConfig) -> int:
    phase = get_current_phase(epoch, config)
    return max(0, phase.end_epoch - epoch)


def is_combat_enabled(epoch: int, config: PhaseConfig) -> bool:
    return get_current_phase(epoch, config).combat_enabled


def get_phase_by_name(name: PhaseName, config: PhaseConfig) -> PhaseEntry | None:
    for phase in config.phases:
        if phase.name == name:
            return phase
    return None


def storm_ring_for(phase: PhaseEntry | PhaseName) -> int:
    if isinstance(phase, PhaseEntry):
        return phase.storm_ring
    return STORM_RING[phase]
