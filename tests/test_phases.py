"""Tests for the phase scheduler."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from hexroyale.core.enums import PhaseName
from hexroyale.core.phases import (
    PHASE_ORDER,
    compute_phase_config,
    detect_phase_transition,
    get_current_phase,
    get_epochs_remaining_in_phase,
    get_phase_by_name,
    is_combat_enabled,
)


def _durations(players: int) -> list[int]:
    return [p.duration for p in compute_phase_config(players).phases]


class TestComputePhaseConfig:
    @pytest.mark.parametrize("players,total", [(5, 16), (6, 20), (7, 24), (8, 28)])
    def test_totals(self, players, total):
        assert compute_phase_config(players).total_epochs == total

    def test_durations(self):
        assert _durations(5) == [4, 4, 4, 4]
        assert _durations(6) == [4, 6, 6, 4]
        assert _durations(7) == [4, 6, 6, 8]
        assert _durations(8) == [6, 6, 8, 8]

    def test_player_count_is_clamped(self):
        assert compute_phase_config(2).total_epochs == 16
        assert compute_phase_config(2).player_count == 5
        assert compute_phase_config(20).total_epochs == 28

    @pytest.mark.parametrize("players", [5, 6, 7, 8])
    def test_windows_are_contiguous(self, players):
        phases = compute_phase_config(players).phases
        assert [p.name for p in phases] == list(PHASE_ORDER)
        assert phases[0].start_epoch == 1
        for prev, nxt in zip(phases, phases[1:]):
            assert nxt.start_epoch == prev.end_epoch + 1

    def test_combat_and_storm_flags(self):
        phases = compute_phase_config(5).phases
        assert [p.combat_enabled for p in phases] == [False, True, True, True]
        assert [p.storm_ring for p in phases] == [-1, 3, 2, 1]


class TestPhaseQueries:
    def test_current_phase(self):
        cfg = compute_phase_config(5)
        assert get_current_phase(1, cfg).name == PhaseName.LOOT
        assert get_current_phase(4, cfg).name == PhaseName.LOOT
        assert get_current_phase(5, cfg).name == PhaseName.HUNT
        assert get_current_phase(16, cfg).name == PhaseName.FINAL_STAND

    def test_saturates_past_end(self):
        cfg = compute_phase_config(5)
        assert get_current_phase(99, cfg).name == PhaseName.FINAL_STAND
        assert get_current_phase(0, cfg).name == PhaseName.LOOT

    def test_epochs_remaining(self):
        cfg = compute_phase_config(5)
        assert get_epochs_remaining_in_phase(1, cfg) == 3
        assert get_epochs_remaining_in_phase(4, cfg) == 0
        assert get_epochs_remaining_in_phase(40, cfg) == 0

    def test_combat_enabled(self):
        cfg = compute_phase_config(6)
        assert not is_combat_enabled(4, cfg)
        assert is_combat_enabled(5, cfg)

    def test_lookup_by_name(self):
        cfg = compute_phase_config(8)
        blood = get_phase_by_name(PhaseName.BLOOD, cfg)
        assert (blood.start_epoch, blood.end_epoch) == (13, 20)


class TestTransitions:
    def test_transition_at_boundary(self):
        cfg = compute_phase_config(5)
        t = detect_phase_transition(4, 5, cfg)
        assert t.from_phase == PhaseName.LOOT
        assert t.to_phase == PhaseName.HUNT
        assert t.new_phase.start_epoch == 5

    def test_no_transition_inside_phase(self):
        cfg = compute_phase_config(5)
        assert detect_phase_transition(2, 3, cfg) is None

    def test_no_transition_before_first_epoch(self):
        cfg = compute_phase_config(5)
        assert detect_phase_transition(0, 1, cfg) is None

    def test_exactly_three_transitions(self):
        cfg = compute_phase_config(7)
        found = [
            e for e in range(2, cfg.total_epochs + 5)
            if detect_phase_transition(e - 1, e, cfg) is not None
        ]
        assert found == [5, 11, 17]
