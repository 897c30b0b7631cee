"""Tests for rollaball.ui.models – main-menu level card state."""

from __future__ import annotations

from pathlib import Path

from rollaball.core.levels import ProgressionGraph, default_progression
from rollaball.core.progress import ProgressStore
from rollaball.ui.models import build_level_states


def _states(tmp_path: Path, unlock_all: bool = False, completed=()):
    store = ProgressStore(file_path=tmp_path / "progress.json")
    for scene, score in completed:
        store.record_completion(scene, score)
    return build_level_states(ProgressionGraph(default_progression()), store, unlock_all=unlock_all)


class TestBuildLevelStates:
    def test_fresh_profile(self, tmp_path: Path):
        states = _states(tmp_path)
        assert [s.unlocked for s in states] == [True, False, False, False, False]
        assert states[0].is_current

    def test_after_first_level(self, tmp_path: Path):
        states = _states(tmp_path, completed=[("Level1", 300)])
        assert states[0].best_score == 300
        assert states[0].completed == 1
        assert states[1].unlocked
        assert states[1].is_current
        assert not states[0].is_current

    def test_unlock_all(self, tmp_path: Path):
        states = _states(tmp_path, unlock_all=True)
        assert all(s.unlocked for s in states)
        assert sum(s.is_current for s in states) == 1

    def test_entries_in_order(self, tmp_path: Path):
        names = [s.entry.scene_name for s in _states(tmp_path)]
        assert names == ["Level1", "Level2", "Level3", "Level_OSM", "GeneratedLevel"]
