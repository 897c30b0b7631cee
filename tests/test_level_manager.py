"""Tests for rollaball.core.level_manager – collectible counting and completion."""

from __future__ import annotations

import pytest

from rollaball.core.level_manager import LevelConfiguration, LevelManager
from rollaball.core.levels import LevelEntry, ProgressionGraph


@pytest.fixture()
def manager() -> LevelManager:
    m = LevelManager(LevelConfiguration("Level1", "Tutorial", total_collectibles=3))
    m.start()
    return m


class TestConfiguration:
    def test_display_name_defaults_to_level_name(self):
        assert LevelConfiguration("Level2").display_name == "Level2"


# ---------------------------------------------------------------------------
# Collecting
# ---------------------------------------------------------------------------

class TestCollect:
    def test_start_emits_counts(self):
        m = LevelManager(LevelConfiguration("Level1"))
        counts, started = [], []
        m.collectible_count_changed.subscribe(lambda r, t: counts.append((r, t)))
        m.level_started.subscribe(started.append)
        m.start(total_collectibles=4)
        assert counts == [(4, 4)]
        assert started == [m.config]

    def test_collect_counts_once(self, manager: LevelManager):
        assert manager.collect("a")
        assert not manager.collect("a")
        assert manager.collectibles_remaining == 2
        assert manager.config.score == 100

    def test_emits_remaining(self, manager: LevelManager):
        counts = []
        manager.collectible_count_changed.subscribe(lambda r, t: counts.append((r, t)))
        manager.collect("a")
        manager.collect("b")
        assert counts == [(2, 3), (1, 3)]

    def test_last_pickup_completes_once(self, manager: LevelManager):
        completed = []
        manager.level_completed.subscribe(completed.append)
        for cid in ("a", "b", "c"):
            manager.collect(cid)
        manager.force_complete_level()
        assert completed == [manager.config]
        assert manager.is_level_completed
        assert manager.config.score == 300

    def test_no_pickups_after_completion(self, manager: LevelManager):
        manager.force_complete_level()
        assert not manager.collect("a")

    def test_restart_resets(self, manager: LevelManager):
        manager.collect("a")
        manager.force_complete_level()
        manager.start()
        assert manager.collectibles_remaining == 3
        assert manager.config.score == 0
        assert not manager.is_level_completed
        assert manager.collect("a")


# ---------------------------------------------------------------------------
# Next scene resolution
# ---------------------------------------------------------------------------

class TestResolveNextScene:
    def test_explicit_next_wins(self):
        graph = ProgressionGraph([LevelEntry("Level1", next_scene_name="Level2")])
        m = LevelManager(LevelConfiguration("Level1", next_scene_name="Bonus"), graph)
        assert m.resolve_next_scene() == "Bonus"

    def test_falls_back_to_graph(self):
        graph = ProgressionGraph([LevelEntry("Level1", next_scene_name="Level2")])
        assert LevelManager(LevelConfiguration("Level1"), graph).resolve_next_scene() == "Level2"

    def test_invalid_graph_not_used(self, caplog: pytest.LogCaptureFixture):
        graph = ProgressionGraph([LevelEntry("Level1", next_scene_name="Level2"), LevelEntry("")])
        with caplog.at_level("WARNING"):
            assert LevelManager(LevelConfiguration("Level1"), graph).resolve_next_scene() == ""
        assert "failed validation" in caplog.text

    def test_no_graph(self):
        assert LevelManager(LevelConfiguration("Level1")).resolve_next_scene() == ""
