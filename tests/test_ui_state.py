"""Tests for rollaball.core.ui_state – screen state machine, notifications, HUD."""

from __future__ import annotations

from typing import List

import pytest

from rollaball.core.level_manager import LevelConfiguration, LevelManager
from rollaball.core.levels import LevelEntry, ProgressionGraph
from rollaball.core.scheduler import Scheduler
from rollaball.core.ui_state import UIState, UIStateMachine


class FakePanel:
    def __init__(self) -> None:
        self.calls: List[bool] = []

    def set_visible(self, visible: bool) -> None:
        self.calls.append(visible)

    @property
    def visible(self) -> bool:
        return bool(self.calls) and self.calls[-1]


class FakeLabel:
    def __init__(self) -> None:
        self.text = ""

    def set_text(self, text: str) -> None:
        self.text = text


@pytest.fixture()
def scheduler() -> Scheduler:
    return Scheduler()


@pytest.fixture()
def panels():
    return {state: FakePanel() for state in UIState}


@pytest.fixture()
def ui(scheduler: Scheduler, panels) -> UIStateMachine:
    progression = ProgressionGraph(
        [
            LevelEntry("Level1", "Tutorial", 1, "Level2", requires_previous_completion=False),
            LevelEntry("Level2", "Advanced", 2, "Level3"),
        ]
    )
    return UIStateMachine(scheduler, panels=panels, progression=progression)


def _level(name: str = "Level1", display: str = "Tutorial", score: int = 0, next_scene: str = "") -> LevelConfiguration:
    return LevelConfiguration(level_name=name, display_name=display, next_scene_name=next_scene, score=score)


# ---------------------------------------------------------------------------
# Screen transitions
# ---------------------------------------------------------------------------

class TestTransitions:
    def test_initial_main_menu(self, ui: UIStateMachine, panels):
        assert ui.current_state is UIState.MAIN_MENU
        assert ui.visible_states() == [UIState.MAIN_MENU]
        assert panels[UIState.MAIN_MENU].visible

    def test_game_then_level_complete(self, ui: UIStateMachine, panels):
        ui.show_game_ui()
        ui.on_level_completed(_level())
        assert ui.current_state is UIState.LEVEL_COMPLETE
        assert ui.visible_states() == [UIState.LEVEL_COMPLETE]
        assert [state for state, panel in panels.items() if panel.visible] == [UIState.LEVEL_COMPLETE]

    def test_hides_all_before_showing(self, ui: UIStateMachine, panels):
        for panel in panels.values():
            panel.calls.clear()
        ui.show_pause_menu()
        assert panels[UIState.PAUSE_MENU].calls == [False, True]
        assert panels[UIState.GAME_PLAY].calls == [False]

    def test_pause_round_trip(self, ui: UIStateMachine):
        ui.show_game_ui()
        ui.show_pause_menu()
        assert ui.current_state is UIState.PAUSE_MENU
        ui.hide_pause_menu()
        assert ui.current_state is UIState.GAME_PLAY

    def test_state_changed_event(self, ui: UIStateMachine):
        changes = []
        ui.state_changed.subscribe(lambda old, new: changes.append((old, new)))
        ui.show_game_ui()
        assert changes == [(UIState.MAIN_MENU, UIState.GAME_PLAY)]

    def test_same_state_allowed(self, ui: UIStateMachine):
        assert ui.show_main_menu()
        assert ui.visible_states() == [UIState.MAIN_MENU]

    def test_missing_panels_tolerated(self, scheduler: Scheduler):
        ui = UIStateMachine(scheduler, panels={UIState.GAME_PLAY: None})
        ui.show_game_ui()
        ui.on_level_completed(_level())
        assert ui.current_state is UIState.LEVEL_COMPLETE
        assert ui.visible_states() == [UIState.LEVEL_COMPLETE]

    def test_no_panels_at_all(self, scheduler: Scheduler):
        ui = UIStateMachine(scheduler)
        assert ui.show_pause_menu()
        assert ui.panel(UIState.PAUSE_MENU).visible


class TestReentrancy:
    def test_request_from_listener_dropped(self, ui: UIStateMachine):
        results = []

        def listener(old, new):
            results.append(ui.show_pause_menu())

        ui.state_changed.subscribe(listener)
        assert ui.show_game_ui()
        assert results == [False]
        assert ui.current_state is UIState.GAME_PLAY
        assert ui.visible_states() == [UIState.GAME_PLAY]
        assert not ui.is_transitioning

    def test_guard_released_after_exception(self, ui: UIStateMachine):
        def boom(old, new):
            raise RuntimeError("listener failed")

        ui.state_changed.subscribe(boom)
        with pytest.raises(RuntimeError):
            ui.show_game_ui()
        assert not ui.is_transitioning

    def test_transition_time_holds_guard(self, scheduler: Scheduler):
        ui = UIStateMachine(scheduler, transition_time=0.5)
        assert ui.show_game_ui()
        assert ui.is_transitioning
        assert not ui.show_pause_menu()
        assert ui.current_state is UIState.GAME_PLAY
        scheduler.advance(0.5)
        assert not ui.is_transitioning
        assert ui.show_pause_menu()
        assert ui.current_state is UIState.PAUSE_MENU


# ---------------------------------------------------------------------------
# Level complete
# ---------------------------------------------------------------------------

class TestLevelCompleted:
    def test_texts(self, ui: UIStateMachine):
        ui.on_level_completed(_level(score=12500))
        assert ui.level_complete_text == "Tutorial Complete!"
        assert ui.final_score_text == "Final Score: 12,500"

    def test_labels_forwarded(self, scheduler: Scheduler):
        complete, score = FakeLabel(), FakeLabel()
        ui = UIStateMachine(scheduler, labels={"level_complete": complete, "final_score": score})
        ui.on_level_completed(_level(score=300))
        assert complete.text == "Tutorial Complete!"
        assert score.text == "Final Score: 300"

    def test_next_scene_from_graph(self, ui: UIStateMachine):
        ui.on_level_completed(_level())
        assert ui.next_scene == "Level2"
        assert ui.next_level_available

    def test_explicit_next_scene_wins(self, ui: UIStateMachine):
        ui.on_level_completed(_level(next_scene="Bonus"))
        assert ui.next_scene == "Bonus"

    def test_end_of_content(self, ui: UIStateMachine):
        ui.on_level_completed(_level("Level2", "Advanced"))
        assert ui.next_scene == "Level3"
        ui.on_level_completed(_level("Unknown", "Unknown"))
        assert ui.next_scene == ""
        assert not ui.next_level_available

    def test_notification(self, ui: UIStateMachine):
        ui.on_level_completed(_level())
        [note] = ui.notifications
        assert note.message == "Level Tutorial Complete!"
        assert note.duration == 2.0


# ---------------------------------------------------------------------------
# Collectibles
# ---------------------------------------------------------------------------

class TestCollectibles:
    def test_count_text(self, ui: UIStateMachine):
        ui.on_collectible_count_changed(3, 10)
        assert ui.collected == 7
        assert ui.collectible_text == "Collectibles: 7/10"

    def test_label_forwarded(self, scheduler: Scheduler):
        label = FakeLabel()
        ui = UIStateMachine(scheduler, labels={"collectibles": label})
        ui.on_collectible_count_changed(0, 4)
        assert label.text == "Collectibles: 4/4"

    def test_low_flag(self, ui: UIStateMachine):
        ui.on_collectible_count_changed(2, 5)
        assert not ui.collectibles_low
        ui.on_collectible_count_changed(1, 5)
        assert ui.collectibles_low

    def test_pulse_when_nearly_done(self, ui: UIStateMachine, scheduler: Scheduler):
        ui.on_collectible_count_changed(5, 10)
        assert not ui.collectible_pulse_active
        ui.on_collectible_count_changed(2, 10)
        assert ui.collectible_pulse_active
        scheduler.advance(1.0)
        assert not ui.collectible_pulse_active

    def test_no_pulse_at_zero(self, ui: UIStateMachine):
        ui.on_collectible_count_changed(0, 10)
        assert not ui.collectible_pulse_active


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

class TestNotifications:
    def test_expires_after_duration(self, ui: UIStateMachine, scheduler: Scheduler):
        ui.show_notification("Hello", 2.0)
        scheduler.advance(1.99)
        assert [n.message for n in ui.notifications] == ["Hello"]
        scheduler.run_due(now=2.0)
        assert ui.notifications == []

    def test_fallback_duration(self, ui: UIStateMachine, scheduler: Scheduler):
        note = ui.show_notification("Hello", 0)
        assert note.duration == 3.0
        assert note.expires_at == 3.0

    def test_events(self, ui: UIStateMachine, scheduler: Scheduler):
        shown, dismissed = [], []
        ui.notification_shown.subscribe(shown.append)
        ui.notification_dismissed.subscribe(dismissed.append)
        note = ui.show_notification("Hi", 1.0)
        scheduler.advance(1.0)
        assert shown == [note]
        assert dismissed == [note]

    def test_requested_event_shows(self, ui: UIStateMachine):
        ui.notification_requested.emit("From gameplay", 1.5)
        assert ui.notifications[0].message == "From gameplay"

    def test_independent_lifetimes(self, ui: UIStateMachine, scheduler: Scheduler):
        ui.show_notification("short", 1.0)
        ui.show_notification("long", 3.0)
        scheduler.advance(1.0)
        assert [n.message for n in ui.notifications] == ["long"]


# ---------------------------------------------------------------------------
# Scene binding
# ---------------------------------------------------------------------------

class TestSceneBinding:
    def test_attach_resyncs_counts(self, ui: UIStateMachine):
        manager = LevelManager(LevelConfiguration("Level1", total_collectibles=4))
        manager.start()
        manager.collect("a")
        ui.attach_level_manager(manager)
        assert ui.collectible_text == "Collectibles: 1/4"

    def test_events_flow_after_attach(self, ui: UIStateMachine):
        manager = LevelManager(LevelConfiguration("Level1", "Tutorial", total_collectibles=1))
        manager.start()
        ui.show_game_ui()
        ui.on_scene_loaded(manager)
        manager.collect("a")
        assert ui.collectible_text == "Collectibles: 1/1"
        assert ui.current_state is UIState.LEVEL_COMPLETE

    def test_old_manager_detached(self, ui: UIStateMachine):
        old = LevelManager(LevelConfiguration("Level1", total_collectibles=3))
        old.start()
        ui.attach_level_manager(old)
        new = LevelManager(LevelConfiguration("Level2", total_collectibles=5))
        new.start()
        ui.attach_level_manager(new)
        old.collect("a")
        assert ui.collectible_text == "Collectibles: 0/5"
        assert old.collectible_count_changed.subscriber_count == 0

    def test_scene_without_manager(self, ui: UIStateMachine):
        manager = LevelManager(LevelConfiguration("Level1", total_collectibles=2))
        ui.attach_level_manager(manager)
        ui.on_scene_loaded(None)
        assert ui.level_manager is None
        assert manager.level_completed.subscriber_count == 0


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

class TestLifecycle:
    def test_reset(self, ui: UIStateMachine, scheduler: Scheduler):
        dismissed = []
        ui.notification_dismissed.subscribe(dismissed.append)
        ui.show_game_ui()
        ui.on_level_completed(_level(score=100))
        ui.reset()
        assert ui.current_state is UIState.MAIN_MENU
        assert ui.notifications == []
        assert len(dismissed) == 1
        assert ui.level_complete_text == ""
        assert ui.next_scene == ""
        assert scheduler.pending == 0

    def test_reset_clears_transition_guard(self, scheduler: Scheduler):
        ui = UIStateMachine(scheduler, transition_time=1.0)
        ui.show_game_ui()
        ui.reset()
        assert ui.current_state is UIState.MAIN_MENU

    def test_dispose_cancels_pending(self, ui: UIStateMachine, scheduler: Scheduler):
        ui.show_notification("bye", 5.0)
        ui.on_collectible_count_changed(1, 3)
        ui.dispose()
        assert scheduler.pending == 0
        assert ui.notifications == []
