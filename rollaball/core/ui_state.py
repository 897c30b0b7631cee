from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Protocol

from rollaball.core.events import Event, SubscriptionScope
from rollaball.core.levels import ProgressionGraph
from rollaball.core.scheduler import ScheduledTask, Scheduler

if TYPE_CHECKING:
    from rollaball.core.level_manager import LevelConfiguration, LevelManager

logger = logging.getLogger(__name__)

DEFAULT_NOTIFICATION_DURATION = 3.0
LEVEL_COMPLETE_NOTIFICATION_DURATION = 2.0
COLLECTIBLE_PULSE_DURATION = 0.6


class UIState(Enum):
    MAIN_MENU = "main_menu"
    GAME_PLAY = "game_play"
    PAUSE_MENU = "pause_menu"
    LEVEL_COMPLETE = "level_complete"


class Panel(Protocol):
    def set_visible(self, visible: bool) -> None: ...


class Label(Protocol):
    def set_text(self, text: str) -> None: ...


class OptionalPanel:
    """Screen handle that may have nothing behind it.

    Visibility is tracked even without a widget, so the one-screen-visible
    rule can be checked headless; with a widget, calls are forwarded.
    """

    def __init__(self, target: Optional[Panel] = None) -> None:
        self.target = target
        self.visible = False

    def set_visible(self, visible: bool) -> None:
        self.visible = visible
        if self.target is not None:
            self.target.set_visible(visible)


class OptionalLabel:
    def __init__(self, target: Optional[Label] = None) -> None:
        self.target = target
        self.text = ""

    def set_text(self, text: str) -> None:
        self.text = text
        if self.target is not None:
            self.target.set_text(text)


@dataclass
class Notification:
    message: str
    duration: float
    shown_at: float
    task: Optional[ScheduledTask] = field(default=None, repr=False)

    @property
    def expires_at(self) -> float:
        return self.shown_at + self.duration


class UIStateMachine:
    """Keeps exactly one of four screens visible and reacts to gameplay events.

    Every transition hides all screens before showing the target. While a
    transition is in flight (the redraw itself, or ``transition_time`` seconds
    when a fade is configured) further requests are dropped, not queued.

    Notifications and the collectible pulse are scheduler tasks owned by this
    machine; ``reset`` and ``dispose`` cancel them, so they never fire into a
    torn-down UI.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        panels: Optional[Mapping[UIState, Optional[Panel]]] = None,
        labels: Optional[Mapping[str, Optional[Label]]] = None,
        progression: Optional[ProgressionGraph] = None,
        transition_time: float = 0.0,
        notification_duration: float = DEFAULT_NOTIFICATION_DURATION,
    ) -> None:
        self._scheduler = scheduler
        self._progression = progression
        self._transition_time = max(0.0, float(transition_time))
        self._notification_duration = notification_duration
        panels = panels or {}
        labels = labels or {}
        self._panels: Dict[UIState, OptionalPanel] = {state: OptionalPanel(panels.get(state)) for state in UIState}
        self._collectible_label = OptionalLabel(labels.get("collectibles"))
        self._level_complete_label = OptionalLabel(labels.get("level_complete"))
        self._final_score_label = OptionalLabel(labels.get("final_score"))

        self._state = UIState.MAIN_MENU
        self._is_transitioning = False
        self._transition_task: Optional[ScheduledTask] = None
        self._notifications: List[Notification] = []
        self._pulse_task: Optional[ScheduledTask] = None
        self._remaining = 0
        self._total = 0
        self._next_scene = ""
        self._level_manager: Optional["LevelManager"] = None
        self._scene_scope = SubscriptionScope()

        self.state_changed = Event("state_changed")
        self.notification_shown = Event("notification_shown")
        self.notification_dismissed = Event("notification_dismissed")
        self.notification_requested = Event("notification_requested")
        self.notification_requested.subscribe(self.show_notification)

        self._apply_state(self._state)

    # -- state -------------------------------------------------------------

    @property
    def current_state(self) -> UIState:
        return self._state

    @property
    def is_transitioning(self) -> bool:
        return self._is_transitioning

    def panel(self, state: UIState) -> OptionalPanel:
        return self._panels[state]

    def visible_states(self) -> List[UIState]:
        return [state for state, panel in self._panels.items() if panel.visible]

    def show_main_menu(self) -> bool:
        return self._change_state(UIState.MAIN_MENU)

    def show_game_ui(self) -> bool:
        return self._change_state(UIState.GAME_PLAY)

    def show_pause_menu(self) -> bool:
        return self._change_state(UIState.PAUSE_MENU)

    def hide_pause_menu(self) -> bool:
        return self._change_state(UIState.GAME_PLAY)

    def _change_state(self, new_state: UIState) -> bool:
        if self._is_transitioning:
            logger.debug("Dropping transition to %s while entering %s", new_state.name, self._state.name)
            return False
        self._is_transitioning = True
        old_state = self._state
        self._state = new_state
        try:
            self._apply_state(new_state)
            self.state_changed.emit(old_state, new_state)
        finally:
            if self._transition_time > 0:
                self._transition_task = self._scheduler.call_later(
                    self._transition_time, self._finish_transition, owner=self
                )
            else:
                self._is_transitioning = False
        return True

    def _apply_state(self, state: UIState) -> None:
        for panel in self._panels.values():
            panel.set_visible(False)
        self._panels[state].set_visible(True)

    def _finish_transition(self) -> None:
        self._is_transitioning = False
        self._transition_task = None

    # -- level events --------------------------------------------------------

    @property
    def level_complete_text(self) -> str:
        return self._level_complete_label.text

    @property
    def final_score_text(self) -> str:
        return self._final_score_label.text

    @property
    def next_scene(self) -> str:
        return self._next_scene

    @property
    def next_level_available(self) -> bool:
        return bool(self._next_scene)

    def on_level_completed(self, level: "LevelConfiguration") -> None:
        self._change_state(UIState.LEVEL_COMPLETE)
        self._level_complete_label.set_text(f"{level.display_name} Complete!")
        self._final_score_label.set_text(f"Final Score: {level.score:,}")
        self._next_scene = self._resolve_next_scene(level)
        self.show_notification(f"Level {level.display_name} Complete!", LEVEL_COMPLETE_NOTIFICATION_DURATION)

    def _resolve_next_scene(self, level: "LevelConfiguration") -> str:
        if level.next_scene_name:
            return level.next_scene_name
        if self._progression is not None and self._progression.validate():
            return self._progression.get_next_scene(level.level_name)
        return ""

    # -- collectibles --------------------------------------------------------

    @property
    def collected(self) -> int:
        return self._total - self._remaining

    @property
    def total(self) -> int:
        return self._total

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def collectible_text(self) -> str:
        return self._collectible_label.text

    @property
    def collectibles_low(self) -> bool:
        return self._total > 0 and self._remaining <= 1

    @property
    def collectible_pulse_active(self) -> bool:
        return self._pulse_task is not None and self._pulse_task.active

    def on_collectible_count_changed(self, remaining: int, total: int) -> None:
        self._remaining = remaining
        self._total = total
        self._collectible_label.set_text(f"Collectibles: {self.collected}/{total}")
        if 0 < remaining <= 2:
            self._start_pulse()

    def _start_pulse(self) -> None:
        if self._pulse_task is not None:
            self._pulse_task.cancel()
        self._pulse_task = self._scheduler.call_later(COLLECTIBLE_PULSE_DURATION, self._end_pulse, owner=self)

    def _end_pulse(self) -> None:
        self._pulse_task = None

    # -- notifications -------------------------------------------------------

    @property
    def notifications(self) -> List[Notification]:
        return list(self._notifications)

    def show_notification(self, message: str, duration: float = 0.0) -> Notification:
        if duration <= 0:
            duration = self._notification_duration
        notification = Notification(message=message, duration=duration, shown_at=self._scheduler.now)
        notification.task = self._scheduler.call_later(
            duration, lambda: self._dismiss_notification(notification), owner=self
        )
        self._notifications.append(notification)
        logger.debug("Notification '%s' for %.1fs", message, duration)
        self.notification_shown.emit(notification)
        return notification

    def _dismiss_notification(self, notification: Notification) -> None:
        if notification in self._notifications:
            self._notifications.remove(notification)
            self.notification_dismissed.emit(notification)

    def _clear_notifications(self) -> None:
        pending, self._notifications = self._notifications, []
        for notification in pending:
            if notification.task is not None:
                notification.task.cancel()
            self.notification_dismissed.emit(notification)

    # -- scene binding -------------------------------------------------------

    @property
    def level_manager(self) -> Optional["LevelManager"]:
        return self._level_manager

    def attach_level_manager(self, manager: "LevelManager") -> None:
        """Bind to the level manager of the newly loaded scene and resync counts."""
        self._scene_scope.dispose()
        self._level_manager = manager
        self._scene_scope.bind(manager.level_completed, self.on_level_completed)
        self._scene_scope.bind(manager.collectible_count_changed, self.on_collectible_count_changed)
        self.on_collectible_count_changed(manager.collectibles_remaining, manager.total_collectibles)

    def detach_level_manager(self) -> None:
        self._scene_scope.dispose()
        self._level_manager = None

    def on_scene_loaded(self, manager: Optional["LevelManager"]) -> None:
        if manager is None:
            logger.debug("No level manager in loaded scene; collectible display deferred")
            self.detach_level_manager()
            return
        self.attach_level_manager(manager)

    # -- lifecycle -----------------------------------------------------------

    def reset(self) -> None:
        """Back to a fresh main menu: cancels pending effects and the transition guard."""
        self._scheduler.cancel_owner(self)
        self._transition_task = None
        self._pulse_task = None
        self._clear_notifications()
        self._is_transitioning = False
        self._next_scene = ""
        self._level_complete_label.set_text("")
        self._final_score_label.set_text("")
        self.show_main_menu()

    def dispose(self) -> None:
        self._scheduler.cancel_owner(self)
        self._clear_notifications()
        self.detach_level_manager()
        self.state_changed.clear()
        self.notification_shown.clear()
        self.notification_dismissed.clear()
        self.notification_requested.clear()
