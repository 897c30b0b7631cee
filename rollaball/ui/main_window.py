from __future__ import annotations

import itertools
import logging
import os
import time
from typing import Dict, Optional

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QCloseEvent, QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QVBoxLayout,
    QWidget,
)

from rollaball.core.levels import ProgressionGraph
from rollaball.core.progress import ProgressStore
from rollaball.core.scene_config import SceneConfigStore
from rollaball.core.session import GameSession
from rollaball.core.ui_state import Notification, UIState
from rollaball.ui.colors import Palette
from rollaball.ui.models import build_level_states
from rollaball.ui.widgets import (
    LabelText,
    LevelButton,
    NotificationToast,
    WidgetPanel,
    primary_button,
    screen_frame,
)

logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 16
COLLECTIBLES_PER_LEVEL = 5


class MainWindow(QMainWindow):
    """Four stacked screens (main menu, game HUD, pause, level complete) driven
    by the session's UI state machine.

    The window only builds widgets and forwards button presses; which screen is
    visible is decided entirely by ``GameSession.ui``. A QTimer advances the
    session scheduler so notification timeouts and HUD effects run on the Qt
    thread.
    """

    def __init__(
        self,
        progression: ProgressionGraph,
        progress_store: ProgressStore,
        config_store: Optional[SceneConfigStore] = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle("Roll-a-Ball")
        self._unlock_all_levels = os.environ.get("ROLLABALL_UNLOCK_ALL") == "1"
        self._collectible_ids = itertools.count()
        self._toasts: Dict[int, NotificationToast] = {}

        root = QWidget()
        root.setStyleSheet(
            f"background: qlineargradient(x1:0, y1:0, x2:0, y2:1, stop:0 {Palette.BG_TOP}, stop:1 {Palette.BG_BOTTOM});"
        )
        grid = QGridLayout(root)
        grid.setContentsMargins(32, 32, 32, 32)
        self.setCentralWidget(root)

        self._menu_screen, self._levels_layout = self._build_main_menu()
        self._game_screen = self._build_game_screen()
        self._pause_screen = self._build_pause_screen()
        self._complete_screen = self._build_level_complete_screen()
        for screen in (self._menu_screen, self._game_screen, self._pause_screen, self._complete_screen):
            grid.addWidget(screen, 0, 0)

        self._toast_area = QWidget(root)
        self._toast_layout = QVBoxLayout(self._toast_area)
        self._toast_layout.setContentsMargins(0, 0, 0, 0)
        self._toast_layout.setAlignment(Qt.AlignTop | Qt.AlignHCenter)
        grid.addWidget(self._toast_area, 0, 0, Qt.AlignTop | Qt.AlignHCenter)

        self._session = GameSession(
            progression,
            progress_store,
            config_store=config_store,
            panels={
                UIState.MAIN_MENU: WidgetPanel(self._menu_screen),
                UIState.GAME_PLAY: WidgetPanel(self._game_screen),
                UIState.PAUSE_MENU: WidgetPanel(self._pause_screen),
                UIState.LEVEL_COMPLETE: WidgetPanel(self._complete_screen),
            },
            labels={
                "collectibles": LabelText(self._collectible_label),
                "level_complete": LabelText(self._complete_title_label),
                "final_score": LabelText(self._final_score_label),
            },
        )
        ui = self._session.ui
        ui.state_changed.subscribe(self._on_state_changed)
        ui.notification_shown.subscribe(self._on_notification_shown)
        ui.notification_dismissed.subscribe(self._on_notification_dismissed)
        self._session.scene_loaded.subscribe(self._on_scene_loaded)
        self._session.scene_load_requested.subscribe(self._load_scene)
        self._session.game_over.subscribe(self._on_game_over)

        self._pause_shortcut = QShortcut(QKeySequence(Qt.Key_Escape), self)
        self._pause_shortcut.activated.connect(self._toggle_pause)

        self._last_tick = time.monotonic()
        self._tick_timer = QTimer(self)
        self._tick_timer.timeout.connect(self._tick)
        self._tick_timer.start(TICK_INTERVAL_MS)

        self._refresh_levels_list()

    @property
    def session(self) -> GameSession:
        return self._session

    # -- screens -------------------------------------------------------------

    def _build_main_menu(self) -> tuple[QWidget, QVBoxLayout]:
        frame = screen_frame("mainMenu")
        layout = QVBoxLayout(frame)
        layout.setContentsMargins(40, 40, 40, 40)
        layout.setSpacing(12)
        title = QLabel("Roll-a-Ball")
        title.setStyleSheet(f"font-size: 40px; font-weight: 900; color: {Palette.PRIMARY_LIGHT};")
        layout.addWidget(title, 0, Qt.AlignHCenter)
        subtitle = QLabel("Choose a level")
        subtitle.setStyleSheet(f"color: {Palette.TEXT_MUTED}; font-size: 14px;")
        layout.addWidget(subtitle, 0, Qt.AlignHCenter)
        levels_layout = QVBoxLayout()
        levels_layout.setSpacing(8)
        layout.addLayout(levels_layout)
        layout.addStretch(1)
        return frame, levels_layout

    def _build_game_screen(self) -> QWidget:
        frame = screen_frame("gameHud")
        layout = QVBoxLayout(frame)
        self._scene_label = QLabel("")
        self._scene_label.setStyleSheet(f"font-size: 20px; font-weight: 700; color: {Palette.PRIMARY};")
        self._scene_type_label = QLabel("")
        self._scene_type_label.setStyleSheet(f"color: {Palette.TEXT_MUTED};")
        self._collectible_label = QLabel("Collectibles: 0/0")
        self._collectible_label.setStyleSheet(f"font-size: 18px; color: {Palette.GOLD};")
        layout.addWidget(self._scene_label)
        layout.addWidget(self._scene_type_label)
        layout.addWidget(self._collectible_label)
        layout.addStretch(1)

        buttons = QHBoxLayout()
        buttons.addWidget(primary_button("Collect", self._collect_one))
        buttons.addWidget(primary_button("Reach Goal", self._reach_goal))
        buttons.addWidget(primary_button("Pause", self._session_pause))
        layout.addLayout(buttons)
        return frame

    def _build_pause_screen(self) -> QWidget:
        frame = screen_frame("pauseMenu")
        layout = QVBoxLayout(frame)
        title = QLabel("Paused")
        title.setStyleSheet(f"font-size: 32px; font-weight: 800; color: {Palette.DANGER};")
        layout.addWidget(title, 0, Qt.AlignHCenter)
        layout.addWidget(primary_button("Resume", self._session_resume))
        layout.addWidget(primary_button("Main Menu", self._return_to_menu))
        layout.addStretch(1)
        return frame

    def _build_level_complete_screen(self) -> QWidget:
        frame = screen_frame("levelComplete")
        layout = QVBoxLayout(frame)
        self._complete_title_label = QLabel("")
        self._complete_title_label.setStyleSheet(f"font-size: 30px; font-weight: 800; color: {Palette.SUCCESS};")
        self._final_score_label = QLabel("")
        self._final_score_label.setStyleSheet("font-size: 18px;")
        layout.addWidget(self._complete_title_label, 0, Qt.AlignHCenter)
        layout.addWidget(self._final_score_label, 0, Qt.AlignHCenter)
        self._next_level_button = primary_button("Next Level", self._next_level)
        layout.addWidget(self._next_level_button)
        layout.addWidget(primary_button("Main Menu", self._return_to_menu))
        layout.addStretch(1)
        return frame

    def _refresh_levels_list(self) -> None:
        """Rebuild the main-menu level buttons from current progress."""
        while self._levels_layout.count():
            item = self._levels_layout.takeAt(0)
            w = item.widget()
            if w is not None:
                w.setParent(None)
                w.deleteLater()
        states = build_level_states(
            self._session.progression,
            self._session.progress_store,
            unlock_all=self._unlock_all_levels,
        )
        for state in states:
            self._levels_layout.addWidget(LevelButton(state, self._load_scene))

    # -- session events ------------------------------------------------------

    def _load_scene(self, scene_name: str) -> None:
        if not self._session.can_enter(scene_name, unlock_all=self._unlock_all_levels):
            self._session.ui.show_notification(f"{scene_name} is locked", 2.0)
            return
        self._session.load_scene(scene_name, total_collectibles=COLLECTIBLES_PER_LEVEL)

    def _on_scene_loaded(self, scene_name: str) -> None:
        entry = self._session.progression.get_entry(scene_name)
        self._scene_label.setText(entry.display_name if entry is not None else scene_name)
        generation = "procedural generation on" if self._session.procedural_generation_allowed else "static layout"
        self._scene_type_label.setText(f"{scene_name} · {self._session.scene_type.value} · {generation}")

    def _on_state_changed(self, old_state: UIState, new_state: UIState) -> None:
        logger.debug("UI state %s -> %s", old_state.name, new_state.name)
        if new_state is UIState.MAIN_MENU:
            self._refresh_levels_list()
        elif new_state is UIState.LEVEL_COMPLETE:
            # Texts and next scene are set right after the transition; read them on the next tick.
            QTimer.singleShot(0, self._sync_next_level_button)

    def _sync_next_level_button(self) -> None:
        self._next_level_button.setEnabled(self._session.ui.next_level_available)

    def _on_notification_shown(self, notification: Notification) -> None:
        toast = NotificationToast(notification, self._toast_area)
        self._toasts[id(notification)] = toast
        self._toast_layout.addWidget(toast)
        toast.show()

    def _on_notification_dismissed(self, notification: Notification) -> None:
        toast = self._toasts.pop(id(notification), None)
        if toast is not None:
            toast.setParent(None)
            toast.deleteLater()

    def _on_game_over(self, scene_name: str) -> None:
        self._return_to_menu()
        self._session.ui.show_notification("You reached the end of the road!", 3.0)

    # -- actions -------------------------------------------------------------

    def _collect_one(self) -> None:
        manager = self._session.level_manager
        if manager is not None:
            manager.collect(next(self._collectible_ids))

    def _reach_goal(self) -> None:
        manager = self._session.level_manager
        if manager is not None:
            manager.force_complete_level()

    def _session_pause(self) -> None:
        self._session.pause()

    def _session_resume(self) -> None:
        self._session.resume()

    def _toggle_pause(self) -> None:
        if not self._session.pause():
            self._session.resume()

    def _next_level(self) -> None:
        self._session.advance_to_next_scene()

    def _return_to_menu(self) -> None:
        self._session.return_to_menu()
        self._refresh_levels_list()

    def _tick(self) -> None:
        now = time.monotonic()
        self._session.scheduler.advance(now - self._last_tick)
        self._last_tick = now
        for toast in self._toasts.values():
            toast.update_fade(self._session.scheduler.now)

    def closeEvent(self, event: QCloseEvent) -> None:
        """Stop the tick timer and persist progress when closing the app."""
        self._tick_timer.stop()
        self._session.close()
        super().closeEvent(event)
