from __future__ import annotations

import logging
from typing import Mapping, Optional

from rollaball.core.events import Event
from rollaball.core.level_manager import LevelConfiguration, LevelManager
from rollaball.core.levels import ProgressionGraph
from rollaball.core.progress import ProgressStore
from rollaball.core.scene_config import SceneConfigStore
from rollaball.core.scene_types import SceneClassifier, SceneType
from rollaball.core.scheduler import Scheduler
from rollaball.core.ui_state import Label, Panel, UIState, UIStateMachine

logger = logging.getLogger(__name__)


class GameSession:
    """Owns every per-session service and wires them together.

    Constructed once at startup and passed to whatever needs it; ``close``
    tears everything down. A loaded scene gets its own LevelManager, and
    loading the next scene drops the previous one's subscriptions and
    scheduled effects before the new one is bound.
    """

    def __init__(
        self,
        progression: ProgressionGraph,
        progress_store: ProgressStore,
        config_store: Optional[SceneConfigStore] = None,
        scheduler: Optional[Scheduler] = None,
        panels: Optional[Mapping[UIState, Optional[Panel]]] = None,
        labels: Optional[Mapping[str, Optional[Label]]] = None,
        transition_time: float = 0.0,
    ) -> None:
        self.progression = progression
        self.progress_store = progress_store
        self.config_store = config_store if config_store is not None else SceneConfigStore()
        self.classifier = SceneClassifier(self.config_store)
        self.scheduler = scheduler if scheduler is not None else Scheduler()
        self.ui = UIStateMachine(
            self.scheduler,
            panels=panels,
            labels=labels,
            progression=progression,
            transition_time=transition_time,
        )

        self._scene_name = ""
        self._scene_type = SceneType.UNKNOWN
        self._level_manager: Optional[LevelManager] = None
        self._level_started_at = 0.0
        self._game_over = False

        self.scene_loaded = Event("scene_loaded")
        self.scene_load_requested = Event("scene_load_requested")
        self.game_over = Event("game_over")

        if not progression.validate():
            logger.warning("Level progression failed validation; progression disabled")
        for name in progression.duplicate_scene_names():
            logger.warning("Scene '%s' appears more than once in the level progression", name)

    @property
    def scene_name(self) -> str:
        return self._scene_name

    @property
    def scene_type(self) -> SceneType:
        return self._scene_type

    @property
    def procedural_generation_allowed(self) -> bool:
        return self._scene_type is SceneType.PROCEDURAL

    @property
    def level_manager(self) -> Optional[LevelManager]:
        return self._level_manager

    @property
    def is_game_over(self) -> bool:
        return self._game_over

    def can_enter(self, scene_name: str, unlock_all: bool = False) -> bool:
        if unlock_all:
            return self.progression.has_level(scene_name)
        return self.progression.can_enter(scene_name, self.progress_store.best_scores())

    def load_scene(self, scene_name: str, total_collectibles: int = 0) -> Optional[LevelManager]:
        """Activate *scene_name*: classify it, bind a fresh level manager, show the game UI.

        Scenes outside the progression (menus, test scenes) get no level manager.
        """
        self._unload_scene()
        self._scene_name = scene_name
        self._scene_type = self.classifier.log_scene_info(scene_name)
        self._game_over = False

        entry = self.progression.get_entry(scene_name)
        if entry is not None:
            manager = LevelManager(
                LevelConfiguration(
                    level_name=entry.scene_name,
                    display_name=entry.display_name,
                    level_index=entry.level_index,
                ),
                progression=self.progression,
            )
            manager.level_completed.subscribe(self._on_level_completed)
            manager.start(total_collectibles)
            self._level_manager = manager
            self._level_started_at = self.scheduler.now

        self.ui.on_scene_loaded(self._level_manager)
        if scene_name == self.progression.main_menu_scene:
            self.ui.reset()
        else:
            self.ui.show_game_ui()
        self.scene_loaded.emit(scene_name)
        return self._level_manager

    def _unload_scene(self) -> None:
        if self._level_manager is None:
            return
        self._level_manager.level_completed.unsubscribe(self._on_level_completed)
        self.scheduler.cancel_owner(self._level_manager)
        self.ui.detach_level_manager()
        self._level_manager = None

    def _on_level_completed(self, config: LevelConfiguration) -> None:
        elapsed = self.scheduler.now - self._level_started_at
        self.progress_store.record_completion(config.level_name, config.score, elapsed)

    def next_scene(self) -> str:
        if self._level_manager is None:
            return ""
        return self._level_manager.resolve_next_scene()

    def advance_to_next_scene(self) -> str:
        """Request the scene after the completed one; end of content means game over."""
        next_scene = self.next_scene()
        if next_scene:
            self.scene_load_requested.emit(next_scene)
        else:
            logger.info("No scene after '%s'; end of content", self._scene_name)
            self._game_over = True
            self.game_over.emit(self._scene_name)
        return next_scene

    def pause(self) -> bool:
        if self.ui.current_state is not UIState.GAME_PLAY:
            return False
        return self.ui.show_pause_menu()

    def resume(self) -> bool:
        if self.ui.current_state is not UIState.PAUSE_MENU:
            return False
        return self.ui.hide_pause_menu()

    def return_to_menu(self) -> None:
        self._unload_scene()
        self._scene_name = self.progression.main_menu_scene
        self._scene_type = SceneType.UNKNOWN
        self.ui.reset()

    def close(self) -> None:
        self._unload_scene()
        self.ui.dispose()
        self.scheduler.clear()
        self.progress_store.save()
        self.scene_loaded.clear()
        self.scene_load_requested.clear()
        self.game_over.clear()
