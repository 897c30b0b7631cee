from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Hashable, Optional, Set

from rollaball.core.events import Event
from rollaball.core.levels import ProgressionGraph

logger = logging.getLogger(__name__)


@dataclass
class LevelConfiguration:
    """Descriptor handed to UI listeners when a level starts or completes."""

    level_name: str
    display_name: str = ""
    level_index: int = 1
    next_scene_name: str = ""
    total_collectibles: int = 0
    collectibles_remaining: int = 0
    score: int = 0

    def __post_init__(self) -> None:
        if not self.display_name:
            self.display_name = self.level_name


class LevelManager:
    """Collectible bookkeeping for one loaded scene.

    Raises ``collectible_count_changed(remaining, total)`` on every pickup and
    ``level_completed(config)`` exactly once, either when the last collectible
    is picked up or when a goal trigger forces completion.
    """

    def __init__(
        self,
        config: LevelConfiguration,
        progression: Optional[ProgressionGraph] = None,
        points_per_collectible: int = 100,
    ) -> None:
        self._config = config
        self._progression = progression
        self._points_per_collectible = points_per_collectible
        self._collected: Set[Hashable] = set()
        self._completed = False

        self.collectible_count_changed = Event("collectible_count_changed")
        self.level_completed = Event("level_completed")
        self.level_started = Event("level_started")

    @property
    def config(self) -> LevelConfiguration:
        return self._config

    @property
    def collectibles_remaining(self) -> int:
        return self._config.collectibles_remaining

    @property
    def total_collectibles(self) -> int:
        return self._config.total_collectibles

    @property
    def is_level_completed(self) -> bool:
        return self._completed

    def start(self, total_collectibles: Optional[int] = None) -> None:
        if total_collectibles is not None:
            self._config.total_collectibles = max(0, int(total_collectibles))
        self._collected.clear()
        self._completed = False
        self._config.collectibles_remaining = self._config.total_collectibles
        self._config.score = 0
        logger.info(
            "Level '%s' started with %d collectibles",
            self._config.level_name,
            self._config.total_collectibles,
        )
        self.level_started.emit(self._config)
        self.collectible_count_changed.emit(self._config.collectibles_remaining, self._config.total_collectibles)

    def collect(self, collectible_id: Hashable) -> bool:
        """Register a pickup. The same collectible counts once; returns whether it counted."""
        if self._completed or collectible_id in self._collected:
            return False
        if len(self._collected) >= self._config.total_collectibles:
            logger.warning(
                "Ignoring collectible %r: all %d already collected in '%s'",
                collectible_id,
                self._config.total_collectibles,
                self._config.level_name,
            )
            return False
        self._collected.add(collectible_id)
        self._config.collectibles_remaining = max(0, self._config.total_collectibles - len(self._collected))
        self._config.score += self._points_per_collectible
        self.collectible_count_changed.emit(self._config.collectibles_remaining, self._config.total_collectibles)
        if self._config.collectibles_remaining <= 0:
            self.force_complete_level()
        return True

    def force_complete_level(self) -> None:
        if self._completed:
            return
        self._completed = True
        logger.info("Level '%s' completed (score %d)", self._config.level_name, self._config.score)
        self.level_completed.emit(self._config)

    def resolve_next_scene(self) -> str:
        """Explicit next scene first, then the progression graph, else end of content."""
        if self._config.next_scene_name:
            return self._config.next_scene_name
        if self._progression is not None:
            if self._progression.validate():
                return self._progression.get_next_scene(self._config.level_name)
            logger.warning("Level progression failed validation; not using it for navigation")
        return ""
