from __future__ import annotations

import logging
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from rollaball.core.scene_config import SceneClassificationConfig, SceneConfigStore

logger = logging.getLogger(__name__)


class SceneType(Enum):
    STATIC = "static"  # hand-built layouts
    PROCEDURAL = "procedural"  # generated at runtime
    UNKNOWN = "unknown"  # test scenes, menus


class SceneClassifier:
    """Answers whether a scene may run procedural generation.

    Lookups are case-insensitive. The lowered name sets are built once per
    loaded config, so calling this every frame never touches the file system.
    """

    def __init__(self, store: SceneConfigStore) -> None:
        self._store = store
        self._source: Optional[SceneClassificationConfig] = None
        self._procedural: FrozenSet[str] = frozenset()
        self._static: FrozenSet[str] = frozenset()

    @property
    def procedural_scenes(self) -> Tuple[str, ...]:
        return self._store.load().procedural_scenes

    @property
    def static_scenes(self) -> Tuple[str, ...]:
        return self._store.load().static_scenes

    def is_procedural(self, scene_name: str) -> bool:
        self._refresh()
        return scene_name.casefold() in self._procedural

    def is_static(self, scene_name: str) -> bool:
        self._refresh()
        return scene_name.casefold() in self._static

    def classify(self, scene_name: str) -> SceneType:
        # Procedural is checked first: a scene listed in both sets is procedural.
        if self.is_procedural(scene_name):
            return SceneType.PROCEDURAL
        if self.is_static(scene_name):
            return SceneType.STATIC
        return SceneType.UNKNOWN

    def log_scene_info(self, scene_name: str) -> SceneType:
        scene_type = self.classify(scene_name)
        if scene_type is SceneType.PROCEDURAL:
            logger.info("Scene '%s' is procedural: generation allowed", scene_name)
        elif scene_type is SceneType.STATIC:
            logger.info("Scene '%s' is static: no generation required", scene_name)
        else:
            logger.warning("Scene '%s' has an unknown scene type", scene_name)
        return scene_type

    def _refresh(self) -> None:
        config = self._store.load()
        if config is self._source:
            return
        self._procedural = frozenset(name.casefold() for name in config.procedural_scenes)
        self._static = frozenset(name.casefold() for name in config.static_scenes)
        self._source = config
