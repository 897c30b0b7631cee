from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_PROCEDURAL_SCENES: Tuple[str, ...] = ("GeneratedLevel", "Level_OSM", "MiniGame")
DEFAULT_STATIC_SCENES: Tuple[str, ...] = ("Level1", "Level2", "Level3")

OVERRIDE_FILE_NAME = "scene_types.json"


def data_dir() -> Path:
    """Per-user writable directory. ROLLABALL_HOME relocates it (tests, portable installs)."""
    override = os.environ.get("ROLLABALL_HOME")
    if override:
        return Path(override)
    return Path.home() / ".rollaball"


@dataclass(frozen=True)
class SceneClassificationConfig:
    procedural_scenes: Tuple[str, ...] = DEFAULT_PROCEDURAL_SCENES
    static_scenes: Tuple[str, ...] = DEFAULT_STATIC_SCENES


class SceneConfigStore:
    """Scene classification data: compiled-in defaults merged with an optional
    JSON override file (``proceduralScenes`` / ``staticScenes`` arrays).

    A non-empty array in the override replaces the matching default; a missing
    or empty one leaves it alone. The merged result is loaded once and cached.
    """

    def __init__(self, override_path: Optional[Path] = None) -> None:
        self._override_path = override_path
        self._cached: Optional[SceneClassificationConfig] = None

    @property
    def override_path(self) -> Path:
        if self._override_path is not None:
            return self._override_path
        return data_dir() / OVERRIDE_FILE_NAME

    @property
    def is_loaded(self) -> bool:
        return self._cached is not None

    def load(self) -> SceneClassificationConfig:
        if self._cached is None:
            self._cached = self._load()
        return self._cached

    def _load(self) -> SceneClassificationConfig:
        defaults = SceneClassificationConfig()
        path = self.override_path
        if not path.exists():
            return defaults
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(payload, dict):
                raise TypeError(f"expected a JSON object, got {type(payload).__name__}")
            procedural = _scene_list(payload.get("proceduralScenes"), "proceduralScenes")
            static = _scene_list(payload.get("staticScenes"), "staticScenes")
        except (json.JSONDecodeError, UnicodeDecodeError, OSError, TypeError) as e:
            logger.warning("Ignoring scene type override %s: %s", path, e)
            return defaults

        config = SceneClassificationConfig(
            procedural_scenes=procedural or defaults.procedural_scenes,
            static_scenes=static or defaults.static_scenes,
        )
        logger.info(
            "Loaded scene type override from %s (%d procedural, %d static)",
            path,
            len(config.procedural_scenes),
            len(config.static_scenes),
        )
        return config


def _scene_list(value: Any, field: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise TypeError(f"'{field}' must be a list of scene names")
    names = []
    for item in value:
        if not isinstance(item, str):
            raise TypeError(f"'{field}' contains a non-string entry: {item!r}")
        if item.strip():
            names.append(item.strip())
    return tuple(names)
