from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_PROGRESSION_FILE = Path(__file__).resolve().parent.parent / "data" / "progression.yaml"


@dataclass(frozen=True)
class LevelEntry:
    scene_name: str
    display_name: str = ""
    level_index: int = 0
    next_scene_name: str = ""
    is_endless_mode: bool = False
    requires_previous_completion: bool = True
    minimum_score: int = 0

    @property
    def is_terminal(self) -> bool:
        return not self.next_scene_name

    @property
    def is_self_loop(self) -> bool:
        return bool(self.scene_name) and self.next_scene_name == self.scene_name


def default_progression() -> List[LevelEntry]:
    """The stock Roll-a-Ball sequence: three tutorial levels, then the endless modes."""
    return [
        LevelEntry(
            scene_name="Level1",
            display_name="Tutorial - Movement",
            level_index=1,
            next_scene_name="Level2",
            requires_previous_completion=False,
        ),
        LevelEntry(
            scene_name="Level2",
            display_name="Advanced Controls",
            level_index=2,
            next_scene_name="Level3",
        ),
        LevelEntry(
            scene_name="Level3",
            display_name="Master Challenge",
            level_index=3,
            next_scene_name="Level_OSM",
        ),
        LevelEntry(
            scene_name="Level_OSM",
            display_name="Endless: Real World Maps",
            level_index=4,
            next_scene_name="Level_OSM",
            is_endless_mode=True,
        ),
        LevelEntry(
            scene_name="GeneratedLevel",
            display_name="Endless: Procedural",
            level_index=5,
            next_scene_name="GeneratedLevel",
            is_endless_mode=True,
        ),
    ]


class ProgressionGraph:
    """Ordered level sequence with O(1) lookup by scene name.

    Lookup misses are not errors: ``get_next_scene`` returns ``""`` and
    ``get_entry`` returns ``None`` for scenes outside the sequence.
    """

    def __init__(
        self,
        entries: Iterable[LevelEntry] = (),
        endless_mode_scene: str = "GeneratedLevel",
        osm_mode_scene: str = "Level_OSM",
        main_menu_scene: str = "MainMenu",
    ) -> None:
        self.endless_mode_scene = endless_mode_scene
        self.osm_mode_scene = osm_mode_scene
        self.main_menu_scene = main_menu_scene
        self._entries: List[LevelEntry] = []
        self._index: Dict[str, LevelEntry] = {}
        self.replace_all(entries)

    @classmethod
    def from_yaml(cls, path: Path = DEFAULT_PROGRESSION_FILE) -> "ProgressionGraph":
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict) or not isinstance(raw.get("levels"), list):
            raise ValueError(f"{path.name}: expected YAML mapping with a 'levels' list")

        entries = []
        for position, item in enumerate(raw["levels"]):
            if not isinstance(item, dict):
                raise ValueError(f"{path.name}: level #{position + 1} is not a mapping")
            entries.append(_entry_from_mapping(item, position))

        special = raw.get("special") or {}
        if not isinstance(special, dict):
            raise ValueError(f"{path.name}: 'special' must be a mapping")
        return cls(
            entries,
            endless_mode_scene=str(special.get("endless_mode_scene", "GeneratedLevel")),
            osm_mode_scene=str(special.get("osm_mode_scene", "Level_OSM")),
            main_menu_scene=str(special.get("main_menu_scene", "MainMenu")),
        )

    def replace_all(self, entries: Iterable[LevelEntry]) -> None:
        """Overwrite the whole sequence (authoring tools and fixtures)."""
        self._entries = list(entries)
        self._index = {}
        for entry in self._entries:
            if entry.scene_name in self._index:
                logger.warning("Duplicate scene '%s' in level progression; last entry wins", entry.scene_name)
            self._index[entry.scene_name] = entry

    def entries(self) -> List[LevelEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get_next_scene(self, current_scene: str) -> str:
        entry = self._index.get(current_scene)
        return entry.next_scene_name if entry is not None else ""

    def get_entry(self, scene_name: str) -> Optional[LevelEntry]:
        return self._index.get(scene_name)

    def has_level(self, scene_name: str) -> bool:
        return self.get_entry(scene_name) is not None

    def all_scene_names(self) -> List[str]:
        return [entry.scene_name for entry in self._entries]

    def duplicate_scene_names(self) -> List[str]:
        seen: set[str] = set()
        duplicates: List[str] = []
        for entry in self._entries:
            if entry.scene_name in seen and entry.scene_name not in duplicates:
                duplicates.append(entry.scene_name)
            seen.add(entry.scene_name)
        return duplicates

    def validate(self) -> bool:
        """Structural check; a graph that fails must not be used for navigation."""
        if not self._entries:
            return False
        return all(entry.scene_name for entry in self._entries)

    def previous_entry(self, scene_name: str) -> Optional[LevelEntry]:
        """The entry authored immediately before *scene_name*, if any."""
        for position, entry in enumerate(self._entries):
            if entry.scene_name == scene_name:
                return self._entries[position - 1] if position > 0 else None
        return None

    def can_enter(self, scene_name: str, scores: Mapping[str, int]) -> bool:
        """Entry policy over recorded best scores (scene name -> score).

        Endless levels that were already reached are not gated again.
        """
        entry = self.get_entry(scene_name)
        if entry is None:
            return False
        if not entry.requires_previous_completion:
            return True
        if entry.is_endless_mode and scene_name in scores:
            return True
        previous = self.previous_entry(scene_name)
        if previous is None:
            return entry.minimum_score == 0
        if previous.scene_name not in scores:
            return False
        return scores[previous.scene_name] >= entry.minimum_score


def _entry_from_mapping(item: Dict[str, Any], position: int) -> LevelEntry:
    scene_name = str(item.get("scene_name") or "").strip()
    minimum_score = int(item.get("minimum_score", 0))
    return LevelEntry(
        scene_name=scene_name,
        display_name=str(item.get("display_name") or scene_name).strip(),
        level_index=int(item.get("level_index", position + 1)),
        next_scene_name=str(item.get("next_scene_name") or "").strip(),
        is_endless_mode=bool(item.get("is_endless_mode", False)),
        requires_previous_completion=bool(item.get("requires_previous_completion", True)),
        minimum_score=max(0, minimum_score),
    )
