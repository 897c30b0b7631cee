from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Optional, Tuple

from rollaball.core.scene_config import data_dir

logger = logging.getLogger(__name__)


@dataclass
class LevelProgress:
    completed: int = 0
    best_score: int = 0
    best_time: float = 0.0


class ProgressStore:
    """Per-scene completion counts and best scores, persisted across sessions.
    File: <data dir>/progress.json (``~/.rollaball`` unless ROLLABALL_HOME is set)."""

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = file_path if file_path is not None else data_dir() / "progress.json"
        self._progress, self._total_score = self._load()

    @property
    def file_path(self) -> Path:
        return self._file_path

    @property
    def total_score(self) -> int:
        return self._total_score

    def get_level_progress(self, scene_name: str) -> LevelProgress:
        return self._progress.get(scene_name, LevelProgress())

    def best_scores(self) -> Dict[str, int]:
        """Scene name -> best score, only for scenes completed at least once."""
        return {key: value.best_score for key, value in self._progress.items() if value.completed > 0}

    def record_completion(self, scene_name: str, score: int, elapsed: float = 0.0) -> LevelProgress:
        current = self._progress.get(scene_name, LevelProgress())
        current.completed += 1
        current.best_score = max(current.best_score, int(score))
        if elapsed > 0 and (current.best_time <= 0 or elapsed < current.best_time):
            current.best_time = float(elapsed)
        self._progress[scene_name] = current
        self._total_score += max(0, int(score))
        self._save()
        return current

    def reset_level(self, scene_name: str) -> None:
        """Forget progress for a single scene."""
        self._progress.pop(scene_name, None)
        self._save()

    def reset(self) -> None:
        self._progress = {}
        self._total_score = 0
        self._save()

    def save(self) -> None:
        """Persist current state to disk (e.g. on app exit)."""
        self._save()

    def _load(self) -> Tuple[Dict[str, LevelProgress], int]:
        progress: Dict[str, LevelProgress] = {}
        if not self._file_path.exists():
            return progress, 0
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load progress from %s: %s", self._file_path, e)
            return progress, 0
        if not isinstance(payload, dict):
            logger.warning("Could not load progress from %s: not a JSON object", self._file_path)
            return progress, 0

        levels = payload.get("levels", {})
        if isinstance(levels, dict):
            for key, value in levels.items():
                if not isinstance(value, dict):
                    continue
                try:
                    progress[key] = LevelProgress(
                        completed=int(value.get("completed", 0)),
                        best_score=int(value.get("best_score", 0)),
                        best_time=float(value.get("best_time", 0.0)),
                    )
                except (TypeError, ValueError) as e:
                    logger.warning("Skipping malformed progress entry '%s' in %s: %s", key, self._file_path, e)
        try:
            total_score = int(payload.get("total_score", 0))
        except (TypeError, ValueError):
            total_score = 0
        return progress, total_score

    def _save(self) -> None:
        payload = {
            "levels": {key: asdict(value) for key, value in self._progress.items()},
            "total_score": self._total_score,
        }
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save progress to %s: %s", self._file_path, e)
