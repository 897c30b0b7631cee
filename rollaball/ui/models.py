"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from rollaball.core.levels import LevelEntry, ProgressionGraph
from rollaball.core.progress import ProgressStore


@dataclass
class LevelCardState:
    """UI state for one main-menu level button: unlock status, best score, selection."""

    entry: LevelEntry
    unlocked: bool
    best_score: int
    completed: int
    is_current: bool = False


def build_level_states(
    progression: ProgressionGraph,
    progress_store: ProgressStore,
    unlock_all: bool = False,
) -> List[LevelCardState]:
    """Compute unlock/completion state for every level and mark the first unfinished one."""
    scores = progress_store.best_scores()
    states: List[LevelCardState] = []
    for entry in progression.entries():
        progress = progress_store.get_level_progress(entry.scene_name)
        unlocked = unlock_all or progression.can_enter(entry.scene_name, scores)
        states.append(
            LevelCardState(
                entry=entry,
                unlocked=unlocked,
                best_score=progress.best_score,
                completed=progress.completed,
            )
        )

    for state in states:
        if state.unlocked and state.completed == 0:
            state.is_current = True
            break
    return states
