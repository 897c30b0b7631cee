from __future__ import annotations

import heapq
import itertools
import logging
from typing import Any, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class ScheduledTask:
    """Handle for a delayed callback; ``cancel`` is safe to call at any time."""

    def __init__(self, due: float, callback: Callable[[], Any], owner: Any = None) -> None:
        self.due = due
        self.owner = owner
        self._callback = callback
        self._cancelled = False
        self._done = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._done

    @property
    def active(self) -> bool:
        return not (self._cancelled or self._done)

    def cancel(self) -> None:
        self._cancelled = True

    def _run(self) -> None:
        self._done = True
        self._callback()


class Scheduler:
    """Single-threaded cooperative scheduler for delayed UI effects.

    Time only moves when the owner calls ``advance`` (or ``run_due`` with an
    external clock reading), so due callbacks run on the same thread that
    dispatches game events. Tasks registered with an ``owner`` are dropped in
    bulk by ``cancel_owner`` when that owner goes away.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._queue: List[Tuple[float, int, ScheduledTask]] = []
        self._sequence = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        return sum(1 for _, _, task in self._queue if task.active)

    def call_later(self, delay: float, callback: Callable[[], Any], owner: Any = None) -> ScheduledTask:
        task = ScheduledTask(self._now + max(0.0, float(delay)), callback, owner)
        heapq.heappush(self._queue, (task.due, next(self._sequence), task))
        logger.debug("Scheduled %s in %.3fs", getattr(callback, "__name__", "callback"), delay)
        return task

    def cancel_owner(self, owner: Any) -> int:
        cancelled = 0
        for _, _, task in self._queue:
            if task.owner is owner and task.active:
                task.cancel()
                cancelled += 1
        if cancelled:
            logger.debug("Cancelled %d scheduled task(s) for %r", cancelled, owner)
        return cancelled

    def advance(self, dt: float) -> int:
        return self.run_due(self._now + max(0.0, float(dt)))

    def run_due(self, now: Optional[float] = None) -> int:
        """Run every task due at or before *now*, in due order. Returns how many ran."""
        if now is not None and now > self._now:
            self._now = now
        ran = 0
        while self._queue and self._queue[0][0] <= self._now:
            _, _, task = heapq.heappop(self._queue)
            if not task.active:
                continue
            task._run()
            ran += 1
        return ran

    def clear(self) -> None:
        for _, _, task in self._queue:
            task.cancel()
        self._queue.clear()
