"""
Manual Scheduler Adapter

Implements IScheduler on a virtual clock that only moves when advance()
is called. Used for deterministic replays (CLI batch runs) and tests.
"""

from __future__ import annotations
import heapq
import itertools
from typing import Callable, List, Tuple

from archsim.application.ports.outbound.scheduler import IScheduler, ScheduledTask


class ManualTask(ScheduledTask):
    """Repeating callback registered on a ManualScheduler."""

    def __init__(self, interval: float, callback: Callable[[], None]):
        self.interval = interval
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(IScheduler):
    """
    Virtual-clock scheduler.

    Due ticks are kept in a priority queue ordered by (due time,
    registration order) and fired one by one inside advance().

    Example:
        >>> scheduler = ManualScheduler()
        >>> task = scheduler.call_repeating(1.0, on_tick)
        >>> scheduler.advance(3.0)   # fires on_tick three times
        3
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[Tuple[float, int, ManualTask]] = []
        self._sequence = itertools.count()

    def call_repeating(self, interval: float, callback: Callable[[], None]) -> ManualTask:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        task = ManualTask(interval, callback)
        self._push(self._now + interval, task)
        return task

    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        """Number of live repeating tasks."""
        return sum(1 for _, _, task in self._queue if not task.cancelled)

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, firing every tick that falls due.

        Callback exceptions propagate to the caller.

        Args:
            seconds: How far to move the clock

        Returns:
            Number of callbacks fired
        """
        deadline = self._now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= deadline:
            due, _, task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            self._now = due
            # Re-arm first so the callback may cancel its own task
            self._push(due + task.interval, task)
            task.callback()
            fired += 1
        self._now = deadline
        return fired

    def _push(self, due: float, task: ManualTask) -> None:
        heapq.heappush(self._queue, (due, next(self._sequence), task))
