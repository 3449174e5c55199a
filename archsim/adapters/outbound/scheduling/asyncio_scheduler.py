"""
Asyncio Scheduler Adapter

Implements IScheduler with event loop timers (loop.call_later).
"""

from __future__ import annotations
import asyncio
from typing import Callable, Optional

from archsim.application.ports.outbound.scheduler import IScheduler, ScheduledTask


class AsyncioTask(ScheduledTask):
    """Self re-arming call_later chain."""

    def __init__(self, loop: asyncio.AbstractEventLoop, interval: float, callback: Callable[[], None]):
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._cancelled = False
        self._handle: asyncio.TimerHandle = loop.call_later(interval, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._handle = self._loop.call_later(self._interval, self._fire)
        self._callback()

    def cancel(self) -> None:
        self._cancelled = True
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class AsyncioScheduler(IScheduler):
    """
    Scheduler bound to an asyncio event loop.

    Callbacks run on the loop thread, so they never overlap with each
    other or with other loop callbacks.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        """Bound loop, or the running one."""
        if self.loop:
            return self.loop
        return asyncio.get_running_loop()

    def call_repeating(self, interval: float, callback: Callable[[], None]) -> AsyncioTask:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        return AsyncioTask(self._get_loop(), interval, callback)

    def now(self) -> float:
        return self._get_loop().time()
