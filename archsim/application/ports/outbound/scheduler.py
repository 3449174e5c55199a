"""
Scheduler Port

Interface for the repeating timer that drives chaos rounds.
"""

from abc import ABC, abstractmethod
from typing import Callable


class ScheduledTask(ABC):
    """Handle of a repeating callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop further invocations. Idempotent."""
        pass

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        pass


class IScheduler(ABC):
    """
    Outbound port for time-based repetition.

    Callbacks run on the caller's event loop, one at a time; there is no
    preemption between ticks.
    """

    @abstractmethod
    def call_repeating(self, interval: float, callback: Callable[[], None]) -> ScheduledTask:
        """
        Invoke callback every interval seconds until cancelled.

        The first invocation happens one interval after the call.

        Args:
            interval: Period in seconds
            callback: Zero-argument callable

        Returns:
            ScheduledTask handle
        """
        pass

    @abstractmethod
    def now(self) -> float:
        """Current scheduler time in seconds."""
        pass
