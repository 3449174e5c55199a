"""
Simulation Use Case Port

Interface defining the contract for simulation operations.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from archsim.domain.models import SimulationMode, SessionSnapshot, SimulationStats


class ISimulationUseCase(ABC):
    """
    Inbound port for simulation use cases.

    Every operation is safe to call in any order. A call that does not
    apply to the current state returns False and leaves the session
    untouched; nothing is raised.
    """

    @abstractmethod
    def set_mode(self, mode: SimulationMode) -> bool:
        """
        Switch the top-level mode, clearing the previous mode's selections.

        Args:
            mode: Target simulation mode

        Returns:
            True (switching is always allowed)
        """
        pass

    @abstractmethod
    def start_flow(self, source_node_id: Optional[str]) -> bool:
        """
        Trace the request flow from an architecture node.

        Args:
            source_node_id: Node the request starts from

        Returns:
            True if a trace was computed
        """
        pass

    @abstractmethod
    def start_failure(self, failed_node_ids: Optional[Iterable[str]] = None) -> bool:
        """
        Compute the blast radius of the marked failures.

        Args:
            failed_node_ids: Failures to mark first (None = use current marks)

        Returns:
            True if a blast radius was computed
        """
        pass

    @abstractmethod
    def start_chaos(self) -> bool:
        """
        Run a chaos round now and repeat it every configured interval.

        Returns:
            True if the auto-run started
        """
        pass

    @abstractmethod
    def stop(self) -> bool:
        """Cancel any repeat and return to idle. False if already idle."""
        pass

    @abstractmethod
    def pause(self) -> bool:
        pass

    @abstractmethod
    def resume(self) -> bool:
        pass

    @abstractmethod
    def snapshot(self) -> SessionSnapshot:
        """Return the published {mode, running, round, cursor} view."""
        pass

    @abstractmethod
    def stats(self) -> Optional[SimulationStats]:
        """Return display counters for the committed results."""
        pass
