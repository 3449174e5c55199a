"""
Graph Accessor Port

Interface defining the contract for reading the diagram graph.
"""

from abc import ABC, abstractmethod

from archsim.domain.models import DiagramSnapshot


class IGraphAccessor(ABC):
    """
    Outbound port supplying the diagram to the simulation.

    The diagram editor owns the graph; the simulation pulls a fresh,
    immutable snapshot on every operation and never writes back.
    """

    @abstractmethod
    def get_snapshot(self) -> DiagramSnapshot:
        """
        Return the current nodes and edges.

        Returns:
            DiagramSnapshot of the diagram at call time
        """
        pass
