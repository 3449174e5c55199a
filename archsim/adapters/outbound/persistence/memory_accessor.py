"""
In-Memory Graph Accessor Adapter

Implements IGraphAccessor over mutable in-memory lists. Stands in for
the diagram editor in tests and embeddings that build diagrams in code.
"""

from typing import Any, Dict, Iterable, List

from archsim.application.ports.outbound.graph_accessor import IGraphAccessor
from archsim.domain.models import DiagramEdge, DiagramNode, DiagramSnapshot
from .documents import DiagramDocument


class InMemoryGraphAccessor(IGraphAccessor):
    """
    In-memory adapter implementing IGraphAccessor.

    Every get_snapshot() call copies the current lists, so later edits
    never leak into a snapshot the simulation already holds.
    """

    def __init__(self, nodes: Iterable[DiagramNode] = (), edges: Iterable[DiagramEdge] = ()):
        self.nodes: List[DiagramNode] = list(nodes)
        self.edges: List[DiagramEdge] = list(edges)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InMemoryGraphAccessor":
        """Build from an editor-style {"nodes": [...], "edges": [...]} dict."""
        snapshot = DiagramDocument.model_validate(data).to_snapshot()
        return cls(snapshot.nodes, snapshot.edges)

    def get_snapshot(self) -> DiagramSnapshot:
        return DiagramSnapshot(nodes=tuple(self.nodes), edges=tuple(self.edges))

    def add_node(self, node: DiagramNode) -> None:
        self.nodes.append(node)

    def add_edge(self, edge: DiagramEdge) -> None:
        self.edges.append(edge)

    def remove_node(self, node_id: str) -> None:
        """Remove a node and every edge touching it."""
        self.nodes = [n for n in self.nodes if n.id != node_id]
        self.edges = [e for e in self.edges if not e.touches({node_id})]

    def remove_edge(self, edge_id: str) -> None:
        self.edges = [e for e in self.edges if e.id != edge_id]
