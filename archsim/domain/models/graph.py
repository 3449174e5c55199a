"""
Diagram Graph Domain Models

Immutable snapshot of the diagram as handed over by the editor, plus a
networkx-backed index for the structural lookups the simulation
algorithms need.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Any, Iterable, List, Optional, Tuple

import networkx as nx

from .enums import NodeKind

# Edges without an explicit latency are assumed to take this long.
DEFAULT_LATENCY_MS = 100.0


@dataclass(frozen=True)
class DiagramNode:
    """A diagram element. Only architecture nodes are simulated."""
    id: str
    kind: str = NodeKind.ARCHITECTURE.value
    label: Optional[str] = None

    @property
    def is_architecture(self) -> bool:
        return self.kind == NodeKind.ARCHITECTURE.value

    @property
    def display_name(self) -> str:
        return self.label or self.id

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "kind": self.kind, "label": self.label}


@dataclass(frozen=True)
class DiagramEdge:
    """A directed connection between two diagram nodes."""
    id: str
    source_id: str
    target_id: str
    protocol: Optional[str] = None
    latency_ms: Optional[float] = None
    bidirectional: bool = False
    label: Optional[str] = None

    def effective_latency(self, default: float = DEFAULT_LATENCY_MS) -> float:
        return self.latency_ms if self.latency_ms is not None else default

    def touches(self, node_ids) -> bool:
        return self.source_id in node_ids or self.target_id in node_ids

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source_id,
            "target": self.target_id,
            "protocol": self.protocol,
            "latency_ms": self.latency_ms,
            "bidirectional": self.bidirectional,
            "label": self.label,
        }


class EdgeIndex:
    """
    Directed multigraph over an edge list.

    Edges are stored in a networkx MultiDiGraph keyed by edge id so that
    parallel edges between the same endpoint pair stay distinct. Each
    edge also records its input position, and lookups return edges in
    input list order rather than grouped by neighbour.
    """

    def __init__(self, edges: Iterable[DiagramEdge]):
        self.graph = nx.MultiDiGraph()
        for position, edge in enumerate(edges):
            self.graph.add_edge(
                edge.source_id, edge.target_id, key=edge.id, edge=edge, order=position,
            )

    @staticmethod
    def _in_input_order(edge_view) -> List[DiagramEdge]:
        ranked = sorted(edge_view, key=lambda item: item[2]["order"])
        return [data["edge"] for _, _, data in ranked]

    def outgoing(self, node_id: str) -> List[DiagramEdge]:
        """Edges whose source is node_id."""
        if node_id not in self.graph:
            return []
        return self._in_input_order(self.graph.out_edges(node_id, data=True))

    def incoming(self, node_id: str) -> List[DiagramEdge]:
        """Edges whose target is node_id."""
        if node_id not in self.graph:
            return []
        return self._in_input_order(self.graph.in_edges(node_id, data=True))


@dataclass(frozen=True)
class DiagramSnapshot:
    """
    Point-in-time copy of the diagram graph.

    Produced by a graph accessor on every orchestrator call. The
    simulation never mutates or caches it.
    """
    nodes: Tuple[DiagramNode, ...] = ()
    edges: Tuple[DiagramEdge, ...] = ()
    _by_id: Dict[str, DiagramNode] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "nodes", tuple(self.nodes))
        object.__setattr__(self, "edges", tuple(self.edges))
        object.__setattr__(self, "_by_id", {n.id: n for n in self.nodes})

    def node(self, node_id: str) -> Optional[DiagramNode]:
        return self._by_id.get(node_id)

    def has_architecture_node(self, node_id: Optional[str]) -> bool:
        node = self._by_id.get(node_id) if node_id else None
        return node is not None and node.is_architecture

    def architecture_nodes(self) -> List[DiagramNode]:
        return [n for n in self.nodes if n.is_architecture]

    def architecture_node_ids(self) -> List[str]:
        return [n.id for n in self.nodes if n.is_architecture]

    def architecture_edges(self) -> List[DiagramEdge]:
        """Edges whose both endpoints are architecture nodes."""
        return [
            e for e in self.edges
            if self.has_architecture_node(e.source_id) and self.has_architecture_node(e.target_id)
        ]

    def label_of(self, node_id: str) -> str:
        node = self._by_id.get(node_id)
        return node.display_name if node else node_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }
