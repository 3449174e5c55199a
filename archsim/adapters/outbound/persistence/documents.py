"""
Pydantic models for diagram documents.

The editor exports diagrams as {"nodes": [...], "edges": [...]} with
React-Flow style node/edge records. These models validate that shape
and convert it into domain objects.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from archsim.domain.models import DiagramEdge, DiagramNode, DiagramSnapshot, NodeKind


class NodeDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1, description="Unique node id")
    type: str = Field(default=NodeKind.ARCHITECTURE.value, description="architecture, group or comment")
    data: Dict[str, Any] = Field(default_factory=dict, description="Free-form node data")

    def to_domain(self) -> DiagramNode:
        label = self.data.get("label")
        return DiagramNode(id=self.id, kind=self.type, label=label if isinstance(label, str) else None)


class EdgeDataDocument(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    protocol: Optional[str] = Field(default=None, description="Protocol tag (http, grpc, kafka, ...)")
    latency_ms: Optional[float] = Field(default=None, alias="latencyMs", ge=0, description="Hop latency in ms")
    bidirectional: bool = Field(default=False, description="Traffic may flow target -> source too")
    label: Optional[str] = None


class EdgeDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1, description="Unique edge id")
    source: str = Field(..., description="Source node id")
    target: str = Field(..., description="Target node id")
    data: EdgeDataDocument = Field(default_factory=EdgeDataDocument)

    def to_domain(self) -> DiagramEdge:
        return DiagramEdge(
            id=self.id,
            source_id=self.source,
            target_id=self.target,
            protocol=self.data.protocol,
            latency_ms=self.data.latency_ms,
            bidirectional=self.data.bidirectional,
            label=self.data.label,
        )


class DiagramDocument(BaseModel):
    """A whole diagram as exported by the editor."""
    model_config = ConfigDict(extra="ignore")

    nodes: List[NodeDocument] = Field(default_factory=list)
    edges: List[EdgeDocument] = Field(default_factory=list)

    def to_snapshot(self) -> DiagramSnapshot:
        return DiagramSnapshot(
            nodes=tuple(n.to_domain() for n in self.nodes),
            edges=tuple(e.to_domain() for e in self.edges),
        )
