"""
Simulation Result Models

Immutable outputs of the simulation algorithms. These are the only
structures the rendering layer and the statistics display ever read.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Dict, Any, List, Optional, Tuple


@dataclass(frozen=True)
class SimulationStep:
    """One hop of a traced request."""
    edge_id: str
    from_node_id: str
    to_node_id: str
    protocol: Optional[str] = None
    latency_ms: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BranchStep(SimulationStep):
    """
    A hop tagged with its BFS depth and branch.

    branch_id is derived from (from_node_id, edge_id) so parallel hops at
    the same depth can be told apart.
    """
    branch_id: str = ""
    depth: int = 0

    @staticmethod
    def make_branch_id(from_node_id: str, edge_id: str) -> str:
        return f"b-{from_node_id}-{edge_id}"


@dataclass(frozen=True)
class BranchLevel:
    """All hops taken at one BFS depth."""
    depth: int
    steps: Tuple[BranchStep, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"depth": self.depth, "steps": [s.to_dict() for s in self.steps]}


@dataclass(frozen=True)
class FlowTrace:
    """Ordered request trace from a source node."""
    source_node_id: str
    node_ids: Tuple[str, ...] = ()
    edge_ids: Tuple[str, ...] = ()
    steps: Tuple[SimulationStep, ...] = ()
    levels: Tuple[BranchLevel, ...] = ()

    @property
    def hop_count(self) -> int:
        return len(self.steps)

    @property
    def level_count(self) -> int:
        return len(self.levels)

    def steps_through(self, level_index: int) -> List[BranchStep]:
        """Steps of every level up to and including level_index."""
        result: List[BranchStep] = []
        for level in self.levels[:max(level_index + 1, 0)]:
            result.extend(level.steps)
        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source_node_id,
            "node_ids": list(self.node_ids),
            "edge_ids": list(self.edge_ids),
            "steps": [s.to_dict() for s in self.steps],
            "levels": [lvl.to_dict() for lvl in self.levels],
        }


@dataclass(frozen=True)
class CascadeLevel:
    """One wave of failure propagation."""
    depth: int
    node_ids: Tuple[str, ...] = ()
    edge_ids: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"depth": self.depth, "node_ids": list(self.node_ids), "edge_ids": list(self.edge_ids)}


@dataclass(frozen=True)
class BlastRadius:
    """
    Cascading impact of a failure set.

    affected_node_ids never contains a seed failure. broken_edge_ids holds
    every edge touching a failed or affected node.
    """
    failed_node_ids: Tuple[str, ...] = ()
    affected_node_ids: Tuple[str, ...] = ()
    broken_edge_ids: Tuple[str, ...] = ()
    levels: Tuple[CascadeLevel, ...] = ()

    @property
    def impacted_node_ids(self) -> Tuple[str, ...]:
        return self.failed_node_ids + self.affected_node_ids

    def to_dict(self) -> Dict[str, Any]:
        return {
            "failed_node_ids": list(self.failed_node_ids),
            "affected_node_ids": list(self.affected_node_ids),
            "broken_edge_ids": list(self.broken_edge_ids),
            "levels": [lvl.to_dict() for lvl in self.levels],
        }


@dataclass(frozen=True)
class PartitionResult:
    """Two disjoint groups covering all architecture nodes, and the cut."""
    group_a: Tuple[str, ...] = ()
    group_b: Tuple[str, ...] = ()
    severed_edge_ids: Tuple[str, ...] = ()

    @property
    def is_partitioned(self) -> bool:
        return bool(self.severed_edge_ids) and bool(self.group_b)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "group_a": list(self.group_a),
            "group_b": list(self.group_b),
            "severed_edge_ids": list(self.severed_edge_ids),
        }
