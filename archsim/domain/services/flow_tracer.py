"""
Flow Path Tracer

Traces how a request spreads from a source node through the diagram.

Traversal is a frontier-by-frontier BFS:
    - outgoing edges are followed in their declared direction
    - incoming edges are followed in reverse only when bidirectional
    - every edge is consumed at most once, whichever way it is walked
    - every BFS depth becomes one BranchLevel so that parallel hops can
      be animated together

The first edge to reach a node wins. Alternate paths of different
length to the same node are not compared, so the trace is one
consistent path and not necessarily the shortest one.
"""

from __future__ import annotations
import logging
from typing import Iterable, List, Set

from archsim.domain.models.graph import DiagramEdge, EdgeIndex
from archsim.domain.models.simulation import (
    SimulationStep,
    BranchStep,
    BranchLevel,
    FlowTrace,
)


class FlowPathTracer:
    """
    Branch-aware BFS over the diagram edges.

    Example:
        >>> tracer = FlowPathTracer()
        >>> trace = tracer.trace(snapshot.architecture_edges(), "api-gateway")
        >>> [len(level.steps) for level in trace.levels]
        [2, 2]
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def trace(self, edges: Iterable[DiagramEdge], source_node_id: str) -> FlowTrace:
        """
        Trace the request flow from source_node_id.

        A source that no edge touches yields a trace containing only the
        source itself.

        Args:
            edges: Edge list of the current snapshot
            source_node_id: Node the request starts from

        Returns:
            FlowTrace with node/edge visitation order and per-depth levels
        """
        index = EdgeIndex(edges)

        visited_nodes: Set[str] = {source_node_id}
        visited_edges: Set[str] = set()
        node_ids: List[str] = [source_node_id]
        edge_ids: List[str] = []
        steps: List[SimulationStep] = []
        levels: List[BranchLevel] = []

        frontier: List[str] = [source_node_id]
        depth = 0

        while frontier:
            next_frontier: List[str] = []
            level_steps: List[BranchStep] = []

            for current in frontier:
                hops = [(edge, edge.target_id) for edge in index.outgoing(current)]
                hops += [
                    (edge, edge.source_id)
                    for edge in index.incoming(current)
                    if edge.bidirectional
                ]

                for edge, destination in hops:
                    if edge.id in visited_edges:
                        continue
                    visited_edges.add(edge.id)
                    edge_ids.append(edge.id)

                    step = SimulationStep(
                        edge_id=edge.id,
                        from_node_id=current,
                        to_node_id=destination,
                        protocol=edge.protocol,
                        latency_ms=edge.latency_ms,
                    )
                    steps.append(step)
                    level_steps.append(BranchStep(
                        edge_id=step.edge_id,
                        from_node_id=step.from_node_id,
                        to_node_id=step.to_node_id,
                        protocol=step.protocol,
                        latency_ms=step.latency_ms,
                        branch_id=BranchStep.make_branch_id(current, edge.id),
                        depth=depth,
                    ))

                    if destination not in visited_nodes:
                        visited_nodes.add(destination)
                        node_ids.append(destination)
                        next_frontier.append(destination)

            if level_steps:
                levels.append(BranchLevel(depth=depth, steps=tuple(level_steps)))

            frontier = next_frontier
            depth += 1

        self.logger.debug(
            f"Traced flow from '{source_node_id}': {len(node_ids)} nodes, "
            f"{len(edge_ids)} edges, {len(levels)} levels"
        )

        return FlowTrace(
            source_node_id=source_node_id,
            node_ids=tuple(node_ids),
            edge_ids=tuple(edge_ids),
            steps=tuple(steps),
            levels=tuple(levels),
        )
