"""
Blast Radius Calculator

Computes the cascading impact of a set of failed nodes.

Cascade Rules:
    - Propagation follows edge direction only: a node downstream of a
      failed or affected node becomes affected
    - Every BFS depth is recorded as a CascadeLevel (domino animation)
    - An edge is broken as soon as it touches a failed or affected node,
      regardless of the direction it was discovered from
"""

from __future__ import annotations
import logging
from typing import Iterable, List, Set

from archsim.domain.models.graph import DiagramEdge, EdgeIndex
from archsim.domain.models.simulation import BlastRadius, CascadeLevel


class BlastRadiusCalculator:
    """Multi-source BFS seeded from all failed nodes at once."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def compute(self, edges: Iterable[DiagramEdge], failed_node_ids: Iterable[str]) -> BlastRadius:
        """
        Compute the blast radius of failed_node_ids.

        Args:
            edges: Edge list of the current snapshot
            failed_node_ids: Seed failures (duplicates are ignored)

        Returns:
            BlastRadius with affected nodes, broken edges and cascade levels
        """
        edges = list(edges)
        index = EdgeIndex(edges)

        seeds: List[str] = list(dict.fromkeys(failed_node_ids))
        failed: Set[str] = set(seeds)
        visited: Set[str] = set(seeds)
        affected: List[str] = []
        levels: List[CascadeLevel] = []

        frontier = list(seeds)
        depth = 0

        while frontier:
            next_frontier: List[str] = []
            level_nodes: List[str] = []
            level_edges: List[str] = []

            for current in frontier:
                for edge in index.outgoing(current):
                    target = edge.target_id
                    if target not in visited and target not in failed:
                        visited.add(target)
                        affected.append(target)
                        next_frontier.append(target)
                        level_nodes.append(target)
                        level_edges.append(edge.id)
                    elif edge.id not in level_edges:
                        # Already impacted target: not a new node, but the edge is still broken
                        level_edges.append(edge.id)

            if level_nodes or level_edges:
                levels.append(CascadeLevel(
                    depth=depth,
                    node_ids=tuple(level_nodes),
                    edge_ids=tuple(level_edges),
                ))

            frontier = next_frontier
            depth += 1

        # Full sweep: catches edges pointing into the impacted set that the
        # forward-only BFS never walked.
        impacted = failed | set(affected)
        broken = [e.id for e in edges if e.touches(impacted)]

        self.logger.debug(
            f"Blast radius of {seeds}: {len(affected)} affected, "
            f"{len(broken)} broken edges, {len(levels)} levels"
        )

        return BlastRadius(
            failed_node_ids=tuple(seeds),
            affected_node_ids=tuple(affected),
            broken_edge_ids=tuple(dict.fromkeys(broken)),
            levels=tuple(levels),
        )
