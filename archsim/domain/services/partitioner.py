"""
Network Partitioner

Simulates a network split by severing a random share of the edges and
grouping the surviving connectivity into two sides.
"""

from __future__ import annotations
import logging
import math
import random
from collections import defaultdict
from typing import Dict, Hashable, Iterable, List, Optional

from archsim.domain.models.graph import DiagramEdge, DiagramNode
from archsim.domain.models.simulation import PartitionResult

# Share of candidate edges severed per partition, drawn uniformly.
SEVER_RATIO_RANGE = (0.3, 0.5)


class DisjointSet:
    """Union-find with path compression and union by rank."""

    def __init__(self, items: Iterable[Hashable] = ()):
        self._parent: Dict[Hashable, Hashable] = {}
        self._rank: Dict[Hashable, int] = {}
        for item in items:
            self.add(item)

    def add(self, item: Hashable) -> None:
        if item not in self._parent:
            self._parent[item] = item
            self._rank[item] = 0

    def find(self, item: Hashable) -> Hashable:
        self.add(item)
        root = item
        while self._parent[root] != root:
            root = self._parent[root]
        # Path compression
        while self._parent[item] != root:
            self._parent[item], item = root, self._parent[item]
        return root

    def union(self, a: Hashable, b: Hashable) -> None:
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return
        if self._rank[ra] < self._rank[rb]:
            ra, rb = rb, ra
        self._parent[rb] = ra
        if self._rank[ra] == self._rank[rb]:
            self._rank[ra] += 1


class NetworkPartitioner:
    """
    Edge-cut partitioner.

    Algorithm:
        1. Candidate edges = all edges except those between two protected nodes
        2. Sever ceil(|candidates| * r) of them, r ~ U[0.3, 0.5], at least one
        3. Union the endpoints of every surviving edge
        4. Largest component is group A, everything else is group B
        5. If edges were severed but the graph stayed connected, fall back to
           a positional half split so the partition is always visible
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.logger = logging.getLogger(__name__)
        self._rng = rng or random.Random()

    def partition(
        self,
        nodes: Iterable[DiagramNode],
        edges: Iterable[DiagramEdge],
        protected_ids: Iterable[str] = (),
    ) -> PartitionResult:
        """
        Compute a network partition.

        Args:
            nodes: Diagram nodes (non-architecture nodes are skipped)
            edges: Edge list of the current snapshot
            protected_ids: Nodes whose mutual links must not be severed

        Returns:
            PartitionResult; a trivial one (everything in group A, nothing
            severed) when fewer than two nodes or no candidate edge exist
        """
        node_ids = [n.id for n in nodes if n.is_architecture]
        edges = list(edges)
        trivial = PartitionResult(group_a=tuple(node_ids))

        if len(node_ids) < 2:
            self.logger.debug("Partition skipped: fewer than two architecture nodes")
            return trivial

        protected = set(protected_ids)
        candidates = [
            e for e in edges
            if not (e.source_id in protected and e.target_id in protected)
        ]
        if not candidates:
            self.logger.debug("Partition skipped: no severable edge")
            return trivial

        ratio = self._rng.uniform(*SEVER_RATIO_RANGE)
        sever_count = max(1, math.ceil(len(candidates) * ratio))
        self._rng.shuffle(candidates)
        severed_ids = [e.id for e in candidates[:sever_count]]
        severed = set(severed_ids)

        components = DisjointSet(node_ids)
        for edge in edges:
            if edge.id not in severed:
                components.union(edge.source_id, edge.target_id)

        groups: Dict[Hashable, List[str]] = defaultdict(list)
        for node_id in node_ids:
            groups[components.find(node_id)].append(node_id)

        ordered = sorted(groups.values(), key=len, reverse=True)
        group_a = ordered[0]
        group_b = [node_id for group in ordered[1:] for node_id in group]

        if not group_b:
            # A redundant path survived the cut
            half = math.ceil(len(node_ids) / 2)
            group_a, group_b = node_ids[:half], node_ids[half:]
            self.logger.debug("Cut left the graph connected, using positional split")

        self.logger.debug(
            f"Partition severed {len(severed_ids)}/{len(candidates)} edges: "
            f"{len(group_a)} | {len(group_b)} nodes"
        )

        return PartitionResult(
            group_a=tuple(group_a),
            group_b=tuple(group_b),
            severed_edge_ids=tuple(severed_ids),
        )
