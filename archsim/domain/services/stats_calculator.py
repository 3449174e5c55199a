"""
Simulation Stats Calculator

Derives display counters from committed simulation outputs. Nothing is
recomputed from the graph; only result objects are read.
"""

from __future__ import annotations
import math
from typing import List, Optional, Sequence

from archsim.domain.models.enums import EdgeProtocol
from archsim.domain.models.graph import DEFAULT_LATENCY_MS
from archsim.domain.models.simulation import (
    BlastRadius,
    ChaosSession,
    FlowTrace,
    PartitionResult,
    SessionState,
    SimulationStats,
    SimulationStep,
)


def impact_percentage(impacted: int, total: int) -> int:
    """Share of impacted nodes, rounded half up to a whole percent."""
    if total <= 0:
        return 0
    return int(math.floor(impacted / total * 100 + 0.5))


class SimulationStatsCalculator:
    """Builds SimulationStats for each simulation mode."""

    def __init__(self, default_latency_ms: float = DEFAULT_LATENCY_MS):
        self.default_latency_ms = default_latency_ms

    def flow_stats(
        self,
        trace: FlowTrace,
        cursor: Optional[int] = None,
        round_trip: bool = False,
    ) -> SimulationStats:
        """
        Hop, protocol and latency counters of a trace.

        When cursor is given only the levels up to it are counted, which is
        what the step-by-step debugger shows. With round_trip the response
        leg is added: every request/response hop is walked back once, while
        messaging hops (Kafka, AMQP, RabbitMQ) send no reply. If no hop
        replies, round_trip_latency_ms stays None.
        """
        if cursor is None:
            steps: Sequence[SimulationStep] = trace.steps
            branch_steps = [s for level in trace.levels for s in level.steps]
            path_length = len(trace.node_ids)
        else:
            branch_steps = trace.steps_through(cursor)
            steps = branch_steps
            reached = {trace.source_node_id} | {s.to_node_id for s in steps}
            path_length = len(reached)

        protocols: List[str] = []
        total_latency = 0.0
        return_latency = 0.0
        replies = 0
        max_latency = 0.0
        bottleneck = None
        for step in steps:
            if step.protocol and step.protocol not in protocols:
                protocols.append(step.protocol)
            latency = step.latency_ms if step.latency_ms is not None else self.default_latency_ms
            total_latency += latency
            if latency > max_latency:
                max_latency = latency
                bottleneck = step.edge_id
            if EdgeProtocol.is_request_response(step.protocol):
                return_latency += latency
                replies += 1

        round_trip_latency = None
        if round_trip and replies:
            round_trip_latency = total_latency + return_latency

        return SimulationStats(
            total_hops=len(steps),
            protocols_used=tuple(protocols),
            path_length=path_length,
            total_latency_ms=total_latency,
            bottleneck_edge_id=bottleneck,
            branch_count=len({s.branch_id for s in branch_steps}),
            round_trip_latency_ms=round_trip_latency,
        )

    def failure_stats(self, blast: BlastRadius, architecture_node_count: int) -> SimulationStats:
        failed = len(blast.failed_node_ids)
        affected = len(blast.affected_node_ids)
        return SimulationStats(
            failed_count=failed,
            affected_count=affected,
            impact_percentage=impact_percentage(failed + affected, architecture_node_count),
            broken_edge_count=len(blast.broken_edge_ids),
        )

    def chaos_stats(
        self,
        chaos: ChaosSession,
        architecture_node_count: int,
        interval_ms: int,
    ) -> SimulationStats:
        if chaos.partition is not None:
            return self._partition_stats(chaos.partition, chaos.round, architecture_node_count)

        failed = len(chaos.failed_node_ids)
        blast = chaos.blast_radius
        affected = len(blast.affected_node_ids) if blast else 0
        return SimulationStats(
            failed_count=failed,
            affected_count=affected,
            impact_percentage=impact_percentage(failed + affected, architecture_node_count),
            broken_edge_count=len(blast.broken_edge_ids) if blast else 0,
            chaos_rounds=chaos.round,
            chaos_total_failures=failed,
            chaos_mtbf_ms=interval_ms if chaos.round > 1 else None,
        )

    def _partition_stats(
        self,
        partition: PartitionResult,
        rounds: int,
        architecture_node_count: int,
    ) -> SimulationStats:
        return SimulationStats(
            affected_count=len(partition.group_b),
            impact_percentage=impact_percentage(len(partition.group_b), architecture_node_count),
            broken_edge_count=len(partition.severed_edge_ids),
            chaos_rounds=rounds,
            chaos_severed_edges=len(partition.severed_edge_ids),
        )

    def for_session(self, state: SessionState, architecture_node_count: int) -> Optional[SimulationStats]:
        """Stats of whatever the session currently shows, None when there is nothing."""
        if state.flow and state.flow.trace is not None:
            cursor = state.flow.cursor if state.flow.stepping_mode else None
            return self.flow_stats(state.flow.trace, cursor, round_trip=state.flow.round_trip)
        if state.failure and state.failure.blast_radius is not None:
            return self.failure_stats(state.failure.blast_radius, architecture_node_count)
        if state.chaos:
            return self.chaos_stats(state.chaos, architecture_node_count, state.chaos_config.interval_ms)
        return None
