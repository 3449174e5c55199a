from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional, Tuple


@dataclass(frozen=True)
class SimulationStats:
    """Counters shown by the statistics display."""
    # Flow
    total_hops: int = 0
    protocols_used: Tuple[str, ...] = ()
    path_length: int = 0
    total_latency_ms: float = 0.0
    bottleneck_edge_id: Optional[str] = None
    branch_count: int = 0
    round_trip_latency_ms: Optional[float] = None
    # Failure
    failed_count: int = 0
    affected_count: int = 0
    impact_percentage: int = 0
    broken_edge_count: int = 0
    # Chaos
    chaos_rounds: int = 0
    chaos_total_failures: int = 0
    chaos_mtbf_ms: Optional[int] = None
    chaos_severed_edges: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
