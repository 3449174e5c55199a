"""
Domain Services Package

Pure simulation algorithms and the session state machine.
"""

from .flow_tracer import FlowPathTracer
from .blast_radius import BlastRadiusCalculator
from .chaos_selector import ChaosTargetSelector
from .partitioner import NetworkPartitioner, DisjointSet
from .stats_calculator import SimulationStatsCalculator, impact_percentage
from . import session_transitions

__all__ = [
    "FlowPathTracer",
    "BlastRadiusCalculator",
    "ChaosTargetSelector",
    "NetworkPartitioner",
    "DisjointSet",
    "SimulationStatsCalculator",
    "impact_percentage",
    "session_transitions",
]
