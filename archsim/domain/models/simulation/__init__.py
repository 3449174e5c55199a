"""
Simulation Models Package

Result types, chaos configuration, statistics and session state.
"""

from .results import (
    SimulationStep,
    BranchStep,
    BranchLevel,
    FlowTrace,
    CascadeLevel,
    BlastRadius,
    PartitionResult,
)
from .chaos import ChaosConfig, ChaosEvent
from .stats import SimulationStats
from .session import (
    FlowSession,
    FailureSession,
    ChaosSession,
    SessionState,
    SessionSnapshot,
)

__all__ = [
    # Algorithm outputs
    "SimulationStep",
    "BranchStep",
    "BranchLevel",
    "FlowTrace",
    "CascadeLevel",
    "BlastRadius",
    "PartitionResult",
    # Chaos
    "ChaosConfig",
    "ChaosEvent",
    # Statistics
    "SimulationStats",
    # Session
    "FlowSession",
    "FailureSession",
    "ChaosSession",
    "SessionState",
    "SessionSnapshot",
]
