"""
Domain Models Package

Pure domain entities with no infrastructure dependencies.
Re-exports all domain models for convenient imports.
"""

# Diagram graph
from .graph import DiagramNode, DiagramEdge, DiagramSnapshot, EdgeIndex, DEFAULT_LATENCY_MS
from .enums import (
    NodeKind, EdgeProtocol, SimulationMode, ChaosSubMode, ChaosEventType, RejectionReason
)

# Simulation models
from .simulation import (
    SimulationStep, BranchStep, BranchLevel, FlowTrace,
    CascadeLevel, BlastRadius, PartitionResult,
    ChaosConfig, ChaosEvent, SimulationStats,
    FlowSession, FailureSession, ChaosSession, SessionState, SessionSnapshot,
)

__all__ = [
    # Graph
    "DiagramNode", "DiagramEdge", "DiagramSnapshot", "EdgeIndex", "DEFAULT_LATENCY_MS",
    # Enums
    "NodeKind", "EdgeProtocol", "SimulationMode", "ChaosSubMode", "ChaosEventType",
    "RejectionReason",
    # Results
    "SimulationStep", "BranchStep", "BranchLevel", "FlowTrace",
    "CascadeLevel", "BlastRadius", "PartitionResult",
    # Chaos and stats
    "ChaosConfig", "ChaosEvent", "SimulationStats",
    # Session
    "FlowSession", "FailureSession", "ChaosSession", "SessionState", "SessionSnapshot",
]
