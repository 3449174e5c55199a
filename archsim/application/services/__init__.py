"""
Application Services Package
"""

from .simulation_orchestrator import SimulationOrchestrator

__all__ = ["SimulationOrchestrator"]
