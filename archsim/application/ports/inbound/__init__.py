"""
Inbound Ports Package
"""

from .simulation_port import ISimulationUseCase

__all__ = ["ISimulationUseCase"]
