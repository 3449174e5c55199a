"""
Application Ports Package

Inbound (use case) and outbound (accessor, scheduler) interfaces.
"""

from .inbound import ISimulationUseCase
from .outbound import IGraphAccessor, IScheduler, ScheduledTask

__all__ = [
    "ISimulationUseCase",
    "IGraphAccessor",
    "IScheduler",
    "ScheduledTask",
]
