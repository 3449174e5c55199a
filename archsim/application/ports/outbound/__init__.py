"""
Outbound Ports Package

Interfaces the application depends on.
"""

from .graph_accessor import IGraphAccessor
from .scheduler import IScheduler, ScheduledTask

__all__ = [
    "IGraphAccessor",
    "IScheduler",
    "ScheduledTask",
]
