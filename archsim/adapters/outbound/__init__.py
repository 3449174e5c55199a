"""
Outbound Adapters Package
"""

from .persistence import InMemoryGraphAccessor, JsonDiagramAccessor, DiagramLoadError
from .scheduling import ManualScheduler, AsyncioScheduler

__all__ = [
    "InMemoryGraphAccessor",
    "JsonDiagramAccessor",
    "DiagramLoadError",
    "ManualScheduler",
    "AsyncioScheduler",
]
