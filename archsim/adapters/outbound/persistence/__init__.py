"""
Persistence Adapters Package

Graph accessors reading diagrams from memory or from editor exports.
"""

from .documents import DiagramDocument, NodeDocument, EdgeDocument, EdgeDataDocument
from .memory_accessor import InMemoryGraphAccessor
from .json_accessor import JsonDiagramAccessor, DiagramLoadError

__all__ = [
    "DiagramDocument",
    "NodeDocument",
    "EdgeDocument",
    "EdgeDataDocument",
    "InMemoryGraphAccessor",
    "JsonDiagramAccessor",
    "DiagramLoadError",
]
