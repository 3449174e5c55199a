"""
Scheduling Adapters Package
"""

from .manual_scheduler import ManualScheduler, ManualTask
from .asyncio_scheduler import AsyncioScheduler, AsyncioTask

__all__ = [
    "ManualScheduler",
    "ManualTask",
    "AsyncioScheduler",
    "AsyncioTask",
]
