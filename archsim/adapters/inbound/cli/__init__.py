"""
CLI Inbound Adapter Package

Terminal output for the simulation command line.
"""

from .display import ConsoleDisplay, Colors

__all__ = [
    "ConsoleDisplay",
    "Colors",
]
