"""
archsim

Resilience simulation engine for architecture diagrams: request flow
tracing, failure blast radius, chaos rounds and network partitions.
"""

__version__ = "0.1.0"
