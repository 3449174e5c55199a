"""
Adapters Package

Inbound (CLI display) and outbound (graph accessors, schedulers) adapters.
"""
