"""
Application Package

Ports and application services orchestrating the domain layer.
"""
