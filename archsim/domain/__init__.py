"""
Domain Package

Pure domain models and services with no infrastructure dependencies.
"""
