"""Core: domain, configuration, contracts and services.

The Core knows nothing about the terminal; adapters and the CLI depend on it,
not the other way around.
"""
