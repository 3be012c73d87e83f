"""Core interfaces/abstractions.

Why:
- Defines contracts (Protocol) implemented by concrete adapters.
- Inverts dependencies: the Core depends on abstractions, not on sockets or stdout.
"""
