"""Adapters: concrete implementations of the Core contracts.

- Resolver backends (`system_resolver`, `dns_resolver`) implement `NameResolver`.
- `console_sink` implements `ResultSink`.
"""
