"""Domain errors."""

from __future__ import annotations


class ResolutionError(Exception):
    """A hostname could not be resolved.

    Single error kind for lookups: name does not exist, no addresses, transport
    failure or timeout all end up here with a human readable message.
    """

    def __init__(self, hostname: str, message: str) -> None:
        super().__init__(f"{hostname}: {message}")
        self.hostname = hostname
        self.message = message


class DispatchError(RuntimeError):
    """A worker context crashed with something other than a `ResolutionError`."""
