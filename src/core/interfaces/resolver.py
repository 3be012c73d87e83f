"""Name resolver contract.

Why Protocol:
- Structural contract (duck typing) without rigid inheritance.
- Backends (OS resolver, dnspython) stay interchangeable and testable with
  fakes, without coupling the Core to a concrete implementation.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import ResolvedAddress


@runtime_checkable
class NameResolver(Protocol):
    """Minimal contract for a resolution backend.

    Design rules:
    - `resolve` is async: each execution context drives many lookups on its own loop.
    - Returns every address found (both families); filtering is the caller's job.
    - Any failure raises `core.domain.errors.ResolutionError`.
    """

    async def resolve(self, hostname: str) -> list[ResolvedAddress]:
        ...

    async def close(self) -> None:
        """Release the handle; called once when its context finishes."""

        ...


class ResolverFactory(Protocol):
    """Builds one resolver per execution context, inside that context's running loop.

    `inline` is set for the synchronous context: lookups run one at a time on
    the calling thread and the resolver must not start helper threads.
    """

    def __call__(self, *, inline: bool = False) -> NameResolver:
        ...
