"""Output sink contract."""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from core.domain.models import ResolvedAddress


@runtime_checkable
class ResultSink(Protocol):
    """Receives finished results from any worker thread.

    Implementations must write all lines of one result atomically with respect
    to other results and keep the aggregate outcome consistent.
    """

    def emit(self, hostname: str, addresses: Sequence[ResolvedAddress]) -> int:
        """Write one line per address passing the family filter; return how many."""

        ...

    def emit_error(self, hostname: str, message: str) -> None:
        ...

    @property
    def all_resolved(self) -> bool:
        ...
