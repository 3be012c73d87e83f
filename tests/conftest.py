from __future__ import annotations

import asyncio
import os
import threading
from typing import Sequence

import pytest

from core.domain.errors import ResolutionError
from core.domain.models import ResolvedAddress

DUAL_STACK = {
    "localhost": ["127.0.0.1", "::1"],
    "dual.example": ["192.0.2.10", "2001:db8::10"],
    "v4only.example": ["192.0.2.20"],
    "v6only.example": ["2001:db8::30"],
    "a.example": ["192.0.2.1"],
    "b.example": ["192.0.2.2"],
    "c.example": ["192.0.2.3"],
    "d.example": ["192.0.2.4"],
    "e.example": ["192.0.2.5"],
}


class FakeResolver:
    """In-memory `NameResolver`; unknown names fail like NXDOMAIN."""

    def __init__(
        self,
        records: dict[str, list[str]] | None = None,
        *,
        delay: float = 0.0,
        calls: list[tuple[str, str]] | None = None,
        inline: bool = False,
    ) -> None:
        self._records = DUAL_STACK if records is None else records
        self._delay = delay
        self.calls = calls if calls is not None else []
        self.inline = inline
        self.closed = False

    async def resolve(self, hostname: str) -> list[ResolvedAddress]:
        self.calls.append((hostname, threading.current_thread().name))
        if self._delay:
            await asyncio.sleep(self._delay)
        if hostname not in self._records:
            raise ResolutionError(hostname, "Name or service not known")
        return [ResolvedAddress(address=ip) for ip in self._records[hostname]]

    async def close(self) -> None:
        self.closed = True


class RecordingSink:
    """`ResultSink` keeping results in memory instead of writing lines."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.emitted: list[tuple[str, list[str]]] = []
        self.errors: list[tuple[str, str]] = []
        self._all_resolved = True

    def emit(self, hostname: str, addresses: Sequence[ResolvedAddress]) -> int:
        with self._lock:
            self.emitted.append((hostname, [str(a) for a in addresses]))
        return len(addresses)

    def emit_error(self, hostname: str, message: str) -> None:
        with self._lock:
            self.errors.append((hostname, message))
            self._all_resolved = False

    @property
    def all_resolved(self) -> bool:
        return self._all_resolved

    @property
    def hostnames(self) -> list[str]:
        return [h for h, _ in self.emitted] + [h for h, _ in self.errors]


@pytest.fixture
def calls() -> list[tuple[str, str]]:
    return []


@pytest.fixture
def fake_factory(calls):
    resolvers: list[FakeResolver] = []

    def factory(*, inline: bool = False) -> FakeResolver:
        resolver = FakeResolver(calls=calls, inline=inline)
        resolvers.append(resolver)
        return resolver

    factory.resolvers = resolvers  # type: ignore[attr-defined]
    return factory


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    """Keep user/project .env files and HOSTRESOLVE_* vars out of tests."""

    for key in list(os.environ):
        if key.startswith("HOSTRESOLVE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)
