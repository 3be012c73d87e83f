"""Builder for per-context resolver handles.

Why a builder:
- Centralizes backend choice and timeouts so every context behaves the same.
- Returns a factory, not a resolver: each context creates its own handle
  inside its own event loop, so no resolver state crosses threads.
"""

from __future__ import annotations

import logging
from typing import Sequence

from adapters.dns_resolver import DnsPythonResolver
from adapters.system_resolver import SystemResolver
from core.config import AppSettings, ResolverBackend
from core.interfaces.resolver import NameResolver, ResolverFactory

logger = logging.getLogger(__name__)

_UNSET = object()


def build_resolver_factory(
    settings: AppSettings | None = None,
    *,
    backend: ResolverBackend | None = None,
    nameservers: Sequence[str] | None = None,
    timeout: float | None | object = _UNSET,
) -> ResolverFactory:
    """Create a `ResolverFactory` from settings, with per-run overrides."""

    settings = settings or AppSettings()
    backend = backend or settings.resolver_backend
    servers = list(nameservers) if nameservers else list(settings.nameservers)
    lookup_timeout = settings.lookup_timeout_seconds if timeout is _UNSET else timeout

    if backend is ResolverBackend.DNSPYTHON:

        def make_dnspython(*, inline: bool = False) -> NameResolver:
            # Queries run on the context loop itself; there is no helper thread to skip.
            return DnsPythonResolver(nameservers=servers, timeout=lookup_timeout)

        return make_dnspython

    if servers:
        logger.warning(
            "nameservers %s ignored: the system backend uses the OS resolver configuration",
            ", ".join(servers),
        )

    def make_system(*, inline: bool = False) -> NameResolver:
        return SystemResolver(timeout=lookup_timeout, inline=inline)

    return make_system
