"""Resolver backend: the operating system's resolver.

Uses `socket.getaddrinfo`, i.e. whatever the host is configured with
(/etc/hosts, nsswitch, DNS). getaddrinfo blocks, so:

- inline (synchronous context): the call runs on the context's own thread,
  one hostname at a time, and no helper thread is ever started. The OS
  resolver's own timeouts apply.
- otherwise: every lookup gets a daemon helper thread of its own, started the
  moment the lookup starts. The timeout therefore measures the lookup itself,
  never time spent queued, and a lookup that outlives it is abandoned rather
  than waited for.
"""

from __future__ import annotations

import asyncio
import logging
import socket
import threading

from core.domain.errors import ResolutionError
from core.domain.models import ResolvedAddress

logger = logging.getLogger(__name__)

AddrInfo = list[tuple]


def _gai_message(exc: OSError) -> str:
    if exc.strerror:
        return exc.strerror
    return str(exc) or exc.__class__.__name__


def _getaddrinfo(hostname: str) -> AddrInfo:
    # No service/port: addresses only. SOCK_STREAM keeps one entry per address.
    return socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)


def _settle(future: asyncio.Future, infos: AddrInfo | None, exc: Exception | None) -> None:
    if future.done():
        return
    if exc is not None:
        future.set_exception(exc)
    else:
        future.set_result(infos)


class SystemResolver:
    """`NameResolver` on top of getaddrinfo."""

    def __init__(self, *, timeout: float | None = None, inline: bool = False) -> None:
        self._timeout = timeout
        self._inline = inline

    def _lookup_in_thread(self, hostname: str) -> asyncio.Future:
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()

        def work() -> None:
            infos: AddrInfo | None = None
            error: Exception | None = None
            try:
                infos = _getaddrinfo(hostname)
            except Exception as exc:
                error = exc
            try:
                loop.call_soon_threadsafe(_settle, future, infos, error)
            except RuntimeError:
                # Loop already closed: the lookup was abandoned after its timeout.
                logger.debug("late getaddrinfo result for %s dropped", hostname)

        threading.Thread(target=work, name=f"getaddrinfo-{hostname}", daemon=True).start()
        return future

    async def _lookup(self, hostname: str) -> AddrInfo:
        if self._inline:
            return _getaddrinfo(hostname)
        future = self._lookup_in_thread(hostname)
        if self._timeout is None:
            return await future
        return await asyncio.wait_for(future, timeout=self._timeout)

    async def resolve(self, hostname: str) -> list[ResolvedAddress]:
        try:
            infos = await self._lookup(hostname)
        except asyncio.TimeoutError as exc:
            raise ResolutionError(hostname, f"lookup timed out after {self._timeout:g}s") from exc
        except UnicodeError as exc:
            raise ResolutionError(hostname, f"invalid hostname ({exc})") from exc
        except OSError as exc:
            raise ResolutionError(hostname, _gai_message(exc)) from exc

        addresses: list[ResolvedAddress] = []
        seen: set[str] = set()
        for family, _type, _proto, _canonname, sockaddr in infos:
            if family not in (socket.AF_INET, socket.AF_INET6):
                continue
            ip = sockaddr[0]
            if ip in seen:
                continue
            seen.add(ip)
            addresses.append(ResolvedAddress(address=ip))

        if not addresses:
            raise ResolutionError(hostname, "no addresses found")
        logger.debug("getaddrinfo %s -> %d address(es)", hostname, len(addresses))
        return addresses

    async def close(self) -> None:
        # Helper threads are daemons; nothing is joined here.
        return None
