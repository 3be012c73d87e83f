"""Resolver backend: dnspython's asyncio resolver.

Queries A and AAAA directly, optionally against explicit nameservers,
bypassing /etc/hosts and nsswitch. Both queries of one hostname run
concurrently on the owning context's loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

import dns.asyncresolver
import dns.exception
import dns.resolver

from core.domain.errors import ResolutionError
from core.domain.models import ResolvedAddress

logger = logging.getLogger(__name__)

_RECORD_TYPES = ("A", "AAAA")


class DnsPythonResolver:
    """`NameResolver` on top of `dns.asyncresolver.Resolver`."""

    def __init__(
        self,
        *,
        nameservers: Sequence[str] | None = None,
        timeout: float | None = None,
    ) -> None:
        nameservers = list(nameservers or [])
        self._resolver = dns.asyncresolver.Resolver(configure=not nameservers)
        if nameservers:
            self._resolver.nameservers = nameservers
        if timeout is not None:
            self._resolver.lifetime = timeout
        self._timeout = timeout

    async def _query(self, hostname: str, rdtype: str) -> list[ResolvedAddress]:
        answer = await self._resolver.resolve(hostname, rdtype, raise_on_no_answer=False)
        return [ResolvedAddress(address=rdata.address) for rdata in answer.rrset or ()]

    async def resolve(self, hostname: str) -> list[ResolvedAddress]:
        outcomes = await asyncio.gather(
            *[self._query(hostname, rdtype) for rdtype in _RECORD_TYPES],
            return_exceptions=True,
        )

        addresses: list[ResolvedAddress] = []
        failure: BaseException | None = None
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, dns.exception.DNSException):
                    raise outcome
                failure = failure or outcome
                continue
            for address in outcome:
                if address not in addresses:
                    addresses.append(address)

        if addresses:
            return addresses
        if isinstance(failure, dns.exception.Timeout) and self._timeout is not None:
            raise ResolutionError(hostname, f"lookup timed out after {self._timeout:g}s") from failure
        if isinstance(failure, dns.resolver.NXDOMAIN):
            raise ResolutionError(hostname, "name does not exist") from failure
        if failure is not None:
            raise ResolutionError(hostname, str(failure) or failure.__class__.__name__) from failure
        raise ResolutionError(hostname, "no addresses found")

    async def close(self) -> None:
        return None
