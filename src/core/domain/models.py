"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Strict validation at the edge (hostnames, worker count, address parsing)
  without coupling the Core to any I/O library.
- Self-documenting fields (Field descriptions) shared by CLI and services.

Note:
- These models describe *what* a lookup is, not *how* it is performed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from pydantic import BaseModel, Field, IPvAnyAddress, field_validator, model_validator
from pydantic.config import ConfigDict


class AddressFamily(str, Enum):
    """IP address family of a resolved address."""

    IPV4 = "ipv4"
    IPV6 = "ipv6"

    def label(self) -> str:
        return "IPv4" if self is AddressFamily.IPV4 else "IPv6"


class ResolvedAddress(BaseModel):
    """One address returned by a resolver."""

    model_config = ConfigDict(frozen=True)

    address: IPvAnyAddress = Field(
        ...,
        description="IPv4 or IPv6 address (IPv6 may carry a scope id).",
    )

    @property
    def family(self) -> AddressFamily:
        return AddressFamily.IPV4 if self.address.version == 4 else AddressFamily.IPV6

    def __str__(self) -> str:
        return str(self.address)


class ResolutionConfig(BaseModel):
    """Validated input of a run.

    Produced by the CLI (or any other entry-point) and consumed by the
    resolution engine. `worker_count == 0` means synchronous, single context.
    """

    hostnames: list[str] = Field(
        ...,
        min_length=1,
        description="Hostnames in input order; duplicates are allowed.",
    )
    include_v4: bool = Field(
        default=True,
        description="Print IPv4 addresses.",
    )
    include_v6: bool = Field(
        default=True,
        description="Print IPv6 addresses.",
    )
    worker_count: int = Field(
        default=0,
        ge=0,
        description="Number of concurrent execution contexts (0 = synchronous).",
    )

    @field_validator("hostnames")
    @classmethod
    def _reject_blank_hostnames(cls, value: list[str]) -> list[str]:
        for hostname in value:
            if not hostname or not hostname.strip():
                raise ValueError("hostnames must be non-empty strings")
        return value

    @model_validator(mode="after")
    def _require_a_family(self) -> "ResolutionConfig":
        if not (self.include_v4 or self.include_v6):
            raise ValueError("at least one of include_v4/include_v6 must be enabled")
        return self


class FamilyFilter(BaseModel):
    """Which address families end up on the output."""

    model_config = ConfigDict(frozen=True)

    include_v4: bool = True
    include_v6: bool = True

    @classmethod
    def from_config(cls, config: ResolutionConfig) -> "FamilyFilter":
        return cls(include_v4=config.include_v4, include_v6=config.include_v6)

    def matches(self, address: ResolvedAddress) -> bool:
        if address.family is AddressFamily.IPV4:
            return self.include_v4
        return self.include_v6

    def apply(self, addresses: Iterable[ResolvedAddress]) -> list[ResolvedAddress]:
        return [a for a in addresses if self.matches(a)]

    def describe_missing(self) -> str:
        """Error message for a lookup that found nothing in the wanted families."""

        if self.include_v4 and not self.include_v6:
            return "no IPv4 addresses found"
        if self.include_v6 and not self.include_v4:
            return "no IPv6 addresses found"
        return "no addresses found"


class ResolutionResult(BaseModel):
    """Outcome of one hostname: either addresses or an error message."""

    hostname: str = Field(..., min_length=1)
    addresses: list[ResolvedAddress] = Field(default_factory=list)
    error: str | None = Field(
        default=None,
        description="Human readable failure reason; None on success.",
    )

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ResolutionTask:
    """A hostname bound to the one context that will resolve it."""

    hostname: str
    position: int
    context_index: int


@dataclass
class RunOutcome:
    """Aggregate result of a run.

    Not thread-safe on its own: mutate it under a lock (the output sink) or
    from a single thread (one per execution context), then `combine`.
    `all_resolved` only ever goes from True to False.
    """

    all_resolved: bool = True
    resolved: int = 0
    failed: int = 0

    def record_success(self) -> None:
        self.resolved += 1

    def record_failure(self) -> None:
        self.failed += 1
        self.all_resolved = False

    @classmethod
    def combine(cls, outcomes: Iterable["RunOutcome"]) -> "RunOutcome":
        total = cls()
        for outcome in outcomes:
            total.resolved += outcome.resolved
            total.failed += outcome.failed
            total.all_resolved = total.all_resolved and outcome.all_resolved
        return total
