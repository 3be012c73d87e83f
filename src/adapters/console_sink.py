"""Line-oriented output sink.

Every worker thread funnels its results through one `ConsoleSink`. A single
lock serializes whole results, so lines of two hostnames never interleave,
and guards the run outcome shared by all threads.
"""

from __future__ import annotations

import sys
import threading
from typing import Sequence, TextIO

from core.domain.models import FamilyFilter, ResolvedAddress, RunOutcome


class ConsoleSink:
    """`ResultSink` writing `hostname<TAB>address` lines and `ERROR:` lines."""

    def __init__(
        self,
        family_filter: FamilyFilter | None = None,
        *,
        out: TextIO | None = None,
        err: TextIO | None = None,
    ) -> None:
        self._filter = family_filter or FamilyFilter()
        self._out = out or sys.stdout
        self._err = err or sys.stderr
        self._lock = threading.Lock()
        self._outcome = RunOutcome()

    def emit(self, hostname: str, addresses: Sequence[ResolvedAddress]) -> int:
        lines = [f"{hostname}\t{address}\n" for address in self._filter.apply(addresses)]
        with self._lock:
            self._out.writelines(lines)
            self._out.flush()
            self._outcome.record_success()
        return len(lines)

    def emit_error(self, hostname: str, message: str) -> None:
        with self._lock:
            self._err.write(f"ERROR: {hostname}: {message}\n")
            self._err.flush()
            self._outcome.record_failure()

    @property
    def all_resolved(self) -> bool:
        with self._lock:
            return self._outcome.all_resolved

    def snapshot(self) -> RunOutcome:
        """Copy of the outcome, safe to read while workers still run."""

        with self._lock:
            return RunOutcome(
                all_resolved=self._outcome.all_resolved,
                resolved=self._outcome.resolved,
                failed=self._outcome.failed,
            )
