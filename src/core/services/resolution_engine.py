"""Resolution orchestration.

Composition root of the core: takes a validated `ResolutionConfig`, builds
the per-task callback (resolve, filter by family, emit) and hands iteration
and concurrency to the `WorkerPool`. The CLI only builds the config and maps
the returned boolean to an exit code, which keeps this reusable from tests or
other entry-points.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from adapters.console_sink import ConsoleSink
from adapters.resolver_factory import build_resolver_factory
from core.config import AppSettings
from core.domain.errors import ResolutionError
from core.domain.models import (
    FamilyFilter,
    ResolutionConfig,
    ResolutionResult,
    ResolutionTask,
    RunOutcome,
)
from core.interfaces.resolver import ResolverFactory
from core.interfaces.sink import ResultSink
from core.services.dispatcher import ExecutionContext, WorkerPool

logger = logging.getLogger(__name__)


@dataclass
class ResolutionEngine:
    """Runs one configuration end to end.

    `sink` and `resolver_factory` default to the console and the backend
    selected in `settings`; tests inject fakes. `execute` reports on its own
    run only: an injected sink may outlive it, and the sink's `all_resolved`
    then covers everything it has been handed so far.
    """

    settings: AppSettings | None = None
    sink: ResultSink | None = None
    resolver_factory: ResolverFactory | None = None

    def execute(self, config: ResolutionConfig) -> bool:
        """Resolve every hostname; True only if all of them produced output."""

        settings = self.settings or AppSettings()
        family_filter = FamilyFilter.from_config(config)
        sink = self.sink or ConsoleSink(family_filter)
        resolver_factory = self.resolver_factory or build_resolver_factory(settings)

        # One tally per context, each only ever touched by that context's thread.
        tallies = [RunOutcome() for _ in range(max(config.worker_count, 1))]

        async def resolve_and_emit(context: ExecutionContext, task: ResolutionTask) -> None:
            result = await _resolve(context, task)
            tally = tallies[context.index]
            if publish(sink, result, family_filter):
                tally.record_success()
            else:
                tally.record_failure()

        pool = WorkerPool(resolver_factory)
        pool.run(config.hostnames, config.worker_count, resolve_and_emit)

        outcome = RunOutcome.combine(tallies)
        logger.info(
            "resolved %d of %d hostname(s) with %d worker(s), %d failed",
            outcome.resolved,
            len(config.hostnames),
            config.worker_count,
            outcome.failed,
        )
        return outcome.all_resolved


async def _resolve(context: ExecutionContext, task: ResolutionTask) -> ResolutionResult:
    try:
        addresses = await context.resolver.resolve(task.hostname)
    except ResolutionError as exc:
        logger.debug("context %d: %s failed: %s", context.index, task.hostname, exc.message)
        return ResolutionResult(hostname=task.hostname, error=exc.message)
    return ResolutionResult(hostname=task.hostname, addresses=addresses)


def publish(sink: ResultSink, result: ResolutionResult, family_filter: FamilyFilter) -> bool:
    """Hand a finished result to the sink, enforcing the family filter.

    Returns False when the result went out as an error line.
    """

    if not result.ok:
        sink.emit_error(result.hostname, result.error or "unknown error")
        return False
    wanted = family_filter.apply(result.addresses)
    if not wanted:
        sink.emit_error(result.hostname, family_filter.describe_missing())
        return False
    sink.emit(result.hostname, wanted)
    return True


def execute(
    config: ResolutionConfig,
    *,
    settings: AppSettings | None = None,
    sink: ResultSink | None = None,
    resolver_factory: ResolverFactory | None = None,
) -> bool:
    """Functional shortcut for `ResolutionEngine(...).execute(config)`."""

    engine = ResolutionEngine(settings=settings, sink=sink, resolver_factory=resolver_factory)
    return engine.execute(config)
