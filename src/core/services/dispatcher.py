"""Worker pool: fans hostnames out to independent execution contexts.

Model:
- `worker_count == 0`: one implicit context on the calling thread, tasks are
  awaited one after another (input order, no extra threads).
- `worker_count >= 1`: `worker_count` contexts, task `i` goes to context
  `i % worker_count`. Every task is submitted before any context starts.
  Each context with work gets its own thread and its own asyncio loop, on
  which all of its lookups run concurrently. The caller blocks until every
  thread has joined.

A task's `ResolutionError` is the handler's business. Anything else escaping a
task is logged, does not stop sibling tasks, and is re-raised to the caller as
`DispatchError` once all threads have joined.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Awaitable, Callable, Sequence

from core.domain.errors import DispatchError
from core.domain.models import ResolutionTask
from core.interfaces.resolver import NameResolver, ResolverFactory

logger = logging.getLogger(__name__)


def assign_round_robin(hostnames: Sequence[str], worker_count: int) -> list[ResolutionTask]:
    """Bind each hostname to a context index, in input order."""

    slots = max(worker_count, 1)
    return [
        ResolutionTask(hostname=hostname, position=position, context_index=position % slots)
        for position, hostname in enumerate(hostnames)
    ]


class ExecutionContext:
    """One worker slot: a task queue plus the loop and resolver that drain it.

    The resolver handle is created inside the context's loop and never leaves
    it; nothing here is shared with other contexts.
    """

    def __init__(
        self,
        index: int,
        resolver_factory: ResolverFactory,
        *,
        sequential: bool = False,
    ) -> None:
        self.index = index
        self._resolver_factory = resolver_factory
        self._sequential = sequential
        self._tasks: list[ResolutionTask] = []
        self._resolver: NameResolver | None = None
        self._started = False
        self.failures: list[BaseException] = []

    @property
    def tasks(self) -> tuple[ResolutionTask, ...]:
        return tuple(self._tasks)

    @property
    def resolver(self) -> NameResolver:
        if self._resolver is None:
            raise RuntimeError(f"context {self.index} is not running")
        return self._resolver

    def submit(self, task: ResolutionTask) -> None:
        if self._started:
            raise RuntimeError(f"context {self.index} already started")
        if task.context_index != self.index:
            raise ValueError(
                f"task for context {task.context_index} submitted to context {self.index}"
            )
        self._tasks.append(task)

    def run(self, handler: "TaskHandler") -> None:
        """Drive the context's loop on the current thread until its queue is empty."""

        self._started = True
        if not self._tasks:
            return
        asyncio.run(self._drain(handler))

    async def _guarded(self, handler: "TaskHandler", task: ResolutionTask) -> None:
        try:
            await handler(self, task)
        except Exception as exc:
            logger.exception(
                "context %d: unexpected failure while handling %r", self.index, task.hostname
            )
            self.failures.append(exc)

    async def _drain(self, handler: "TaskHandler") -> None:
        self._resolver = self._resolver_factory(inline=self._sequential)
        try:
            if self._sequential:
                for task in self._tasks:
                    await self._guarded(handler, task)
            else:
                await asyncio.gather(*[self._guarded(handler, task) for task in self._tasks])
        finally:
            resolver, self._resolver = self._resolver, None
            await resolver.close()


TaskHandler = Callable[[ExecutionContext, ResolutionTask], Awaitable[None]]


class WorkerPool:
    """Owns the execution contexts of one run."""

    def __init__(self, resolver_factory: ResolverFactory) -> None:
        self._resolver_factory = resolver_factory
        self.contexts: list[ExecutionContext] = []

    def run(
        self,
        hostnames: Sequence[str],
        worker_count: int,
        handler: TaskHandler,
    ) -> None:
        if worker_count < 0:
            raise ValueError("worker_count must be >= 0")

        tasks = assign_round_robin(hostnames, worker_count)

        if worker_count == 0:
            context = ExecutionContext(0, self._resolver_factory, sequential=True)
            for task in tasks:
                context.submit(task)
            self.contexts = [context]
            logger.debug("synchronous run: %d hostname(s) on the calling thread", len(tasks))
            self._run_context(context, handler)
            self._raise_failures()
            return

        self.contexts = [
            ExecutionContext(index, self._resolver_factory) for index in range(worker_count)
        ]
        for task in tasks:
            self.contexts[task.context_index].submit(task)

        busy = [context for context in self.contexts if context.tasks]
        logger.debug(
            "dispatching %d hostname(s) to %d context(s) (%d idle)",
            len(tasks),
            len(busy),
            worker_count - len(busy),
        )

        threads = [
            threading.Thread(
                target=self._run_context,
                args=(context, handler),
                name=f"resolver-{context.index}",
            )
            for context in busy
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self._raise_failures()

    @staticmethod
    def _run_context(context: ExecutionContext, handler: TaskHandler) -> None:
        try:
            context.run(handler)
        except Exception as exc:
            logger.exception("context %d crashed", context.index)
            context.failures.append(exc)

    def _raise_failures(self) -> None:
        failures = [exc for context in self.contexts for exc in context.failures]
        if failures:
            raise DispatchError(
                f"{len(failures)} task(s) failed unexpectedly: {failures[0]!r}"
            ) from failures[0]
