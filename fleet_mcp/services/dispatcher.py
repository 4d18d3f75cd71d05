"""Concurrent fan-out of one task across many hosts.

Every resolved host gets its own asyncio task inside a TaskGroup:

    DISPATCHED -> CONNECTING -> EXECUTING -> DONE(ok | error)
                           \\-> DONE(error)

A failure on one host is recorded in that host's slot and never affects any
other host. The result mapping is the only state shared between host tasks
and is guarded by a single lock. Tasks are never retried here; a task may
implement its own bounded fallback.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from fleet_mcp.errors import ResolutionError
from fleet_mcp.models import DispatchResult, HostRecord, TaskResult
from fleet_mcp.services.session import Connector, Session, connect_ssh
from fleet_mcp.services.store import CredentialStore

logger = logging.getLogger(__name__)

Task = Callable[[HostRecord, Session], Awaitable[Any]]


class Dispatcher:
    """Resolves host names and runs tasks on them concurrently."""

    def __init__(
        self,
        store: CredentialStore,
        connector: Connector = connect_ssh,
        max_concurrency: int | None = None,
        command_timeout: float | None = None,
    ) -> None:
        """Initialize dispatcher.

        Args:
            store: Registry used to resolve host names (read-only here)
            connector: Opens the transport for each session
            max_concurrency: Cap on hosts in flight at once, None for unbounded
            command_timeout: Per-command timeout passed to each session

        Raises:
            ValueError: If max_concurrency is not positive
        """
        if max_concurrency is not None and max_concurrency <= 0:
            raise ValueError(f"max_concurrency must be > 0, got {max_concurrency}")

        self.store = store
        self.connector = connector
        self.max_concurrency = max_concurrency
        self.command_timeout = command_timeout

        logger.warning(
            "SSH host key verification DISABLED - sessions accept any host key "
            "and are vulnerable to MITM attacks."
        )
        logger.info(
            "Dispatcher initialized (max_concurrency=%s, command_timeout=%s)",
            max_concurrency if max_concurrency is not None else "unbounded",
            command_timeout,
        )

    def resolve_hosts(self, names: Iterable[str]) -> tuple[list[HostRecord], list[str]]:
        """Look up requested host names in the store.

        Duplicate names are collapsed, keeping request order.

        Returns:
            Tuple of (resolved records, unresolved names).

        Raises:
            ResolutionError: If no names were given or none resolved
        """
        requested = list(dict.fromkeys(n.strip() for n in names if n and n.strip()))
        if not requested:
            raise ResolutionError("no hosts provided")

        records: list[HostRecord] = []
        unresolved: list[str] = []
        for name in requested:
            record = self.store.get(name)
            if record is None:
                unresolved.append(name)
            else:
                records.append(record)

        if not records:
            raise ResolutionError(
                f"no matching hosts for: {', '.join(unresolved)}",
                unresolved=unresolved,
            )
        if unresolved:
            logger.warning("Unresolved host(s): %s", ", ".join(unresolved))
        return records, unresolved

    async def run_on_hosts(
        self,
        records: Iterable[HostRecord],
        task: Task,
    ) -> dict[str, TaskResult]:
        """Run ``task`` on every record concurrently.

        Returns once every host finished, with one TaskResult per host name.
        Cancelling the caller cancels every in-flight dial and command.
        """
        records = list(records)
        results: dict[str, TaskResult] = {}
        results_lock = asyncio.Lock()
        limiter = (
            asyncio.Semaphore(self.max_concurrency)
            if self.max_concurrency is not None
            else None
        )

        async def run_single(record: HostRecord) -> None:
            if limiter is None:
                outcome = await self._run_task(record, task)
            else:
                async with limiter:
                    outcome = await self._run_task(record, task)
            async with results_lock:
                results[record.name] = outcome

        start = time.perf_counter()
        logger.info("Dispatching to %d host(s)", len(records))
        async with asyncio.TaskGroup() as group:
            for record in records:
                logger.debug("Host %s: DISPATCHED", record.name)
                group.create_task(run_single(record), name=f"fleet:{record.name}")

        duration_ms = (time.perf_counter() - start) * 1000
        succeeded = sum(1 for r in results.values() if r.success)
        logger.info(
            "Dispatch completed: %d/%d host(s) succeeded [%.1fms]",
            succeeded,
            len(results),
            duration_ms,
        )
        return results

    async def dispatch(self, names: Iterable[str], task: Task) -> DispatchResult:
        """Resolve ``names`` then run ``task`` on every resolved host.

        Raises:
            ResolutionError: If no requested host exists (nothing is dispatched)
        """
        records, unresolved = self.resolve_hosts(names)
        results = await self.run_on_hosts(records, task)
        return DispatchResult(results=results, unresolved=unresolved)

    async def _run_task(self, record: HostRecord, task: Task) -> TaskResult:
        """Connect, run the task, and close the session, capturing the outcome."""
        session = Session(record, self.connector, command_timeout=self.command_timeout)
        try:
            logger.debug("Host %s: CONNECTING", record.name)
            await session.connect()
            logger.debug("Host %s: EXECUTING", record.name)
            output = await task(record, session)
        except Exception as e:
            logger.info("Host %s: DONE(error) %s: %s", record.name, type(e).__name__, e)
            return TaskResult.failed(record.name, e)
        finally:
            await session.close()

        logger.debug("Host %s: DONE(ok)", record.name)
        return TaskResult.ok(record.name, output)
