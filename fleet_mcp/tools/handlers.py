"""Handlers for each operation variant."""

import logging
from dataclasses import replace
from typing import assert_never

from fleet_mcp.dependencies import Dependencies
from fleet_mcp.models import DispatchResult, OSInfo, TaskResult
from fleet_mcp.services import (
    Session,
    describe_host_os,
    make_check_updates_task,
    make_command_task,
    make_os_info_task,
    make_perform_updates_task,
)
from fleet_mcp.tools.operations import (
    AddHost,
    CheckForUpdates,
    GetHosts,
    GetOSInfo,
    HostAdded,
    HostList,
    HostRemoved,
    Operation,
    OperationResult,
    PerformCommand,
    PerformUpdates,
    RemoveHost,
    UpdateOSInfo,
)
from fleet_mcp.utils.parser import parse_connection_string

logger = logging.getLogger(__name__)


async def execute(op: Operation, deps: Dependencies) -> OperationResult:
    """Run one operation.

    Raises:
        ResolutionError: Bad connection string or no matching hosts
        PersistenceError: The registry could not be written
        ConnectionError: AddHost could not reach the new host
        ExecutionError: AddHost could not read the new host's OS release
        SummarizerError: A summary was needed but the provider failed
        ValueError: Invalid operation input
    """
    match op:
        case AddHost():
            return await handle_add_host(op, deps)
        case RemoveHost():
            return handle_remove_host(op, deps)
        case GetHosts():
            return handle_get_hosts(deps)
        case GetOSInfo():
            return handle_get_os_info(op, deps)
        case UpdateOSInfo():
            return await handle_update_os_info(op, deps)
        case PerformCommand():
            return await handle_perform_command(op, deps)
        case CheckForUpdates():
            return await handle_check_for_updates(op, deps)
        case PerformUpdates():
            return await handle_perform_updates(op, deps)
        case _:
            assert_never(op)


async def handle_add_host(op: AddHost, deps: Dependencies) -> HostAdded:
    """Connect to a new host, describe its OS, and register it."""
    record = parse_connection_string(op.connection_string, name=op.name.strip())

    async with Session(
        record,
        deps.dispatcher.connector,
        command_timeout=deps.dispatcher.command_timeout,
    ) as session:
        if deps.summarizer is None:
            logger.warning(
                "No summarizer configured, registering %s without OS info", record.name
            )
        else:
            record = replace(record, os=await describe_host_os(session, deps.summarizer))

    deps.store.set(record)
    return HostAdded(record=record)


def handle_remove_host(op: RemoveHost, deps: Dependencies) -> HostRemoved:
    name = op.name.strip()
    if not name:
        raise ValueError("name_of_host is required")
    return HostRemoved(name=name, existed=deps.store.delete(name))


def handle_get_hosts(deps: Dependencies) -> HostList:
    return HostList(hosts=deps.store.list())


def handle_get_os_info(op: GetOSInfo, deps: Dependencies) -> HostList:
    records, unresolved = deps.dispatcher.resolve_hosts(op.names)
    return HostList(hosts=records, unresolved=unresolved)


async def handle_update_os_info(op: UpdateOSInfo, deps: Dependencies) -> DispatchResult:
    """Refresh OS descriptors concurrently, then persist them one by one."""
    task = make_os_info_task(deps.require_summarizer())
    dispatched = await deps.dispatcher.dispatch(op.names, task)

    results: dict[str, TaskResult] = {}
    for name, result in dispatched.results.items():
        if not result.success:
            results[name] = result
            continue
        record = deps.store.get(name)
        if record is None:
            # Removed while the dispatch was running
            results[name] = TaskResult(
                host=name, error=f"host {name} no longer registered", error_type="ResolutionError"
            )
            continue
        os_info: OSInfo = result.output
        deps.store.set(replace(record, os=os_info))
        results[name] = TaskResult.ok(name, f"successfully updated {name}")

    return DispatchResult(results=results, unresolved=dispatched.unresolved)


async def handle_perform_command(op: PerformCommand, deps: Dependencies) -> DispatchResult:
    if not op.command.strip():
        raise ValueError("command is required")
    return await deps.dispatcher.dispatch(op.names, make_command_task(op.command))


async def handle_check_for_updates(op: CheckForUpdates, deps: Dependencies) -> DispatchResult:
    task = make_check_updates_task(deps.require_summarizer())
    return await deps.dispatcher.dispatch(op.names, task)


async def handle_perform_updates(op: PerformUpdates, deps: Dependencies) -> DispatchResult:
    task = make_perform_updates_task(deps.require_summarizer())
    return await deps.dispatcher.dispatch(op.names, task)
