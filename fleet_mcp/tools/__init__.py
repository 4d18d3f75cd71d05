"""Fleet MCP operations and their handlers."""

from fleet_mcp.tools.handlers import execute
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

__all__ = [
    "AddHost",
    "CheckForUpdates",
    "GetHosts",
    "GetOSInfo",
    "HostAdded",
    "HostList",
    "HostRemoved",
    "Operation",
    "OperationResult",
    "PerformCommand",
    "PerformUpdates",
    "RemoveHost",
    "UpdateOSInfo",
    "execute",
]
