"""Data models for Fleet MCP."""

from fleet_mcp.models.host import DEFAULT_SSH_PORT, HostRecord, OSInfo
from fleet_mcp.models.result import DispatchResult, TaskResult

__all__ = [
    "DEFAULT_SSH_PORT",
    "DispatchResult",
    "HostRecord",
    "OSInfo",
    "TaskResult",
]
