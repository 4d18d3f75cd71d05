"""MCP resources for Fleet MCP."""

from fleet_mcp.resources.hosts import list_hosts_resource

__all__ = ["list_hosts_resource"]
