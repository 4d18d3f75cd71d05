"""Utilities for Fleet MCP."""

from fleet_mcp.utils.console import ColorfulFormatter, MCPRequestFormatter
from fleet_mcp.utils.parser import parse_connection_string
from fleet_mcp.utils.ping import check_host_online, check_hosts_online

__all__ = [
    "check_host_online",
    "check_hosts_online",
    "ColorfulFormatter",
    "MCPRequestFormatter",
    "parse_connection_string",
]
