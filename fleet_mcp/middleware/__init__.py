"""Fleet MCP middleware components."""

from fleet_mcp.middleware.base import FleetMiddleware
from fleet_mcp.middleware.errors import ErrorHandlingMiddleware
from fleet_mcp.middleware.logging import LoggingMiddleware

__all__ = [
    "ErrorHandlingMiddleware",
    "FleetMiddleware",
    "LoggingMiddleware",
]
