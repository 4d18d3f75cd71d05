"""Configuration for Fleet MCP.

- Settings: environment variable configuration
"""

from fleet_mcp.config.settings import DEFAULT_REGISTRY_PATH, Settings

__all__ = ["DEFAULT_REGISTRY_PATH", "Settings"]
