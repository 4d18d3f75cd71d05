"""Fleet MCP: run shell commands across a registry of SSH hosts."""

__version__ = "0.1.0"
