"""Entry point for the fleet_mcp server."""

import logging

from fleet_mcp.config import Settings
from fleet_mcp.dependencies import Dependencies
from fleet_mcp.server import configure_logging, create_server

logger = logging.getLogger(__name__)


def run_server() -> None:
    """Build dependencies and run the MCP server with the configured transport."""
    settings = Settings.from_env()
    configure_logging(settings)
    logger.info(
        "Logging configured: level=%s, transport=%s",
        settings.log_level,
        settings.transport,
    )

    deps = Dependencies.from_settings(settings)
    mcp = create_server(deps)

    if settings.transport == "stdio":
        logger.info("Starting Fleet MCP server (transport=stdio)")
        mcp.run(transport="stdio")
    else:
        logger.info(
            "Starting Fleet MCP server (transport=http, host=%s, port=%d)",
            settings.http_host,
            settings.http_port,
        )
        mcp.run(
            transport="http",
            host=settings.http_host,
            port=settings.http_port,
        )


if __name__ == "__main__":
    run_server()
