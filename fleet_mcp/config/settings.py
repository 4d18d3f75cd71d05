"""Application settings from environment variables.

Centralized environment variable parsing and validation.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_PATH = Path.home() / ".config" / "fleet_mcp" / "hosts.yaml"


@dataclass
class Settings:
    """Application settings from environment.

    Handles parsing, validation, and defaults for all env vars.
    """

    # Host registry
    registry_path: Path = field(default=DEFAULT_REGISTRY_PATH)

    # Sessions and dispatch
    connect_timeout: float = field(default=10.0)
    command_timeout: float | None = field(default=600.0)
    max_concurrency: int | None = field(default=None)

    # Transport
    transport: str = field(default="stdio")
    http_host: str = field(default="127.0.0.1")
    http_port: int = field(default=8000)

    # Logging
    log_level: str = field(default="INFO")
    log_colors: bool = field(default=True)
    log_payloads: bool = field(default=False)
    slow_threshold_ms: int = field(default=1000)
    include_traceback: bool = field(default=False)

    # Summarizer
    openai_api_key: str | None = field(default=None, repr=False)
    openai_model: str = field(default="gpt-4o")

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from FLEET_* environment variables.

        Returns:
            Settings instance with values from environment
        """
        registry = os.getenv("FLEET_REGISTRY_PATH", "").strip()
        command_timeout = cls._get_float("FLEET_COMMAND_TIMEOUT", 600.0)
        max_concurrency = cls._get_int("FLEET_MAX_CONCURRENCY", 0)

        return cls(
            registry_path=Path(registry).expanduser() if registry else DEFAULT_REGISTRY_PATH,
            connect_timeout=cls._get_float("FLEET_CONNECT_TIMEOUT", 10.0),
            command_timeout=command_timeout if command_timeout > 0 else None,
            max_concurrency=max_concurrency if max_concurrency > 0 else None,
            transport=cls._get_transport(),
            http_host=os.getenv("FLEET_HTTP_HOST", "127.0.0.1"),
            http_port=cls._get_int("FLEET_HTTP_PORT", 8000),
            log_level=os.getenv("FLEET_LOG_LEVEL", "INFO").upper(),
            log_colors=cls._get_bool("FLEET_LOG_COLORS", True),
            log_payloads=cls._get_bool("FLEET_LOG_PAYLOADS", False),
            slow_threshold_ms=cls._get_int("FLEET_SLOW_THRESHOLD_MS", 1000),
            include_traceback=cls._get_bool("FLEET_INCLUDE_TRACEBACK", False),
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_model=os.getenv("FLEET_OPENAI_MODEL", "gpt-4o"),
        )

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get integer from environment.

        Args:
            key: Environment variable key
            default: Default value if not set or invalid

        Returns:
            Integer value from environment or default
        """
        value = os.getenv(key)
        if value is None or not value.strip():
            return default

        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid int for %s: %s, using default %d", key, value, default)
            return default

    @staticmethod
    def _get_float(key: str, default: float) -> float:
        """Get float from environment, falling back to default when invalid."""
        value = os.getenv(key)
        if value is None or not value.strip():
            return default

        try:
            return float(value)
        except ValueError:
            logger.warning("Invalid number for %s: %s, using default %s", key, value, default)
            return default

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Get boolean from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Boolean value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ("1", "true", "yes", "on")

    @staticmethod
    def _get_transport() -> str:
        """Get transport from environment with validation.

        Returns:
            Transport type ("stdio" or "http")
        """
        transport = os.getenv("FLEET_TRANSPORT", "").lower()
        if transport in ("http", "stdio"):
            return transport
        return "stdio"
