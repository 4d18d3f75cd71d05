"""SSH connection string parsing."""

from urllib.parse import unquote, urlsplit

from fleet_mcp.errors import ConnectionStringError
from fleet_mcp.models import DEFAULT_SSH_PORT, HostRecord

SSH_SCHEME = "ssh"


def parse_connection_string(conn_str: str, name: str = "") -> HostRecord:
    """Parse an SSH connection string into a host record.

    Format: ``ssh://<user>:<password>@<host>[:<port>]``. The port defaults
    to 22. Host keys are not part of the string and are never verified.

    Args:
        conn_str: Connection string to parse
        name: Registry name for the host (defaults to the host part)

    Returns:
        HostRecord with credentials from the string.

    Raises:
        ConnectionStringError: If the string is malformed. ``reason`` holds
            which component was wrong or missing.
    """
    try:
        parts = urlsplit(conn_str.strip())
        port = parts.port
    except ValueError as e:
        raise ConnectionStringError(ConnectionStringError.INVALID_URL, str(e)) from e

    if parts.scheme != SSH_SCHEME:
        raise ConnectionStringError(ConnectionStringError.WRONG_SCHEME, "not ssh scheme")

    if "@" not in parts.netloc:
        raise ConnectionStringError(
            ConnectionStringError.MISSING_USER_INFO, "missing user info"
        )

    user = unquote(parts.username or "")
    if not user:
        raise ConnectionStringError(
            ConnectionStringError.MISSING_USERNAME, "missing username"
        )

    password = unquote(parts.password or "")
    if not password:
        raise ConnectionStringError(
            ConnectionStringError.MISSING_PASSWORD, "missing password"
        )

    host = _host_of(parts.netloc)
    if not host:
        raise ConnectionStringError(ConnectionStringError.MISSING_HOST, "missing host")

    return HostRecord(
        name=name or host,
        host=host,
        port=str(port) if port is not None else DEFAULT_SSH_PORT,
        user=user,
        password=password,
    )


def _host_of(netloc: str) -> str:
    # urlsplit().hostname lowercases; keep the host as typed
    hostinfo = netloc.rpartition("@")[2]
    if hostinfo.startswith("["):
        return hostinfo[1:].partition("]")[0]
    return hostinfo.partition(":")[0]
