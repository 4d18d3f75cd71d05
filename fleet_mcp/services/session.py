"""Single-host SSH sessions.

A Session owns one live connection for the duration of one task. Sessions
are never pooled or reused across calls.

Host keys are accepted without verification (``known_hosts=None``). This
leaves sessions open to man-in-the-middle attacks and is logged when the
dispatcher is created.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any

import asyncssh

from fleet_mcp.errors import ConnectionError, ExecutionError
from fleet_mcp.models import HostRecord

logger = logging.getLogger(__name__)

Connector = Callable[[HostRecord], Awaitable[Any]]


async def connect_ssh(
    record: HostRecord,
    connect_timeout: float | None = None,
) -> asyncssh.SSHClientConnection:
    """Open an SSH connection using the record's password credentials.

    Args:
        record: Host to connect to
        connect_timeout: Seconds allowed for dial plus authentication

    Returns:
        Connected asyncssh client connection
    """
    return await asyncssh.connect(
        record.host,
        port=int(record.port),
        username=record.user,
        password=record.password,
        known_hosts=None,
        connect_timeout=connect_timeout,
    )


def make_connector(connect_timeout: float | None = None) -> Connector:
    """Build the default connector with a fixed connect timeout."""
    return partial(connect_ssh, connect_timeout=connect_timeout)


class Session:
    """One live SSH connection to one host."""

    def __init__(
        self,
        record: HostRecord,
        connector: Connector = connect_ssh,
        command_timeout: float | None = None,
    ) -> None:
        """Initialize an unconnected session.

        Args:
            record: Host this session is bound to
            connector: Coroutine function that opens the transport
            command_timeout: Seconds allowed per command, None for no limit
        """
        self.record = record
        self.command_timeout = command_timeout
        self._connector = connector
        self._conn: Any = None

    @property
    def is_connected(self) -> bool:
        """Whether the transport is open."""
        return self._conn is not None

    async def connect(self) -> None:
        """Open the transport.

        Raises:
            ConnectionError: On dial, timeout, or authentication failure
        """
        if self._conn is not None:
            return

        logger.debug("Connecting to %s (%s)", self.record.name, self.record.address)
        try:
            self._conn = await self._connector(self.record)
        except (OSError, asyncssh.Error, asyncio.TimeoutError, ValueError) as e:
            logger.warning("Connection to %s failed: %s", self.record.name, e)
            raise ConnectionError(self.record.name, e) from e
        logger.debug("Connected to %s", self.record.name)

    async def exec(self, command: str) -> bytes:
        """Run one command to completion in a new channel.

        Returns:
            Standard output and standard error merged, as bytes.

        Raises:
            ExecutionError: If not connected, the transport fails, the command
                times out, or the remote exit status is non-zero.
        """
        if self._conn is None:
            raise ExecutionError(self.record.name, command, "not connected")

        logger.debug("Running %r on %s", command, self.record.name)
        try:
            result = await self._conn.run(
                command,
                stderr=asyncssh.STDOUT,
                encoding=None,
                check=False,
                timeout=self.command_timeout,
            )
        except asyncssh.TimeoutError as e:
            raise ExecutionError(
                self.record.name,
                command,
                f"timed out after {self.command_timeout}s",
                output=_as_bytes(e.stdout),
            ) from e
        except (OSError, asyncssh.Error) as e:
            raise ExecutionError(self.record.name, command, str(e)) from e

        output = _as_bytes(result.stdout)
        exit_status = result.exit_status
        if exit_status is None and result.exit_signal:
            signal_name = result.exit_signal[0]
            raise ExecutionError(
                self.record.name,
                command,
                f"terminated by signal {signal_name}",
                output=output,
            )
        if exit_status:
            raise ExecutionError(
                self.record.name,
                command,
                f"exit status {exit_status}",
                exit_status=exit_status,
                output=output,
            )
        return output

    async def close(self) -> None:
        """Release the transport. Safe to call repeatedly or before connect."""
        conn, self._conn = self._conn, None
        if conn is None:
            return
        try:
            conn.close()
            await conn.wait_closed()
        except (OSError, asyncssh.Error) as e:
            logger.debug("Error while closing connection to %s: %s", self.record.name, e)
        logger.debug("Closed connection to %s", self.record.name)

    async def __aenter__(self) -> "Session":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


def _as_bytes(data: bytes | str | None) -> bytes:
    if data is None:
        return b""
    if isinstance(data, str):
        return data.encode("utf-8", errors="replace")
    return data
