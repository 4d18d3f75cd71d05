"""Host reachability probes."""

import asyncio
from collections.abc import Iterable

from fleet_mcp.models import HostRecord


async def check_host_online(hostname: str, port: int, timeout: float = 2.0) -> bool:
    """Check if a host accepts TCP connections on its SSH port.

    Args:
        hostname: Host to check.
        port: Port to connect to.
        timeout: Connection timeout in seconds.

    Returns:
        True if host is reachable, False otherwise.
    """
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(hostname, port),
            timeout=timeout,
        )
        writer.close()
        await writer.wait_closed()
        return True
    except (TimeoutError, OSError):
        return False


async def check_hosts_online(
    records: Iterable[HostRecord],
    timeout: float = 2.0,
) -> dict[str, bool]:
    """Probe every record concurrently.

    Records with a non-numeric port are reported offline without probing.

    Returns:
        Dict of {record name: is_online}.
    """

    async def probe(record: HostRecord) -> bool:
        try:
            port = int(record.port)
        except ValueError:
            return False
        return await check_host_online(record.host, port, timeout)

    records = list(records)
    if not records:
        return {}

    results = await asyncio.gather(*(probe(r) for r in records))
    return {r.name: online for r, online in zip(records, results)}
