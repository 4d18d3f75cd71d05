"""Hosts resource for listing registered SSH hosts."""

from fleet_mcp.services import CredentialStore
from fleet_mcp.utils.ping import check_hosts_online


async def list_hosts_resource(store: CredentialStore) -> str:
    """List registered hosts with reachability and cached OS info.

    Returns:
        Formatted list of hosts with connectivity status.
    """
    hosts = sorted(store.list(), key=lambda h: h.name)

    if not hosts:
        return "No SSH hosts registered."

    online_status = await check_hosts_online(hosts, timeout=2.0)

    lines = ["Registered SSH Hosts", "=" * 40, ""]

    for host in hosts:
        online = online_status.get(host.name, False)
        status_icon = "✓" if online else "✗"
        status = "online" if online else "offline"

        lines.append(f"[{status_icon}] {host.name} ({status})")
        lines.append(f"    SSH:      {host.address}")
        if host.os is not None:
            lines.append(
                f"    OS:       {host.os.name} {host.os.version} "
                f"({host.os.platform}/{host.os.arch})"
            )
        else:
            lines.append("    OS:       unknown (run update_os_info)")
        lines.append("")

    online_count = sum(1 for online in online_status.values() if online)
    lines.append(f"{online_count}/{len(hosts)} host(s) online")

    return "\n".join(lines)
