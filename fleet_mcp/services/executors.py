"""Task functions run by the dispatcher on each host.

Everything here assumes a Debian/Ubuntu host with a POSIX shell.
"""

import asyncio
import logging

from fleet_mcp.errors import ExecutionError
from fleet_mcp.models import HostRecord, OSInfo
from fleet_mcp.services.dispatcher import Task
from fleet_mcp.services.session import Session
from fleet_mcp.services.summarizer import Summarizer

logger = logging.getLogger(__name__)

OS_RELEASE_COMMAND = "cat /etc/os-release"
UNAME_COMMAND = "uname -a"
APT_UPDATE_COMMAND = "apt-get update"
APT_LIST_UPGRADABLE_COMMAND = "apt list --upgradable"
APT_UPGRADE_COMMAND = "sudo apt-get upgrade -y"

CHECK_UPDATES_INSTRUCTIONS = (
    "You are a helpful assistant that summarizes the output of the "
    "'apt list --upgradable' command."
)
PERFORM_UPDATES_INSTRUCTIONS = (
    "You are a helpful assistant that summarizes the output of the "
    "'apt-get upgrade -y' command."
)


def decode_output(output: bytes) -> str:
    """Decode remote output, replacing invalid UTF-8."""
    return output.decode("utf-8", errors="replace")


def make_command_task(command: str) -> Task:
    """Build a task that runs ``command`` and returns its output."""

    async def run_command(record: HostRecord, session: Session) -> str:
        return decode_output(await session.exec(command))

    return run_command


async def gather_os_release(session: Session) -> tuple[bytes, bytes]:
    """Read ``/etc/os-release`` and ``uname -a``."""
    os_release = await session.exec(OS_RELEASE_COMMAND)
    uname = await session.exec(UNAME_COMMAND)
    return os_release, uname


async def describe_host_os(session: Session, summarizer: Summarizer) -> OSInfo:
    """Read the OS release files and have the summarizer describe them."""
    os_release, uname = await gather_os_release(session)
    return await summarizer.describe_os(os_release, uname)


def make_os_info_task(summarizer: Summarizer) -> Task:
    """Build a task that returns the host's OSInfo.

    The task does not write to the store. Callers persist the returned
    descriptors after the dispatch has joined.
    """

    async def os_info(record: HostRecord, session: Session) -> OSInfo:
        return await describe_host_os(session, summarizer)

    return os_info


async def refresh_package_index(session: Session) -> None:
    """Run ``apt-get update``, retrying once with sudo.

    The caller may lack the privileges to refresh the index; the unprivileged
    attempt comes first. Cancellation is checked before the privileged
    fallback is tried.

    Raises:
        ExecutionError: If both attempts fail
    """
    try:
        await session.exec(APT_UPDATE_COMMAND)
        return
    except ExecutionError as e:
        logger.debug(
            "Unprivileged package refresh failed on %s: %s", session.record.name, e
        )

    current = asyncio.current_task()
    if current is not None and current.cancelling():
        raise asyncio.CancelledError()

    await session.exec(f"sudo {APT_UPDATE_COMMAND}")


def make_check_updates_task(summarizer: Summarizer) -> Task:
    """Build a task that summarizes the packages that can be upgraded."""

    async def check_updates(record: HostRecord, session: Session) -> str:
        try:
            await refresh_package_index(session)
        except ExecutionError as e:
            # Fall back to the index as it is
            logger.info("Using stale package index on %s: %s", record.name, e)

        output = await session.exec(APT_LIST_UPGRADABLE_COMMAND)
        return await summarizer.summarize(output, CHECK_UPDATES_INSTRUCTIONS)

    return check_updates


def make_perform_updates_task(summarizer: Summarizer) -> Task:
    """Build a task that upgrades all packages and summarizes the result."""

    async def perform_updates(record: HostRecord, session: Session) -> str:
        await session.exec(f"sudo {APT_UPDATE_COMMAND}")
        output = await session.exec(APT_UPGRADE_COMMAND)
        return await summarizer.summarize(output, PERFORM_UPDATES_INSTRUCTIONS)

    return perform_updates
