"""Services for Fleet MCP."""

from fleet_mcp.services.dispatcher import Dispatcher, Task
from fleet_mcp.services.executors import (
    describe_host_os,
    make_check_updates_task,
    make_command_task,
    make_os_info_task,
    make_perform_updates_task,
    refresh_package_index,
)
from fleet_mcp.services.session import Connector, Session, connect_ssh, make_connector
from fleet_mcp.services.store import CredentialStore
from fleet_mcp.services.summarizer import OpenAISummarizer, Summarizer, SummarizerError

__all__ = [
    "Connector",
    "CredentialStore",
    "Dispatcher",
    "OpenAISummarizer",
    "Session",
    "Summarizer",
    "SummarizerError",
    "Task",
    "connect_ssh",
    "describe_host_os",
    "make_check_updates_task",
    "make_command_task",
    "make_connector",
    "make_os_info_task",
    "make_perform_updates_task",
    "refresh_package_index",
]
