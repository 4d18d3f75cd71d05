"""Operations exposed to clients.

The set is closed: ``Operation`` is the union of every variant and
``fleet_mcp.tools.handlers.execute`` matches on it exhaustively.
"""

from dataclasses import dataclass, field
from typing import Any

from fleet_mcp.models import DispatchResult, HostRecord


@dataclass(frozen=True)
class AddHost:
    """Register a host from an ``ssh://`` connection string."""

    connection_string: str
    name: str = ""


@dataclass(frozen=True)
class RemoveHost:
    """Remove a host from the registry."""

    name: str


@dataclass(frozen=True)
class GetHosts:
    """List every registered host."""


@dataclass(frozen=True)
class GetOSInfo:
    """Return the cached OS descriptors of some hosts."""

    names: tuple[str, ...]


@dataclass(frozen=True)
class UpdateOSInfo:
    """Refresh the cached OS descriptors of some hosts."""

    names: tuple[str, ...]


@dataclass(frozen=True)
class PerformCommand:
    """Run a shell command on some hosts."""

    names: tuple[str, ...]
    command: str


@dataclass(frozen=True)
class CheckForUpdates:
    """Summarize pending package upgrades on some hosts."""

    names: tuple[str, ...]


@dataclass(frozen=True)
class PerformUpdates:
    """Upgrade packages on some hosts and summarize what changed."""

    names: tuple[str, ...]


Operation = (
    AddHost
    | RemoveHost
    | GetHosts
    | GetOSInfo
    | UpdateOSInfo
    | PerformCommand
    | CheckForUpdates
    | PerformUpdates
)


@dataclass(frozen=True)
class HostAdded:
    """Output of AddHost."""

    record: HostRecord

    @property
    def message(self) -> str:
        return f"successfully added {self.record.name}"


@dataclass(frozen=True)
class HostRemoved:
    """Output of RemoveHost."""

    name: str
    existed: bool

    @property
    def message(self) -> str:
        if self.existed:
            return f"successfully removed {self.name}"
        return f"host {self.name} not found"


@dataclass(frozen=True)
class HostList:
    """Output of GetHosts and GetOSInfo. Passwords are never rendered."""

    hosts: list[HostRecord]
    unresolved: list[str] = field(default_factory=list)

    @property
    def names(self) -> list[str]:
        return [h.name for h in self.hosts]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "hosts": [h.to_public_dict() for h in sorted(self.hosts, key=lambda h: h.name)]
        }
        if self.unresolved:
            data["unresolved"] = list(self.unresolved)
        return data


OperationResult = HostAdded | HostRemoved | HostList | DispatchResult
