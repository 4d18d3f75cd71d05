"""Host registry data models."""

from dataclasses import dataclass
from typing import Any

DEFAULT_SSH_PORT = "22"


@dataclass(frozen=True)
class OSInfo:
    """Cached operating system descriptor for a host."""

    name: str = ""
    platform: str = ""
    version: str = ""
    arch: str = ""

    def to_dict(self) -> dict[str, str]:
        """Serialize to the persisted mapping."""
        return {
            "name": self.name,
            "platform": self.platform,
            "version": self.version,
            "arch": self.arch,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OSInfo":
        """Build from a persisted mapping, tolerating missing keys."""
        return cls(
            name=str(data.get("name") or ""),
            platform=str(data.get("platform") or ""),
            version=str(data.get("version") or ""),
            arch=str(data.get("arch") or ""),
        )

    @property
    def is_empty(self) -> bool:
        """True when no field carries a value."""
        return not (self.name or self.platform or self.version or self.arch)


@dataclass(frozen=True)
class HostRecord:
    """Credentials and metadata for one registered host.

    The password is kept in cleartext and persisted under the ``pass`` key.
    """

    name: str
    host: str
    port: str = DEFAULT_SSH_PORT
    user: str = ""
    password: str = ""
    os: OSInfo | None = None

    @property
    def is_connectable(self) -> bool:
        """Whether every field needed to open a session is set."""
        return bool(self.host and self.port and self.user and self.password)

    @property
    def address(self) -> str:
        """``user@host:port`` for display and logs."""
        return f"{self.user}@{self.host}:{self.port}"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted mapping."""
        data: dict[str, Any] = {
            "name": self.name,
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "pass": self.password,
        }
        data["os"] = (self.os or OSInfo()).to_dict()
        return data

    def to_public_dict(self) -> dict[str, Any]:
        """Serialize without the password, for rendering to clients."""
        data = self.to_dict()
        del data["pass"]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any], name: str | None = None) -> "HostRecord":
        """Build from a persisted mapping.

        Args:
            data: Mapping with host/port/user/pass/os keys
            name: Registry key, used when the mapping has no ``name``

        Raises:
            ValueError: If the entry is not a mapping or has no name
        """
        if not isinstance(data, dict):
            raise ValueError(f"host entry must be a mapping, got {type(data).__name__}")

        record_name = str(data.get("name") or name or "")
        if not record_name:
            raise ValueError("host entry has no name")

        os_data = data.get("os")
        os_info = None
        if isinstance(os_data, dict):
            os_info = OSInfo.from_dict(os_data)
            if os_info.is_empty:
                os_info = None

        port = data.get("port")
        return cls(
            name=record_name,
            host=str(data.get("host") or ""),
            port=str(port) if port not in (None, "") else DEFAULT_SSH_PORT,
            user=str(data.get("user") or ""),
            password=str(data.get("pass") or ""),
            os=os_info,
        )
