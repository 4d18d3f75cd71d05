"""Host registry persisted to a single YAML file.

The whole registry is loaded when the store is constructed and rewritten in
full on every mutation. Writes go to a temporary file in the same directory
which then replaces the registry, so readers never see a partial file.

There is no cross-process locking: mutations assume a single writer. Reads
are safe during a dispatch because dispatching never mutates the store.
"""

import logging
import os
import tempfile
from pathlib import Path

import yaml

from fleet_mcp.errors import PersistenceError
from fleet_mcp.models import HostRecord

logger = logging.getLogger(__name__)

REGISTRY_FILE_MODE = 0o600


class CredentialStore:
    """Durable mapping of host name to HostRecord."""

    def __init__(self, path: Path | str) -> None:
        """Load the registry from ``path``.

        Args:
            path: Registry file. A missing file yields an empty store.

        Raises:
            PersistenceError: If the file exists but cannot be read or parsed.
        """
        self.path = Path(path).expanduser()
        self._hosts: dict[str, HostRecord] = self._load()
        logger.info("Loaded %d host(s) from %s", len(self._hosts), self.path)

    def get(self, name: str) -> HostRecord | None:
        """Get a host record by name.

        Returns:
            HostRecord if found, None otherwise
        """
        return self._hosts.get(name)

    def set(self, record: HostRecord) -> None:
        """Insert or replace a record by name, then persist.

        Raises:
            ValueError: If the record has no name
            PersistenceError: If the registry cannot be written
        """
        if not record.name:
            raise ValueError("host record must have a name")
        replaced = record.name in self._hosts
        hosts = dict(self._hosts)
        hosts[record.name] = record
        self._save(hosts)
        self._hosts = hosts
        logger.info(
            "%s host %s (%s)",
            "Replaced" if replaced else "Added",
            record.name,
            record.address,
        )

    def delete(self, name: str) -> bool:
        """Remove a record if present, then persist.

        Deleting an unknown name is not an error.

        Returns:
            True if a record was removed
        """
        hosts = dict(self._hosts)
        existed = hosts.pop(name, None) is not None
        self._save(hosts)
        self._hosts = hosts
        if existed:
            logger.info("Removed host %s", name)
        else:
            logger.debug("Host %s not in registry, nothing to remove", name)
        return existed

    def list(self) -> list[HostRecord]:
        """Return all records in no particular order."""
        return list(self._hosts.values())

    def __contains__(self, name: object) -> bool:
        return name in self._hosts

    def __len__(self) -> int:
        return len(self._hosts)

    def _load(self) -> dict[str, HostRecord]:
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("Registry %s does not exist yet, starting empty", self.path)
            return {}
        except OSError as e:
            raise PersistenceError(str(self.path), "failed to read registry", e) from e

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise PersistenceError(str(self.path), "failed to parse registry", e) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise PersistenceError(
                str(self.path),
                f"registry must be a mapping of host name to record, got {type(data).__name__}",
            )

        hosts: dict[str, HostRecord] = {}
        for key, entry in data.items():
            try:
                record = HostRecord.from_dict(entry, name=str(key))
            except ValueError as e:
                raise PersistenceError(str(self.path), f"invalid entry {key!r}", e) from e
            if record.name != str(key):
                raise PersistenceError(
                    str(self.path),
                    f"entry {key!r} is named {record.name!r}, names must match their keys",
                )
            hosts[str(key)] = record
        return hosts

    def _save(self, hosts: dict[str, HostRecord]) -> None:
        data = {name: record.to_dict() for name, record in hosts.items()}
        try:
            content = yaml.safe_dump(data, default_flow_style=False, sort_keys=True)
        except yaml.YAMLError as e:
            raise PersistenceError(str(self.path), "failed to serialize registry", e) from e

        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.chmod(tmp_name, REGISTRY_FILE_MODE)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            raise PersistenceError(str(self.path), "failed to write registry", e) from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
