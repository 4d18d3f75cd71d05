"""Tests for the YAML-backed credential store."""

import stat
from pathlib import Path

import pytest
import yaml

from fleet_mcp.errors import PersistenceError
from fleet_mcp.models import HostRecord, OSInfo
from fleet_mcp.services.store import REGISTRY_FILE_MODE, CredentialStore


def make_record(name: str, host: str = "10.0.0.1", os: OSInfo | None = None) -> HostRecord:
    return HostRecord(name=name, host=host, port="22", user="admin", password="pw", os=os)


@pytest.fixture
def registry_path(tmp_path: Path) -> Path:
    return tmp_path / "fleet" / "hosts.yaml"


class TestLoad:
    """Tests for loading the registry."""

    def test_missing_file_is_empty(self, registry_path: Path) -> None:
        """A registry that does not exist yet loads as empty."""
        store = CredentialStore(registry_path)

        assert store.list() == []
        assert len(store) == 0

    def test_empty_file_is_empty(self, registry_path: Path) -> None:
        """An empty YAML document loads as empty."""
        registry_path.parent.mkdir(parents=True)
        registry_path.write_text("")

        assert len(CredentialStore(registry_path)) == 0

    def test_unreadable_path_raises(self, registry_path: Path) -> None:
        """A directory where the registry file should be is a persistence error."""
        registry_path.mkdir(parents=True)

        with pytest.raises(PersistenceError, match="failed to read registry"):
            CredentialStore(registry_path)

    def test_invalid_yaml_raises(self, registry_path: Path) -> None:
        """Unparseable YAML is a persistence error."""
        registry_path.parent.mkdir(parents=True)
        registry_path.write_text("web1: [unclosed\n")

        with pytest.raises(PersistenceError, match="failed to parse registry"):
            CredentialStore(registry_path)

    def test_non_mapping_raises(self, registry_path: Path) -> None:
        """A top-level list is rejected."""
        registry_path.parent.mkdir(parents=True)
        registry_path.write_text("- web1\n- web2\n")

        with pytest.raises(PersistenceError, match="mapping"):
            CredentialStore(registry_path)

    def test_invalid_entry_raises(self, registry_path: Path) -> None:
        """An entry that is not a mapping is rejected."""
        registry_path.parent.mkdir(parents=True)
        registry_path.write_text("web1: just-a-string\n")

        with pytest.raises(PersistenceError, match="invalid entry 'web1'"):
            CredentialStore(registry_path)

    def test_name_must_match_key(self, registry_path: Path) -> None:
        """An entry whose name differs from its key would break name uniqueness."""
        registry_path.parent.mkdir(parents=True)
        registry_path.write_text(
            "web1:\n  name: other\n  host: 10.0.0.1\n  user: admin\n  pass: pw\n"
            "other:\n  name: other\n  host: 10.0.0.2\n  user: admin\n  pass: pw\n"
        )

        with pytest.raises(PersistenceError, match="names must match their keys"):
            CredentialStore(registry_path)

    def test_loads_existing_entries(self, registry_path: Path) -> None:
        """Entries use the pass key and an optional os mapping."""
        registry_path.parent.mkdir(parents=True)
        registry_path.write_text(
            "web1:\n"
            "  name: web1\n"
            "  host: 10.0.0.1\n"
            "  port: '2222'\n"
            "  user: admin\n"
            "  pass: s3cret\n"
            "  os:\n"
            "    name: Ubuntu\n"
            "    platform: linux\n"
            "    version: '22.04'\n"
            "    arch: x86_64\n"
            "db1:\n"
            "  host: 10.0.0.2\n"
            "  user: root\n"
            "  pass: pw\n"
        )

        store = CredentialStore(registry_path)

        web1 = store.get("web1")
        assert web1 is not None
        assert web1.port == "2222"
        assert web1.password == "s3cret"
        assert web1.os == OSInfo(name="Ubuntu", platform="linux", version="22.04", arch="x86_64")

        db1 = store.get("db1")
        assert db1 is not None
        assert db1.name == "db1"
        assert db1.port == "22"
        assert db1.os is None


class TestMutations:
    """Tests for set() and delete()."""

    def test_set_then_get(self, registry_path: Path) -> None:
        """A stored record is returned by name."""
        store = CredentialStore(registry_path)
        record = make_record("web1")

        store.set(record)

        assert store.get("web1") == record
        assert "web1" in store

    def test_set_replaces_by_name(self, registry_path: Path) -> None:
        """Setting an existing name replaces the record."""
        store = CredentialStore(registry_path)
        store.set(make_record("web1", host="10.0.0.1"))

        store.set(make_record("web1", host="10.0.0.9"))

        assert len(store) == 1
        assert store.get("web1").host == "10.0.0.9"

    def test_set_requires_name(self, registry_path: Path) -> None:
        """Nameless records are rejected before anything is written."""
        store = CredentialStore(registry_path)

        with pytest.raises(ValueError):
            store.set(make_record(""))

        assert not registry_path.exists()

    def test_get_unknown_returns_none(self, registry_path: Path) -> None:
        store = CredentialStore(registry_path)

        assert store.get("nope") is None

    def test_delete_is_idempotent(self, registry_path: Path) -> None:
        """Deleting twice succeeds and reports whether anything was removed."""
        store = CredentialStore(registry_path)
        store.set(make_record("web1"))

        assert store.delete("web1") is True
        assert store.delete("web1") is False
        assert store.get("web1") is None

    def test_list_returns_every_record(self, registry_path: Path) -> None:
        """N distinct sets list N records."""
        store = CredentialStore(registry_path)
        for i in range(5):
            store.set(make_record(f"host{i}", host=f"10.0.0.{i}"))

        assert sorted(r.name for r in store.list()) == [f"host{i}" for i in range(5)]


class TestPersistence:
    """Tests for what lands on disk."""

    def test_changes_survive_reload(self, registry_path: Path) -> None:
        """A new store over the same file sees earlier writes."""
        os_info = OSInfo(name="Debian", platform="linux", version="12", arch="aarch64")
        store = CredentialStore(registry_path)
        store.set(make_record("web1", os=os_info))
        store.set(make_record("web2"))
        store.delete("web2")

        reloaded = CredentialStore(registry_path)

        assert [r.name for r in reloaded.list()] == ["web1"]
        assert reloaded.get("web1").os == os_info

    def test_file_is_owner_only(self, registry_path: Path) -> None:
        """The registry holds passwords and is written 0600."""
        store = CredentialStore(registry_path)
        store.set(make_record("web1"))

        mode = stat.S_IMODE(registry_path.stat().st_mode)
        assert mode == REGISTRY_FILE_MODE

    def test_file_uses_pass_key(self, registry_path: Path) -> None:
        """Passwords are persisted under the pass key."""
        store = CredentialStore(registry_path)
        store.set(make_record("web1"))

        data = yaml.safe_load(registry_path.read_text())
        assert data["web1"]["pass"] == "pw"
        assert "password" not in data["web1"]

    def test_no_temp_files_left_behind(self, registry_path: Path) -> None:
        store = CredentialStore(registry_path)
        store.set(make_record("web1"))
        store.set(make_record("web2"))

        assert [p.name for p in registry_path.parent.iterdir()] == ["hosts.yaml"]

    def test_failed_write_keeps_memory_unchanged(
        self, registry_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A write failure raises and leaves the in-memory registry as it was."""
        store = CredentialStore(registry_path)
        store.set(make_record("web1"))

        def fail_replace(src: str, dst: object) -> None:
            raise OSError("disk full")

        monkeypatch.setattr("fleet_mcp.services.store.os.replace", fail_replace)

        with pytest.raises(PersistenceError, match="failed to write registry"):
            store.set(make_record("web2"))

        assert store.get("web2") is None
        assert [p.name for p in registry_path.parent.iterdir()] == ["hosts.yaml"]
