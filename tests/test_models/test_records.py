"""Tests for host and result models."""

import pytest

from fleet_mcp.errors import ConnectionError
from fleet_mcp.models import DispatchResult, HostRecord, OSInfo, TaskResult


class TestHostRecord:
    """Tests for HostRecord."""

    def test_to_dict_uses_pass_key(self) -> None:
        record = HostRecord(name="web1", host="10.0.0.1", user="admin", password="pw")

        data = record.to_dict()

        assert data["pass"] == "pw"
        assert data["port"] == "22"
        assert data["os"] == {"name": "", "platform": "", "version": "", "arch": ""}

    def test_public_dict_drops_password(self) -> None:
        record = HostRecord(name="web1", host="10.0.0.1", user="admin", password="pw")

        assert "pass" not in record.to_public_dict()

    def test_from_dict_uses_key_as_name(self) -> None:
        record = HostRecord.from_dict({"host": "10.0.0.1", "port": 2222}, name="web1")

        assert record.name == "web1"
        assert record.port == "2222"

    def test_from_dict_empty_os_is_none(self) -> None:
        record = HostRecord.from_dict({"name": "web1", "host": "h", "os": {"name": ""}})

        assert record.os is None

    def test_from_dict_requires_name(self) -> None:
        with pytest.raises(ValueError):
            HostRecord.from_dict({"host": "10.0.0.1"})

    def test_from_dict_requires_mapping(self) -> None:
        with pytest.raises(ValueError):
            HostRecord.from_dict(["10.0.0.1"], name="web1")  # type: ignore[arg-type]

    def test_is_connectable(self) -> None:
        assert HostRecord(name="a", host="h", user="u", password="p").is_connectable
        assert not HostRecord(name="a", host="h", user="u").is_connectable

    def test_address(self) -> None:
        record = HostRecord(name="a", host="h", port="2200", user="u", password="p")

        assert record.address == "u@h:2200"


def test_os_info_round_trips_through_dict() -> None:
    info = OSInfo(name="Debian", platform="linux", version="12", arch="aarch64")

    assert OSInfo.from_dict(info.to_dict()) == info
    assert not info.is_empty
    assert OSInfo().is_empty


class TestResults:
    """Tests for TaskResult and DispatchResult."""

    def test_failed_result_has_no_output(self) -> None:
        result = TaskResult.failed("web1", ConnectionError("web1", OSError("refused")))

        assert not result.success
        assert result.output is None
        assert result.error_type == "ConnectionError"
        assert result.to_dict() == {
            "host": "web1",
            "error": "Cannot connect to web1: refused",
            "error_type": "ConnectionError",
        }

    def test_dispatch_result_to_dict(self) -> None:
        result = DispatchResult(
            results={
                "web2": TaskResult.ok("web2", "up"),
                "web1": TaskResult.failed("web1", ValueError("x")),
            },
            unresolved=["ghost"],
        )

        data = result.to_dict()

        assert list(data["results"]) == ["web1", "web2"]
        assert data["results"]["web2"] == {"host": "web2", "result": "up"}
        assert data["unresolved"] == ["ghost"]
        assert result.succeeded == ["web2"]
        assert result.failed == ["web1"]

    def test_dispatch_result_omits_empty_unresolved(self) -> None:
        data = DispatchResult(results={"web1": TaskResult.ok("web1", "")}).to_dict()

        assert "unresolved" not in data
