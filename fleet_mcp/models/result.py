"""Per-host outcomes of a fleet dispatch."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TaskResult:
    """Outcome of one task on one host: either output or an error."""

    host: str
    output: Any = None
    error: str | None = None
    error_type: str | None = None

    @property
    def success(self) -> bool:
        """True when the task finished without an error."""
        return self.error is None

    @classmethod
    def ok(cls, host: str, output: Any) -> "TaskResult":
        """Build a successful result."""
        return cls(host=host, output=output)

    @classmethod
    def failed(cls, host: str, error: BaseException) -> "TaskResult":
        """Build a failed result from the exception that ended the task."""
        return cls(host=host, error=str(error), error_type=type(error).__name__)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for rendering."""
        if self.success:
            return {"host": self.host, "result": self.output}
        return {"host": self.host, "error": self.error, "error_type": self.error_type}


@dataclass
class DispatchResult:
    """Aggregated results of running one task across many hosts."""

    results: dict[str, TaskResult] = field(default_factory=dict)
    unresolved: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> list[str]:
        """Names of hosts whose task succeeded."""
        return sorted(name for name, r in self.results.items() if r.success)

    @property
    def failed(self) -> list[str]:
        """Names of hosts whose task failed."""
        return sorted(name for name, r in self.results.items() if not r.success)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for rendering, keyed by host name."""
        data: dict[str, Any] = {
            "results": {
                name: self.results[name].to_dict() for name in sorted(self.results)
            },
        }
        if self.unresolved:
            data["unresolved"] = list(self.unresolved)
        return data
